"""Pytest configuration and shared fixtures for the Mongo Cursor Pagination tests."""

import logging
import socket

import pytest

from mongo_pagination.config import Settings
from tests.fakes import FRUITS, MULTISORT_FRUITS, InMemoryCollection


# Disable logging for cleaner test output
logging.getLogger("pymongo").setLevel(logging.WARNING)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with library defaults and quiet logging."""
    return Settings(log_level="ERROR")


@pytest.fixture
def empty_collection() -> InMemoryCollection:
    return InMemoryCollection()


@pytest.fixture
def fruits() -> InMemoryCollection:
    """The five-fruit dataset."""
    return InMemoryCollection(FRUITS)


@pytest.fixture
def multisort_fruits() -> InMemoryCollection:
    """Fruits with duplicate counts for multi-key sorting."""
    return InMemoryCollection(MULTISORT_FRUITS)


# Pytest markers for test categorization
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, in-memory)")
    config.addinivalue_line("markers", "integration: Integration tests (real MongoDB)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


# Skip integration tests if MongoDB is not available
def pytest_runtest_setup(item):
    """Skip tests that require MongoDB if it's not reachable."""
    if item.get_closest_marker("integration"):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        try:
            result = sock.connect_ex(("localhost", 27017))
        except OSError:
            result = 1
        finally:
            sock.close()
        if result != 0:
            pytest.skip("MongoDB not available for integration tests")
