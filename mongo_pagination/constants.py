"""Process-wide pagination defaults."""

from pymongo import ASCENDING, DESCENDING

# Page size used when the caller does not supply a limit
DEFAULT_LIMIT = 25

# Unique per document; appended to every sort so ordering is total
TIE_BREAKER_FIELD = "_id"
DEFAULT_TIE_BREAKER_DIRECTION = DESCENDING

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "DEFAULT_LIMIT",
    "TIE_BREAKER_FIELD",
    "DEFAULT_TIE_BREAKER_DIRECTION",
]
