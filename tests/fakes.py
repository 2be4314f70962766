"""In-memory test doubles and datasets for the pagination tests."""

from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel


_MISSING = object()


def _resolve(document: Dict[str, Any], path: str) -> Any:
    value = document
    for part in path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return _MISSING
    return value


def _equals(value: Any, operand: Any) -> bool:
    # Like MongoDB, null matches missing fields
    if operand is None:
        return value is _MISSING or value is None
    return value is not _MISSING and value == operand


def _apply_operator(op: str, value: Any, operand: Any) -> bool:
    if op == "$eq":
        return _equals(value, operand)
    if op == "$ne":
        return not _equals(value, operand)
    if op == "$in":
        return any(_equals(value, item) for item in operand)
    if op not in ("$gt", "$gte", "$lt", "$lte"):
        raise ValueError(f"Unsupported operator {op}")
    if value is _MISSING or value is None or operand is None:
        return False
    try:
        if op == "$gt":
            return value > operand
        if op == "$gte":
            return value >= operand
        if op == "$lt":
            return value < operand
        return value <= operand
    except TypeError:
        return False


def matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Evaluate the subset of the MongoDB query language the engine emits."""
    for key, condition in query.items():
        if key == "$or":
            if not any(matches(document, clause) for clause in condition):
                return False
        elif key == "$and":
            if not all(matches(document, clause) for clause in condition):
                return False
        elif isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
            value = _resolve(document, key)
            if not all(_apply_operator(op, value, operand) for op, operand in condition.items()):
                return False
        elif not _equals(_resolve(document, key), condition):
            return False
    return True


def _sort_key(value: Any):
    # Missing and null sort before everything else
    if value is _MISSING or value is None:
        return (0, 0)
    return (1, value)


class InMemoryResults:
    """Async iterable standing in for a driver cursor."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for document in self._documents:
            yield document


class InMemoryCollection:
    """Async collection double recording every call made against it."""

    def __init__(self, documents: Optional[List[Dict[str, Any]]] = None):
        self.documents = []
        self.count_calls: List[Dict[str, Any]] = []
        self.find_calls: List[Dict[str, Any]] = []
        self.option_calls: List[Dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None
        for document in documents or []:
            self.insert_one(document)

    def insert_one(self, document: Dict[str, Any]) -> ObjectId:
        document = dict(document)
        document.setdefault("_id", ObjectId())
        self.documents.append(document)
        return document["_id"]

    def with_options(self, **kwargs):
        self.option_calls.append(kwargs)
        return self

    async def count_documents(self, filter: Dict[str, Any], **kwargs) -> int:
        self.count_calls.append({"filter": filter, **kwargs})
        if self.fail_with:
            raise self.fail_with
        return sum(1 for document in self.documents if matches(document, filter))

    def find(
        self,
        filter: Optional[Dict[str, Any]] = None,
        projection=None,
        sort=None,
        limit: int = 0,
        skip: int = 0,
        **kwargs
    ) -> InMemoryResults:
        self.find_calls.append({
            "filter": filter,
            "projection": projection,
            "sort": sort,
            "limit": limit,
            "skip": skip,
            **kwargs
        })
        if self.fail_with:
            raise self.fail_with

        found = [dict(document) for document in self.documents if matches(document, filter or {})]
        for field, direction in reversed(list(sort or [])):
            found.sort(key=lambda d: _sort_key(_resolve(d, field)), reverse=direction < 0)
        found = found[skip:]
        if limit:
            found = found[:limit]
        if projection:
            found = [self._project(document, projection) for document in found]
        return InMemoryResults(found)

    @staticmethod
    def _project(document: Dict[str, Any], projection) -> Dict[str, Any]:
        if not isinstance(projection, dict):
            projection = {field: 1 for field in projection}
        if not any(value for key, value in projection.items() if key != "_id"):
            return {k: v for k, v in document.items() if projection.get(k, 1)}
        fields = {key for key, value in projection.items() if value}
        if projection.get("_id", 1):
            fields.add("_id")
        return {k: v for k, v in document.items() if k in fields}


class Fruit(BaseModel):
    """Item type used throughout the tests."""

    name: str
    how_many: int


FRUITS = [
    {"name": "Apple", "how_many": 5},
    {"name": "Orange", "how_many": 3},
    {"name": "Blueberry", "how_many": 25},
    {"name": "Bananas", "how_many": 8},
    {"name": "Grapes", "how_many": 12},
]

MULTISORT_FRUITS = [
    {"name": "Apple", "how_many": 5},
    {"name": "Avocado", "how_many": 5},
    {"name": "Orange", "how_many": 3},
    {"name": "Blueberry", "how_many": 10},
    {"name": "Bananas", "how_many": 10},
    {"name": "Blackberry", "how_many": 12},
    {"name": "Grapes", "how_many": 12},
]


def names(items) -> List[str]:
    return [item.name if isinstance(item, Fruit) else item["name"] for item in items]

