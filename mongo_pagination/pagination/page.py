"""Page assembly: execute a directional query and describe the resulting page."""

import asyncio
import logging
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_serializer, field_validator
from pymongo.errors import PyMongoError
from pymongo.read_concern import ReadConcern

from ..errors.problem_details import SerializationError, StoreError
from .cursor import BackwardCursor, DirectedCursor, Edge, ForwardCursor, is_backward
from .options import CursorOptions, normalize_options
from .query import build_range_filter


logger = logging.getLogger(__name__)

T = TypeVar("T")


class PageInfo(BaseModel):
    """Information about the current page.

    ``start_cursor`` and ``end_cursor`` are set whenever the page has items,
    even when nothing lies beyond them; ``has_previous_page`` and
    ``has_next_page`` report whether items actually exist there.
    """

    model_config = ConfigDict(frozen=True)

    has_previous_page: bool = Field(default=False, description="Whether items exist before this page")
    has_next_page: bool = Field(default=False, description="Whether items exist after this page")
    start_cursor: Optional[BackwardCursor] = Field(default=None, description="Cursor to the first item")
    end_cursor: Optional[ForwardCursor] = Field(default=None, description="Cursor to the last item")

    @field_validator("start_cursor", mode="before")
    @classmethod
    def parse_start_cursor(cls, v):
        if isinstance(v, str):
            return BackwardCursor.from_token(v)
        return v

    @field_validator("end_cursor", mode="before")
    @classmethod
    def parse_end_cursor(cls, v):
        if isinstance(v, str):
            return ForwardCursor.from_token(v)
        return v

    @field_serializer("start_cursor", "end_cursor")
    def serialize_cursor(self, cursor):
        return cursor.token if cursor is not None else None


class PageResult(BaseModel, Generic[T]):
    """A page of items with its cursors and the size of the full result set."""

    model_config = ConfigDict(frozen=True)

    page_info: PageInfo = Field(default_factory=PageInfo)
    edges: List[Edge] = Field(default_factory=list, description="Cursor of every item on the page")
    total_count: int = Field(default=0, ge=0, description="Documents matching the filter, ignoring paging")
    items: List[T] = Field(default_factory=list)


def item_loader(item_type: Any) -> Callable[[Mapping[str, Any]], Any]:
    """Return the callable turning a raw document into ``item_type``.

    Types exposing a ``from_document`` classmethod use it; anything else is
    validated by pydantic.
    """
    from_document = getattr(item_type, "from_document", None)
    if callable(from_document):
        return from_document
    return TypeAdapter(item_type).validate_python


def load_items(documents: List[Dict[str, Any]], item_type: Any) -> List[Any]:
    """Deserialize every document; one failure aborts the whole page."""
    load = item_loader(item_type)
    items = []
    for index, document in enumerate(documents):
        try:
            items.append(load(document))
        except (ValueError, TypeError, KeyError) as e:
            logger.error(f"Failed to deserialize document {document.get('_id')!r}: {e}")
            raise SerializationError(
                f"Document at position {index} could not be converted: {e}",
                position=index
            ) from e
    return items


def strip_fields(document: Mapping[str, Any], paths: Sequence[str]) -> Dict[str, Any]:
    """Copy of ``document`` without the given dotted paths."""
    document = dict(document)
    for path in paths:
        *parents, leaf = path.split(".")
        parent = document
        for part in parents:
            child = parent.get(part)
            if not isinstance(child, Mapping):
                parent = None
                break
            parent[part] = dict(child)
            parent = parent[part]
        if parent is not None:
            parent.pop(leaf, None)
    return document


async def count_documents(collection, filter: Dict[str, Any], options: CursorOptions) -> int:
    """Count every document matching the caller filter."""
    try:
        return await collection.count_documents(filter, **options.count_kwargs())
    except PyMongoError as e:
        logger.error(f"Database error counting documents: {e}")
        raise StoreError(f"Failed to count documents: {e}") from e


async def find_documents(collection, query: Dict[str, Any], find_kwargs: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Run a find and collect the whole window."""
    try:
        results = collection.find(query, **find_kwargs)
        return [document async for document in results]
    except PyMongoError as e:
        logger.error(f"Database error fetching documents: {e}")
        raise StoreError(f"Failed to fetch documents: {e}") from e


async def has_page(
    collection,
    filter: Dict[str, Any],
    options: CursorOptions,
    boundary: Optional[DirectedCursor]
) -> bool:
    """Probe for a single document beyond a boundary cursor."""
    if boundary is None:
        return False

    query = build_range_filter(filter, options.sort, boundary, options.tie_breaker)
    documents = await find_documents(
        collection,
        query,
        options.find_kwargs(boundary, limit=1, include_skip=False)
    )
    return bool(documents)


async def fetch_page(
    collection,
    filter: Optional[Mapping[str, Any]] = None,
    options: Any = None,
    cursor: Optional[DirectedCursor] = None,
    item_type: Any = dict
) -> PageResult:
    """Fetch one page of a collection.

    Args:
        collection: Async collection exposing ``count_documents`` and ``find``
        filter: Caller filter; the total count is always taken over it
        options: Raw or normalized query options
        cursor: Optional cursor of a previous page
        item_type: Type each document is converted to

    Returns:
        The page, its cursors and the total count

    Raises:
        InvalidCursor: If the cursor cannot seek under the active sort
        StoreError: If the document store fails
        SerializationError: If a document cannot be converted to ``item_type``
    """
    filter = dict(filter or {})
    options = normalize_options(options, cursor)

    if options.read_concern:
        collection = collection.with_options(read_concern=ReadConcern(options.read_concern))

    total_count = await count_documents(collection, filter, options)
    if total_count == 0:
        logger.debug("No documents match the filter, returning an empty page")
        return PageResult()

    query = build_range_filter(filter, options.sort, cursor, options.tie_breaker)
    logger.debug(f"Fetching page with filter {query} and sort {options.directed_sort(cursor)}")
    documents = await find_documents(collection, query, options.find_kwargs(cursor))

    # The sentinel is always the last document fetched, whatever the direction
    overflow = len(documents) > options.limit
    documents = documents[:options.limit]
    if is_backward(cursor):
        documents.reverse()

    edges = [Edge.from_document(document, options.sort) for document in documents]
    _projection, hidden = options.projection_plan()
    if hidden:
        logger.debug(f"Removing sort fields {list(hidden)} fetched outside the requested projection")
        documents = [strip_fields(document, hidden) for document in documents]

    start_cursor = BackwardCursor(edge=edges[0]) if edges else None
    end_cursor = ForwardCursor(edge=edges[-1]) if edges else None

    if cursor is None:
        has_previous_page = bool(options.skip)
        has_next_page = overflow
    else:
        results = await asyncio.gather(
            has_page(collection, filter, options, start_cursor),
            has_page(collection, filter, options, end_cursor),
            return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        has_previous_page, has_next_page = results

    items = load_items(documents, item_type)

    logger.debug(
        f"Fetched {len(items)} of {total_count} documents "
        f"(previous={has_previous_page}, next={has_next_page})"
    )

    return PageResult(
        page_info=PageInfo(
            has_previous_page=has_previous_page,
            has_next_page=has_next_page,
            start_cursor=start_cursor,
            end_cursor=end_cursor,
        ),
        edges=edges,
        total_count=total_count,
        items=items,
    )
