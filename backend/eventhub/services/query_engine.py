"""
EventHub Backend — List Query Engine
=====================================

What:  The paginated list-and-filter contract shared by users, events and
       categories.
How:   1. `parse_query_spec()` turns the flat query-parameter bag into a
          QuerySpec (page/limit parsed as integers, everything else a filter).
       2. `ListQueryEngine.build_predicate()` composes the resource's filters:
          exact-match fields AND together; `search` fans out to an OR of
          case-insensitive substring matches over the resource's text fields.
       3. `ListQueryEngine.list()` counts the filtered set, fetches the
          requested window in a deterministic order, and returns a PageResult.
Who:   Called by the resource services; reads through SqlAlchemyRepository.

Pagination math:
    offset      = (max(page, 1) - 1) * limit
    total_pages = ceil(total / limit)     (0 when total == 0)

    Pages past the end return no items; total and total_pages still reflect
    the whole filtered set.

The engine keeps no state between calls; one instance per resource is
shared by every request.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar

from sqlalchemy import ColumnElement, and_, or_

from eventhub.exceptions import ValidationError
from eventhub.repositories.base import SqlAlchemyRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
SEARCH_PARAM = "search"
MAX_LIMIT = 100

# Ids are 32-bit INTEGER columns
MAX_ID = 2**31 - 1


@dataclass(frozen=True)
class QuerySpec:
    """Normalized filter + pagination input to a list operation."""

    filters: Dict[str, str] = field(default_factory=dict)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        # Non-positive pages read from the start
        return (max(self.page, 1) - 1) * self.limit


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """One page of records plus count metadata for the whole filtered set."""

    items: List[T]
    total: int
    page: int
    total_pages: int


def total_pages_for(total: int, limit: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / limit)


def parse_int_param(
    name: str,
    value: Any,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    """
    Parse a plain decimal integer or raise ValidationError naming it.

    Only ASCII digits with an optional sign are accepted ("1_000" and
    non-ASCII digits are not). `minimum` / `maximum` bound the result.
    """
    if isinstance(value, bool):
        raise ValidationError(message=f"Invalid {name} number", field=name, tag=f"invalid {name}")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        digits = text[1:] if text[:1] in ("+", "-") else text
        if not (digits.isascii() and digits.isdigit()):
            raise ValidationError(
                message=f"Invalid {name} number",
                field=name,
                tag=f"invalid {name}",
                context={"value": text},
            )
        number = int(text)

    if minimum is not None and number < minimum:
        raise ValidationError(
            message=f"Invalid {name} number: must be at least {minimum}",
            field=name,
            tag=f"invalid {name}",
            context={"value": str(number)},
        )
    if maximum is not None and number > maximum:
        raise ValidationError(
            message=f"Invalid {name} number: must be at most {maximum}",
            field=name,
            tag=f"invalid {name}",
            context={"value": str(number)},
        )
    return number


def parse_id_param(name: str, value: Any) -> int:
    """Parse a record id (1 .. MAX_ID) given as a filter or reference."""
    return parse_int_param(name, value, minimum=1, maximum=MAX_ID)


def parse_query_spec(
    params: Mapping[str, Any],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> QuerySpec:
    """
    Build a QuerySpec from a flat string → string mapping.

    - Absent or empty `page` / `limit` fall back to 1 / `default_limit`.
    - Present but non-integer `page` / `limit` is a client error.
    - `limit` must lie in 1 .. `max_limit` (it is the pagination divisor
      and the window size); `page` is unbounded: non-positive pages read
      the first window, pages past the end read an empty one.
    - Every other non-empty parameter becomes a filter; the resource
      definition decides which of them it understands.
    """
    page = DEFAULT_PAGE
    limit = default_limit
    filters: Dict[str, str] = {}

    for key, value in params.items():
        if value is None:
            continue
        text = str(value).strip()
        if text == "":
            continue
        if key == "page":
            page = parse_int_param("page", text)
        elif key == "limit":
            limit = parse_int_param("limit", text, minimum=1, maximum=max_limit)
        else:
            filters[key] = text

    return QuerySpec(filters=filters, page=page, limit=limit)


@dataclass(frozen=True)
class ExactFilter:
    """`param` must equal `column`, after converting the raw string with `convert`."""

    column: Any
    convert: Callable[[str], Any] = str


@dataclass(frozen=True)
class ListDefinition:
    """
    Per-resource list configuration.

    Attributes:
        exact_filters: query parameter → ExactFilter
        search_fields: columns matched case-insensitively by `search`
        order_by:      deterministic ordering (must end with a unique column)
    """

    resource: str
    exact_filters: Mapping[str, ExactFilter]
    search_fields: Tuple[Any, ...]
    order_by: Tuple[Any, ...]


class ListQueryEngine:
    """Runs the list contract for one resource definition."""

    def __init__(self, definition: ListDefinition):
        self.definition = definition

    def build_predicate(self, filters: Mapping[str, str]) -> Optional[ColumnElement[bool]]:
        """AND of exact filters and the `search` OR-group; None when nothing applies."""
        clauses: List[ColumnElement[bool]] = []

        for param, exact in self.definition.exact_filters.items():
            if param not in filters:
                continue
            clauses.append(exact.column == exact.convert(filters[param]))

        term = filters.get(SEARCH_PARAM)
        if term and self.definition.search_fields:
            clauses.append(
                or_(*[column.icontains(term, autoescape=True) for column in self.definition.search_fields])
            )

        if not clauses:
            return None
        return and_(*clauses)

    async def list(
        self,
        repository: SqlAlchemyRepository,
        spec: QuerySpec,
        options: Sequence[Any] = (),
    ) -> PageResult:
        """
        Count the filtered set, then fetch the requested window.

        Both reads run on the repository's session, so they see the same
        transaction; no stronger consistency is promised under concurrent writes.
        """
        predicate = self.build_predicate(spec.filters)

        total = await repository.count(predicate)
        if spec.offset >= total:
            # offset < total keeps the bound OFFSET within the driver's integer range
            items = []
        else:
            items = await repository.find_page(
                predicate,
                order_by=self.definition.order_by,
                offset=spec.offset,
                limit=spec.limit,
                options=options,
            )

        logger.debug(
            "Listed %s: page=%d limit=%d total=%d returned=%d",
            self.definition.resource, spec.page, spec.limit, total, len(items),
        )
        return PageResult(
            items=items,
            total=total,
            page=spec.page,
            total_pages=total_pages_for(total, spec.limit),
        )
