"""Base query filter class.

Provides the status, sort and pagination filters shared by every list
endpoint, plus the ``apply`` entry point that maps raw request parameters
onto filter methods.
"""

from __future__ import annotations

import enum
import inspect
import logging
import operator
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar

from sqlalchemy import and_, asc, desc, or_

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FilterStatus(enum.Enum):
    active = "active"
    archived = "archived"
    deleted = "deleted"


# Operator prefixes accepted in ``op:value`` tokens.
OPERATOR_ALIASES: dict[str, str] = {
    "lt": "<",
    "gt": ">",
    "lte": "<=",
    "gte": ">=",
    "eq": "=",
}

COMPARATORS = {
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
    "=": operator.eq,
}


class InvalidFilterError(ValueError):
    """Raised when a filter token cannot be parsed."""

    def __init__(self, param: str, value: str, expected: str):
        super().__init__(f"Invalid value '{value}' for '{param}', expected {expected}.")
        self.param = param
        self.value = value
        self.expected = expected


class QueryFilters(Generic[T]):
    """Base class for request-driven query filters.

    A filters instance wraps one SQLAlchemy query. Filter methods update
    that query in place and return ``self`` so calls can be chained:

        rows = (
            ClientFilters(db, company_id)
            .filter("acme")
            .status("active,archived")
            .sort("name|asc")
            .paginate(limit=50, offset=0)
            .all()
        )

    The instance is not safe to share between requests.

    Subclasses should:
    1. Set ``model_class`` to the SQLAlchemy model whose status columns are used
    2. Define ``ordering_fields`` mapping sort keys to columns
    3. List their public filters in ``filter_names`` so ``apply`` can reach them
    """

    STATUS_ACTIVE = FilterStatus.active.value
    STATUS_ARCHIVED = FilterStatus.archived.value
    STATUS_DELETED = FilterStatus.deleted.value

    model_class: type[T]
    ordering_fields: ClassVar[dict[str, Any]] = {}
    filter_names: ClassVar[tuple[str, ...]] = ("status", "sort")

    # Tables archived through deleted_at alone, with no is_deleted column.
    flagless_tables: ClassVar[frozenset[str]] = frozenset({"users"})

    def __init__(self, db: Session, query: Query | None = None):
        self.db = db
        self._query: Query = query if query is not None else db.query(self.model_class)

    # -------------------------------------------------------------------------
    # Request parameters
    # -------------------------------------------------------------------------

    def apply(self, params: Mapping[str, str | None]) -> Self:
        """Call the filter method named by each key of ``params``.

        Unknown keys are ignored. An empty value calls the method with no
        argument when it accepts that, and is skipped otherwise.
        """
        for name, value in params.items():
            if name not in self.filter_names:
                continue
            method = getattr(self, name)
            if value is not None and str(value) != "":
                logger.debug("Applying %s filter %s=%r", type(self).__name__, name, value)
                method(str(value))
            elif _accepts_no_argument(method):
                method()
        return self

    # -------------------------------------------------------------------------
    # Token parsing
    # -------------------------------------------------------------------------

    def split(self, value: str, param: str = "value") -> tuple[str, str]:
        """Split an ``op:value`` token into a SQL operator and its operand.

        Unknown operator prefixes compare for equality.
        """
        prefix, sep, operand = value.partition(":")
        if not sep or not operand:
            raise InvalidFilterError(param, value, "'operator:value' such as 'gt:100'")
        return OPERATOR_ALIASES.get(prefix, "="), operand

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def status_condition(self, model: Any, statuses: Iterable[str]):
        """Build the OR-ed status predicate for ``model``.

        The seed ``id IS NULL`` never matches, so a list naming no known
        status selects nothing.
        """
        table = model.__tablename__
        requested = set(statuses)
        has_flag = table not in self.flagless_tables

        conditions = [model.id.is_(None)]
        if self.STATUS_ACTIVE in requested:
            conditions.append(model.deleted_at.is_(None))
        if self.STATUS_ARCHIVED in requested:
            archived = [model.deleted_at.is_not(None)]
            if has_flag:
                archived.append(model.is_deleted.is_(False))
            conditions.append(and_(*archived))
        if self.STATUS_DELETED in requested and has_flag:
            conditions.append(model.is_deleted.is_(True))
        return or_(*conditions)

    def status(self, value: str = "") -> Self:
        """Filter by a comma separated list of active, archived, deleted."""
        if not value:
            return self
        statuses = [part.strip() for part in value.split(",")]
        self._query = self._query.filter(self.status_condition(self.model_class, statuses))
        return self

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def order_by(self, field: str, direction: str = "asc") -> Self:
        """Apply ordering to the query.

        Args:
            field: Field name (must be in ordering_fields)
            direction: 'desc' sorts descending, anything else ascending
        """
        column = self.ordering_fields.get(field)
        if column is None:
            logger.warning("Ignoring sort on unknown field %r for %s", field, type(self).__name__)
            return self
        if direction.lower() == "desc":
            self._query = self._query.order_by(desc(column))
        else:
            self._query = self._query.order_by(asc(column))
        return self

    def sort(self, value: str) -> Self:
        """Sort by a ``column|direction`` token, e.g. ``name|desc``."""
        field, sep, direction = value.partition("|")
        if not sep:
            raise InvalidFilterError("sort", value, "'column|direction' such as 'name|asc'")
        return self.order_by(field, direction)

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def paginate(self, limit: int = 50, offset: int = 0) -> Self:
        """Apply pagination to the query."""
        if limit > 0:
            self._query = self._query.limit(limit)
        if offset > 0:
            self._query = self._query.offset(offset)
        return self

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def all(self) -> list[Any]:
        """Execute query and return all results."""
        return self._query.all()

    def first(self) -> Any | None:
        """Execute query and return first result."""
        return self._query.first()

    def count(self) -> int:
        """Return count of matching records."""
        return self._query.order_by(None).count()

    def query(self) -> Query:
        """Return the underlying SQLAlchemy Query object."""
        return self._query


def _accepts_no_argument(method) -> bool:
    params = inspect.signature(method).parameters.values()
    return all(p.default is not inspect.Parameter.empty for p in params)
