"""Query filters for list endpoints.

This module provides filter classes that turn raw request parameters into
SQLAlchemy predicates, keeping services free of query-building details.

Usage:
    from app.queries import ClientFilters

    rows = (
        ClientFilters(db, company_id)
        .apply({"filter": "acme", "status": "active,archived", "sort": "name|asc"})
        .paginate(limit=50, offset=0)
        .all()
    )
"""

from app.queries.base import FilterStatus, InvalidFilterError, QueryFilters
from app.queries.clients import ClientFilters
from app.queries.users import UserFilters

__all__ = [
    "ClientFilters",
    "FilterStatus",
    "InvalidFilterError",
    "QueryFilters",
    "UserFilters",
]
