"""Query filters for the staff user list."""

from __future__ import annotations

from typing import Any, ClassVar

from sqlalchemy import or_

from app.models.user import User
from app.queries.base import QueryFilters


class UserFilters(QueryFilters[User]):
    """Filters for staff users.

    Users are archived through ``deleted_at`` only, so ``status("archived")``
    matches any user with ``deleted_at`` set and ``deleted`` matches nothing.
    """

    model_class = User
    ordering_fields: ClassVar[dict[str, Any]] = {
        "id": User.id,
        "first_name": User.first_name,
        "last_name": User.last_name,
        "email": User.email,
        "created_at": User.created_at,
    }
    filter_names: ClassVar[tuple[str, ...]] = ("filter", "status", "sort")

    def filter(self, value: str = "") -> UserFilters:
        """Search users by first name, last name or email."""
        if not value:
            return self
        like_term = f"%{value}%"
        self._query = self._query.filter(
            or_(
                User.first_name.ilike(like_term),
                User.last_name.ilike(like_term),
                User.email.ilike(like_term),
            )
        )
        return self
