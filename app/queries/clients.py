"""Query filters for the client list."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import func, literal, or_

from app.models.client import Client, ClientContact
from app.models.company import Company
from app.queries.base import COMPARATORS, InvalidFilterError, QueryFilters

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session


CURRENCY_ID = func.coalesce(Client.currency_id, Company.currency_id)
COUNTRY_ID = func.coalesce(Client.country_id, Company.country_id)
CONTACT_NAME = (
    func.coalesce(ClientContact.first_name, "")
    + literal(" ")
    + func.coalesce(ClientContact.last_name, "")
)


class ClientFilters(QueryFilters[Client]):
    """Filters for a company's client list.

    Usage:
        rows = (
            ClientFilters(db, company_id)
            .filter("acme")
            .status("active")
            .balance("gt:100")
            .sort("balance|desc")
            .all()
        )
    """

    model_class = Client
    ordering_fields: ClassVar[dict[str, Any]] = {
        "id": Client.id,
        "name": Client.name,
        "id_number": Client.id_number,
        "balance": Client.balance,
        "last_login": Client.last_login,
        "created_at": Client.created_at,
        "client_created_at": Client.created_at,
        "contact": CONTACT_NAME,
        "first_name": ClientContact.first_name,
        "last_name": ClientContact.last_name,
        "email": ClientContact.email,
        "phone": ClientContact.phone,
        "currency_id": CURRENCY_ID,
        "country_id": COUNTRY_ID,
        "private_notes": Client.private_notes,
        "deleted_at": Client.deleted_at,
        "is_deleted": Client.is_deleted,
        "user_id": Client.user_id,
    }
    filter_names: ClassVar[tuple[str, ...]] = (
        "filter",
        "status",
        "balance",
        "between_balance",
        "sort",
    )

    def __init__(self, db: Session, company_id: int, query: Query | None = None):
        self.db = db
        self.company_id = company_id
        super().__init__(db, query if query is not None else self.base_query(company_id))

    def balance(self, value: str) -> ClientFilters:
        """Compare the balance using an ``op:amount`` token, e.g. ``gt:100``."""
        op, amount = self.split(value, "balance")
        compare = COMPARATORS[op]
        self._query = self._query.filter(compare(Client.balance, _parse_amount("balance", value, amount)))
        return self

    def between_balance(self, value: str) -> ClientFilters:
        """Restrict the balance to a closed ``low:high`` range."""
        low, sep, high = value.partition(":")
        if not sep or not low or not high:
            raise InvalidFilterError("between_balance", value, "'low:high' such as '10:50'")
        self._query = self._query.filter(
            Client.balance.between(
                _parse_amount("between_balance", value, low),
                _parse_amount("between_balance", value, high),
            )
        )
        return self

    def filter(self, value: str = "") -> ClientFilters:
        """Search client name, id number and primary contact name or email.

        Performs a case-insensitive substring match.
        """
        if not value:
            return self
        like_term = f"%{value}%"
        self._query = self._query.filter(
            or_(
                Client.name.ilike(like_term),
                Client.id_number.ilike(like_term),
                ClientContact.first_name.ilike(like_term),
                ClientContact.last_name.ilike(like_term),
                ClientContact.email.ilike(like_term),
            )
        )
        return self

    def base_query(self, company_id: int) -> Query:
        """Return the company's clients joined to their primary contact."""
        return (
            self.db.query(
                CURRENCY_ID.label("currency_id"),
                COUNTRY_ID.label("country_id"),
                CONTACT_NAME.label("contact"),
                Client.id,
                Client.name,
                Client.private_notes,
                ClientContact.first_name,
                ClientContact.last_name,
                Client.balance,
                Client.last_login,
                Client.created_at,
                Client.created_at.label("client_created_at"),
                ClientContact.phone,
                ClientContact.email,
                Client.deleted_at,
                Client.is_deleted,
                Client.user_id,
                Client.id_number,
            )
            .select_from(Client)
            .join(Company, Company.id == Client.company_id)
            .join(ClientContact, ClientContact.client_id == Client.id)
            .filter(Client.company_id == company_id)
            .filter(ClientContact.is_primary.is_(True))
            .filter(ClientContact.deleted_at.is_(None))
        )


def _parse_amount(param: str, value: str, amount: str) -> Decimal:
    try:
        parsed = Decimal(amount.strip())
    except InvalidOperation as exc:
        raise InvalidFilterError(param, value, "a numeric amount") from exc
    if not parsed.is_finite():
        raise InvalidFilterError(param, value, "a numeric amount")
    return parsed
