from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from app.models.client import ClientContact
from app.models.company import Company
from app.queries.base import InvalidFilterError
from app.queries.clients import ClientFilters


def _names(rows) -> list[str]:
    return [row.name for row in rows]


def test_empty_filter_leaves_query_unchanged(db_session, company):
    filters = ClientFilters(db_session, company.id)
    before = filters.query()

    assert filters.filter("") is filters
    assert filters.status("") is filters
    assert filters.query() is before


def test_filter_matches_client_and_contact_columns(db_session, company, make_client):
    make_client(company, name="Acme Corp")
    make_client(company, name="Beta LLC", id_number="ACME-42")
    make_client(company, name="Gamma", first_name="Acmeson")
    make_client(company, name="Delta", email="billing@acme.example")
    make_client(company, name="Omega", first_name="Olga", last_name="Ivanova")

    rows = ClientFilters(db_session, company.id).filter("acme").sort("name|asc").all()

    assert _names(rows) == ["Acme Corp", "Beta LLC", "Delta", "Gamma"]


def test_filter_matches_last_name(db_session, company, make_client):
    make_client(company, name="One", last_name="Fitzgerald")
    make_client(company, name="Two", last_name="Smith")

    rows = ClientFilters(db_session, company.id).filter("FITZ").all()

    assert _names(rows) == ["One"]


def test_balance_greater_than(db_session, company, make_client):
    make_client(company, name="Low", balance="50")
    make_client(company, name="Exact", balance="100")
    make_client(company, name="High", balance="150")

    filters = ClientFilters(db_session, company.id).balance("gt:100")

    assert _names(filters.all()) == ["High"]
    assert "clients.balance >" in str(filters.query().statement)


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("lt:100", {"Low"}),
        ("lte:100", {"Low", "Exact"}),
        ("gte:100", {"Exact", "High"}),
        ("eq:100", {"Exact"}),
        ("xx:100", {"Exact"}),
    ],
)
def test_balance_operators(db_session, company, make_client, token, expected):
    make_client(company, name="Low", balance="50")
    make_client(company, name="Exact", balance="100")
    make_client(company, name="High", balance="150")

    rows = ClientFilters(db_session, company.id).balance(token).all()

    assert set(_names(rows)) == expected


def test_between_balance_is_inclusive(db_session, company, make_client):
    for name, balance in [("A", "5"), ("B", "10"), ("C", "30"), ("D", "50"), ("E", "60")]:
        make_client(company, name=name, balance=balance)

    filters = ClientFilters(db_session, company.id).between_balance("10:50")

    assert _names(filters.sort("name|asc").all()) == ["B", "C", "D"]
    assert "BETWEEN" in str(filters.query().statement)


@pytest.mark.parametrize("token", ["100", "gt:", "gt:abc", "gt:NaN"])
def test_balance_rejects_malformed_tokens(db_session, company, token):
    with pytest.raises(InvalidFilterError):
        ClientFilters(db_session, company.id).balance(token)


@pytest.mark.parametrize("token", ["10", "10:", ":50", "low:high"])
def test_between_balance_rejects_malformed_tokens(db_session, company, token):
    with pytest.raises(InvalidFilterError, match="between_balance"):
        ClientFilters(db_session, company.id).between_balance(token)


def test_status_active_and_deleted(db_session, company, make_client):
    make_client(company, name="Active", status="active")
    make_client(company, name="Archived", status="archived")
    make_client(company, name="Deleted", status="deleted")

    rows = ClientFilters(db_session, company.id).status("active,deleted").all()

    assert set(_names(rows)) == {"Active", "Deleted"}


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("active", {"Active"}),
        ("archived", {"Archived"}),
        ("deleted", {"Deleted"}),
        ("active,archived,deleted", {"Active", "Archived", "Deleted"}),
        ("archived, deleted", {"Archived", "Deleted"}),
        ("bogus", set()),
    ],
)
def test_status_combinations(db_session, company, make_client, value, expected):
    make_client(company, name="Active", status="active")
    make_client(company, name="Archived", status="archived")
    make_client(company, name="Deleted", status="deleted")

    rows = ClientFilters(db_session, company.id).status(value).all()

    assert set(_names(rows)) == expected


def test_sort_by_name_desc(db_session, company, make_client):
    for name in ["Bravo", "Alpha", "Charlie"]:
        make_client(company, name=name)

    rows = ClientFilters(db_session, company.id).sort("name|desc").all()

    assert _names(rows) == ["Charlie", "Bravo", "Alpha"]


def test_sort_with_unknown_direction_sorts_ascending(db_session, company, make_client):
    for name in ["Bravo", "Alpha"]:
        make_client(company, name=name)

    rows = ClientFilters(db_session, company.id).sort("name|sideways").all()

    assert _names(rows) == ["Alpha", "Bravo"]


def test_sort_by_balance_and_contact(db_session, company, make_client):
    make_client(company, name="Rich", balance="900", first_name="Zed")
    make_client(company, name="Poor", balance="1", first_name="Amy")

    by_balance = ClientFilters(db_session, company.id).sort("balance|desc").all()
    by_contact = ClientFilters(db_session, company.id).sort("contact|asc").all()

    assert _names(by_balance) == ["Rich", "Poor"]
    assert _names(by_contact) == ["Poor", "Rich"]


def test_sort_ignores_unknown_column(db_session, company):
    filters = ClientFilters(db_session, company.id)
    before = filters.query()

    filters.sort("password|asc")

    assert filters.query() is before


def test_sort_requires_pipe_delimiter(db_session, company):
    with pytest.raises(InvalidFilterError, match="column\\|direction"):
        ClientFilters(db_session, company.id).sort("name")


def test_base_query_scopes_to_company_and_primary_contact(db_session, make_client):
    tenant = Company(id=5, name="Tenant Five", currency_id=2, country_id=826)
    other = Company(id=6, name="Tenant Six")
    db_session.add_all([tenant, other])
    db_session.flush()

    visible = make_client(tenant, name="Visible", first_name="Ann", last_name=None)
    make_client(other, name="Other Tenant")

    no_primary = make_client(tenant, name="Secondary Only")
    for contact in db_session.query(ClientContact).filter(ClientContact.client_id == no_primary.id):
        contact.is_primary = False
    removed_contact = make_client(tenant, name="Removed Contact")
    for contact in db_session.query(ClientContact).filter(ClientContact.client_id == removed_contact.id):
        contact.deleted_at = removed_contact.created_at
    db_session.flush()

    filters = ClientFilters(db_session, 5)
    rows = filters.all()

    assert [row.id for row in rows] == [visible.id]
    row = rows[0]
    assert row.currency_id == 2
    assert row.country_id == 826
    assert row.contact == "Ann "
    assert row.client_created_at == row.created_at
    assert not row.is_deleted


def test_base_query_prefers_client_currency_and_country(db_session, company, make_client):
    make_client(company, name="Own Currency", currency_id=9, country_id=36)

    row = ClientFilters(db_session, company.id).first()

    assert row.currency_id == 9
    assert row.country_id == 36
    assert row.contact == "Jane Doe"
    assert Decimal(str(row.balance)) == Decimal("0")


def test_filters_chain_on_one_builder(db_session, company, make_client):
    make_client(company, name="Acme North", balance="20", status="active")
    make_client(company, name="Acme South", balance="200", status="active")
    make_client(company, name="Acme Old", balance="20", status="archived")

    filters = ClientFilters(db_session, company.id)
    result = filters.filter("acme").status("active").between_balance("0:100")

    assert result is filters
    assert _names(filters.all()) == ["Acme North"]


PROJECTED_COLUMNS = [
    "currency_id",
    "country_id",
    "contact",
    "id",
    "name",
    "private_notes",
    "first_name",
    "last_name",
    "balance",
    "last_login",
    "created_at",
    "client_created_at",
    "phone",
    "email",
    "deleted_at",
    "is_deleted",
    "user_id",
    "id_number",
]


def test_projected_columns_listed(db_session, company):
    filters = ClientFilters(db_session, company.id)

    assert {column["name"] for column in filters.query().column_descriptions} == set(PROJECTED_COLUMNS)
    assert set(ClientFilters.ordering_fields) == set(PROJECTED_COLUMNS)


@pytest.mark.parametrize("column", PROJECTED_COLUMNS)
def test_sort_accepts_every_projected_column(db_session, company, column):
    filters = ClientFilters(db_session, company.id)
    before = filters.query()

    filters.sort(f"{column}|desc")

    assert filters.query() is not before
    assert "ORDER BY" in str(filters.query().statement)
    assert "DESC" in str(filters.query().statement)


def test_sort_by_deleted_at_and_resolved_currency(db_session, company, make_client):
    older = make_client(company, name="Older", status="archived", currency_id=3)
    newer = make_client(company, name="Newer", status="archived")
    older.deleted_at = datetime(2024, 1, 1, tzinfo=UTC)
    newer.deleted_at = datetime(2025, 1, 1, tzinfo=UTC)
    db_session.flush()

    by_deleted = ClientFilters(db_session, company.id).sort("deleted_at|desc").all()
    by_currency = ClientFilters(db_session, company.id).sort("currency_id|desc").all()

    assert _names(by_deleted) == ["Newer", "Older"]
    assert [row.currency_id for row in by_currency] == [3, company.currency_id]
