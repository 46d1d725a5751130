import os
import sqlite3
import uuid
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base
from app.models import Client, ClientContact, Company, User  # noqa: F401

load_dotenv(os.path.join(os.getcwd(), ".env"))


def _resolve_test_database_url() -> str | None:
    def _running_in_container() -> bool:
        return os.path.exists("/.dockerenv") or os.getenv("RUNNING_IN_DOCKER") == "1"

    raw_url = os.getenv("TEST_DATABASE_URL")
    if not raw_url:
        return None

    url = make_url(raw_url)
    if url.drivername.startswith("postgresql"):
        if url.database != "billing_test":
            url = url.set(database="billing_test")
        if url.host == "db" and not _running_in_container():
            url = url.set(host="localhost")
        return url.render_as_string(hide_password=False)

    return raw_url


@pytest.fixture(scope="session")
def engine():
    database_url = _resolve_test_database_url()
    if database_url:
        # Use PostgreSQL for tests (recommended)
        engine = create_engine(database_url)
    else:
        engine = create_engine(
            "sqlite+pysqlite://",
            connect_args={
                "check_same_thread": False,
                "detect_types": sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
            },
            poolclass=StaticPool,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)

    return engine


@pytest.fixture()
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex}@example.com"


@pytest.fixture()
def company(db_session):
    company = Company(name="Acme Billing", currency_id=1, country_id=840)
    db_session.add(company)
    db_session.flush()
    return company


@pytest.fixture()
def make_client(db_session):
    """Create a client with a primary contact.

    Status is one of ``active``, ``archived`` or ``deleted``.
    """

    def _make(
        company,
        name="Client",
        balance="0",
        status="active",
        first_name="Jane",
        last_name="Doe",
        email=None,
        **overrides,
    ) -> Client:
        deleted_at = None if status == "active" else datetime.now(UTC)
        client = Client(
            company_id=company.id,
            name=name,
            balance=Decimal(balance),
            deleted_at=deleted_at,
            is_deleted=status == "deleted",
            **overrides,
        )
        db_session.add(client)
        db_session.flush()
        db_session.add(
            ClientContact(
                client_id=client.id,
                company_id=company.id,
                first_name=first_name,
                last_name=last_name,
                email=email or _unique_email(),
                is_primary=True,
            )
        )
        db_session.flush()
        return client

    return _make


@pytest.fixture()
def make_user(db_session):
    def _make(first_name="Sam", last_name="Staff", email=None, archived=False) -> User:
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email or _unique_email(),
            deleted_at=datetime.now(UTC) if archived else None,
        )
        db_session.add(user)
        db_session.flush()
        return user

    return _make


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient

    from app.db import get_db
    from app.main import app

    app.dependency_overrides[get_db] = lambda: db_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
