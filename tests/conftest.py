"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real database. Tables are created before each test and dropped
after it, so every test starts from an empty ledger.
"""

import os

# Settings are read at import time, so point them at SQLite
# before anything from invoice_settlement is imported.
TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["DEFAULT_TENANT_ID"] = "default"
os.environ.setdefault("LOG_FORMAT", "console")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from invoice_settlement.config import get_settings  # noqa: E402
from invoice_settlement.main import app  # noqa: E402
from invoice_settlement.models import Base  # noqa: E402
from invoice_settlement.models.base import get_db  # noqa: E402
from invoice_settlement.models.enums import AccountType  # noqa: E402
from invoice_settlement.schemas.account import LedgerAccountCreate  # noqa: E402
from invoice_settlement.services.account_directory import AccountDirectory  # noqa: E402


# A file rather than :memory: so that several sessions (one per
# simulated request) see the same database.
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

TENANT_ID = get_settings().DEFAULT_TENANT_ID


def seed_accounts(session, tenant_id):
    """Create receivable, revenue and cash accounts and map them."""
    directory = AccountDirectory(session)
    ar = directory.register_account(tenant_id, LedgerAccountCreate(
        code="1100", name="Accounts Receivable", account_type=AccountType.ASSET,
    ))
    sales = directory.register_account(tenant_id, LedgerAccountCreate(
        code="4000", name="Sales Income", account_type=AccountType.REVENUE,
    ))
    cash = directory.register_account(tenant_id, LedgerAccountCreate(
        code="1000", name="Cash", account_type=AccountType.ASSET,
    ))
    mapping = directory.configure(
        tenant_id,
        accounts_receivable=ar.id,
        sales_revenue=sales.id,
        cash=cash.id,
    )
    session.commit()
    return mapping


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def session_factory():
    """
    Open extra sessions, e.g. a competing request in a race test.

    Each session has its own connection, like a separate request.
    """
    sessions = []

    def make_session():
        session = TestSessionLocal()
        sessions.append(session)
        return session

    yield make_session

    for session in sessions:
        session.rollback()
        session.close()


@pytest.fixture
def accounts(db_session):
    """The default tenant's account mapping, with accounts created."""
    return seed_accounts(db_session, TENANT_ID)


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed_tenant(db_session):
    """Seed accounts for an extra tenant: seed_tenant("other")."""
    def seed(tenant_id):
        return seed_accounts(db_session, tenant_id)
    return seed
