"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets its own
session from get_db(); the settlement engine decides when
that session commits.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from invoice_settlement.config import get_settings

settings = get_settings()

# --- Engine ---
# pool_pre_ping=True checks a pooled connection before handing
# it out, so a restarted database or a stale connection fails
# here instead of halfway through a settlement.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# --- Session Factory ---
# autocommit=False: nothing is saved until commit(). A ledger
# batch and the invoice update it belongs to share one commit.
# autoflush=False: SQL is only sent on an explicit flush or
# commit, so the order of writes inside a settlement is ours.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The session is always closed when the request finishes,
    even if the endpoint raised, so connections are returned
    to the pool.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
