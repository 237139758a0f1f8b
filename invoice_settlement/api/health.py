"""
Health check endpoint.

Reports whether the service is up and whether it can reach
the database that holds invoices and the ledger.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoice_settlement.config import get_settings
from invoice_settlement.models.base import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return service status and database connectivity.

    A database failure does not fail the request: the endpoint
    answers "degraded" so a load balancer can tell the process
    is alive but cannot settle invoices.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.warning("Health check could not reach the database", exc_info=True)
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "invoice-settlement-engine",
        "version": get_settings().APP_VERSION,
        "database": db_status,
    }
