"""
Ledger API endpoints.

Read-only. Entries only enter the ledger through invoice
creation and transitions.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from invoice_settlement.exceptions import NotFoundError
from invoice_settlement.models.base import get_db
from invoice_settlement.schemas.ledger import (
    LedgerEntryResponse,
    LedgerIntegrityResponse,
)
from invoice_settlement.services.ledger_engine import LedgerEngine

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.get("/integrity", response_model=LedgerIntegrityResponse)
def check_integrity(db: Session = Depends(get_db)):
    """
    Verify total debits equal total credits, batch by batch.

    A non-empty unbalanced_batches list means something wrote
    to the ledger without going through the engine.
    """
    return LedgerEngine(db).check_integrity()


@router.get(
    "/batches/{batch_id}",
    response_model=list[LedgerEntryResponse],
)
def get_batch(batch_id: uuid.UUID, db: Session = Depends(get_db)):
    """The entries of one posting event, in row order."""
    entries = LedgerEngine(db).get_entries_by_batch(batch_id)
    if not entries:
        raise NotFoundError(
            f"Ledger batch {batch_id} not found",
            details={"batch_id": str(batch_id)},
        )
    return entries
