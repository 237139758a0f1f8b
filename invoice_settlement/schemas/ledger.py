"""
Pydantic schemas for ledger operations.

Requests describe a batch to post; responses describe posted
rows. They are separate from the database models because the
API shape and the storage shape differ (a request entry has
no row number; a stored row has no batch-level description).
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from invoice_settlement.models.enums import EntryType, InvoiceStatus


# --- Request Schemas ---

class LedgerEntryCreate(BaseModel):
    """A single debit or credit in a batch."""
    account_id: int
    entry_type: EntryType
    amount: Decimal = Field(gt=0, max_digits=19, decimal_places=4)
    # Falls back to the batch description
    description: str | None = Field(default=None, max_length=255)


class PostBatchRequest(BaseModel):
    """
    A posting event: entries that must balance, posted together.

    Entries are numbered in list order. The engine checks the
    entry list itself (non-empty, balanced, resolvable accounts)
    so those failures surface as settlement errors rather than
    schema errors.
    """
    batch_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    tenant_id: str = Field(min_length=1, max_length=64)
    transaction_date: date
    description: str = Field(min_length=1, max_length=255)
    invoice_id: int | None = None
    bill_id: int | None = None
    status_snapshot: InvoiceStatus | None = None
    entries: list[LedgerEntryCreate]


# --- Response Schemas ---

class LedgerEntryResponse(BaseModel):
    """Single ledger row in API responses."""
    id: int
    batch_id: uuid.UUID
    row_num: int
    transaction_date: date
    account_id: int
    entry_type: EntryType
    amount: Decimal
    debit_amount: Decimal
    credit_amount: Decimal
    invoice_id: int | None
    bill_id: int | None
    status_snapshot: InvoiceStatus | None
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class LedgerIntegrityResponse(BaseModel):
    """Ledger-wide debit/credit totals."""
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool
    unbalanced_batches: list[uuid.UUID]
