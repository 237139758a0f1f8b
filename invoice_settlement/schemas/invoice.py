"""
Pydantic schemas for invoice creation and settlement.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from invoice_settlement.models.enums import InvoiceStatus


# --- Request Schemas ---

class InvoiceCreate(BaseModel):
    """Request to create an invoice, either PENDING or already PAID."""
    customer_ref: str = Field(min_length=1, max_length=255)
    invoice_amount: Decimal = Field(ge=0, max_digits=19, decimal_places=4)
    description: str = Field(default="", max_length=255)
    initial_status: InvoiceStatus = InvoiceStatus.PENDING
    issue_date: date = Field(default_factory=date.today)


class InvoiceTransition(BaseModel):
    """
    Request to move an invoice to a new status.

    payment_amount is only read for PARTIALLY_PAID; a PAID
    transition always settles the full outstanding balance.
    The amount is range-checked by the settlement calculator,
    not here, so a bad amount is reported as a settlement
    validation error.

    expected_version pins the invoice version the caller last
    saw. When it no longer matches, the transition is rejected
    instead of being applied to a state the caller never saw.
    """
    target_status: InvoiceStatus
    payment_amount: Decimal | None = None
    payment_date: date | None = None
    expected_version: int | None = Field(default=None, ge=1)


# --- Calculator Result ---

class Settlement(BaseModel):
    """Cash applied by a transition and the balance left afterwards."""
    payment_value: Decimal
    new_outstanding_amount: Decimal

    model_config = {"frozen": True}


# --- Response Schemas ---

class InvoiceResponse(BaseModel):
    id: int
    tenant_id: str
    customer_ref: str
    issue_date: date
    invoice_amount: Decimal
    outstanding_amount: Decimal
    status: InvoiceStatus
    description: str
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SettlementResponse(BaseModel):
    """The invoice after a creation or transition, plus what was posted."""
    invoice: InvoiceResponse
    batch_id: uuid.UUID | None
    ledger_entry_ids: list[int]
