"""
Invoice API endpoints.

The API layer is thin: it resolves the tenant's accounts,
hands the request to the InvoiceStateMachine, and shapes the
response. Settlement errors are rendered by the handler
registered in main.py.
"""

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from invoice_settlement.config import get_settings
from invoice_settlement.models.base import get_db
from invoice_settlement.schemas.account import AccountMapping
from invoice_settlement.schemas.invoice import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceTransition,
    SettlementResponse,
)
from invoice_settlement.schemas.ledger import LedgerEntryResponse
from invoice_settlement.services.account_directory import AccountDirectory
from invoice_settlement.services.invoice_state_machine import (
    InvoiceStateMachine,
    SettlementOutcome,
)
from invoice_settlement.services.ledger_engine import LedgerEngine

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_tenant_id(x_tenant_id: str | None = Header(default=None)) -> str:
    return x_tenant_id or get_settings().DEFAULT_TENANT_ID


def get_account_mapping(
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> AccountMapping:
    """Resolve the tenant's accounts once per request."""
    return AccountDirectory(db).lookup(tenant_id)


def _settlement_response(outcome: SettlementOutcome) -> SettlementResponse:
    return SettlementResponse(
        invoice=InvoiceResponse.model_validate(outcome.invoice),
        batch_id=outcome.batch_id,
        ledger_entry_ids=[entry.id for entry in outcome.entries],
    )


@router.post("", response_model=SettlementResponse, status_code=201)
def create_invoice(
    request: InvoiceCreate,
    accounts: AccountMapping = Depends(get_account_mapping),
    db: Session = Depends(get_db),
):
    """
    Create an invoice as PENDING or PAID.

    Returns the invoice and the ids of the ledger entries
    posted for it.
    """
    outcome = InvoiceStateMachine(db).create(request, accounts)
    return _settlement_response(outcome)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: int,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Get invoice details, including its current version."""
    return InvoiceStateMachine(db).get_invoice(invoice_id, tenant_id)


@router.post(
    "/{invoice_id}/transitions",
    response_model=SettlementResponse,
)
def transition_invoice(
    invoice_id: int,
    request: InvoiceTransition,
    accounts: AccountMapping = Depends(get_account_mapping),
    db: Session = Depends(get_db),
):
    """
    Move an invoice to a new status, applying any payment.

    Version conflicts are retried from a fresh read unless the
    request pins expected_version.
    """
    outcome = InvoiceStateMachine(db).transition_with_retry(
        invoice_id, request, accounts
    )
    return _settlement_response(outcome)


@router.get(
    "/{invoice_id}/ledger",
    response_model=list[LedgerEntryResponse],
)
def get_invoice_ledger(
    invoice_id: int,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """All ledger entries posted for an invoice, in posting order."""
    InvoiceStateMachine(db).get_invoice(invoice_id, tenant_id)
    return LedgerEngine(db).get_entries_by_invoice(invoice_id)
