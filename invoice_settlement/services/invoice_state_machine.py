"""
Invoice state machine: creates invoices and moves them between
statuses, keeping the ledger in step.

Each operation is one unit of work on the session:

1. Read the invoice fresh (row-locked when INVOICE_ROW_LOCKING is on)
2. Check the transition against TRANSITION_RULES
3. Compute the settlement with the SettlementCalculator
4. Post the ledger batch through the LedgerEngine
5. Write the new status and outstanding amount through the
   InvoiceStore, conditional on the version read in step 1
6. Record an audit row and commit

Any failure rolls the whole unit back, so the ledger and the
invoice header cannot disagree. A ConcurrencyConflictError is
safe to retry: the next attempt starts again from step 1.

Accounts are never looked up here. Callers resolve the tenant's
AccountMapping and pass it in.
"""

import json
import logging
import uuid
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoice_settlement.config import Settings, get_settings
from invoice_settlement.exceptions import (
    ConcurrencyConflictError,
    IllegalTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from invoice_settlement.models.audit_log import AuditLog
from invoice_settlement.models.enums import EntryType, InvoiceStatus, PostingRule
from invoice_settlement.models.invoice import (
    CREATION_RULES,
    TRANSITION_RULES,
    Invoice,
    allowed_targets,
)
from invoice_settlement.models.ledger_entry import LedgerEntry
from invoice_settlement.schemas.account import AccountMapping
from invoice_settlement.schemas.invoice import InvoiceCreate, InvoiceTransition
from invoice_settlement.schemas.ledger import LedgerEntryCreate, PostBatchRequest
from invoice_settlement.services.invoice_store import InvoiceStore
from invoice_settlement.services.ledger_engine import LedgerEngine
from invoice_settlement.services.settlement_calculator import SettlementCalculator

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Length of ledger_entries.description
DESCRIPTION_MAX_LENGTH = 255

# Ledger legs per posting rule, in row order: (mapping slot, direction)
POSTING_LEGS: dict[PostingRule, tuple[tuple[str, EntryType], ...]] = {
    PostingRule.RECOGNIZE_REVENUE: (
        ("accounts_receivable", EntryType.DEBIT),
        ("sales_revenue", EntryType.CREDIT),
    ),
    PostingRule.CASH_SALE: (
        ("accounts_receivable", EntryType.CREDIT),
        ("cash", EntryType.DEBIT),
    ),
    PostingRule.RECEIVE_PAYMENT: (
        ("accounts_receivable", EntryType.CREDIT),
        ("cash", EntryType.DEBIT),
    ),
    PostingRule.STATUS_ONLY: (),
}


def ledger_description(prefix: str, invoice: Invoice) -> str:
    """'<prefix> #<id> - <customer>', cut to fit the description column."""
    text = f"{prefix} #{invoice.id} - {invoice.customer_ref}"
    return text[:DESCRIPTION_MAX_LENGTH]


class SettlementOutcome(NamedTuple):
    invoice: Invoice
    batch_id: uuid.UUID | None
    entries: list[LedgerEntry]


def build_legs(
    rule: PostingRule, accounts: AccountMapping, amount: Decimal
) -> list[LedgerEntryCreate]:
    """Ledger entries a posting rule produces for an amount."""
    return [
        LedgerEntryCreate(
            account_id=getattr(accounts, slot),
            entry_type=direction,
            amount=amount,
        )
        for slot, direction in POSTING_LEGS[rule]
    ]


class InvoiceStateMachine:

    def __init__(
        self,
        db: Session,
        settings: Settings | None = None,
        calculator: SettlementCalculator | None = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.calculator = calculator or SettlementCalculator()
        self.invoice_store = InvoiceStore(db)
        self.ledger_engine = LedgerEngine(db)

    @contextmanager
    def _unit_of_work(self):
        """Commit if the block completes, roll back if anything raises."""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("Settlement could not be committed") from e
        except Exception:
            self.db.rollback()
            raise

    def create(
        self, request: InvoiceCreate, accounts: AccountMapping
    ) -> SettlementOutcome:
        """
        Create an invoice and post its opening batch.

        PENDING: DR receivable / CR sales revenue for the full
        amount; outstanding starts at the invoice amount.
        PAID: CR receivable / DR cash for the full amount;
        outstanding starts at zero. Revenue is not recognized
        on this path.
        """
        rule = CREATION_RULES.get(request.initial_status)
        if rule is None:
            raise ValidationError(
                f"An invoice cannot be created as "
                f"{request.initial_status.value}",
                details={
                    "initial_status": request.initial_status.value,
                    "allowed": sorted(s.value for s in CREATION_RULES),
                },
            )

        amount = request.invoice_amount
        outstanding = amount if rule == PostingRule.RECOGNIZE_REVENUE else ZERO

        with self._unit_of_work():
            invoice = Invoice(
                tenant_id=accounts.tenant_id,
                customer_ref=request.customer_ref,
                issue_date=request.issue_date,
                invoice_amount=amount,
                outstanding_amount=outstanding,
                status=request.initial_status,
                description=request.description,
            )
            self.invoice_store.create(invoice)

            posted = self._post(
                invoice,
                rule,
                amount,
                accounts,
                transaction_date=request.issue_date,
                description=ledger_description("Invoice", invoice),
            )
            self._audit(
                "invoice.created",
                invoice,
                from_status=None,
                to_status=request.initial_status,
                payment_value=amount if rule == PostingRule.CASH_SALE else ZERO,
                batch_id=posted.batch_id if posted else None,
            )

        logger.info(
            "Created invoice %s as %s for %s",
            invoice.id, invoice.status.value, amount,
            extra={"invoice_id": invoice.id, "tenant_id": accounts.tenant_id},
        )
        return SettlementOutcome(
            invoice=invoice,
            batch_id=posted.batch_id if posted else None,
            entries=posted.entries if posted else [],
        )

    def transition(
        self,
        invoice_id: int,
        request: InvoiceTransition,
        accounts: AccountMapping,
    ) -> SettlementOutcome:
        """
        Move an invoice to request.target_status.

        Illegal transitions and bad payment amounts are rejected
        before anything is written.
        """
        target = request.target_status

        with self._unit_of_work():
            invoice = self.invoice_store.get(
                invoice_id, for_update=self.settings.INVOICE_ROW_LOCKING
            )
            if invoice.tenant_id != accounts.tenant_id:
                raise NotFoundError(
                    f"Invoice {invoice_id} not found",
                    details={"invoice_id": invoice_id},
                )
            if (
                request.expected_version is not None
                and request.expected_version != invoice.version
            ):
                raise ConcurrencyConflictError(
                    f"Invoice {invoice_id} is at version {invoice.version}, "
                    f"not {request.expected_version}",
                    details={
                        "invoice_id": invoice_id,
                        "expected_version": request.expected_version,
                        "current_version": invoice.version,
                    },
                )

            from_status = invoice.status
            read_version = invoice.version
            # Amount errors are reported ahead of table errors; the
            # check has no side effects
            if target == InvoiceStatus.PARTIALLY_PAID:
                self.calculator.check_partial_payment(
                    invoice.outstanding_amount, request.payment_amount
                )
            rule = self._guard(invoice, target)

            settlement = self.calculator.compute_settlement(
                current_status=from_status,
                target_status=target,
                outstanding_amount=invoice.outstanding_amount,
                invoice_amount=invoice.invoice_amount,
                requested_payment_amount=request.payment_amount,
            )

            posted = None
            if rule == PostingRule.RECEIVE_PAYMENT:
                posted = self._post(
                    invoice,
                    rule,
                    settlement.payment_value,
                    accounts,
                    transaction_date=request.payment_date or date.today(),
                    description=ledger_description("Payment on invoice", invoice),
                    status_snapshot=target,
                )

            self.invoice_store.update(
                invoice.id,
                status=target,
                outstanding_amount=settlement.new_outstanding_amount,
                expected_version=read_version,
            )
            self.db.refresh(invoice)

            self._audit(
                "invoice.transitioned",
                invoice,
                from_status=from_status,
                to_status=target,
                payment_value=settlement.payment_value,
                batch_id=posted.batch_id if posted else None,
            )

        logger.info(
            "Invoice %s %s -> %s, paid %s, outstanding %s",
            invoice.id, from_status.value, target.value,
            settlement.payment_value, settlement.new_outstanding_amount,
            extra={"invoice_id": invoice.id, "tenant_id": accounts.tenant_id},
        )
        return SettlementOutcome(
            invoice=invoice,
            batch_id=posted.batch_id if posted else None,
            entries=posted.entries if posted else [],
        )

    def transition_with_retry(
        self,
        invoice_id: int,
        request: InvoiceTransition,
        accounts: AccountMapping,
        max_attempts: int | None = None,
    ) -> SettlementOutcome:
        """
        transition(), re-run from a fresh read on a version conflict.

        A request pinned to an expected_version is not retried:
        the caller's view is stale and only the caller can decide
        what to do about it.
        """
        attempts = max(1, max_attempts or self.settings.TRANSITION_MAX_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            try:
                return self.transition(invoice_id, request, accounts)
            except ConcurrencyConflictError:
                if request.expected_version is not None or attempt == attempts:
                    raise
                logger.warning(
                    "Retrying transition of invoice %s (attempt %d of %d)",
                    invoice_id, attempt + 1, attempts,
                    extra={"invoice_id": invoice_id},
                )

    def get_invoice(self, invoice_id: int, tenant_id: str) -> Invoice:
        invoice = self.invoice_store.get(invoice_id)
        if invoice.tenant_id != tenant_id:
            raise NotFoundError(
                f"Invoice {invoice_id} not found",
                details={"invoice_id": invoice_id},
            )
        return invoice

    def _guard(self, invoice: Invoice, target: InvoiceStatus) -> PostingRule:
        if not invoice.can_transition_to(target):
            logger.warning(
                "Rejected transition of invoice %s: %s -> %s",
                invoice.id, invoice.status.value, target.value,
                extra={"invoice_id": invoice.id},
            )
            raise IllegalTransitionError(
                f"Cannot transition invoice {invoice.id} from "
                f"{invoice.status.value} to {target.value}",
                details={
                    "invoice_id": invoice.id,
                    "from_status": invoice.status.value,
                    "to_status": target.value,
                    "terminal": invoice.is_terminal,
                    "allowed": sorted(
                        s.value for s in allowed_targets(invoice.status)
                    ),
                },
            )
        return TRANSITION_RULES[(invoice.status, target)]

    def _post(
        self,
        invoice: Invoice,
        rule: PostingRule,
        amount: Decimal,
        accounts: AccountMapping,
        transaction_date: date,
        description: str,
        status_snapshot: InvoiceStatus | None = None,
    ):
        """Post the rule's batch for amount; nothing is posted for zero."""
        legs = build_legs(rule, accounts, amount) if amount > ZERO else []
        if not legs:
            return None

        return self.ledger_engine.post_batch(PostBatchRequest(
            tenant_id=accounts.tenant_id,
            transaction_date=transaction_date,
            description=description,
            invoice_id=invoice.id,
            status_snapshot=status_snapshot or invoice.status,
            entries=legs,
        ))

    def _audit(
        self,
        event_type: str,
        invoice: Invoice,
        from_status: InvoiceStatus | None,
        to_status: InvoiceStatus,
        payment_value: Decimal,
        batch_id: uuid.UUID | None,
    ) -> None:
        self.db.add(AuditLog(
            event_type=event_type,
            invoice_id=invoice.id,
            from_status=from_status.value if from_status else None,
            to_status=to_status.value,
            payment_value=payment_value,
            batch_id=batch_id,
            details=json.dumps({
                "tenant_id": invoice.tenant_id,
                "outstanding_amount": str(invoice.outstanding_amount),
                "version": invoice.version,
            }),
        ))
        self.db.flush()
