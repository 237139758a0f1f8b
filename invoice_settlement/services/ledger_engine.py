"""
Ledger engine: the only way entries get into the ledger.

This engine enforces the fundamental rules:
1. Every batch balances (debits = credits, exact Decimal math)
2. Every entry references an existing, active account of the
   batch's tenant
3. Entries are immutable (append-only); a batch is stored
   whole or not at all

It does not deduplicate. Posting the same event twice appends
two batches; preventing that is the caller's job.
"""

import logging
import uuid
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from invoice_settlement.exceptions import (
    UnbalancedBatchError,
    UnknownAccountError,
    ValidationError,
)
from invoice_settlement.models.enums import EntryType
from invoice_settlement.models.ledger_account import LedgerAccount
from invoice_settlement.models.ledger_entry import LedgerEntry
from invoice_settlement.schemas.ledger import PostBatchRequest
from invoice_settlement.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

# Scale of Numeric(19, 4) amount columns
AMOUNT_QUANTUM = Decimal("0.0001")


def to_amount(value) -> Decimal:
    """
    Convert a SQL sum to a Decimal at column scale.

    Backends without a native decimal type (SQLite) sum in
    floating point, so 0.1 + 0.2 can come back as
    0.30000000000000004.
    """
    return Decimal(str(value)).quantize(AMOUNT_QUANTUM)


class PostedBatch(NamedTuple):
    batch_id: uuid.UUID
    entries: list[LedgerEntry]


class LedgerEngine:
    """
    All ledger writes pass through this engine.

    The engine takes a database session as a constructor
    argument. The caller controls the transaction boundary:
    it decides when to commit or roll back.
    """

    def __init__(self, db: Session, store: LedgerStore | None = None):
        self.db = db
        self.store = store or LedgerStore(db)

    def post_batch(self, request: PostBatchRequest) -> PostedBatch:
        """
        Validate and append a balanced batch of entries.

        If any check fails, nothing is written. The caller
        is responsible for committing after this returns, and
        for rolling back if it raises.
        """
        if not request.entries:
            raise ValidationError("A ledger batch needs at least one entry")

        # --- Resolve accounts ---
        account_ids = {entry.account_id for entry in request.entries}
        accounts = self.db.execute(
            select(LedgerAccount).where(LedgerAccount.id.in_(account_ids))
        ).scalars().all()
        accounts_by_id = {a.id: a for a in accounts}

        unresolved = sorted(
            account_id for account_id in account_ids
            if account_id not in accounts_by_id
            or accounts_by_id[account_id].tenant_id != request.tenant_id
        )
        if unresolved:
            raise UnknownAccountError(
                f"Accounts not found for tenant {request.tenant_id}: {unresolved}",
                details={"account_ids": unresolved},
            )

        inactive = sorted(a.code for a in accounts if not a.is_active)
        if inactive:
            raise UnknownAccountError(
                f"Accounts not active: {inactive}",
                details={"account_codes": inactive},
            )

        # --- Enforce balance rule ---
        total_debits = sum(
            (e.amount for e in request.entries if e.entry_type == EntryType.DEBIT),
            Decimal("0"),
        )
        total_credits = sum(
            (e.amount for e in request.entries if e.entry_type == EntryType.CREDIT),
            Decimal("0"),
        )
        if total_debits != total_credits:
            raise UnbalancedBatchError(
                f"Batch does not balance: "
                f"debits={total_debits}, credits={total_credits}",
                details={
                    "total_debits": str(total_debits),
                    "total_credits": str(total_credits),
                },
            )

        # --- Append ---
        entries = [
            LedgerEntry(
                transaction_date=request.transaction_date,
                account_id=entry.account_id,
                entry_type=entry.entry_type,
                amount=entry.amount,
                invoice_id=request.invoice_id,
                bill_id=request.bill_id,
                status_snapshot=request.status_snapshot,
                description=entry.description or request.description,
            )
            for entry in request.entries
        ]
        batch_id = self.store.append_batch(request.batch_id, entries)

        logger.info(
            "Posted ledger batch %s (%d entries, %s)",
            batch_id, len(entries), total_debits,
            extra={"batch_id": str(batch_id), "invoice_id": request.invoice_id},
        )
        return PostedBatch(batch_id=batch_id, entries=entries)

    def get_entries_by_batch(self, batch_id: uuid.UUID) -> list[LedgerEntry]:
        """Return the entries of one batch in row order."""
        entries = self.db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.batch_id == batch_id)
            .order_by(LedgerEntry.row_num)
        ).scalars().all()
        return list(entries)

    def get_entries_by_invoice(self, invoice_id: int) -> list[LedgerEntry]:
        """Return all entries for an invoice, oldest batch first."""
        entries = self.db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.invoice_id == invoice_id)
            .order_by(LedgerEntry.id, LedgerEntry.row_num)
        ).scalars().all()
        return list(entries)

    def get_collected_amount(self, invoice_id: int, cash_account_id: int) -> Decimal:
        """
        Total cash received against an invoice.

        For every invoice this equals invoice_amount minus
        outstanding_amount.
        """
        total = self.db.execute(
            select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(
                LedgerEntry.invoice_id == invoice_id,
                LedgerEntry.account_id == cash_account_id,
                LedgerEntry.entry_type == EntryType.DEBIT,
            )
        ).scalar()
        return to_amount(total)

    def check_integrity(self) -> dict:
        """
        Verify the whole ledger balances, batch by batch.

        Every batch is checked on its own, so two opposite
        errors in different batches cannot hide each other.
        """
        signed = case(
            (LedgerEntry.entry_type == EntryType.DEBIT, LedgerEntry.amount),
            else_=-LedgerEntry.amount,
        )

        total_debits = self.db.execute(
            select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(
                LedgerEntry.entry_type == EntryType.DEBIT
            )
        ).scalar()
        total_credits = self.db.execute(
            select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(
                LedgerEntry.entry_type == EntryType.CREDIT
            )
        ).scalar()

        # Compared after quantizing, not in SQL, so float sums
        # on SQLite do not flag balanced batches
        batch_sums = self.db.execute(
            select(LedgerEntry.batch_id, func.sum(signed))
            .group_by(LedgerEntry.batch_id)
            .order_by(func.min(LedgerEntry.id))
        ).all()
        unbalanced = [
            batch_id for batch_id, net in batch_sums if to_amount(net) != 0
        ]

        total_debits = to_amount(total_debits)
        total_credits = to_amount(total_credits)
        difference = total_debits - total_credits

        return {
            "total_debits": total_debits,
            "total_credits": total_credits,
            "difference": difference,
            "is_balanced": difference == 0 and not unbalanced,
            "unbalanced_batches": list(unbalanced),
        }
