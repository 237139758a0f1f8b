"""
Invoice store: reads and version-checked writes of invoice headers.

The store never changes invoice_amount after creation and
never deletes an invoice. State writes go through update(),
which only succeeds against the version the caller read.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoice_settlement.exceptions import (
    ConcurrencyConflictError,
    NotFoundError,
    PersistenceError,
)
from invoice_settlement.models.enums import InvoiceStatus
from invoice_settlement.models.invoice import Invoice

logger = logging.getLogger(__name__)


class InvoiceStore:

    def __init__(self, db: Session):
        self.db = db

    def create(self, invoice: Invoice) -> int:
        """Insert a new invoice and return its id."""
        invoice.version = 1
        try:
            self.db.add(invoice)
            self.db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError("Invoice could not be stored") from e
        return invoice.id

    def get(self, invoice_id: int, for_update: bool = False) -> Invoice:
        """
        Read an invoice from the database, never from the session cache.

        for_update=True takes a row lock (SELECT ... FOR UPDATE)
        held until the surrounding transaction ends. Databases
        without row locks ignore it.
        """
        stmt = (
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        try:
            invoice = self.db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Invoice {invoice_id} could not be read") from e

        if not invoice:
            raise NotFoundError(
                f"Invoice {invoice_id} not found",
                details={"invoice_id": invoice_id},
            )
        return invoice

    def update(
        self,
        invoice_id: int,
        status: InvoiceStatus,
        outstanding_amount: Decimal,
        expected_version: int,
    ) -> int:
        """
        Write a new status and outstanding amount.

        A single conditional UPDATE matches on the version read
        at the start of the settlement. If another writer got
        there first, no row matches and ConcurrencyConflictError
        is raised; the caller must roll back and start again
        from a fresh read.
        """
        new_version = expected_version + 1
        stmt = (
            update(Invoice)
            .where(
                Invoice.id == invoice_id,
                Invoice.version == expected_version,
            )
            .values(
                status=status,
                outstanding_amount=outstanding_amount,
                version=new_version,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Invoice {invoice_id} could not be updated"
            ) from e

        if result.rowcount != 1:
            logger.warning(
                "Version conflict on invoice %s (expected v%s)",
                invoice_id, expected_version,
                extra={"invoice_id": invoice_id},
            )
            raise ConcurrencyConflictError(
                f"Invoice {invoice_id} was modified concurrently; "
                f"re-read and retry",
                details={
                    "invoice_id": invoice_id,
                    "expected_version": expected_version,
                },
            )
        return new_version
