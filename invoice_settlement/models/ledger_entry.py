"""
Ledger entry model.

Each entry is one debit or one credit row. Entries posted
together share a batch_id and are numbered 1..N by row_num.
Entries are immutable: once posted, never updated or deleted.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, Integer, ForeignKey,
    CheckConstraint, UniqueConstraint,
    Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoice_settlement.models.base import Base
from invoice_settlement.models.enums import EntryType, InvoiceStatus


class LedgerEntry(Base):
    """
    An immutable debit or credit row.

    The row stores a direction (entry_type) and a strictly
    positive amount instead of two nullable debit/credit
    columns, so a row with both sides or neither side cannot
    exist. debit_amount and credit_amount are derived views.
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        UniqueConstraint("batch_id", "row_num", name="uq_ledger_entry_row"),
        CheckConstraint("amount > 0", name="ck_ledger_entry_amount_positive"),
        CheckConstraint("row_num >= 1", name="ck_ledger_entry_row_num"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    batch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, index=True
    )
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("ledger_accounts.id"), nullable=False, index=True
    )
    entry_type: Mapped[EntryType] = mapped_column(
        SAEnum(EntryType, name="entry_type_enum"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    invoice_id: Mapped[int | None] = mapped_column(
        ForeignKey("invoices.id"), nullable=True, index=True
    )
    # Vendor bills share the ledger but are not settled here
    bill_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    row_num: Mapped[int] = mapped_column(Integer, nullable=False)
    status_snapshot: Mapped[InvoiceStatus | None] = mapped_column(
        SAEnum(InvoiceStatus, name="invoice_status_enum"),
        nullable=True,
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    account: Mapped["LedgerAccount"] = relationship(
        back_populates="entries"
    )

    @property
    def debit_amount(self) -> Decimal:
        return self.amount if self.entry_type == EntryType.DEBIT else Decimal("0")

    @property
    def credit_amount(self) -> Decimal:
        return self.amount if self.entry_type == EntryType.CREDIT else Decimal("0")

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry {self.batch_id}#{self.row_num} "
            f"{self.entry_type.value} {self.amount}>"
        )
