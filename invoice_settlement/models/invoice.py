"""
Customer invoice model.

The invoice header carries the lifecycle status, the unpaid
remainder, and a version counter. Every state write bumps the
version; a write that expects an older version is rejected,
which is how concurrent settlements of one invoice are caught.

The transition table below is the source of truth for the
state machine. Each legal (from, to) pair maps to the posting
rule the ledger applies when the transition happens.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, Integer, CheckConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from invoice_settlement.models.base import Base
from invoice_settlement.models.enums import InvoiceStatus, PostingRule


TRANSITION_RULES: dict[tuple[InvoiceStatus, InvoiceStatus], PostingRule] = {
    (InvoiceStatus.PENDING, InvoiceStatus.PAID): PostingRule.RECEIVE_PAYMENT,
    (InvoiceStatus.PENDING, InvoiceStatus.PARTIALLY_PAID): PostingRule.RECEIVE_PAYMENT,
    (InvoiceStatus.PENDING, InvoiceStatus.OVERDUE): PostingRule.STATUS_ONLY,
    (InvoiceStatus.PENDING, InvoiceStatus.CANCELLED): PostingRule.STATUS_ONLY,
    (InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID): PostingRule.RECEIVE_PAYMENT,
    (InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.OVERDUE): PostingRule.STATUS_ONLY,
    (InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.CANCELLED): PostingRule.STATUS_ONLY,
    (InvoiceStatus.OVERDUE, InvoiceStatus.PAID): PostingRule.RECEIVE_PAYMENT,
    # PAID and CANCELLED are terminal: no rows
}

# Statuses an invoice may be created in, and what creation posts
CREATION_RULES: dict[InvoiceStatus, PostingRule] = {
    InvoiceStatus.PENDING: PostingRule.RECOGNIZE_REVENUE,
    # Cash sale shortcut. Does not recognize sales revenue.
    InvoiceStatus.PAID: PostingRule.CASH_SALE,
}

TERMINAL_STATUSES = frozenset(
    status for status in InvoiceStatus
    if not any(source == status for source, _ in TRANSITION_RULES)
)


def allowed_targets(status: InvoiceStatus) -> set[InvoiceStatus]:
    return {target for source, target in TRANSITION_RULES if source == status}


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("invoice_amount >= 0", name="ck_invoice_amount"),
        CheckConstraint(
            "outstanding_amount >= 0 AND outstanding_amount <= invoice_amount",
            name="ck_invoice_outstanding_bounds",
        ),
        CheckConstraint("version >= 1", name="ck_invoice_version"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    customer_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    invoice_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    outstanding_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    status: Mapped[InvoiceStatus] = mapped_column(
        SAEnum(InvoiceStatus, name="invoice_status_enum"),
        nullable=False,
        default=InvoiceStatus.PENDING,
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, new_status: InvoiceStatus) -> bool:
        """Check if a state transition is valid."""
        return (self.status, new_status) in TRANSITION_RULES

    def __repr__(self) -> str:
        return (
            f"<Invoice {self.id} {self.customer_ref} "
            f"{self.outstanding_amount}/{self.invoice_amount} "
            f"({self.status.value}, v{self.version})>"
        )
