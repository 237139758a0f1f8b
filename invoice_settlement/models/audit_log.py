"""
Audit log model.

One row per invoice state change, written in the same commit
as the change itself.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Text, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from invoice_settlement.models.base import Base


class AuditLog(Base):
    """
    Immutable record of an invoice creation or transition.

    Like ledger entries, audit rows are append-only.
    """

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    invoice_id: Mapped[int | None] = mapped_column(
        ForeignKey("invoices.id"), nullable=True, index=True
    )
    from_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    to_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    payment_value: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    batch_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
