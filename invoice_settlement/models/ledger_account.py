"""
Ledger account model (chart of accounts).

Receivables, sales revenue and cash are all ledger accounts.
Accounts belong to a tenant; codes are unique within a tenant.
"""

from datetime import datetime

from sqlalchemy import (
    String, Boolean, DateTime, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoice_settlement.models.base import Base
from invoice_settlement.models.enums import AccountType


class LedgerAccount(Base):
    """
    A single account in a tenant's chart of accounts.

    Accounts with entries are never deleted, only deactivated
    via is_active=False. The ledger refuses to post to an
    inactive account.
    """

    __tablename__ = "ledger_accounts"
    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_ledger_account_code"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum"),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    entries: Mapped[list["LedgerEntry"]] = relationship(
        back_populates="account"
    )

    def __repr__(self) -> str:
        return f"<LedgerAccount {self.tenant_id}/{self.code} ({self.account_type.value})>"
