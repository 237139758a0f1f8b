"""
Tenant accounting settings.

Records which ledger accounts a tenant uses for receivables,
sales revenue and cash. The settlement engine only reads this
table, through the AccountDirectory.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from invoice_settlement.models.base import Base


class AccountingSettings(Base):
    __tablename__ = "accounting_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False
    )
    accounts_receivable_account_id: Mapped[int] = mapped_column(
        ForeignKey("ledger_accounts.id"), nullable=False
    )
    sales_revenue_account_id: Mapped[int] = mapped_column(
        ForeignKey("ledger_accounts.id"), nullable=False
    )
    cash_account_id: Mapped[int] = mapped_column(
        ForeignKey("ledger_accounts.id"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<AccountingSettings {self.tenant_id}>"
