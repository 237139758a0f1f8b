"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from invoice_settlement.models.base import Base
from invoice_settlement.models.enums import (
    AccountType,
    EntryType,
    InvoiceStatus,
    PostingRule,
)
from invoice_settlement.models.audit_log import AuditLog
from invoice_settlement.models.ledger_account import LedgerAccount
from invoice_settlement.models.accounting_settings import AccountingSettings
from invoice_settlement.models.invoice import (
    Invoice,
    TRANSITION_RULES,
    CREATION_RULES,
    TERMINAL_STATUSES,
)
from invoice_settlement.models.ledger_entry import LedgerEntry

__all__ = [
    "Base",
    "AccountType",
    "EntryType",
    "InvoiceStatus",
    "PostingRule",
    "AuditLog",
    "LedgerAccount",
    "AccountingSettings",
    "Invoice",
    "TRANSITION_RULES",
    "CREATION_RULES",
    "TERMINAL_STATUSES",
    "LedgerEntry",
]
