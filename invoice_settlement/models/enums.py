"""
Shared enumerations for database models.

Python enums mapped to database enums mean an invalid status
or entry type is rejected by the database, not just by Python.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


class EntryType(str, enum.Enum):
    """Direction of a ledger entry."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class InvoiceStatus(str, enum.Enum):
    """Lifecycle of a customer invoice. PAID and CANCELLED are terminal."""
    PENDING = "PENDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    OVERDUE = "OVERDUE"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class PostingRule(str, enum.Enum):
    """What the ledger records when an invoice enters a status."""
    RECOGNIZE_REVENUE = "RECOGNIZE_REVENUE"  # DR receivable, CR sales revenue
    CASH_SALE = "CASH_SALE"  # CR receivable, DR cash, at creation
    RECEIVE_PAYMENT = "RECEIVE_PAYMENT"  # CR receivable, DR cash
    STATUS_ONLY = "STATUS_ONLY"  # nothing posted
