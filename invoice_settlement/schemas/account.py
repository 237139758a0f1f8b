"""
Pydantic schemas for tenant accounts.
"""

from pydantic import BaseModel, Field

from invoice_settlement.models.enums import AccountType


class AccountMapping(BaseModel):
    """
    The ledger accounts a tenant settles invoices against.

    Resolved once per request and passed explicitly into every
    settlement operation.
    """
    tenant_id: str
    accounts_receivable: int
    sales_revenue: int
    cash: int

    model_config = {"frozen": True}


class LedgerAccountCreate(BaseModel):
    """Request to register a ledger account for a tenant."""
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)
    account_type: AccountType
