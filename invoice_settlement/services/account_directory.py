"""
Account directory: which ledger accounts a tenant settles against.

lookup() is all the settlement engine needs. register_account()
and configure() populate the chart of accounts and the tenant
settings; they stand in for the administration screens, which
live outside this service.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from invoice_settlement.exceptions import NotFoundError, ValidationError
from invoice_settlement.models.accounting_settings import AccountingSettings
from invoice_settlement.models.enums import AccountType
from invoice_settlement.models.ledger_account import LedgerAccount
from invoice_settlement.schemas.account import AccountMapping, LedgerAccountCreate


# Account type each mapping slot must hold
REQUIRED_ACCOUNT_TYPES = {
    "accounts_receivable": AccountType.ASSET,
    "sales_revenue": AccountType.REVENUE,
    "cash": AccountType.ASSET,
}


class AccountDirectory:

    def __init__(self, db: Session):
        self.db = db

    def lookup(self, tenant_id: str) -> AccountMapping:
        """Resolve a tenant's receivable, revenue and cash accounts."""
        settings = self.db.execute(
            select(AccountingSettings).where(
                AccountingSettings.tenant_id == tenant_id
            )
        ).scalar_one_or_none()

        if not settings:
            raise NotFoundError(
                f"No accounting settings for tenant '{tenant_id}'",
                details={"tenant_id": tenant_id},
            )

        return AccountMapping(
            tenant_id=tenant_id,
            accounts_receivable=settings.accounts_receivable_account_id,
            sales_revenue=settings.sales_revenue_account_id,
            cash=settings.cash_account_id,
        )

    def register_account(
        self, tenant_id: str, request: LedgerAccountCreate
    ) -> LedgerAccount:
        """
        Add an account to a tenant's chart of accounts.

        Raises ValidationError if the code is already taken.
        """
        existing = self.db.execute(
            select(LedgerAccount).where(
                LedgerAccount.tenant_id == tenant_id,
                LedgerAccount.code == request.code,
            )
        ).scalar_one_or_none()

        if existing:
            raise ValidationError(
                f"Account with code '{request.code}' already exists",
                details={"tenant_id": tenant_id, "code": request.code},
            )

        account = LedgerAccount(
            tenant_id=tenant_id,
            code=request.code,
            name=request.name,
            account_type=request.account_type,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def configure(
        self,
        tenant_id: str,
        accounts_receivable: int,
        sales_revenue: int,
        cash: int,
    ) -> AccountMapping:
        """
        Create or replace a tenant's account settings.

        Every account must belong to the tenant and have the
        type its slot expects.
        """
        chosen = {
            "accounts_receivable": accounts_receivable,
            "sales_revenue": sales_revenue,
            "cash": cash,
        }
        for slot, account_id in chosen.items():
            account = self.db.get(LedgerAccount, account_id)
            if not account or account.tenant_id != tenant_id:
                raise NotFoundError(
                    f"Account {account_id} not found for tenant '{tenant_id}'",
                    details={"slot": slot, "account_id": account_id},
                )
            if account.account_type != REQUIRED_ACCOUNT_TYPES[slot]:
                raise ValidationError(
                    f"Account {account.code} is {account.account_type.value}, "
                    f"{slot} needs {REQUIRED_ACCOUNT_TYPES[slot].value}",
                    details={"slot": slot, "account_id": account_id},
                )

        settings = self.db.execute(
            select(AccountingSettings).where(
                AccountingSettings.tenant_id == tenant_id
            )
        ).scalar_one_or_none()
        if not settings:
            settings = AccountingSettings(tenant_id=tenant_id)
            self.db.add(settings)

        settings.accounts_receivable_account_id = accounts_receivable
        settings.sales_revenue_account_id = sales_revenue
        settings.cash_account_id = cash
        self.db.flush()

        return AccountMapping(tenant_id=tenant_id, **chosen)
