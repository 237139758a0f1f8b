"""Settlement engine services."""

from invoice_settlement.services.account_directory import AccountDirectory
from invoice_settlement.services.invoice_state_machine import (
    InvoiceStateMachine,
    SettlementOutcome,
)
from invoice_settlement.services.invoice_store import InvoiceStore
from invoice_settlement.services.ledger_engine import LedgerEngine, PostedBatch
from invoice_settlement.services.ledger_store import LedgerStore
from invoice_settlement.services.settlement_calculator import SettlementCalculator

__all__ = [
    "AccountDirectory",
    "InvoiceStateMachine",
    "SettlementOutcome",
    "InvoiceStore",
    "LedgerEngine",
    "PostedBatch",
    "LedgerStore",
    "SettlementCalculator",
]
