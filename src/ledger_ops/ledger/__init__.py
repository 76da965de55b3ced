"""Ledger — transaction store client and wire models."""

from ledger_ops.ledger.client import LedgerClient
from ledger_ops.ledger.models import (
    AccountDetails,
    FetchEmpty,
    FetchErr,
    FetchOk,
    FetchResult,
    ReversalResponse,
    Transaction,
    TransactionDescription,
    TransactionStatus,
    TransactionType,
)

__all__ = [
    "AccountDetails",
    "FetchEmpty",
    "FetchErr",
    "FetchOk",
    "FetchResult",
    "LedgerClient",
    "ReversalResponse",
    "Transaction",
    "TransactionDescription",
    "TransactionStatus",
    "TransactionType",
]
