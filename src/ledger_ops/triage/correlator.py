"""Failure correlator — related failed transactions for operator triage.

Purely informational: the result never feeds the reversal decision.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from ledger_ops.ledger.models import TransactionStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ledger_ops.config.settings import TriageConfig
    from ledger_ops.ledger.models import Transaction


def find_related(
    transaction: Transaction,
    all_transactions: Iterable[Transaction],
    *,
    window: timedelta = timedelta(hours=24),
    amount_tolerance: Decimal | float = Decimal("0.10"),
    limit: int = 5,
) -> list[Transaction]:
    """Other FAILED transactions of the same user close in time and amount.

    Args:
        transaction: The failed transaction under review.
        all_transactions: Candidate rows (typically the fetched view).
        window: Maximum distance in creation time.
        amount_tolerance: Maximum relative amount difference (0.10 = ±10 %).
        limit: Maximum number of matches returned.

    Returns:
        Matches ordered by closeness in time, at most ``limit`` of them.
        Empty when ``transaction`` itself is not FAILED.
    """
    if transaction.status is not TransactionStatus.FAILED:
        return []

    tolerance = abs(transaction.amount) * Decimal(str(amount_tolerance))
    matches = [
        t
        for t in all_transactions
        if t.id != transaction.id
        and t.status is TransactionStatus.FAILED
        and t.user_id == transaction.user_id
        and abs(t.created_at - transaction.created_at) <= window
        and abs(t.amount - transaction.amount) <= tolerance
    ]
    matches.sort(key=lambda t: abs(t.created_at - transaction.created_at))
    return matches[:limit]


def find_related_with_config(
    transaction: Transaction,
    all_transactions: Iterable[Transaction],
    config: TriageConfig,
) -> list[Transaction]:
    """``find_related`` with the window, tolerance and limit from ``config``."""
    return find_related(
        transaction,
        all_transactions,
        window=timedelta(hours=config.related_window_hours),
        amount_tolerance=config.related_amount_tolerance,
        limit=config.related_limit,
    )
