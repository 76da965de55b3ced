"""Residual filter & merge layer.

The ledger cannot evaluate the wallet-id (account number) or row-id
predicates, so they are applied here to the rows already fetched.

Two pagination regimes:

* No residual predicate: the server page and ``totalElements`` are
  authoritative.
* Residual predicate active: server totals are ignored. The fetched,
  filtered rows are the whole addressable set and are paginated locally.
  Matches on server pages that were not fetched stay invisible; this is a
  known limitation of the ledger contract and must not be papered over.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ledger_ops.query.filters import Pagination
from ledger_ops.query.sorting import sort_transactions

if TYPE_CHECKING:
    from ledger_ops.ledger.models import Transaction
    from ledger_ops.query.executor import Page
    from ledger_ops.query.filters import FilterState, Sorting


@dataclass(frozen=True)
class MergedPage:
    """Rows ready for display plus the effective pagination totals.

    Attributes:
        items: Rows on the current page, sorted.
        matched: Every fetched row that passed the residual filters, sorted.
        total_count: Effective match count used for pagination.
        total_pages: ``ceil(total_count / page_size)``.
        residual_active: Whether the client-side regime was used.
    """

    items: list[Transaction]
    matched: list[Transaction]
    total_count: int
    total_pages: int
    residual_active: bool


def matches_wallet(transaction: Transaction, wallet_id: str) -> bool:
    """Case-insensitive substring match against either side's account number."""
    needle = wallet_id.strip().lower()
    if not needle:
        return True
    return any(needle in number.lower() for number in transaction.account_numbers())


def matches_transaction_id(transaction: Transaction, transaction_id: str) -> bool:
    """Case-insensitive substring match against the row id."""
    needle = transaction_id.strip().lower()
    return not needle or needle in transaction.id.lower()


def apply_residual_filters(
    items: list[Transaction], filters: FilterState
) -> list[Transaction]:
    """Keep only rows satisfying the client-only predicates."""
    return [
        t
        for t in items
        if matches_wallet(t, filters.wallet_id)
        and matches_transaction_id(t, filters.transaction_id)
    ]


def server_window(filters: FilterState, pagination: Pagination, window_size: int) -> Pagination:
    """Pagination to request from the ledger for the current view.

    While a residual predicate is active the operator's page is cut locally,
    so the first ``window_size`` rows are requested instead.
    """
    if filters.residual_active:
        return Pagination(page=1, page_size=window_size)
    return pagination


def merge_page(
    page: Page,
    filters: FilterState,
    pagination: Pagination,
    sorting: Sorting | None = None,
) -> MergedPage:
    """Combine a fetched page with the residual filters and sort order.

    Args:
        page: Rows and total count returned by the ledger.
        filters: Current filters (decides the regime).
        pagination: The operator's 1-based page and page size.
        sorting: Column/direction for the client-side ordering.

    Returns:
        MergedPage with display rows and effective totals.
    """
    column = sorting.column if sorting else None
    direction = sorting.direction if sorting else "desc"

    if not filters.residual_active:
        ordered = sort_transactions(page.items, column, direction)
        return MergedPage(
            items=ordered,
            matched=ordered,
            total_count=page.total_count,
            total_pages=pagination.total_pages(page.total_count),
            residual_active=False,
        )

    ordered = sort_transactions(apply_residual_filters(page.items, filters), column, direction)
    return MergedPage(
        items=pagination.slice(ordered),
        matched=ordered,
        total_count=len(ordered),
        total_pages=pagination.total_pages(len(ordered)),
        residual_active=True,
    )
