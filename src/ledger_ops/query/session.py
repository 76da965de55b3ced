"""QuerySession — filter, pagination and sort state for one transaction view.

The session is the single writer of its state. Every mutation marks the
current view stale and bumps the request sequence; the caller then issues
``refetch()`` explicitly. Responses are applied last-request-wins: a fetch
whose sequence number is no longer the latest is dropped, not merged.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ledger_ops.config.settings import QueryConfig
from ledger_ops.errors.ledger_errors import AuthError, LedgerOpsError
from ledger_ops.query.builder import build_query
from ledger_ops.query.filters import FilterState, Pagination, Sorting
from ledger_ops.query.merge import merge_page, server_window

if TYPE_CHECKING:
    from collections.abc import Callable

    from ledger_ops.ledger.models import Transaction
    from ledger_ops.metrics.collector import LedgerMetrics
    from ledger_ops.query.executor import QueryExecutor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryView:
    """What the view currently shows.

    Attributes:
        items: Rows on the current page.
        matched: All fetched rows after residual filtering (triage context).
        total_count: Effective match count.
        total_pages: Effective page count.
        residual_active: Whether client-side pagination is in effect.
        loading: A fetch is in flight.
        stale: State changed since ``items`` were fetched.
        error: Raw message of the last failed fetch.
        auth_required: The last fetch failed authentication.
        sequence: Request sequence number that produced this view.
    """

    items: list[Transaction] = field(default_factory=list)
    matched: list[Transaction] = field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    residual_active: bool = False
    loading: bool = False
    stale: bool = True
    error: str | None = None
    auth_required: bool = False
    sequence: int = 0


class QuerySession:
    """Owns the query state of one active transaction view."""

    def __init__(
        self,
        executor: QueryExecutor,
        *,
        config: QueryConfig | None = None,
        filters: FilterState | None = None,
        sorting: Sorting | None = None,
        clock: Callable[[], datetime] | None = None,
        metrics: LedgerMetrics | None = None,
    ) -> None:
        self._executor = executor
        self._config = config or QueryConfig()
        self._filters = filters or self.default_filters()
        self._pagination = Pagination(page=1, page_size=self._config.default_page_size)
        self._sorting = sorting or Sorting()
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._metrics = metrics
        self._sequence = 0
        self._in_flight = 0
        self._view = QueryView()

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def filters(self) -> FilterState:
        """Current filters (treat as read-only; mutate via the session)."""
        return self._filters

    @property
    def pagination(self) -> Pagination:
        """Current operator pagination."""
        return self._pagination

    @property
    def sorting(self) -> Sorting:
        """Current sort column and direction."""
        return self._sorting

    @property
    def view(self) -> QueryView:
        """The most recently applied view."""
        return self._view

    @property
    def sequence(self) -> int:
        """Latest issued request sequence number."""
        return self._sequence

    def default_filters(self) -> FilterState:
        """Filters a fresh or reset view starts with."""
        return FilterState(date_range=self._config.default_date_range)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_filters(self, **changes: Any) -> None:
        """Change filter fields; returns to page 1."""
        self._filters = self._filters.replace(**changes)
        self._pagination = dataclasses.replace(self._pagination, page=1)
        self.invalidate()

    def set_filters(self, filters: FilterState) -> None:
        """Replace the whole filter state; returns to page 1."""
        self._filters = filters
        self._pagination = dataclasses.replace(self._pagination, page=1)
        self.invalidate()

    def reset_filters(self) -> None:
        """Restore default filters."""
        self.set_filters(self.default_filters())

    def set_page(self, page: int) -> None:
        """Move to a 1-based page."""
        self._pagination = Pagination(page=page, page_size=self._pagination.page_size)
        self.invalidate()

    def set_page_size(self, page_size: int) -> None:
        """Change the page size; returns to page 1."""
        self._pagination = Pagination(page=1, page_size=page_size)
        self.invalidate()

    def toggle_sort(self, column: str) -> None:
        """Flip direction on the active column, or sort a new column descending."""
        self._sorting = self._sorting.toggle(column)
        self.invalidate()

    def invalidate(self) -> None:
        """Mark the view stale and supersede any fetch in flight."""
        self._sequence += 1
        self._view = dataclasses.replace(self._view, stale=True)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def refetch(self) -> QueryView | None:
        """Fetch the current state from the ledger and apply it.

        Failures become a page-level error on the view and are not retried.

        Returns:
            The applied view, or ``None`` if a newer request superseded this one.
        """
        self._sequence += 1
        sequence = self._sequence
        filters, pagination, sorting = self._filters, self._pagination, self._sorting

        window = server_window(filters, pagination, self._config.residual_window_size)
        query = build_query(filters, window, sorting, now=self._clock())
        self._in_flight += 1
        self._view = dataclasses.replace(self._view, loading=True)

        failure: LedgerOpsError | None = None
        try:
            page = await self._executor.fetch_page(query)
        except LedgerOpsError as exc:
            failure = exc
        finally:
            # Cancelled fetches must release their slot too
            self._in_flight -= 1
            self._view = dataclasses.replace(self._view, loading=self._in_flight > 0)

        if self._superseded(sequence):
            return None
        if failure is not None:
            logger.warning("Transaction fetch failed: %s", failure.message)
            self._view = dataclasses.replace(
                self._view,
                loading=False,
                error=failure.message,
                auth_required=isinstance(failure, AuthError),
                sequence=sequence,
            )
            return self._view

        merged = merge_page(page, filters, pagination, sorting)
        self._view = QueryView(
            items=merged.items,
            matched=merged.matched,
            total_count=merged.total_count,
            total_pages=merged.total_pages,
            residual_active=merged.residual_active,
            loading=False,
            stale=False,
            sequence=sequence,
        )
        return self._view

    async def load_details(self, transaction: Transaction) -> Transaction:
        """Fetch full details for a row, falling back to the row itself."""
        try:
            return await self._executor.get_transaction(transaction.id)
        except LedgerOpsError as exc:
            logger.warning("Detail fetch for %s failed: %s", transaction.id, exc.message)
            return transaction

    def _superseded(self, sequence: int) -> bool:
        if sequence == self._sequence:
            return False
        logger.debug("Dropping stale response #%d (latest #%d)", sequence, self._sequence)
        if self._metrics:
            self._metrics.record_stale_response()
        self._view = dataclasses.replace(self._view, loading=self._in_flight > 0)
        return True
