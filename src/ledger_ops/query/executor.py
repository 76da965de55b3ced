"""Query executor — issues ServerQuery requests and normalises the result."""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ledger_ops.ledger.models import FetchEmpty, FetchOk

if TYPE_CHECKING:
    from ledger_ops.ledger.client import LedgerClient
    from ledger_ops.ledger.models import Transaction
    from ledger_ops.metrics.collector import LedgerMetrics
    from ledger_ops.query.filters import ServerQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    """One server page: its rows and the ledger's total match count."""

    items: list[Transaction]
    total_count: int


class QueryExecutor:
    """Runs transaction queries against the ledger.

    ``FetchEmpty`` becomes an empty page; ``FetchErr`` is raised as its
    classified error (NetworkError, AuthError, BadRequestError, ServerError).
    """

    def __init__(self, ledger: LedgerClient, *, metrics: LedgerMetrics | None = None) -> None:
        self._ledger = ledger
        self._metrics = metrics

    @property
    def ledger(self) -> LedgerClient:
        """Direct access to the ledger client."""
        return self._ledger

    async def fetch_page(self, query: ServerQuery) -> Page:
        """Fetch and normalise one page.

        Args:
            query: Predicates and page window to send.

        Returns:
            Page with the rows and total element count.

        Raises:
            LedgerOpsError: When the request failed.
        """
        tracker = self._metrics.track_fetch() if self._metrics else contextlib.nullcontext()
        with tracker:
            result = await self._ledger.fetch_transactions(query)

        if isinstance(result, FetchOk):
            logger.debug(
                "Fetched %d of %d transactions (page %d)",
                len(result.content),
                result.total_elements,
                query.page,
            )
            return Page(items=result.content, total_count=result.total_elements)
        if isinstance(result, FetchEmpty):
            logger.debug("Ledger returned no page: %s", result.message or "no content")
            return Page(items=[], total_count=0)
        raise result.error

    async def get_transaction(self, transaction_id: str) -> Transaction:
        """Fetch full details of one transaction."""
        return await self._ledger.get_transaction(transaction_id)
