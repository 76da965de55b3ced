"""Transaction console — wires the query and reversal components together.

Composes the ledger client, query session, reversal workflow and failure
triage for one operator view.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledger_ops.config.settings import AppConfig
from ledger_ops.ledger.client import LedgerClient
from ledger_ops.query.executor import QueryExecutor
from ledger_ops.query.session import QuerySession
from ledger_ops.reversal.idempotency import generate_idempotency_key
from ledger_ops.reversal.workflow import ReversalWorkflow
from ledger_ops.triage.classifier import load_taxonomy
from ledger_ops.triage.correlator import find_related_with_config

if TYPE_CHECKING:
    from collections.abc import Callable, Collection
    from datetime import datetime

    from ledger_ops.ledger.models import Transaction
    from ledger_ops.metrics.collector import LedgerMetrics
    from ledger_ops.reversal.idempotency import IdempotencyKeyGenerator
    from ledger_ops.triage.classifier import FailureInfo, FailureTaxonomy


class TransactionConsole:
    """One operator's transaction view: query session, reversals and triage.

    Usage::

        console = TransactionConsole(config, token_provider=auth.current_token)
        await console.connect()
        try:
            await console.session.refetch()
            await console.reversals.reverse("standard", txn, "Duplicate transaction")
        finally:
            await console.close()
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        token_provider: Callable[[], str | None] | None = None,
        permissions: Collection[str] | None = None,
        key_generator: IdempotencyKeyGenerator = generate_idempotency_key,
        clock: Callable[[], datetime] | None = None,
        metrics: LedgerMetrics | None = None,
    ) -> None:
        """Initialize the console.

        Args:
            config: Application configuration (defaults loaded from env).
            token_provider: Source of the operator's session token.
            permissions: Operator permissions (gates force reversal).
            key_generator: Idempotency key source for reversals.
            clock: Reference clock for relative date filters.
            metrics: Optional metrics sink.
        """
        self._config = config or AppConfig()
        self._ledger = LedgerClient(self._config.ledger, token_provider=token_provider)
        self._session = QuerySession(
            QueryExecutor(self._ledger, metrics=metrics),
            config=self._config.query,
            clock=clock,
            metrics=metrics,
        )
        self._reversals = ReversalWorkflow(
            self._ledger,
            config=self._config.reversal,
            session=self._session,
            key_generator=key_generator,
            permissions=permissions,
            metrics=metrics,
        )
        self._taxonomy = load_taxonomy(self._config.triage.taxonomy_path)

    async def connect(self) -> None:
        """Connect the ledger client."""
        await self._ledger.connect()

    async def close(self) -> None:
        """Close the ledger client."""
        await self._ledger.close()

    @property
    def config(self) -> AppConfig:
        """The active configuration."""
        return self._config

    @property
    def ledger(self) -> LedgerClient:
        """Direct access to the ledger client."""
        return self._ledger

    @property
    def session(self) -> QuerySession:
        """The query session for this view."""
        return self._session

    @property
    def reversals(self) -> ReversalWorkflow:
        """The reversal workflow for this view."""
        return self._reversals

    @property
    def taxonomy(self) -> FailureTaxonomy:
        """The failure taxonomy in use."""
        return self._taxonomy

    # ------------------------------------------------------------------
    # Triage
    # ------------------------------------------------------------------

    def classify(self, transaction: Transaction) -> FailureInfo:
        """Failure category and retry verdict for ``transaction``."""
        return self._taxonomy.classify(transaction.status, transaction.description)

    def related_failures(self, transaction: Transaction) -> list[Transaction]:
        """Related failed transactions among the rows fetched for this view."""
        return find_related_with_config(
            transaction, self._session.view.matched, self._config.triage
        )
