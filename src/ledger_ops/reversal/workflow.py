"""Reversal workflow — standard and force reversals of successful transactions.

Per transaction::

    SUCCESSFUL --open--> DRAFTING --submit--> IN_FLIGHT --2xx success--> REVERSED
                             ^                    |
                             +---- error ---------+

Submissions are never retried automatically; a human re-confirms. The
idempotency key protects a literal resubmission of the same draft from
being applied twice by the ledger.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ledger_ops.config.settings import ReversalConfig
from ledger_ops.errors.definitions import (
    ErrAlreadyReversed,
    ErrDraftClosed,
    ErrForceNotPermitted,
    ErrMissingReference,
    ErrNotReversible,
    ErrReasonRequired,
    ErrReversalArtifact,
    ErrReversalInFlight,
)
from ledger_ops.errors.ledger_errors import LedgerOpsError
from ledger_ops.ledger.models import TransactionStatus
from ledger_ops.reversal.idempotency import generate_idempotency_key
from ledger_ops.reversal.models import (
    DraftState,
    ReversalDraft,
    ReversalKind,
    ReversalRequest,
    ReversalResult,
)

if TYPE_CHECKING:
    from collections.abc import Collection

    from ledger_ops.ledger.client import LedgerClient
    from ledger_ops.ledger.models import Transaction
    from ledger_ops.metrics.collector import LedgerMetrics
    from ledger_ops.query.session import QuerySession
    from ledger_ops.reversal.idempotency import IdempotencyKeyGenerator

logger = logging.getLogger(__name__)


class ReversalWorkflow:
    """Drives reversal dialogs from draft to ledger submission.

    Usage::

        workflow = ReversalWorkflow(ledger, session=session)
        draft = workflow.open(ReversalKind.STANDARD, txn)
        draft.reason = "Duplicate transaction"
        result = await workflow.submit(draft)
    """

    def __init__(
        self,
        ledger: LedgerClient,
        *,
        config: ReversalConfig | None = None,
        session: QuerySession | None = None,
        key_generator: IdempotencyKeyGenerator = generate_idempotency_key,
        permissions: Collection[str] | None = None,
        metrics: LedgerMetrics | None = None,
    ) -> None:
        """Initialize the workflow.

        Args:
            ledger: Connected ledger client.
            config: Reversal settings (force permission, debt terms).
            session: View to invalidate and refetch after a successful reversal.
            key_generator: Source of idempotency keys.
            permissions: Operator permissions; ``None`` skips the force check.
            metrics: Optional metrics sink.
        """
        self._ledger = ledger
        self._config = config or ReversalConfig()
        self._session = session
        self._key_generator = key_generator
        self._permissions = frozenset(permissions) if permissions is not None else None
        self._metrics = metrics
        self._in_flight: set[str] = set()
        self._reversed: set[str] = set()

    @property
    def reversed_references(self) -> frozenset[str]:
        """References this workflow has successfully reversed."""
        return frozenset(self._reversed)

    @property
    def in_flight(self) -> frozenset[str]:
        """References with a submission currently awaiting the ledger."""
        return frozenset(self._in_flight)

    def can_force_reverse(self) -> bool:
        """Whether the operator may open force reversals."""
        return self._permissions is None or self._config.force_permission in self._permissions

    # ------------------------------------------------------------------
    # Dialog lifecycle
    # ------------------------------------------------------------------

    def open(self, kind: ReversalKind | str, transaction: Transaction) -> ReversalDraft:
        """Open a reversal dialog for ``transaction``.

        Raises:
            ValidationError: If the transaction cannot be reversed or the
                operator may not force-reverse.
        """
        kind = ReversalKind(kind)
        self._check_reversible(kind, transaction)
        return ReversalDraft(kind=kind, transaction=transaction)

    def close(self, draft: ReversalDraft) -> None:
        """Discard a dialog without submitting."""
        if draft.state is not DraftState.IN_FLIGHT:
            draft.state = DraftState.CLOSED

    async def submit(self, draft: ReversalDraft) -> ReversalResult:
        """Submit a draft to the ledger.

        On failure the draft returns to DRAFTING with ``error`` set and its
        reason, notes and idempotency key preserved for a manual retry.

        Returns:
            ReversalResult; ``succeeded`` is False when the ledger answered
            without applying the reversal.

        Raises:
            ValidationError: Missing reason, closed draft, not reversible,
                already reversed, or a reversal already in flight. No request
                is sent.
            LedgerOpsError: Transport, auth or HTTP failure from the ledger.
        """
        if not draft.is_open:
            raise ErrDraftClosed
        reference = draft.reference
        if draft.state is DraftState.IN_FLIGHT or reference in self._in_flight:
            raise ErrReversalInFlight
        self._check_reversible(draft.kind, draft.transaction)
        reason = draft.reason.strip()
        if not reason:
            raise ErrReasonRequired

        request = ReversalRequest.build(
            draft.kind,
            reason=reason,
            admin_notes=draft.admin_notes,
            idempotency_key=draft.issue_key(self._key_generator),
            debt_due_days=self._config.debt_due_days,
        )

        self._in_flight.add(reference)
        draft.state = DraftState.IN_FLIGHT
        draft.error = None
        logger.info(
            "Submitting %s reversal for %s (key %s)",
            draft.kind.value,
            reference,
            request.idempotency_key,
        )
        try:
            if draft.kind is ReversalKind.FORCE:
                response = await self._ledger.force_reversal(reference, request.to_body())
            else:
                response = await self._ledger.standard_reversal(reference, request.to_body())
        except LedgerOpsError as exc:
            draft.state = DraftState.DRAFTING
            draft.error = exc.message
            self._record(draft.kind, "error")
            logger.warning(
                "%s reversal of %s failed: %s", draft.kind.value, reference, exc.message
            )
            raise
        finally:
            self._in_flight.discard(reference)

        if not response.succeeded:
            draft.state = DraftState.DRAFTING
            draft.error = response.message or f"Reversal not applied (status: {response.status})"
            self._record(draft.kind, "rejected")
            logger.warning(
                "%s reversal of %s not applied: %s", draft.kind.value, reference, draft.error
            )
            return ReversalResult(
                kind=draft.kind,
                reference=reference,
                idempotency_key=request.idempotency_key,
                succeeded=False,
                message=draft.error,
                response=response,
            )

        draft.state = DraftState.REVERSED
        self._reversed.add(reference)
        self._record(draft.kind, "success")
        if self._session is not None:
            self._session.invalidate()
            await self._session.refetch()
        return ReversalResult(
            kind=draft.kind,
            reference=reference,
            idempotency_key=request.idempotency_key,
            succeeded=True,
            message=response.message,
            response=response,
        )

    async def reverse(
        self,
        kind: ReversalKind | str,
        transaction: Transaction,
        reason: str,
        notes: str = "",
    ) -> ReversalResult:
        """Open, fill and submit a reversal in one call."""
        draft = self.open(kind, transaction)
        draft.reason = reason
        draft.admin_notes = notes
        return await self.submit(draft)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_reversible(self, kind: ReversalKind, transaction: Transaction) -> None:
        if transaction.status is not TransactionStatus.SUCCESSFUL:
            raise ErrNotReversible
        if transaction.is_reversal_artifact:
            raise ErrReversalArtifact
        if not transaction.internal_reference:
            raise ErrMissingReference
        if transaction.internal_reference in self._reversed:
            raise ErrAlreadyReversed
        if kind is ReversalKind.FORCE and not self.can_force_reverse():
            raise ErrForceNotPermitted

    def _record(self, kind: ReversalKind, outcome: str) -> None:
        if self._metrics:
            self._metrics.record_reversal(kind.value, outcome)
