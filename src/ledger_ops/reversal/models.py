"""Reversal data models — kinds, drafts, requests and results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ledger_ops.ledger.models import ReversalResponse, Transaction
    from ledger_ops.reversal.idempotency import IdempotencyKeyGenerator

FORCE_REVERSAL_WARNING = (
    "This will create debt if the receiver has insufficient funds to cover the reversal."
)


class ReversalKind(enum.StrEnum):
    """Standard reversal, or force reversal that may create a debt."""

    STANDARD = "standard"
    FORCE = "force"


class DraftState(enum.StrEnum):
    """Lifecycle of one reversal dialog."""

    DRAFTING = "drafting"
    IN_FLIGHT = "in_flight"
    REVERSED = "reversed"
    CLOSED = "closed"


@dataclass(frozen=True)
class ReversalRequest:
    """One submission to the reversal endpoint."""

    reason: str
    admin_notes: str
    idempotency_key: str
    create_debt_if_insufficient_funds: bool = False
    debt_due_days: int | None = None

    @classmethod
    def build(
        cls,
        kind: ReversalKind,
        *,
        reason: str,
        admin_notes: str,
        idempotency_key: str,
        debt_due_days: int = 0,
    ) -> ReversalRequest:
        """Build the request for ``kind``; force reversals carry the debt terms."""
        if kind is ReversalKind.FORCE:
            return cls(
                reason=reason,
                admin_notes=admin_notes,
                idempotency_key=idempotency_key,
                create_debt_if_insufficient_funds=True,
                debt_due_days=debt_due_days,
            )
        return cls(reason=reason, admin_notes=admin_notes, idempotency_key=idempotency_key)

    def to_body(self) -> dict[str, Any]:
        """Serialize to the JSON body expected by the ledger."""
        body: dict[str, Any] = {
            "reason": self.reason,
            "adminNotes": self.admin_notes,
            "idempotencyKey": self.idempotency_key,
        }
        if self.create_debt_if_insufficient_funds:
            body["createDebtIfInsufficientFunds"] = True
            body["debtDueDays"] = self.debt_due_days or 0
        return body


@dataclass
class ReversalDraft:
    """Operator input for one reversal dialog.

    The idempotency key is issued on the first submission and reused only
    while reason and notes are unchanged, i.e. when the same submission is
    retried. Editing the draft after a failure makes it a new action.
    """

    kind: ReversalKind
    transaction: Transaction
    reason: str = ""
    admin_notes: str = ""
    state: DraftState = DraftState.DRAFTING
    error: str | None = None
    idempotency_key: str | None = None
    _key_fingerprint: tuple[str, str] | None = field(default=None, init=False, repr=False)

    @property
    def reference(self) -> str:
        """Ledger reference of the transaction being reversed."""
        return self.transaction.internal_reference

    @property
    def is_open(self) -> bool:
        """Whether the dialog is still open (drafting or in flight)."""
        return self.state in (DraftState.DRAFTING, DraftState.IN_FLIGHT)

    @property
    def warning(self) -> str | None:
        """Mandatory warning shown for force reversals."""
        return FORCE_REVERSAL_WARNING if self.kind is ReversalKind.FORCE else None

    def issue_key(self, generator: IdempotencyKeyGenerator) -> str:
        """Return the key for this submission, generating one if needed."""
        fingerprint = (self.reason.strip(), self.admin_notes)
        if self.idempotency_key is None or fingerprint != self._key_fingerprint:
            self.idempotency_key = generator()
            self._key_fingerprint = fingerprint
        return self.idempotency_key


@dataclass(frozen=True)
class ReversalResult:
    """Outcome of a reversal submission that reached the ledger."""

    kind: ReversalKind
    reference: str
    idempotency_key: str
    succeeded: bool
    message: str = ""
    response: ReversalResponse | None = None
