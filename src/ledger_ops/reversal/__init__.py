"""Reversal — standard and force reversal workflow."""

from ledger_ops.reversal.idempotency import generate_idempotency_key
from ledger_ops.reversal.models import (
    DraftState,
    ReversalDraft,
    ReversalKind,
    ReversalRequest,
    ReversalResult,
)
from ledger_ops.reversal.workflow import ReversalWorkflow

__all__ = [
    "DraftState",
    "ReversalDraft",
    "ReversalKind",
    "ReversalRequest",
    "ReversalResult",
    "ReversalWorkflow",
    "generate_idempotency_key",
]
