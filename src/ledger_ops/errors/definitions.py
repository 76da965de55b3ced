"""Pre-built error instances raised across the engine."""

from __future__ import annotations

from ledger_ops.errors.ledger_errors import AuthError, LedgerOpsError, ValidationError

# -- Authentication --------------------------------------------------------

ErrMissingToken = AuthError("session token is missing")

# -- Reversal validation ---------------------------------------------------

ErrReasonRequired = ValidationError(
    "a reason is required to reverse a transaction", code="reason-required"
)
ErrNotReversible = ValidationError(
    "only SUCCESSFUL transactions can be reversed", code="not-reversible"
)
ErrReversalArtifact = ValidationError(
    "transaction is itself the result of a reversal", code="reversal-artifact"
)
ErrMissingReference = ValidationError(
    "transaction has no internal reference", code="missing-reference"
)
ErrReversalInFlight = ValidationError(
    "a reversal is already in flight for this transaction", code="reversal-in-flight"
)
ErrAlreadyReversed = ValidationError(
    "transaction has already been reversed", code="already-reversed"
)
ErrForceNotPermitted = ValidationError(
    "operator is not permitted to force-reverse transactions", code="force-not-permitted"
)
ErrDraftClosed = ValidationError("reversal draft is no longer open", code="draft-closed")

# -- Query validation ------------------------------------------------------

ErrInvalidPage = ValidationError("page must be >= 1", code="invalid-page")
ErrInvalidPageSize = ValidationError("page size must be >= 1", code="invalid-page-size")
ErrUnsortableColumn = ValidationError("column is not sortable", code="unsortable-column")
ErrInvalidDateRange = ValidationError("unknown date range preset", code="invalid-date-range")

# -- Client lifecycle ------------------------------------------------------

ErrClientNotConnected = LedgerOpsError(
    "ledger client not connected. Call connect() first.", code="not-connected"
)
