"""Error taxonomy for ledger queries and reversals."""

from __future__ import annotations


class LedgerOpsError(Exception):
    """Base error for all transaction query and reversal operations.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code observed or suggested.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "ledger-ops-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ValidationError(LedgerOpsError):
    """Input rejected locally; never reaches the network."""

    def __init__(self, message: str, *, code: str = "validation-error") -> None:
        super().__init__(message, status_code=400, code=code)


class NetworkError(LedgerOpsError):
    """The ledger could not be reached (connect failure, timeout)."""

    def __init__(self, message: str, *, status_code: int = 503) -> None:
        super().__init__(message, status_code=status_code, code="network-error")


class AuthError(LedgerOpsError):
    """Session token is missing, expired or rejected."""

    def __init__(self, message: str, *, status_code: int = 401) -> None:
        super().__init__(message, status_code=status_code, code="auth-error")


class BadRequestError(LedgerOpsError):
    """The ledger rejected the request with a 4xx response."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message, status_code=status_code, code="bad-request")


class ServerError(LedgerOpsError):
    """The ledger failed (5xx) or returned a malformed envelope."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="server-error")
