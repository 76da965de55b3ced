"""Ledger HTTP client — transaction listing, detail lookup and reversals.

Provides an async HTTP client for the transaction ledger API:
- GET  /api/transactions/all                     — paginated, filtered listing
- GET  /api/transactions/{id}                    — single transaction
- GET  /api/transactions/by-user/{userId}        — listing for one user
- POST /transactions/{reference}/reverse         — standard reversal
- POST /transactions/{reference}/force-reverse   — force reversal (may create debt)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from ledger_ops.errors.definitions import ErrClientNotConnected, ErrMissingToken
from ledger_ops.errors.ledger_errors import (
    AuthError,
    BadRequestError,
    LedgerOpsError,
    NetworkError,
    ServerError,
)
from ledger_ops.ledger.models import (
    FetchErr,
    FetchResult,
    ReversalResponse,
    Transaction,
    fetch_result_from_envelope,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from ledger_ops.config.settings import LedgerConfig
    from ledger_ops.query.filters import ServerQuery

logger = logging.getLogger(__name__)


def extract_error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of a failed ledger response.

    Field errors under ``data`` render as ``field: message, ...``; otherwise
    ``message``, then ``error``, then the raw body are used.
    """
    fallback = f"Request failed with status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return response.text or fallback

    if not isinstance(body, dict):
        return response.text or fallback

    data = body.get("data")
    if isinstance(data, dict):
        if data:
            return ", ".join(f"{key}: {value}" for key, value in data.items())
        return body.get("message") or fallback
    return body.get("message") or body.get("error") or fallback


class LedgerClient:
    """Async HTTP client for the transaction ledger.

    The session token comes from ``token_provider`` when given (the
    authentication layer is an external collaborator), else from
    ``config.token``.

    Usage::

        ledger = LedgerClient(config)
        await ledger.connect()
        try:
            result = await ledger.fetch_transactions(query)
        finally:
            await ledger.close()
    """

    def __init__(
        self,
        config: LedgerConfig,
        *,
        token_provider: Callable[[], str | None] | None = None,
    ) -> None:
        """Initialize the ledger client.

        Args:
            config: Ledger configuration (url, token, timeout, paths).
            token_provider: Callable returning the current session token.
        """
        self._config = config
        self._token_provider = token_provider
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def fetch_transactions(self, query: ServerQuery) -> FetchResult:
        """Fetch one page of transactions matching ``query``.

        Never raises for transport or HTTP failures; they come back as
        ``FetchErr`` so callers handle all three outcomes explicitly.

        Args:
            query: Server-side predicates and page window.

        Returns:
            FetchOk, FetchEmpty (``success=false`` / no content) or FetchErr.
        """
        return await self._fetch_page(self._config.transactions_path, query)

    async def get_user_transactions(self, user_id: str, query: ServerQuery) -> FetchResult:
        """Fetch one page of a single user's transactions.

        Args:
            user_id: The user whose transactions to list.
            query: Server-side predicates and page window.

        Returns:
            FetchOk, FetchEmpty or FetchErr.
        """
        path = f"{self._config.user_transactions_path}/{quote(user_id, safe='')}"
        return await self._fetch_page(path, query)

    async def get_transaction(self, transaction_id: str) -> Transaction:
        """Fetch full details of one transaction.

        Args:
            transaction_id: Ledger row id.

        Returns:
            The Transaction.

        Raises:
            LedgerOpsError: On transport, auth, HTTP or envelope errors.
        """
        path = f"{self._config.transaction_path}/{quote(transaction_id, safe='')}"
        response = await self._request("GET", path)
        body = self._decode(response)
        data = body.get("data", body) if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise ServerError(f"Malformed transaction response for {transaction_id}")
        return Transaction.from_dict(data)

    # ------------------------------------------------------------------
    # Reversals
    # ------------------------------------------------------------------

    async def standard_reversal(self, reference: str, body: dict[str, Any]) -> ReversalResponse:
        """POST a standard reversal for the transaction with ``reference``.

        Raises:
            LedgerOpsError: On transport, auth, HTTP or envelope errors.
        """
        return await self._post_reversal(reference, "reverse", body)

    async def force_reversal(self, reference: str, body: dict[str, Any]) -> ReversalResponse:
        """POST a force reversal for the transaction with ``reference``.

        Raises:
            LedgerOpsError: On transport, auth, HTTP or envelope errors.
        """
        return await self._post_reversal(reference, "force-reverse", body)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _fetch_page(self, path: str, query: ServerQuery) -> FetchResult:
        try:
            response = await self._request("GET", path, params=query.to_params())
            body = self._decode(response)
        except LedgerOpsError as exc:
            return FetchErr(exc)
        return fetch_result_from_envelope(body)

    async def _post_reversal(
        self, reference: str, action: str, body: dict[str, Any]
    ) -> ReversalResponse:
        path = f"{self._config.reversal_path}/{quote(reference, safe='')}/{action}"
        response = await self._request("POST", path, json=body)
        payload = self._decode(response)
        if not isinstance(payload, dict):
            raise ServerError(f"Malformed reversal response for {reference}")
        return ReversalResponse.from_dict(payload)

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            raise ErrClientNotConnected
        return self._client

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else self._config.token
        if not token:
            raise ErrMissingToken
        return {"Authorization": f"Bearer {token}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = self._ensure_connected()
        headers = self._auth_headers()
        logger.debug("Ledger %s %s", method, path)
        try:
            response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Ledger request timed out: {exc}", status_code=504) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Ledger unreachable: {exc}") from exc

        if response.is_success:
            return response
        self._raise_for_status(response)
        return response  # unreachable

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ServerError(
                f"Malformed ledger response ({response.status_code})",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        """Raise the classified error for a non-2xx response."""
        status = response.status_code
        message = extract_error_message(response)
        if status in (401, 403):
            raise AuthError(message, status_code=status)
        if 400 <= status < 500:
            raise BadRequestError(message, status_code=status)
        raise ServerError(message, status_code=status)
