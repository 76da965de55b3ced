"""Test data factories and a fake ledger served through httpx.MockTransport."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import httpx

from ledger_ops.ledger.client import LedgerClient
from ledger_ops.ledger.models import Transaction, parse_timestamp

LEDGER_URL = "https://ledger.test"

# Fixed reference time for date-relative filters
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def txn_dict(
    id: str,
    *,
    status: str = "SUCCESSFUL",
    amount: float | int | str = 1000,
    user_id: str = "user-1",
    reference: str | None = None,
    description: str = "WALLET_TRANSFER",
    transaction_type: str = "CASH_OUT",
    created_at: datetime = NOW,
    from_account: str = "ACC-FROM-0001",
    to_account: str = "ACC-TO-0001",
    currency: str = "RWF",
) -> dict[str, Any]:
    """Build a ledger JSON transaction."""
    return {
        "id": id,
        "internalReference": reference or f"TRX-{id}",
        "userId": user_id,
        "amount": amount,
        "currency": currency,
        "status": status,
        "transactionType": transaction_type,
        "description": description,
        "fromDetails": {
            "accountName": "Sender",
            "accountSource": "WALLET",
            "accountNumber": from_account,
            "currency": currency,
        },
        "toDetails": {
            "accountName": "Receiver",
            "accountSource": "WALLET",
            "accountNumber": to_account,
            "currency": currency,
        },
        "initiatorConfirmed": True,
        "receiverConfirmed": True,
        "createdAt": created_at.isoformat(),
        "updatedAt": created_at.isoformat(),
    }


def make_txn(id: str, **kwargs: Any) -> Transaction:
    """Build a parsed Transaction."""
    return Transaction.from_dict(txn_dict(id, **kwargs))


class FakeLedger:
    """In-memory ledger behind an ``httpx.MockTransport``.

    Evaluates the server-side predicates the real ledger supports and
    records every request it sees.
    """

    def __init__(self, transactions: list[dict[str, Any]] | None = None) -> None:
        self.transactions = list(transactions or [])
        self.requests: list[httpx.Request] = []
        self.reversal_bodies: list[tuple[str, dict[str, Any]]] = []
        self.reversal_status = 200
        self.reversal_payload: dict[str, Any] = {
            "status": "success",
            "message": "Transfer reversed",
        }

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/api/transactions/all":
            return self._list(request, self.transactions)
        if request.method == "GET" and path.startswith("/api/transactions/by-user/"):
            user_id = path.rsplit("/", 1)[-1]
            rows = [t for t in self.transactions if t["userId"] == user_id]
            return self._list(request, rows)
        if request.method == "GET" and path.startswith("/api/transactions/"):
            txn_id = path.rsplit("/", 1)[-1]
            for row in self.transactions:
                if row["id"] == txn_id:
                    return httpx.Response(200, json={"success": True, "data": row})
            return httpx.Response(404, json={"message": "Transaction not found"})
        if request.method == "POST" and path.endswith(("/reverse", "/force-reverse")):
            self.reversal_bodies.append((path, json.loads(request.content)))
            return httpx.Response(self.reversal_status, json=self.reversal_payload)
        return httpx.Response(404, json={"message": "not found"})

    @property
    def list_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/api/transactions/all"]

    def _list(self, request: httpx.Request, rows: list[dict[str, Any]]) -> httpx.Response:
        params = request.url.params
        for key in ("status", "transactionType", "description", "userId"):
            if key in params:
                rows = [r for r in rows if str(r.get(key)) == params[key]]
        if "transactionReference" in params:
            rows = [r for r in rows if r["internalReference"] == params["transactionReference"]]
        if params.get_list("descriptions"):
            allowed = set(params.get_list("descriptions"))
            rows = [r for r in rows if r["description"] in allowed]
        if "startDate" in params:
            start = datetime.fromisoformat(params["startDate"])
            rows = [r for r in rows if parse_timestamp(r["createdAt"]) >= start]
        if "endDate" in params:
            end = datetime.fromisoformat(params["endDate"])
            rows = [r for r in rows if parse_timestamp(r["createdAt"]) <= end]
        if "minAmount" in params:
            rows = [r for r in rows if Decimal(str(r["amount"])) >= Decimal(params["minAmount"])]
        if "maxAmount" in params:
            rows = [r for r in rows if Decimal(str(r["amount"])) <= Decimal(params["maxAmount"])]

        reverse = params.get("order", "DESC") == "DESC"
        rows = sorted(rows, key=lambda r: parse_timestamp(r["createdAt"]), reverse=reverse)
        page = int(params.get("page", 0))
        limit = int(params.get("limit", 50))
        content = rows[page * limit : (page + 1) * limit]
        return httpx.Response(
            200,
            json={"success": True, "data": {"content": content, "totalElements": len(rows)}},
        )


def attach_transport(client: LedgerClient, transport: httpx.MockTransport) -> LedgerClient:
    """Replace the ledger client's internal httpx client with a mock transport."""
    client._client = httpx.AsyncClient(transport=transport, base_url=LEDGER_URL)
    return client


