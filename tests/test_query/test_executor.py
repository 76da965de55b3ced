"""Tests for the query executor."""

from __future__ import annotations

import httpx
import pytest

from ledger_ops.config.settings import LedgerConfig
from ledger_ops.errors.ledger_errors import AuthError, NetworkError
from ledger_ops.ledger.client import LedgerClient
from ledger_ops.metrics.collector import LedgerMetrics
from ledger_ops.query.executor import Page, QueryExecutor
from ledger_ops.query.filters import ServerQuery
from tests.factories import LEDGER_URL, attach_transport


def _executor(handler, metrics=None) -> QueryExecutor:
    ledger = attach_transport(
        LedgerClient(LedgerConfig(url=LEDGER_URL, token="t")), httpx.MockTransport(handler)
    )
    return QueryExecutor(ledger, metrics=metrics)


class TestFetchPage:
    async def test_ok(self, ledger: LedgerClient):
        page = await QueryExecutor(ledger).fetch_page(ServerQuery(limit=4))
        assert isinstance(page, Page)
        assert len(page.items) == 4
        assert page.total_count == 10

    async def test_empty_envelope_is_empty_page(self):
        executor = _executor(lambda r: httpx.Response(200, json={"success": False}))
        assert await executor.fetch_page(ServerQuery()) == Page([], 0)

    async def test_error_is_raised(self):
        executor = _executor(lambda r: httpx.Response(401, json={"message": "expired"}))
        with pytest.raises(AuthError, match="expired"):
            await executor.fetch_page(ServerQuery())

    async def test_network_error_is_raised(self):
        def handler(request: httpx.Request):
            raise httpx.ConnectError("refused")

        with pytest.raises(NetworkError):
            await _executor(handler).fetch_page(ServerQuery())

    async def test_fetch_is_timed(self, ledger: LedgerClient):
        metrics = LedgerMetrics()
        await QueryExecutor(ledger, metrics=metrics).fetch_page(ServerQuery())
        assert metrics.registry.get_sample_value("ledger_fetch_histogram_count") == 1.0


class TestGetTransaction:
    async def test_delegates(self, ledger: LedgerClient):
        executor = QueryExecutor(ledger)
        assert executor.ledger is ledger
        assert (await executor.get_transaction("t03")).id == "t03"
