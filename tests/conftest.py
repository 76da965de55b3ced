"""Shared test fixtures for the ledger-ops test suite."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest

from ledger_ops.config.settings import AppConfig, LedgerConfig, QueryConfig
from ledger_ops.ledger.client import LedgerClient
from tests.factories import LEDGER_URL, NOW, FakeLedger, attach_transport, txn_dict


@pytest.fixture
def ledger_config() -> LedgerConfig:
    """Ledger settings pointing at the fake ledger."""
    return LedgerConfig(url=LEDGER_URL, token="test-token")


@pytest.fixture
def app_config(ledger_config: LedgerConfig) -> AppConfig:
    """Provide a test AppConfig with safe defaults."""
    return AppConfig(
        debug=True,
        ledger=ledger_config,
        query=QueryConfig(default_page_size=5),
    )


@pytest.fixture
def fixture_transactions() -> list[dict[str, Any]]:
    """Ten transactions: three FAILED within the last seven days."""
    day = timedelta(days=1)
    return [
        txn_dict("t01", status="FAILED", created_at=NOW - 1 * day, description="network timeout"),
        txn_dict(
            "t02", status="FAILED", created_at=NOW - 3 * day, description="insufficient balance"
        ),
        txn_dict("t03", status="FAILED", created_at=NOW - 6 * day, description="gateway error"),
        txn_dict("t04", status="FAILED", created_at=NOW - 8 * day),
        txn_dict("t05", status="FAILED", created_at=NOW - 40 * day),
        txn_dict("t06", status="SUCCESSFUL", created_at=NOW - 1 * day),
        txn_dict("t07", status="SUCCESSFUL", created_at=NOW - 2 * day, to_account="WAL-9931"),
        txn_dict("t08", status="PENDING", created_at=NOW - 2 * day),
        txn_dict("t09", status="CANCELLED", created_at=NOW - 5 * day),
        txn_dict("t10", status="ROLLED_BACK", created_at=NOW - 4 * day, from_account="wal-9931x"),
    ]


@pytest.fixture
def fake_ledger(fixture_transactions: list[dict[str, Any]]) -> FakeLedger:
    """A fake ledger seeded with the fixture transactions."""
    return FakeLedger(fixture_transactions)


@pytest.fixture
def ledger(ledger_config: LedgerConfig, fake_ledger: FakeLedger) -> LedgerClient:
    """A ledger client wired to the fake ledger."""
    return attach_transport(LedgerClient(ledger_config), fake_ledger.transport())
