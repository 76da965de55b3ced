"""Shared fixtures for integration tests.

These fixtures build a full TransactionConsole wired to the in-memory
fake ledger. Only the HTTP transport is replaced.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from ledger_ops.config.settings import AppConfig
from ledger_ops.console import TransactionConsole
from ledger_ops.metrics.collector import LedgerMetrics
from tests.factories import NOW, FakeLedger, attach_transport

FORCE_PERMISSION = "FORCE_REVERSE_TRANSACTION"


@pytest.fixture
def metrics() -> LedgerMetrics:
    return LedgerMetrics()


@pytest.fixture
async def console(
    app_config: AppConfig, fake_ledger: FakeLedger, metrics: LedgerMetrics
) -> AsyncIterator[TransactionConsole]:
    """A console for an operator allowed to force-reverse."""
    keys = iter(f"idem-{i}" for i in range(1, 100))
    con = TransactionConsole(
        app_config,
        permissions={FORCE_PERMISSION},
        key_generator=lambda: next(keys),
        clock=lambda: NOW,
        metrics=metrics,
    )
    attach_transport(con.ledger, fake_ledger.transport())
    yield con
    await con.close()
