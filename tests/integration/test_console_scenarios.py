"""End-to-end operator scenarios through TransactionConsole."""

from __future__ import annotations

import pytest

from ledger_ops.console import TransactionConsole
from ledger_ops.errors.ledger_errors import ValidationError
from ledger_ops.ledger.models import TransactionStatus
from ledger_ops.metrics.collector import LedgerMetrics
from ledger_ops.reversal.models import DraftState, ReversalKind
from tests.factories import FakeLedger, make_txn, txn_dict

# ---------------------------------------------------------------------------
# Querying
# ---------------------------------------------------------------------------


class TestQueryScenarios:
    async def test_failed_in_last_seven_days(
        self, console: TransactionConsole, fake_ledger: FakeLedger
    ) -> None:
        console.session.update_filters(status="FAILED", date_range="7d")
        view = await console.session.refetch()
        assert sorted(t.id for t in view.items) == ["t01", "t02", "t03"]
        assert all(t.status is TransactionStatus.FAILED for t in view.items)
        assert view.total_count == 3
        assert view.total_pages == 1

        params = fake_ledger.list_requests[-1].url.params
        assert params["status"] == "FAILED"
        assert params["startDate"].startswith("2026-10-12T00:00:00")

    async def test_paging_through_results(self, console: TransactionConsole) -> None:
        console.session.update_filters(date_range="all")
        first = await console.session.refetch()
        assert first.total_count == 10
        assert first.total_pages == 2

        console.session.set_page(2)
        second = await console.session.refetch()
        assert len(second.items) == 5
        assert {t.id for t in first.items}.isdisjoint(t.id for t in second.items)

    async def test_wallet_search(self, console: TransactionConsole) -> None:
        console.session.update_filters(wallet_id="wal-9931", date_range="all")
        view = await console.session.refetch()
        assert view.residual_active is True
        assert sorted(t.id for t in view.items) == ["t07", "t10"]

    async def test_sort_by_amount(self, console: TransactionConsole, fake_ledger: FakeLedger):
        fake_ledger.transactions = [
            txn_dict("a", amount=10),
            txn_dict("b", amount=300),
            txn_dict("c", amount=20),
        ]
        console.session.toggle_sort("amount")
        view = await console.session.refetch()
        assert [t.id for t in view.items] == ["b", "c", "a"]
        assert fake_ledger.list_requests[-1].url.params["sortBy"] == "amount"


# ---------------------------------------------------------------------------
# Reversals
# ---------------------------------------------------------------------------


class TestReversalScenarios:
    async def test_standard_reversal_refreshes_view(
        self, console: TransactionConsole, fake_ledger: FakeLedger, metrics: LedgerMetrics
    ) -> None:
        txn = make_txn("001", reference="TRX-001", amount=50000, currency="RWF")
        await console.session.refetch()
        fetches = len(fake_ledger.list_requests)

        result = await console.reversals.reverse(
            ReversalKind.STANDARD, txn, "Duplicate transaction"
        )

        assert result.succeeded is True
        path, body = fake_ledger.reversal_bodies[0]
        assert path == "/transactions/TRX-001/reverse"
        assert body == {
            "reason": "Duplicate transaction",
            "adminNotes": "",
            "idempotencyKey": "idem-1",
        }
        assert len(fake_ledger.list_requests) == fetches + 1
        assert metrics.registry.get_sample_value(
            "ledger_reversal_total", {"kind": "standard", "outcome": "success"}
        ) == 1.0

    async def test_force_reversal_body(
        self, console: TransactionConsole, fake_ledger: FakeLedger
    ) -> None:
        txn = make_txn("001", reference="TRX-001", amount=50000, currency="RWF")
        draft = console.reversals.open(ReversalKind.FORCE, txn)
        assert draft.warning is not None
        draft.reason = "Dispute resolution"
        await console.reversals.submit(draft)

        path, body = fake_ledger.reversal_bodies[0]
        assert path == "/transactions/TRX-001/force-reverse"
        assert body["createDebtIfInsufficientFunds"] is True
        assert body["reason"] == "Dispute resolution"
        assert body["adminNotes"] == ""
        assert body["idempotencyKey"] == "idem-1"
        assert body["debtDueDays"] == 0
        assert draft.state is DraftState.REVERSED

    async def test_reversal_artifacts_cannot_be_reversed(
        self, console: TransactionConsole, fake_ledger: FakeLedger
    ) -> None:
        artifact = make_txn("r1", description="WALLET_TRANSFER_REVERSAL_IN")
        with pytest.raises(ValidationError):
            await console.reversals.reverse(ReversalKind.STANDARD, artifact, "again")
        assert fake_ledger.reversal_bodies == []


# ---------------------------------------------------------------------------
# Triage
# ---------------------------------------------------------------------------


class TestTriageScenarios:
    async def test_classify_and_correlate(self, console: TransactionConsole) -> None:
        console.session.update_filters(status="FAILED", date_range="all")
        view = await console.session.refetch()
        by_id = {t.id: t for t in view.matched}

        info = console.classify(by_id["t02"])
        assert info.category == "Insufficient Funds"
        assert info.retry_eligible is False
        assert console.classify(make_txn("ok")).category == "N/A"

        # t01 and t02 are 48h apart; only rows within 24h correlate
        assert console.related_failures(by_id["t01"]) == []
        assert console.taxonomy.version == "1"


class TestNonReversibleStatuses:
    @pytest.mark.parametrize("status", ["PENDING", "FAILED", "ROLLED_BACK", "CANCELLED", "EXPIRED"])
    async def test_rejected_without_network_calls(
        self, console: TransactionConsole, fake_ledger: FakeLedger, status: str
    ) -> None:
        txn = make_txn("001", reference="TRX-001", status=status)
        for kind in ReversalKind:
            with pytest.raises(ValidationError):
                await console.reversals.reverse(kind, txn, "Duplicate transaction")
        assert fake_ledger.requests == []
