"""Tests for related-failure correlation."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from ledger_ops.config.settings import TriageConfig
from ledger_ops.triage.correlator import find_related, find_related_with_config
from tests.factories import NOW, make_txn


def _failed(id: str, *, hours: float = 0, amount: int | str = 1000, user_id: str = "user-1"):
    return make_txn(
        id,
        status="FAILED",
        amount=amount,
        user_id=user_id,
        created_at=NOW - timedelta(hours=hours),
    )


class TestFindRelated:
    def test_same_user_close_in_time_and_amount(self) -> None:
        target = _failed("target")
        rows = [
            target,
            _failed("near", hours=2, amount=1050),
            _failed("far-time", hours=30),
            _failed("far-amount", hours=1, amount=2000),
            _failed("other-user", hours=1, user_id="user-2"),
            make_txn("succeeded", amount=1000, created_at=NOW),
        ]
        assert [t.id for t in find_related(target, rows)] == ["near"]

    def test_excludes_self(self) -> None:
        target = _failed("target")
        assert find_related(target, [target]) == []

    def test_only_for_failed(self) -> None:
        target = make_txn("ok")
        assert find_related(target, [_failed("a")]) == []

    def test_ordered_by_time_distance_and_limited(self) -> None:
        target = _failed("target")
        rows = [_failed(f"h{h}", hours=h) for h in (5, 1, 3, 2, 4, 6, 7)]
        related = find_related(target, rows, limit=3)
        assert [t.id for t in related] == ["h1", "h2", "h3"]

    def test_boundaries_inclusive(self) -> None:
        target = _failed("target")
        rows = [_failed("edge-time", hours=24), _failed("edge-amount", amount="1100")]
        assert {t.id for t in find_related(target, rows)} == {"edge-time", "edge-amount"}

    def test_future_rows_count(self) -> None:
        target = _failed("target", hours=5)
        assert [t.id for t in find_related(target, [_failed("later")])] == ["later"]

    def test_with_config(self) -> None:
        target = _failed("target")
        rows = [_failed("a", hours=2), _failed("b", hours=1, amount=1300)]
        config = TriageConfig(related_window_hours=1.5, related_amount_tolerance=0.5)
        assert [t.id for t in find_related_with_config(target, rows, config)] == ["b"]

    def test_zero_amount_requires_exact_match(self) -> None:
        target = _failed("target", amount=0)
        rows = [_failed("zero", hours=1, amount=0), _failed("one", hours=1, amount=1)]
        related = find_related(target, rows, amount_tolerance=Decimal("0.10"))
        assert [t.id for t in related] == ["zero"]
