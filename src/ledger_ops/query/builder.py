"""Query builder — FilterState + Pagination + Sorting → ServerQuery.

Only predicates the ledger understands are emitted. Client-only
predicates (wallet id, transaction id) are left to the merge layer.
Bad input degrades silently: unparseable or negative amounts and
incomplete custom date ranges are dropped rather than rejected.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ledger_ops.config.settings import DateRangePreset
from ledger_ops.ledger.models import parse_decimal
from ledger_ops.query.filters import ALL, DEFAULT_SORT_COLUMN, SortDirection, ServerQuery

if TYPE_CHECKING:
    from ledger_ops.query.filters import FilterState, Pagination, Sorting

_PRESET_DAYS = {
    DateRangePreset.LAST_7_DAYS: 7,
    DateRangePreset.LAST_30_DAYS: 30,
}


def start_of_day(moment: datetime) -> datetime:
    """Midnight at the start of ``moment``'s day (timezone preserved)."""
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def end_of_day(moment: datetime) -> datetime:
    """Last millisecond of ``moment``'s day (timezone preserved)."""
    return datetime.combine(moment.date(), time(23, 59, 59, 999000), tzinfo=moment.tzinfo)


def _parse_day(value: date | str | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def resolve_date_range(
    filters: FilterState, now: datetime
) -> tuple[datetime, datetime] | None:
    """Resolve the date preset into inclusive ``(start, end)`` bounds.

    Returns ``None`` when no date predicate applies: preset ``all``, or
    ``custom`` without both bounds.
    """
    preset = filters.date_range
    if preset == DateRangePreset.TODAY:
        return start_of_day(now), end_of_day(now)
    if preset in _PRESET_DAYS:
        return start_of_day(now - timedelta(days=_PRESET_DAYS[preset])), end_of_day(now)
    if preset == DateRangePreset.CUSTOM:
        start = _parse_day(filters.start)
        end = _parse_day(filters.end)
        if start is None or end is None:
            return None
        tz = now.tzinfo
        return (
            datetime.combine(start, time.min, tzinfo=tz),
            datetime.combine(end, time(23, 59, 59, 999000), tzinfo=tz),
        )
    return None


def parse_amount(value: Any) -> Decimal | None:
    """Parse a non-negative amount bound; anything else is dropped."""
    if isinstance(value, str) and not value.strip():
        return None
    amount = parse_decimal(value)
    if amount is None or amount < 0:
        return None
    return amount


def _clean(value: str | None) -> str | None:
    """Trim a string predicate; empty means absent."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _enum_predicate(value: str | None) -> str | None:
    text = _clean(value)
    if text is None or text.lower() == ALL:
        return None
    return text.upper()


def build_query(
    filters: FilterState,
    pagination: Pagination,
    sorting: Sorting | None = None,
    *,
    now: datetime | None = None,
) -> ServerQuery:
    """Translate view state into the query sent to the ledger.

    Args:
        filters: Current filter predicates.
        pagination: 1-based page and page size.
        sorting: Sort column/direction; unset means ``createdAt`` descending.
        now: Reference time for relative date presets (defaults to local now).

    Returns:
        ServerQuery with a 0-based page and only server-supported predicates.
    """
    if now is None:
        now = datetime.now().astimezone()

    if sorting is None or sorting.column is None:
        sort_by, order = DEFAULT_SORT_COLUMN, SortDirection.DESC.wire
    else:
        sort_by, order = sorting.column, sorting.direction.wire

    bounds = resolve_date_range(filters, now)
    start_date, end_date = bounds if bounds else (None, None)

    descriptions = tuple(sorted({d.strip() for d in filters.descriptions if d and d.strip()}))

    return ServerQuery(
        page=pagination.page - 1,
        limit=pagination.page_size,
        sort_by=sort_by,
        order=order,
        start_date=start_date,
        end_date=end_date,
        status=_enum_predicate(filters.status),
        transaction_type=_enum_predicate(filters.transaction_type),
        description=_clean(filters.description),
        descriptions=descriptions,
        transaction_reference=_clean(filters.transaction_reference),
        user_id=_clean(filters.user_id),
        user_name=_clean(filters.user_name),
        user_phone_number=_clean(filters.user_phone_number),
        user_national_id=_clean(filters.user_national_id),
        min_amount=parse_amount(filters.min_amount),
        max_amount=parse_amount(filters.max_amount),
    )
