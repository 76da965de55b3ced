"""Sort engine — stable client-side ordering over the sortable columns."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ledger_ops.errors.definitions import ErrUnsortableColumn
from ledger_ops.query.filters import SortDirection

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ledger_ops.ledger.models import Transaction

_SORT_KEYS: dict[str, Callable[[Transaction], Any]] = {
    "id": lambda t: t.id,
    "createdAt": lambda t: t.created_at_ms,
    "amount": lambda t: t.amount,
    "status": lambda t: t.status.value,
    "transactionType": lambda t: t.transaction_type.value,
    "userId": lambda t: t.user_id,
}


def sort_transactions(
    items: Iterable[Transaction],
    column: str | None,
    direction: SortDirection | str = SortDirection.DESC,
) -> list[Transaction]:
    """Return ``items`` ordered by ``column``.

    Equal keys keep their input order in both directions. ``column=None``
    returns the items unchanged.

    Raises:
        ValidationError: If ``column`` is not sortable.
    """
    if column is None:
        return list(items)
    key = _SORT_KEYS.get(column)
    if key is None:
        raise ErrUnsortableColumn
    return sorted(items, key=key, reverse=SortDirection(direction) is SortDirection.DESC)
