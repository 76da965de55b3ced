"""Filter model — FilterState, Pagination, Sorting and the outgoing ServerQuery.

``FilterState`` holds raw operator input exactly as typed; normalisation
(trimming, amount parsing, date resolution) happens in the query builder.
"""

from __future__ import annotations

import dataclasses
import enum
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from ledger_ops.config.settings import DateRangePreset
from ledger_ops.errors.definitions import (
    ErrInvalidDateRange,
    ErrInvalidPage,
    ErrInvalidPageSize,
    ErrUnsortableColumn,
)

ALL = "all"

# Columns the sort engine knows how to order
SORTABLE_COLUMNS = ("id", "createdAt", "amount", "status", "transactionType", "userId")

DEFAULT_SORT_COLUMN = "createdAt"


class SortDirection(enum.StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"

    @property
    def wire(self) -> str:
        """Order token understood by the ledger (``ASC`` / ``DESC``)."""
        return self.value.upper()

    def flipped(self) -> SortDirection:
        """The opposite direction."""
        return SortDirection.ASC if self is SortDirection.DESC else SortDirection.DESC


# ---------------------------------------------------------------------------
# FilterState
# ---------------------------------------------------------------------------


@dataclass
class FilterState:
    """All query predicates for one transaction view.

    Attributes:
        transaction_reference: Ledger reference search (server-side).
        transaction_id: Row id substring (client-side only).
        wallet_id: Account-number substring (client-side only).
        date_range: Preset; ``custom`` uses ``start`` / ``end``.
        status: ``"all"`` or a TransactionStatus value.
        transaction_type: ``"all"`` or a TransactionType value.
        description: Single description tag.
        descriptions: Multi-select description tags.
        min_amount: Raw lower amount bound as typed.
        max_amount: Raw upper amount bound as typed.
    """

    transaction_reference: str = ""
    transaction_id: str = ""
    user_id: str = ""
    user_name: str = ""
    user_phone_number: str = ""
    user_national_id: str = ""
    wallet_id: str = ""
    date_range: DateRangePreset = DateRangePreset.LAST_7_DAYS
    start: date | str | None = None
    end: date | str | None = None
    status: str = ALL
    transaction_type: str = ALL
    description: str = ""
    descriptions: frozenset[str] = field(default_factory=frozenset)
    min_amount: str | Decimal | float | None = None
    max_amount: str | Decimal | float | None = None

    def __post_init__(self) -> None:
        try:
            self.date_range = DateRangePreset(self.date_range)
        except ValueError as exc:
            raise ErrInvalidDateRange from exc
        self.descriptions = frozenset(self.descriptions)

    @property
    def residual_active(self) -> bool:
        """Whether a predicate the ledger cannot evaluate is set."""
        return bool(self.wallet_id.strip() or self.transaction_id.strip())

    def replace(self, **changes: Any) -> FilterState:
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


# ---------------------------------------------------------------------------
# Pagination / Sorting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pagination:
    """1-based page position and page size."""

    page: int = 1
    page_size: int = 50

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ErrInvalidPage
        if self.page_size < 1:
            raise ErrInvalidPageSize

    @property
    def offset(self) -> int:
        """Index of the first item on this page."""
        return (self.page - 1) * self.page_size

    def total_pages(self, count: int) -> int:
        """Number of pages needed to show ``count`` items."""
        return math.ceil(count / self.page_size) if count > 0 else 0

    def slice(self, items: list[Any]) -> list[Any]:
        """Cut this page out of a fully materialised list."""
        return items[self.offset : self.offset + self.page_size]


@dataclass(frozen=True)
class Sorting:
    """Sort column and direction; ``column=None`` keeps input order."""

    column: str | None = DEFAULT_SORT_COLUMN
    direction: SortDirection = SortDirection.DESC

    def __post_init__(self) -> None:
        if self.column is not None and self.column not in SORTABLE_COLUMNS:
            raise ErrUnsortableColumn
        object.__setattr__(self, "direction", SortDirection(self.direction))

    def toggle(self, column: str) -> Sorting:
        """Flip direction on the same column; a new column starts descending."""
        if column == self.column:
            return Sorting(column, self.direction.flipped())
        return Sorting(column, SortDirection.DESC)


# ---------------------------------------------------------------------------
# ServerQuery
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServerQuery:
    """The predicates and page window sent to the transaction ledger.

    ``page`` is 0-based. Optional predicates that are ``None`` (or an empty
    ``descriptions`` tuple) are omitted from the request.
    """

    page: int = 0
    limit: int = 50
    sort_by: str = DEFAULT_SORT_COLUMN
    order: str = "DESC"
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: str | None = None
    transaction_type: str | None = None
    description: str | None = None
    descriptions: tuple[str, ...] = ()
    transaction_reference: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    user_phone_number: str | None = None
    user_national_id: str | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ledger's camelCase request shape."""
        data: dict[str, Any] = {
            "page": self.page,
            "limit": self.limit,
            "sortBy": self.sort_by,
            "order": self.order,
        }
        optional: dict[str, Any] = {
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "status": self.status,
            "transactionType": self.transaction_type,
            "description": self.description,
            "descriptions": list(self.descriptions) or None,
            "transactionReference": self.transaction_reference,
            "userId": self.user_id,
            "userName": self.user_name,
            "userPhoneNumber": self.user_phone_number,
            "userNationalId": self.user_national_id,
            "minAmount": str(self.min_amount) if self.min_amount is not None else None,
            "maxAmount": str(self.max_amount) if self.max_amount is not None else None,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    def to_params(self) -> list[tuple[str, str]]:
        """Flatten into query-string pairs; ``descriptions`` repeats its key."""
        params: list[tuple[str, str]] = []
        for key, value in self.to_dict().items():
            if isinstance(value, list):
                params.extend((key, str(item)) for item in value)
            else:
                params.append((key, str(value)))
        return params
