"""Ledger data models — Transaction, account details, response envelopes.

Data classes representing the transaction ledger API request/response
objects. Transactions are immutable once fetched and are replaced
wholesale on refetch.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ledger_ops.errors.ledger_errors import LedgerOpsError

# Description suffixes marking a transaction produced by a prior reversal
REVERSAL_MARKERS = ("_REVERSAL_OUT", "_REVERSAL_IN")

_EPOCH = datetime.fromtimestamp(0, UTC)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TransactionStatus(enum.StrEnum):
    """Ledger transaction status codes."""

    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"
    ROLLED_BACK = "ROLLED_BACK"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_string(cls, value: str | None) -> TransactionStatus:
        """Parse a status string, returning UNKNOWN for unrecognised values."""
        try:
            return cls((value or "").upper())
        except ValueError:
            return cls.UNKNOWN


class TransactionType(enum.StrEnum):
    """Direction of a transaction relative to the initiating user."""

    CASH_IN = "CASH_IN"
    CASH_OUT = "CASH_OUT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_string(cls, value: str | None) -> TransactionType:
        """Parse a type string, returning UNKNOWN for unrecognised values."""
        try:
            return cls((value or "").upper())
        except ValueError:
            return cls.UNKNOWN


class TransactionDescription(enum.StrEnum):
    """Known description tags used as coarse classification."""

    SAVINGS = "SAVINGS"
    REWARD = "REWARD"
    AGENT_CASHOUT = "AGENT_CASHOUT"
    WITHDRAW_SAVINGS = "WITHDRAW_SAVINGS"
    MOMO_TRANSFER = "MOMO_TRANSFER"
    SAVINGS_TRANSFER = "SAVINGS_TRANSFER"
    BANK_TRANSFER = "BANK_TRANSFER"
    BILL_PAYMENT = "BILL_PAYMENT"
    WALLET_TRANSFER = "WALLET_TRANSFER"
    WALLET_TRANSFER_REVERSAL_OUT = "WALLET_TRANSFER_REVERSAL_OUT"
    WALLET_TRANSFER_REVERSAL_IN = "WALLET_TRANSFER_REVERSAL_IN"
    LOTTERY_PRIZE = "LOTTERY_PRIZE"
    ACCIDENTAL_TRANSFER_ROLLBACK = "ACCIDENTAL_TRANSFER_ROLLBACK"
    REFUND = "REFUND"
    RECOVERY_DEBT = "RECOVERY_DEBT"
    TRUST_ACCOUNT_DEPOSIT = "TRUST_ACCOUNT_DEPOSIT"
    ESCROW_PAYMENT = "ESCROW_PAYMENT"
    ESCROW_RELEASE = "ESCROW_RELEASE"
    ESCROW_REFUND = "ESCROW_REFUND"
    ESCROW_COMMISSION = "ESCROW_COMMISSION"
    MOBILE_MONEY = "MOBILE_MONEY"


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_decimal(value: Any) -> Decimal | None:
    """Parse a JSON number or numeric string into a finite Decimal."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string or epoch-millis number into an aware datetime.

    Naive timestamps are taken as UTC. Unparseable values map to the epoch.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, int | float) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, UTC)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return _EPOCH
    else:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _format_timestamp(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Account details
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountDetails:
    """One side (source or destination) of a transfer."""

    account_name: str = ""
    account_source: str = ""
    account_number: str = ""
    currency: str = ""
    owner_name: str | None = None
    owner_phone_number: str | None = None
    owner_email: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AccountDetails | None:
        """Create AccountDetails from a ledger JSON dict (``None`` passes through)."""
        if not isinstance(data, dict):
            return None
        return cls(
            account_name=data.get("accountName") or "",
            account_source=data.get("accountSource") or "",
            account_number=data.get("accountNumber") or "",
            currency=data.get("currency") or "",
            owner_name=data.get("ownerName"),
            owner_phone_number=data.get("ownerPhoneNumber"),
            owner_email=data.get("ownerEmail"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict matching the ledger JSON format."""
        return {
            "accountName": self.account_name,
            "accountSource": self.account_source,
            "accountNumber": self.account_number,
            "currency": self.currency,
            "ownerName": self.owner_name,
            "ownerPhoneNumber": self.owner_phone_number,
            "ownerEmail": self.owner_email,
        }


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transaction:
    """A ledger transaction as returned by the transaction store.

    Attributes:
        id: Ledger row identifier.
        internal_reference: Ledger-unique reference; the reversal target key.
        user_id: Initiating user.
        amount: Transaction amount.
        status: Current ledger status.
        transaction_type: CASH_IN or CASH_OUT.
        description: Free-form description, doubling as a classification tag.
        created_at: Creation timestamp (timezone-aware).
    """

    id: str
    internal_reference: str = ""
    user_id: str = ""
    counterparty_user_id: str | None = None
    amount: Decimal = Decimal(0)
    currency: str | None = None
    status: TransactionStatus = TransactionStatus.UNKNOWN
    transaction_type: TransactionType = TransactionType.UNKNOWN
    description: str = ""
    from_details: AccountDetails | None = None
    to_details: AccountDetails | None = None
    commission_amount: Decimal | None = None
    commission_percentage: Decimal | None = None
    vendor_amount: Decimal | None = None
    charge_fee: Decimal | None = None
    initiator_confirmed: bool = False
    receiver_confirmed: bool = False
    user_name: str | None = None
    user_phone_number: str | None = None
    user_national_id: str | None = None
    created_at: datetime = _EPOCH
    updated_at: datetime = _EPOCH
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def created_at_ms(self) -> int:
        """Creation time as epoch milliseconds."""
        return int(self.created_at.timestamp() * 1000)

    @property
    def is_reversal_artifact(self) -> bool:
        """Whether this transaction was itself produced by a reversal."""
        desc = (self.description or "").upper()
        return any(marker in desc for marker in REVERSAL_MARKERS)

    @property
    def is_reversible(self) -> bool:
        """Whether a reversal may be initiated from this transaction."""
        return (
            self.status == TransactionStatus.SUCCESSFUL
            and not self.is_reversal_artifact
            and bool(self.internal_reference)
        )

    def display_currency(self, default: str = "RWF") -> str:
        """Currency for display, falling back through the account details."""
        for candidate in (
            self.currency,
            self.to_details.currency if self.to_details else None,
            self.from_details.currency if self.from_details else None,
        ):
            if candidate:
                return candidate
        return default

    def account_numbers(self) -> tuple[str, ...]:
        """Account numbers on both sides of the transfer (empty ones omitted)."""
        return tuple(
            details.account_number
            for details in (self.from_details, self.to_details)
            if details is not None and details.account_number
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Transaction:
        """Create a Transaction from a ledger JSON dict."""
        known = {
            "id", "internalReference", "userId", "counterpartyUserId", "amount",
            "currency", "status", "transactionType", "description", "fromDetails",
            "toDetails", "commissionAmount", "commissionPercentage", "vendorAmount",
            "chargeFee", "initiatorConfirmed", "receiverConfirmed", "userName",
            "userPhoneNumber", "userNationalId", "createdAt", "updatedAt",
        }  # fmt: skip
        return cls(
            id=str(data.get("id", "")),
            internal_reference=data.get("internalReference") or "",
            user_id=str(data.get("userId") or ""),
            counterparty_user_id=data.get("counterpartyUserId"),
            amount=parse_decimal(data.get("amount")) or Decimal(0),
            currency=data.get("currency"),
            status=TransactionStatus.from_string(data.get("status")),
            transaction_type=TransactionType.from_string(data.get("transactionType")),
            description=data.get("description") or "",
            from_details=AccountDetails.from_dict(data.get("fromDetails")),
            to_details=AccountDetails.from_dict(data.get("toDetails")),
            commission_amount=parse_decimal(data.get("commissionAmount")),
            commission_percentage=parse_decimal(data.get("commissionPercentage")),
            vendor_amount=parse_decimal(data.get("vendorAmount")),
            charge_fee=parse_decimal(data.get("chargeFee")),
            initiator_confirmed=bool(data.get("initiatorConfirmed")),
            receiver_confirmed=bool(data.get("receiverConfirmed")),
            user_name=data.get("userName"),
            user_phone_number=data.get("userPhoneNumber"),
            user_national_id=data.get("userNationalId"),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict matching the ledger JSON format."""

        def _num(value: Decimal | None) -> str | None:
            return None if value is None else str(value)

        return {
            **self.extra,
            "id": self.id,
            "internalReference": self.internal_reference,
            "userId": self.user_id,
            "counterpartyUserId": self.counterparty_user_id,
            "amount": str(self.amount),
            "currency": self.currency,
            "status": self.status.value,
            "transactionType": self.transaction_type.value,
            "description": self.description,
            "fromDetails": self.from_details.to_dict() if self.from_details else None,
            "toDetails": self.to_details.to_dict() if self.to_details else None,
            "commissionAmount": _num(self.commission_amount),
            "commissionPercentage": _num(self.commission_percentage),
            "vendorAmount": _num(self.vendor_amount),
            "chargeFee": _num(self.charge_fee),
            "initiatorConfirmed": self.initiator_confirmed,
            "receiverConfirmed": self.receiver_confirmed,
            "userName": self.user_name,
            "userPhoneNumber": self.user_phone_number,
            "userNationalId": self.user_national_id,
            "createdAt": _format_timestamp(self.created_at),
            "updatedAt": _format_timestamp(self.updated_at),
        }


# ---------------------------------------------------------------------------
# Transaction retrieval results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FetchOk:
    """The ledger returned a page of transactions."""

    content: list[Transaction]
    total_elements: int


@dataclass(frozen=True)
class FetchEmpty:
    """The ledger answered but reported no usable page (``success=false``)."""

    message: str = ""


@dataclass(frozen=True)
class FetchErr:
    """The request failed; ``error`` carries the classified failure."""

    error: LedgerOpsError


FetchResult = FetchOk | FetchEmpty | FetchErr


def fetch_result_from_envelope(body: Any) -> FetchResult:
    """Interpret the ``{success, data: {content, totalElements}}`` envelope.

    ``success=false`` or a missing ``data.content`` is an empty page, not an error.
    """
    if not isinstance(body, dict):
        return FetchEmpty("unexpected response body")
    if not body.get("success", False):
        return FetchEmpty(body.get("message") or "")
    data = body.get("data")
    content = data.get("content") if isinstance(data, dict) else None
    if not isinstance(content, list):
        return FetchEmpty(body.get("message") or "")
    transactions = [Transaction.from_dict(item) for item in content if isinstance(item, dict)]
    total = data.get("totalElements")
    if not isinstance(total, int) or isinstance(total, bool):
        total = len(transactions)
    return FetchOk(content=transactions, total_elements=total)


# ---------------------------------------------------------------------------
# Reversal response
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReversalResponse:
    """Envelope returned by the reverse / force-reverse endpoints."""

    status: str = ""
    message: str = ""
    data: Any = None

    @property
    def succeeded(self) -> bool:
        """Whether the ledger reported the reversal as applied."""
        return self.status.lower() == "success"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReversalResponse:
        """Create a ReversalResponse from the ledger JSON dict."""
        return cls(
            status=str(data.get("status") or ""),
            message=str(data.get("message") or ""),
            data=data.get("data"),
        )


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def channel_name(description: str | None) -> str:
    """Derive the payment channel shown to operators from a description."""
    if not description:
        return "Wallet"
    desc = description.upper()
    if "ESCROW" in desc:
        return "Escrow"
    if "MOBILE" in desc:
        return "Mobile Money"
    if "BANK" in desc:
        return "Bank Transfer"
    return "Wallet"


def format_amount(amount: Decimal | float | None, currency: str = "RWF") -> str:
    """Format an amount as whole units with thousands separators."""
    if amount is None or isinstance(amount, bool):
        return f"0 {currency}"
    if isinstance(amount, float) and math.isnan(amount):
        return f"0 {currency}"
    value = Decimal(str(amount))
    if not value.is_finite():
        return f"0 {currency}"
    return f"{value.quantize(Decimal(1), rounding=ROUND_HALF_UP):,} {currency}"
