
# autopayout/payouts/model.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Literal, Optional

OutcomeStatus = Literal["success", "failed"]

UNKNOWN_RECIPIENT = "unknown"

CENTS = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(ts: datetime) -> str:
    # 2026-10-19T04:00:00.123Z
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_batch_id() -> str:
    return f"batch_{uuid.uuid4().hex[:12]}"


def new_item_id() -> str:
    return f"item_{uuid.uuid4().hex[:12]}"


def format_amount(amount: Decimal) -> str:
    return str(Decimal(amount).quantize(CENTS))


def payout_amount(amount) -> Decimal:
    """
    Validate a disbursable amount: positive and a whole number of cents.
    Sub-cent values are rejected, never rounded, so the amount sent and the
    amount recorded are the same number.
    """
    amount = Decimal(amount)
    if amount < CENTS:
        raise ValueError(f"Payout amount must be at least {CENTS}, got {amount}")
    if amount != amount.quantize(CENTS):
        raise ValueError(f"Payout amount must be a whole number of cents, got {amount}")
    return amount


@dataclass(frozen=True)
class PayoutRequest:
    amount: Decimal
    recipient: str
    currency: str = "USD"
    sender_batch_id: str = field(default_factory=new_batch_id)
    sender_item_id: str = field(default_factory=new_item_id)
    email_subject: str = ""
    email_message: str = ""
    note: str = ""

    def __post_init__(self):
        payout_amount(self.amount)


@dataclass
class AttemptState:
    amount: Decimal
    recipient: str
    request: Optional[PayoutRequest] = None
    retry_count: int = 0
    phase: str = "ATTEMPTING"
    started_at: datetime = field(default_factory=utcnow)
    last_error: Optional[str] = None
    transaction_id: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.phase in ("SUCCEEDED", "PERMANENTLY_FAILED", "ABANDONED")


@dataclass(frozen=True)
class PayoutOutcome:
    recipient: str
    amount: Decimal
    status: OutcomeStatus
    detail: str
    timestamp: datetime = field(default_factory=utcnow)
    response: Optional[dict[str, Any]] = None
