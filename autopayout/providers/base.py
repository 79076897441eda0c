

# autopayout/providers/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Literal

from autopayout.payouts.model import PayoutRequest

GatewayStatus = Literal["CONFIRMED", "FAILED"]

@dataclass(frozen=True)
class GatewayResult:
    status: GatewayStatus
    provider_ref: Optional[str] = None
    response: Optional[dict[str, Any]] = None
    error: Optional[str] = None

    # None => unclassified, treated as retryable
    retryable: Optional[bool] = None

    @property
    def ok(self) -> bool:
        return self.status == "CONFIRMED"

    @classmethod
    def failed(cls, error: str, *, retryable: Optional[bool] = None, response: Optional[dict[str, Any]] = None) -> "GatewayResult":
        return cls(status="FAILED", error=error, retryable=retryable, response=response)


class PayoutGateway(Protocol):
    name: str

    def send_payout(self, request: PayoutRequest) -> GatewayResult: ...
    def close(self) -> None: ...
