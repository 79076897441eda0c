

# autopayout/providers/mock.py
from __future__ import annotations

import threading
from typing import Iterable, Optional, Union

from autopayout.payouts.model import PayoutRequest
from autopayout.providers.base import GatewayResult


class MockGateway:
    """
    Test/dev gateway.

    Plays back a script of outcomes, one per call: True for success,
    False for a generic failure, a string for a failure with that error,
    or an Exception instance to raise. When the script runs out the
    gateway falls back to `succeed`.

    Every request it receives is kept in `calls` so tests can assert on
    ids and ordering.
    """

    name = "mock"

    def __init__(
        self,
        *,
        succeed: bool = True,
        script: Optional[Iterable[Union[bool, str, Exception]]] = None,
        failure_http_status: int = 503,
    ):
        self.succeed = succeed
        self.failure_http_status = failure_http_status
        self._script = list(script or [])
        self._lock = threading.Lock()
        self.calls: list[PayoutRequest] = []
        self.closed = False

    def send_payout(self, request: PayoutRequest) -> GatewayResult:
        with self._lock:
            self.calls.append(request)
            step = self._script.pop(0) if self._script else self.succeed

        if isinstance(step, Exception):
            raise step

        if step is True:
            return GatewayResult(
                status="CONFIRMED",
                provider_ref=f"mock-{request.sender_batch_id}",
                response={
                    "batch_header": {
                        "payout_batch_id": f"mock-{request.sender_batch_id}",
                        "batch_status": "PENDING",
                    },
                    "mock": True,
                },
            )

        error = step if isinstance(step, str) else "Service unavailable"
        return GatewayResult.failed(
            error,
            response={"http_status": self.failure_http_status, "mock": True},
        )

    def close(self) -> None:
        self.closed = True
