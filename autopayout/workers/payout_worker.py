# autopayout/workers/payout_worker.py
from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Callable, Optional

from autopayout.payouts.model import AttemptState, PayoutOutcome, PayoutRequest
from autopayout.payouts.recorder import OutcomeRecorder
from autopayout.payouts.state_machine import assert_retry_budget, assert_transition
from autopayout.providers.base import GatewayResult, PayoutGateway
from services import metrics
from services.redaction import redact_text
from settings import settings

logger = logging.getLogger("autopayout.worker")

BASE_BACKOFF_SECONDS = 1.0


class PayoutAttemptExecutor:
    """One submission to the gateway. Never records, never retries."""

    def __init__(
        self,
        gateway: PayoutGateway,
        *,
        currency: Optional[str] = None,
        email_subject: Optional[str] = None,
        email_message: Optional[str] = None,
        note: Optional[str] = None,
    ):
        self.gateway = gateway
        self.currency = (currency or settings.PAYOUT_CURRENCY).strip().upper()
        self.email_subject = settings.PAYOUT_EMAIL_SUBJECT if email_subject is None else email_subject
        self.email_message = settings.PAYOUT_EMAIL_MESSAGE if email_message is None else email_message
        self.note = settings.PAYOUT_NOTE if note is None else note
        self.last_request: Optional[PayoutRequest] = None

    def build_request(self, amount: Decimal, recipient: str) -> PayoutRequest:
        # Fresh batch/item ids on every call, retries included
        return PayoutRequest(
            amount=Decimal(amount),
            recipient=recipient,
            currency=self.currency,
            email_subject=self.email_subject,
            email_message=self.email_message,
            note=self.note,
        )

    def attempt(self, amount: Decimal, recipient: str) -> GatewayResult:
        request = self.build_request(amount, recipient)
        self.last_request = request

        logger.info(
            "Sending payout batch=%s item=%s amount=%s %s recipient=%s",
            request.sender_batch_id,
            request.sender_item_id,
            request.amount,
            request.currency,
            redact_text(recipient),
        )

        try:
            res = self.gateway.send_payout(request)
        except Exception as e:
            logger.warning("Gateway raised for batch=%s: %s", request.sender_batch_id, e)
            res = GatewayResult.failed(f"Gateway error: {e}")

        if res.ok and not res.provider_ref:
            res = GatewayResult.failed("Confirmation missing transaction id", response=res.response)

        metrics.increment_payout_attempt("success" if res.ok else "failure")
        return res


class RetryController:
    """
    Drives one attempt chain: ATTEMPTING(0..max_retries-1) ending in
    SUCCEEDED or PERMANENTLY_FAILED (ABANDONED if cancelled mid-backoff).

    Every failed attempt is recorded before the next one is scheduled, the
    success is recorded once. `wait(seconds)` returns True when the delay
    was cancelled.
    """

    def __init__(
        self,
        executor: PayoutAttemptExecutor,
        recorder: OutcomeRecorder,
        *,
        max_retries: Optional[int] = None,
        backoff_multiplier: Optional[float] = None,
        fail_fast_non_retryable: Optional[bool] = None,
        wait: Optional[Callable[[float], bool]] = None,
    ):
        self.executor = executor
        self.recorder = recorder
        self.max_retries = int(settings.MAX_RETRIES if max_retries is None else max_retries)
        self.backoff_multiplier = float(
            settings.BACKOFF_MULTIPLIER if backoff_multiplier is None else backoff_multiplier
        )
        self.fail_fast_non_retryable = bool(
            settings.PAYOUT_FAIL_FAST_NON_RETRYABLE if fail_fast_non_retryable is None else fail_fast_non_retryable
        )
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.backoff_multiplier <= 0:
            raise ValueError(f"backoff_multiplier must be > 0, got {self.backoff_multiplier}")

        self._cancelled = threading.Event()
        self.wait = wait or self._cancelled.wait

    def backoff_delay(self, retry_count: int) -> float:
        # 1, 2, 4, ... seconds with the default multiplier
        return BASE_BACKOFF_SECONDS * (self.backoff_multiplier ** retry_count)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run(self, amount: Decimal, recipient: str) -> AttemptState:
        state = AttemptState(amount=Decimal(amount), recipient=recipient)

        while True:
            assert_retry_budget(state.retry_count, self.max_retries)
            attempt_no = state.retry_count + 1

            res = self.executor.attempt(state.amount, recipient)
            state.request = self.executor.last_request

            if res.ok:
                self._transition(state, "SUCCEEDED")
                state.transaction_id = res.provider_ref
                state.last_error = None
                logger.info("Payout attempt %s/%s succeeded transaction=%s", attempt_no, self.max_retries, res.provider_ref)
                self.recorder.record_success(
                    PayoutOutcome(
                        recipient=recipient,
                        amount=state.amount,
                        status="success",
                        detail=res.provider_ref or "",
                        response=res.response,
                    )
                )
                return state

            state.last_error = res.error or "Unknown gateway error"
            logger.warning("Payout attempt %s/%s failed: %s", attempt_no, self.max_retries, state.last_error)
            self.recorder.record_failure(recipient, state.amount, state.last_error)

            if self.fail_fast_non_retryable and res.retryable is False:
                self._transition(state, "PERMANENTLY_FAILED")
                logger.error("Payout failed with a non-retryable error after %s attempt(s).", attempt_no)
                return state

            if attempt_no >= self.max_retries:
                self._transition(state, "PERMANENTLY_FAILED")
                logger.error("Payout failed after %s attempts.", attempt_no)
                return state

            delay = self.backoff_delay(state.retry_count)
            logger.info("Retrying payout in %s seconds... Attempt %s", delay, attempt_no + 1)
            if self.wait(delay):
                self._transition(state, "ABANDONED")
                logger.warning("Retry cancelled during backoff; abandoning payout after %s attempt(s).", attempt_no)
                return state

            self._transition(state, "ATTEMPTING")
            state.retry_count += 1

    @staticmethod
    def _transition(state: AttemptState, new_phase: str) -> None:
        assert_transition(state.phase, new_phase)
        state.phase = new_phase
