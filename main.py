#main.py
from __future__ import annotations

import logging
import signal
import sys
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from autopayout.balance.oracle import BalanceOracle, StaticBalanceOracle
from autopayout.payouts.recorder import OutcomeRecorder, build_recorder
from autopayout.providers.base import PayoutGateway
from autopayout.providers.factory import get_gateway, reset_gateways
from autopayout.workers import scheduler
from autopayout.workers.payout_job import check_balance_and_send_payout
from autopayout.workers.payout_worker import PayoutAttemptExecutor, RetryController
from autopayout.workers.single_flight import SingleFlightQueue
from services.observability import configure_logging
from settings import Settings, settings, validate_env_settings

logger = logging.getLogger("autopayout.daemon")


@dataclass
class PayoutDaemon:
    recorder: OutcomeRecorder
    queue: SingleFlightQueue
    oracle: BalanceOracle
    gateway: PayoutGateway
    minimum_reserve: Optional[Decimal] = None
    # token request + payout request, each bounded by the HTTP timeout
    stop_timeout: float = 45.0
    stop_requested: threading.Event = field(default_factory=threading.Event)
    _shut_down: bool = False

    def run_job(self):
        return check_balance_and_send_payout(self.oracle, self.queue, minimum_reserve=self.minimum_reserve)

    def request_stop(self, signum=None, frame=None) -> None:
        name = signal.Signals(signum).name if signum else "stop"
        logger.info("%s signal received. Closing gracefully...", name)
        self.stop_requested.set()

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the trigger and the queue, then release the gateway and the
        recorder. If a gateway call is still in flight after `timeout`, both
        stay open so the worker can still record its outcome; returns False.
        """
        if self._shut_down:
            return True
        scheduler.stop_scheduler()
        if not self.queue.stop(timeout=self.stop_timeout if timeout is None else timeout):
            logger.error("Payout still in flight at shutdown; leaving gateway and outcome recorder open.")
            return False

        self._shut_down = True
        self.gateway.close()
        reset_gateways()
        self.recorder.close()
        logger.info("Outcome recorder closed (destination=%s).", self.recorder.destination)
        return True


def build_daemon(
    s: Optional[Settings] = None,
    *,
    gateway: Optional[PayoutGateway] = None,
    oracle: Optional[BalanceOracle] = None,
) -> PayoutDaemon:
    s = s or settings
    gateway = gateway or get_gateway(s.GATEWAY)
    if gateway is None:
        raise RuntimeError(f"Unsupported gateway: {s.GATEWAY}")

    recorder = build_recorder(s)
    executor = PayoutAttemptExecutor(
        gateway,
        currency=s.PAYOUT_CURRENCY,
        email_subject=s.PAYOUT_EMAIL_SUBJECT,
        email_message=s.PAYOUT_EMAIL_MESSAGE,
        note=s.PAYOUT_NOTE,
    )
    controller = RetryController(
        executor,
        recorder,
        max_retries=s.MAX_RETRIES,
        backoff_multiplier=s.BACKOFF_MULTIPLIER,
        fail_fast_non_retryable=s.PAYOUT_FAIL_FAST_NON_RETRYABLE,
    )
    queue = SingleFlightQueue(controller, recorder, default_recipient=s.RECIPIENT_EMAIL)
    return PayoutDaemon(
        recorder=recorder,
        queue=queue,
        oracle=oracle or StaticBalanceOracle(s.STATIC_BALANCE),
        gateway=gateway,
        minimum_reserve=s.MINIMUM_RESERVE,
        stop_timeout=2 * s.PAYPAL_HTTP_TIMEOUT_S + 5.0,
    )


def main() -> int:
    configure_logging(settings.LOG_LEVEL)

    try:
        validate_env_settings()
        scheduler.build_trigger()
        daemon = build_daemon()
    except Exception as e:
        logger.error("Startup failed: %s", e)
        return 1

    signal.signal(signal.SIGTERM, daemon.request_stop)
    signal.signal(signal.SIGINT, daemon.request_stop)

    daemon.queue.start()
    scheduler.start_scheduler(daemon.run_job)
    logger.info(
        "Payout daemon started gateway=%s max_retries=%s backoff_multiplier=%s recorder=%s",
        settings.GATEWAY,
        settings.MAX_RETRIES,
        settings.BACKOFF_MULTIPLIER,
        daemon.recorder.destination,
    )

    while not daemon.stop_requested.wait(timeout=1.0):
        pass

    while not daemon.shutdown():
        logger.info("Waiting for the in-flight payout to finish...")
    logger.info("Payout daemon stopped.")
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
