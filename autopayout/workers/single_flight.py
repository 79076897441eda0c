# autopayout/workers/single_flight.py
from __future__ import annotations

import logging
import queue
import threading
import uuid
from collections import deque
from decimal import Decimal
from typing import Optional

from autopayout.payouts.model import AttemptState, payout_amount
from autopayout.payouts.recorder import OutcomeRecorder
from autopayout.workers.payout_worker import RetryController
from services import metrics
from services.observability import set_chain_id
from services.redaction import redact_text
from settings import settings

logger = logging.getLogger("autopayout.queue")

_STOP = object()


class SingleFlightQueue:
    """
    FIFO of payout amounts drained by exactly one worker thread, so only one
    attempt chain (first attempt plus its retries) is ever in flight.

    submit() only enqueues; chain errors end in the recorder, not the caller.
    """

    def __init__(
        self,
        controller: RetryController,
        recorder: OutcomeRecorder,
        *,
        default_recipient: Optional[str] = None,
        history_size: int = 100,
    ):
        self.controller = controller
        self.recorder = recorder
        self.default_recipient = settings.RECIPIENT_EMAIL if default_recipient is None else default_recipient
        self.history: deque[AttemptState] = deque(maxlen=history_size)

        self._queue: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stopping = threading.Event()
        self._start_lock = threading.Lock()

    def start(self) -> None:
        with self._start_lock:
            self._start_locked()

    def _start_locked(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="payout-worker", daemon=True)
        self._thread.start()

    def submit(self, amount: Decimal, recipient: Optional[str] = None) -> Optional[str]:
        amount = payout_amount(amount)

        # stop() takes the same lock, so nothing is ever queued behind _STOP
        with self._start_lock:
            if self._stopping.is_set():
                logger.warning("Queue is shutting down; payout of %s not queued", amount)
                return None
            self._start_locked()
            submission_id = uuid.uuid4().hex[:12]
            self._queue.put((submission_id, amount, recipient))

        logger.info("Queued payout submission=%s amount=%s pending=%s", submission_id, amount, self.pending())
        return submission_id

    def pending(self) -> int:
        return self._queue.qsize()

    def join(self) -> None:
        """Block until every submission queued so far has terminated."""
        self._queue.join()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Stop taking work: a pending backoff is cancelled, queued submissions
        are dropped, and the worker thread exits.

        Returns False if the worker is still running when `timeout` expires
        (a gateway call in flight); its outcome has not been recorded yet.
        """
        with self._start_lock:
            first_stop = not self._stopping.is_set()
            self._stopping.set()
            thread = self._thread
            if thread is not None and first_stop:
                self._queue.put(_STOP)
        self.controller.cancel()
        if thread is None:
            return True
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("Payout worker did not stop within %ss", timeout)
            return False
        return True

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if self._stopping.is_set():
                    logger.warning("Dropping queued payout submission=%s on shutdown", item[0])
                    continue
                self._process(*item)
            finally:
                self._queue.task_done()

    def _process(self, submission_id: str, amount: Decimal, recipient: Optional[str]) -> None:
        recipient = (recipient or self.default_recipient or "").strip()
        set_chain_id(submission_id)
        try:
            if not recipient:
                logger.error("No recipient configured; payout of %s not sent", amount)
                self.recorder.record_failure(None, amount, "No recipient configured")
                metrics.increment_payout_chain("error")
                return

            try:
                state = self.controller.run(amount, recipient)
            except Exception as e:
                logger.exception("Payout chain crashed submission=%s", submission_id)
                self.recorder.record_failure(recipient, amount, e)
                metrics.increment_payout_chain("error")
                return

            self.history.append(state)
            metrics.increment_payout_chain(state.phase.lower())
            if state.phase == "SUCCEEDED":
                logger.info(
                    "Payout completed successfully transaction=%s recipient=%s",
                    state.transaction_id,
                    redact_text(recipient),
                )
            else:
                logger.error(
                    "Payout %s after %s attempt(s): %s",
                    state.phase.lower(),
                    state.retry_count + 1,
                    state.last_error,
                )
        finally:
            set_chain_id(None)
