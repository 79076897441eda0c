# autopayout/payouts/recorder.py
"""
Durable record of payout outcomes.

Every terminal attempt (a success, or each failed attempt) is written once,
either as a row in ``payout_history`` or as a line in one of the two
append-only fallback files. The destination is picked once, at startup, by
``build_recorder``; a write that fails later is logged and dropped, it never
reaches the payout flow and never switches the destination.
"""
from __future__ import annotations

import json
import logging
import threading
from decimal import Decimal
from pathlib import Path
from typing import Optional, Protocol

import psycopg2

import db
from autopayout.payouts.model import (
    UNKNOWN_RECIPIENT,
    PayoutOutcome,
    format_amount,
    iso_timestamp,
)
from autopayout.payouts.repository import insert_payout_history
from services import metrics
from services.redaction import redact_text
from settings import Settings, db_configured, settings

logger = logging.getLogger("autopayout.recorder")


class OutcomeSink(Protocol):
    name: str

    def write(self, outcome: PayoutOutcome) -> None: ...
    def close(self) -> None: ...


class FileOutcomeSink:
    name = "file"

    def __init__(self, errors_path: str | Path, success_path: str | Path):
        self.errors_path = Path(errors_path)
        self.success_path = Path(success_path)
        self._lock = threading.Lock()

    def write(self, outcome: PayoutOutcome) -> None:
        ts = iso_timestamp(outcome.timestamp)
        if outcome.status == "success":
            payload = {
                "recipient": outcome.recipient,
                "amount": format_amount(outcome.amount),
                "transaction_id": outcome.detail,
                "response": outcome.response,
            }
            self._append(self.success_path, f"{ts} - Success: {json.dumps(payload, default=str)}")
        else:
            self._append(
                self.errors_path,
                f"{ts} - Error: {outcome.detail} "
                f"(recipient={outcome.recipient}, amount={format_amount(outcome.amount)})",
            )

    def _append(self, path: Path, line: str) -> None:
        # Single line per event; newlines inside details would break that
        line = line.replace("\r", " ").replace("\n", " ")
        with self._lock:
            with path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")

    def close(self) -> None:
        pass


class DatabaseOutcomeSink:
    name = "db"

    def write(self, outcome: PayoutOutcome) -> None:
        success = outcome.status == "success"
        with db.get_conn() as conn:
            insert_payout_history(
                conn,
                recipient_email=outcome.recipient,
                amount=outcome.amount,
                status=outcome.status,
                transaction_id=outcome.detail if success else None,
                error_message=None if success else outcome.detail,
                created_at=outcome.timestamp,
            )

    def close(self) -> None:
        db.close_pool()


class OutcomeRecorder:
    def __init__(self, sink: OutcomeSink):
        self.sink = sink
        self._closed = False

    @property
    def destination(self) -> str:
        return self.sink.name

    def record_success(self, outcome: PayoutOutcome) -> None:
        self._write(outcome)

    def record_failure(
        self,
        recipient: Optional[str],
        amount: Decimal | None,
        error_detail: str | BaseException | None,
    ) -> PayoutOutcome:
        outcome = PayoutOutcome(
            recipient=(recipient or "").strip() or UNKNOWN_RECIPIENT,
            amount=Decimal(amount) if amount is not None else Decimal("0"),
            status="failed",
            detail=str(error_detail) if error_detail is not None else "Unknown error",
        )
        self._write(outcome)
        return outcome

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.sink.close()
        except Exception:
            logger.exception("Error closing outcome sink=%s", self.sink.name)

    def _write(self, outcome: PayoutOutcome) -> None:
        try:
            self.sink.write(outcome)
        except Exception:
            metrics.increment_record_failure(self.sink.name)
            logger.exception(
                "Error recording payout outcome sink=%s status=%s recipient=%s",
                self.sink.name,
                outcome.status,
                redact_text(outcome.recipient),
            )
            return
        metrics.increment_outcome_recorded(outcome.status, self.sink.name)


def build_recorder(s: Settings | None = None) -> OutcomeRecorder:
    s = s or settings
    file_sink = FileOutcomeSink(s.PAYOUT_ERRORS_LOG, s.PAYOUT_SUCCESS_LOG)

    if not db_configured(s):
        logger.info("Database credentials not found. Falling back to file logging.")
        return OutcomeRecorder(file_sink)

    try:
        db.init_pool(s)
    except psycopg2.Error as e:
        logger.warning("Database unreachable at startup (%s). Falling back to file logging.", e)
        return OutcomeRecorder(file_sink)

    logger.info("Connected to database pool host=%s db=%s", s.DB_HOST, s.DB_NAME)
    return OutcomeRecorder(DatabaseOutcomeSink())
