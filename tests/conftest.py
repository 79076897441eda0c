
# tests/conftest.py

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import pytest

from autopayout.payouts.model import PayoutOutcome
from autopayout.payouts.recorder import FileOutcomeSink, OutcomeRecorder
from services import metrics


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


# ---------------------------
# Recorders
# ---------------------------

@dataclass
class MemorySink:
    name: str = "memory"
    outcomes: List[PayoutOutcome] = field(default_factory=list)
    closed: int = 0

    def write(self, outcome: PayoutOutcome) -> None:
        self.outcomes.append(outcome)

    def close(self) -> None:
        self.closed += 1

    @property
    def successes(self) -> List[PayoutOutcome]:
        return [o for o in self.outcomes if o.status == "success"]

    @property
    def failures(self) -> List[PayoutOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def memory_recorder(memory_sink) -> OutcomeRecorder:
    return OutcomeRecorder(memory_sink)


@dataclass
class FallbackFiles:
    errors: Path
    success: Path

    def error_lines(self) -> List[str]:
        return self.errors.read_text(encoding="utf-8").splitlines() if self.errors.exists() else []

    def success_lines(self) -> List[str]:
        return self.success.read_text(encoding="utf-8").splitlines() if self.success.exists() else []


@pytest.fixture
def fallback_files(tmp_path) -> FallbackFiles:
    return FallbackFiles(errors=tmp_path / "payout_errors.log", success=tmp_path / "payout_success.log")


@pytest.fixture
def file_recorder(fallback_files) -> OutcomeRecorder:
    return OutcomeRecorder(FileOutcomeSink(fallback_files.errors, fallback_files.success))


# ---------------------------
# Backoff
# ---------------------------

class RecordingWait:
    """Stands in for the cancellable backoff delay; never sleeps."""

    def __init__(self, cancel_after: int | None = None):
        self.delays: List[float] = []
        self.cancel_after = cancel_after

    def __call__(self, seconds: float) -> bool:
        self.delays.append(seconds)
        return self.cancel_after is not None and len(self.delays) >= self.cancel_after


@pytest.fixture
def recording_wait() -> RecordingWait:
    return RecordingWait()


@pytest.fixture
def cancelling_wait() -> RecordingWait:
    return RecordingWait(cancel_after=1)
