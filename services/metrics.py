from __future__ import annotations

from threading import Lock
from typing import Tuple


_lock = Lock()
_counters: dict[str, dict[Tuple[Tuple[str, str], ...], int]] = {}


def _inc(name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
    key = tuple(sorted((labels or {}).items()))
    with _lock:
        series = _counters.setdefault(name, {})
        series[key] = int(series.get(key, 0)) + int(value)


def increment_payout_attempt(result: str) -> None:
    _inc("payout_attempts_total", {"result": result})


def increment_payout_chain(result: str) -> None:
    _inc("payout_chains_total", {"result": result})


def increment_outcome_recorded(status: str, sink: str) -> None:
    _inc("payout_outcomes_recorded_total", {"status": status, "sink": sink})


def increment_record_failure(sink: str) -> None:
    _inc("payout_record_failures_total", {"sink": sink})


def counter_value(name: str, **labels: str) -> int:
    key = tuple(sorted(labels.items()))
    with _lock:
        return int(_counters.get(name, {}).get(key, 0))


def reset() -> None:
    with _lock:
        _counters.clear()


def render_prometheus() -> str:
    lines: list[str] = []
    with _lock:
        for name, series in sorted(_counters.items()):
            lines.append(f"# TYPE {name} counter")
            for labels, value in sorted(series.items()):
                if labels:
                    label_str = ",".join(f'{k}="{v}"' for k, v in labels)
                    lines.append(f"{name}{{{label_str}}} {value}")
                else:
                    lines.append(f"{name} {value}")
    return "\n".join(lines) + ("\n" if lines else "")
