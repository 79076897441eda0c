from __future__ import annotations

import logging

from services import metrics
from services.observability import ChainIdFilter, set_chain_id
from services.redaction import redact_text


def test_redact_masks_emails():
    assert redact_text("paid payee@example.com ok") == "paid p***@example.com ok"
    assert redact_text(None) == ""
    assert redact_text("no address here") == "no address here"


def test_chain_id_filter_stamps_records():
    record = logging.LogRecord("autopayout", logging.INFO, __file__, 1, "msg", None, None)

    set_chain_id("abc123")
    try:
        ChainIdFilter().filter(record)
    finally:
        set_chain_id(None)

    assert record.chain_id == "abc123"

    ChainIdFilter().filter(record)
    assert record.chain_id == "-"


def test_prometheus_rendering():
    metrics.increment_payout_attempt("success")
    metrics.increment_payout_attempt("failure")
    metrics.increment_payout_attempt("failure")

    text = metrics.render_prometheus()

    assert "# TYPE payout_attempts_total counter" in text
    assert 'payout_attempts_total{result="failure"} 2' in text
    assert 'payout_attempts_total{result="success"} 1' in text


def test_render_empty():
    assert metrics.render_prometheus() == ""
