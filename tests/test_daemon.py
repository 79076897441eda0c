from __future__ import annotations

import signal
import threading
from decimal import Decimal

import pytest

import main as main_module
import settings as settings_module
from autopayout.providers.factory import reset_gateways
from autopayout.providers.mock import MockGateway
from settings import Settings


@pytest.fixture(autouse=True)
def _fresh_gateways():
    reset_gateways()
    yield
    reset_gateways()


@pytest.fixture
def daemon_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        GATEWAY="mock",
        RECIPIENT_EMAIL="payee@example.com",
        STATIC_BALANCE=Decimal("150.00"),
        MINIMUM_RESERVE=Decimal("20.00"),
        DB_HOST="",
        DB_USER="",
        DB_PASSWORD="",
        DB_NAME="",
        PAYOUT_ERRORS_LOG=str(tmp_path / "payout_errors.log"),
        PAYOUT_SUCCESS_LOG=str(tmp_path / "payout_success.log"),
    )


def test_scheduled_run_pays_out_surplus(daemon_settings, fallback_files, tmp_path):
    gateway = MockGateway(succeed=True)
    daemon = main_module.build_daemon(daemon_settings, gateway=gateway)
    try:
        assert daemon.run_job() == Decimal("130.00")
        daemon.queue.join()
    finally:
        daemon.shutdown(timeout=5)

    [request] = gateway.calls
    assert request.amount == Decimal("130.00")
    assert request.recipient == "payee@example.com"
    assert request.currency == "USD"
    assert len(fallback_files.success_lines()) == 1
    assert fallback_files.error_lines() == []


def test_build_daemon_uses_configured_gateway(daemon_settings):
    daemon = main_module.build_daemon(daemon_settings)
    try:
        assert daemon.queue.controller.executor.gateway.name == "mock"
        assert daemon.recorder.destination == "file"
    finally:
        daemon.shutdown(timeout=5)


def test_shutdown_is_idempotent(daemon_settings, memory_sink):
    gateway = MockGateway()
    daemon = main_module.build_daemon(daemon_settings, gateway=gateway)
    daemon.recorder.sink = memory_sink

    daemon.shutdown(timeout=5)
    daemon.shutdown(timeout=5)

    assert memory_sink.closed == 1
    assert gateway.closed
    assert daemon.queue.submit(Decimal("1")) is None


def test_request_stop_sets_event(daemon_settings, caplog):
    caplog.set_level("INFO")
    daemon = main_module.build_daemon(daemon_settings, gateway=MockGateway())
    try:
        daemon.request_stop(signal.SIGTERM, None)
        assert daemon.stop_requested.is_set()
        assert "SIGTERM signal received. Closing gracefully..." in caplog.text
    finally:
        daemon.shutdown(timeout=5)


def test_main_exits_nonzero_without_credentials(monkeypatch):
    monkeypatch.setattr(settings_module.settings, "GATEWAY", "paypal")
    monkeypatch.setattr(settings_module.settings, "PAYPAL_CLIENT_ID", "")
    monkeypatch.setattr(settings_module.settings, "PAYPAL_CLIENT_SECRET", "")
    monkeypatch.setattr(settings_module.settings, "RECIPIENT_EMAIL", "payee@example.com")

    assert main_module.main() == 1


def test_main_exits_nonzero_on_bad_cron(monkeypatch):
    monkeypatch.setattr(settings_module.settings, "GATEWAY", "mock")
    monkeypatch.setattr(settings_module.settings, "RECIPIENT_EMAIL", "payee@example.com")
    monkeypatch.setattr(settings_module.settings, "PAYOUT_CRON", "every day")

    assert main_module.main() == 1


def test_stop_timeout_covers_token_and_payout_calls(daemon_settings):
    daemon = main_module.build_daemon(daemon_settings.model_copy(update={"PAYPAL_HTTP_TIMEOUT_S": 20.0}), gateway=MockGateway())
    try:
        assert daemon.stop_timeout > 40.0
    finally:
        daemon.shutdown(timeout=5)


def test_shutdown_keeps_recorder_open_while_payout_in_flight(daemon_settings, memory_sink):
    entered = threading.Event()
    release = threading.Event()

    class HeldGateway(MockGateway):
        def send_payout(self, request):
            entered.set()
            assert release.wait(5), "gateway never released"
            return super().send_payout(request)

    gateway = HeldGateway(succeed=True)
    daemon = main_module.build_daemon(daemon_settings, gateway=gateway)
    daemon.recorder.sink = memory_sink

    daemon.queue.submit(Decimal("5"))
    assert entered.wait(5)

    assert daemon.shutdown(timeout=0.2) is False
    assert memory_sink.closed == 0
    assert not gateway.closed

    release.set()
    assert daemon.shutdown(timeout=5) is True

    assert len(memory_sink.successes) == 1
    assert memory_sink.closed == 1
    assert gateway.closed
