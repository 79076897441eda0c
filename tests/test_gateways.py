from __future__ import annotations

from decimal import Decimal

import pytest

import settings as settings_module
from autopayout.payouts.model import PayoutRequest
from autopayout.providers.factory import get_gateway, reset_gateways
from autopayout.providers.mock import MockGateway


@pytest.fixture(autouse=True)
def _fresh_gateways():
    reset_gateways()
    yield
    reset_gateways()


def _request() -> PayoutRequest:
    return PayoutRequest(amount=Decimal("5"), recipient="payee@example.com")


def test_mock_plays_back_script_then_default():
    gateway = MockGateway(succeed=False, script=[True, "HTTP 500 INTERNAL_SERVICE_ERROR"])

    first = gateway.send_payout(_request())
    second = gateway.send_payout(_request())
    third = gateway.send_payout(_request())

    assert first.ok and first.provider_ref.startswith("mock-batch_")
    assert second.error == "HTTP 500 INTERNAL_SERVICE_ERROR"
    assert third.error == "Service unavailable"
    assert third.response["http_status"] == 503
    assert len(gateway.calls) == 3


def test_mock_raises_scripted_exception():
    gateway = MockGateway(script=[TimeoutError("read timeout")])
    with pytest.raises(TimeoutError):
        gateway.send_payout(_request())


def test_factory_caches_gateways():
    mock = get_gateway("mock")
    assert isinstance(mock, MockGateway)
    assert get_gateway(" MOCK ") is mock


def test_factory_unknown_gateway():
    assert get_gateway("stripe") is None
    assert get_gateway("") is None


def test_factory_paypal_requires_credentials(monkeypatch):
    monkeypatch.setattr(settings_module.settings, "PAYPAL_CLIENT_ID", "")
    monkeypatch.setattr(settings_module.settings, "PAYPAL_CLIENT_SECRET", "")

    with pytest.raises(RuntimeError):
        get_gateway("paypal")


def test_payout_request_rejects_non_positive_amount():
    with pytest.raises(ValueError):
        PayoutRequest(amount=Decimal("0"), recipient="payee@example.com")


@pytest.mark.parametrize("amount", ["0.004", "0.009", "130.125"])
def test_payout_request_rejects_sub_cent_amount(amount):
    with pytest.raises(ValueError):
        PayoutRequest(amount=Decimal(amount), recipient="payee@example.com")


def test_payout_request_accepts_whole_cents():
    assert PayoutRequest(amount=Decimal("0.01"), recipient="payee@example.com").amount == Decimal("0.01")
    assert PayoutRequest(amount=Decimal("130.10"), recipient="payee@example.com").amount == Decimal("130.10")
