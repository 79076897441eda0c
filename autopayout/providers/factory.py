


# autopayout/providers/factory.py
from __future__ import annotations

from typing import Dict

from autopayout.providers.base import PayoutGateway

_GATEWAY_CACHE: Dict[str, PayoutGateway] = {}


def get_gateway(name: str) -> PayoutGateway | None:
    key = (name or "").strip().lower()
    if not key:
        return None

    if key in _GATEWAY_CACHE:
        return _GATEWAY_CACHE[key]

    gateway: PayoutGateway | None = None

    if key == "paypal":
        from autopayout.providers.paypal.gateway import PayPalGateway
        from autopayout.providers.paypal.validate import validate_paypal_startup

        validate_paypal_startup()
        gateway = PayPalGateway()

    elif key == "mock":
        from autopayout.providers.mock import MockGateway
        gateway = MockGateway(succeed=True)

    else:
        return None

    _GATEWAY_CACHE[key] = gateway
    return gateway


def reset_gateways() -> None:
    _GATEWAY_CACHE.clear()
