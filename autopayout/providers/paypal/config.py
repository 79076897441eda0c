

# autopayout/providers/paypal/config.py
from __future__ import annotations

from dataclasses import dataclass

from settings import settings

BASE_URLS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}


def paypal_mode() -> str:
    return (settings.PAYPAL_MODE or "sandbox").strip().lower()


@dataclass(frozen=True)
class PayPalConfig:
    mode: str  # "sandbox" | "live"
    base_url: str
    client_id: str
    client_secret: str
    timeout_s: float


def paypal_config() -> PayPalConfig:
    mode = paypal_mode()
    return PayPalConfig(
        mode=mode,
        base_url=BASE_URLS.get(mode, BASE_URLS["sandbox"]),
        client_id=(settings.PAYPAL_CLIENT_ID or "").strip(),
        client_secret=(settings.PAYPAL_CLIENT_SECRET or "").strip(),
        timeout_s=float(settings.PAYPAL_HTTP_TIMEOUT_S),
    )
