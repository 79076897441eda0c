

# autopayout/providers/paypal/validate.py
from __future__ import annotations

import logging

from autopayout.providers.paypal.config import BASE_URLS, paypal_config

logger = logging.getLogger("autopayout")


def validate_paypal_startup() -> None:
    cfg = paypal_config()

    logger.info(
        "paypal startup check: mode=%s base_url=%s client_id=%s",
        cfg.mode,
        cfg.base_url,
        "<set>" if cfg.client_id else "<missing>",
    )

    if cfg.mode not in BASE_URLS:
        raise RuntimeError(
            "PayPal startup validation failed. "
            f"Invalid PAYPAL_MODE={cfg.mode!r}. Allowed: {', '.join(sorted(BASE_URLS))}"
        )

    missing: list[str] = []
    if not cfg.client_id:
        missing.append("PAYPAL_CLIENT_ID")
    if not cfg.client_secret:
        missing.append("PAYPAL_CLIENT_SECRET")

    if missing:
        raise RuntimeError(
            "PayPal startup validation failed. "
            f"mode={cfg.mode} "
            "Missing required env vars: " + ", ".join(missing)
        )
