# settings.py
from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # -----------------------
    # Retry policy
    # -----------------------
    MAX_RETRIES: int = Field(default=3, gt=0)
    BACKOFF_MULTIPLIER: float = Field(default=2.0, gt=0)
    PAYOUT_FAIL_FAST_NON_RETRYABLE: bool = False

    # -----------------------
    # Gateway
    # -----------------------
    GATEWAY: Literal["paypal", "mock"] = "paypal"

    PAYPAL_MODE: Literal["sandbox", "live"] = "sandbox"
    PAYPAL_CLIENT_ID: str = ""
    PAYPAL_CLIENT_SECRET: str = ""
    PAYPAL_HTTP_TIMEOUT_S: float = Field(default=20.0, gt=0)

    # -----------------------
    # Payout
    # -----------------------
    RECIPIENT_EMAIL: str = ""
    PAYOUT_CURRENCY: str = "USD"
    PAYOUT_EMAIL_SUBJECT: str = "You have a payment"
    PAYOUT_EMAIL_MESSAGE: str = "You have received a payment from us!"
    PAYOUT_NOTE: str = "Automatic payout every 24 hours"

    MINIMUM_RESERVE: Decimal = Field(default=Decimal("20.00"), ge=0, decimal_places=2)
    # Balance oracle stub
    STATIC_BALANCE: Decimal = Field(default=Decimal("150.00"), ge=0, decimal_places=2)

    # -----------------------
    # Schedule
    # -----------------------
    PAYOUT_CRON: str = "0 0 * * *"
    PAYOUT_TIMEZONE: str = "America/New_York"

    # -----------------------
    # DB (all four of host/user/password/name, or file fallback)
    # -----------------------
    DB_HOST: str = ""
    DB_PORT: int = 5432
    DB_USER: str = ""
    DB_PASSWORD: str = ""
    DB_NAME: str = ""
    DB_POOL_MAX: int = Field(default=10, gt=0)

    # -----------------------
    # Fallback files
    # -----------------------
    PAYOUT_ERRORS_LOG: str = "payout_errors.log"
    PAYOUT_SUCCESS_LOG: str = "payout_success.log"


settings = Settings()


def db_configured(s: Settings | None = None) -> bool:
    s = s or settings
    return all((v or "").strip() for v in (s.DB_HOST, s.DB_USER, s.DB_PASSWORD, s.DB_NAME))


def validate_env_settings(s: Settings | None = None) -> None:
    """
    Fail-fast startup check.

    Raises RuntimeError listing every missing variable so the daemon
    never starts against a half-configured gateway.
    """
    s = s or settings
    missing: list[str] = []

    if s.GATEWAY == "paypal":
        if not (s.PAYPAL_CLIENT_ID or "").strip():
            missing.append("PAYPAL_CLIENT_ID")
        if not (s.PAYPAL_CLIENT_SECRET or "").strip():
            missing.append("PAYPAL_CLIENT_SECRET")

    if not (s.RECIPIENT_EMAIL or "").strip():
        missing.append("RECIPIENT_EMAIL")

    if not (s.PAYOUT_CURRENCY or "").strip():
        missing.append("PAYOUT_CURRENCY")

    if missing:
        raise RuntimeError(
            "Startup validation failed. "
            f"env={s.ENV} gateway={s.GATEWAY} "
            "Missing required env vars: " + ", ".join(sorted(missing))
        )
