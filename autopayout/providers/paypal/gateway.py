# autopayout/providers/paypal/gateway.py
from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from autopayout.payouts.model import PayoutRequest, format_amount
from autopayout.providers.base import GatewayResult, PayoutGateway
from autopayout.providers.paypal.config import PayPalConfig, paypal_config
from autopayout.providers.paypal.http import HttpClient, is_retryable_http


class PayPalGateway(PayoutGateway):
    name = "paypal"

    def __init__(self, http: Optional[HttpClient] = None, cfg: Optional[PayPalConfig] = None):
        self.cfg = cfg or paypal_config()
        self.http = http or HttpClient(timeout_s=self.cfg.timeout_s)
        self._token: Optional[str] = None
        self._token_exp: float = 0.0

    def send_payout(self, request: PayoutRequest) -> GatewayResult:
        token = self._get_token()
        if not token:
            return GatewayResult.failed("paypal token error", retryable=True)

        url = f"{self.cfg.base_url}/v1/payments/payouts"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        try:
            resp = self.http.post(url, headers=headers, json_body=build_payout_body(request), debug=True)
        except httpx.TimeoutException:
            return GatewayResult.failed("Gateway timeout", retryable=True)
        except httpx.HTTPError as e:
            return GatewayResult.failed(f"Provider error: {e}", retryable=True)

        if resp.status_code in (200, 201):
            batch_id = _payout_batch_id(resp.json)
            if not batch_id:
                return GatewayResult.failed(
                    "Confirmation missing payout_batch_id",
                    retryable=True,
                    response={"http_status": resp.status_code, "body": resp.json},
                )
            return GatewayResult(status="CONFIRMED", provider_ref=batch_id, response=resp.json)

        if resp.status_code == 401:
            # Token revoked or expired early; fetch a new one next attempt
            self._token = None

        return GatewayResult.failed(
            _error_message(resp.status_code, resp.json),
            retryable=is_retryable_http(resp.status_code) or resp.status_code == 401,
            response={"http_status": resp.status_code, "body": resp.json, "text": resp.text},
        )

    def close(self) -> None:
        self.http.close()

    def _get_token(self) -> Optional[str]:
        now = time.time()
        if self._token and now < (self._token_exp - 30):
            return self._token

        if not (self.cfg.client_id and self.cfg.client_secret):
            return None

        url = f"{self.cfg.base_url}/v1/oauth2/token"
        headers = {"Accept": "application/json"}

        try:
            resp = self.http.post(
                url,
                headers=headers,
                form={"grant_type": "client_credentials"},
                auth=(self.cfg.client_id, self.cfg.client_secret),
            )
        except httpx.HTTPError:
            return None

        if resp.status_code == 200 and isinstance(resp.json, dict) and resp.json.get("access_token"):
            self._token = resp.json["access_token"]
            expires_in = int(resp.json.get("expires_in") or 3600)
            self._token_exp = now + expires_in
            return self._token

        return None


def build_payout_body(request: PayoutRequest) -> dict[str, Any]:
    return {
        "sender_batch_header": {
            "sender_batch_id": request.sender_batch_id,
            "email_subject": request.email_subject,
            "email_message": request.email_message,
        },
        "items": [
            {
                "recipient_type": "EMAIL",
                "amount": {
                    "value": format_amount(request.amount),
                    "currency": request.currency,
                },
                "receiver": request.recipient,
                "note": request.note,
                "sender_item_id": request.sender_item_id,
            }
        ],
    }


def _payout_batch_id(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    header = payload.get("batch_header") or {}
    return (header.get("payout_batch_id") or None) if isinstance(header, dict) else None


def _error_message(status_code: int, payload: Any) -> str:
    if isinstance(payload, dict):
        name = payload.get("name")
        message = payload.get("message")
        if name and message:
            return f"HTTP {status_code} {name}: {message}"
        if name or message:
            return f"HTTP {status_code} {name or message}"
    return f"HTTP {status_code}"
