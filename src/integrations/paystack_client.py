from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from src.config import ConfigurationError, Settings

logger = logging.getLogger(__name__)

PAYMENT_CHANNELS = ["card", "bank", "ussd", "qr", "mobile_money", "bank_transfer"]


class PaystackError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PaystackClient:
    """Thin async client for the Paystack transaction endpoints."""

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout_seconds: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None) -> "PaystackClient":
        return cls(
            secret_key=settings.paystack_secret_key,
            base_url=settings.paystack_base_url,
            timeout_seconds=settings.paystack_timeout_seconds,
            client=client,
        )

    def _headers(self) -> dict[str, str]:
        if not self.secret_key:
            raise ConfigurationError("Paystack secret key not configured")
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _json_or_empty(resp: httpx.Response) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def initialize_transaction(
        self,
        amount: float,
        email: str,
        reference: str,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = self._headers()
        payload = {
            "amount": amount,
            "email": email,
            "reference": reference,
            "metadata": metadata or {},
            "channels": PAYMENT_CHANNELS,
        }
        logger.info("Initializing Paystack transaction", extra={"reference": reference})
        resp = await self.client.post(f"{self.base_url}/transaction/initialize", json=payload, headers=headers)
        data = self._json_or_empty(resp)
        if not resp.is_success:
            raise PaystackError(data.get("message") or "Failed to initialize payment", status_code=resp.status_code)
        return data.get("data") or {}

    async def verify_transaction(self, reference: str) -> dict[str, Any]:
        headers = self._headers()
        url = f"{self.base_url}/transaction/verify/{quote(reference, safe='')}"
        logger.info("Verifying Paystack transaction", extra={"reference": reference})
        resp = await self.client.get(url, headers=headers)
        data = self._json_or_empty(resp)
        if not resp.is_success:
            raise PaystackError(data.get("message") or "Failed to verify payment", status_code=resp.status_code)
        return data.get("data") or {}

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
