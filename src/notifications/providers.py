from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from src.config import ConfigurationError, Settings
from src.models.notification import DeliveryResult, PushMessage

logger = logging.getLogger(__name__)

ANDROID_CHANNEL_ID = "food_delivery_channel"


class BaseNotificationProvider(ABC):
    name: str = "base"

    @abstractmethod
    async def send(self, message: PushMessage, token: str) -> DeliveryResult:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class MockNotificationProvider(BaseNotificationProvider):
    name = "mock"

    def __init__(self) -> None:
        self.sent: list[tuple[str, PushMessage]] = []

    async def send(self, message: PushMessage, token: str) -> DeliveryResult:
        self.sent.append((token, message))
        return DeliveryResult(success=True)


class FCMNotificationProvider(BaseNotificationProvider):
    """Delivers one message per device token through the FCM HTTP v1 API."""

    name = "fcm"

    def __init__(
        self,
        project_id: str,
        server_key: str,
        base_url: str = "https://fcm.googleapis.com/v1",
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not project_id or not server_key:
            raise ConfigurationError("Firebase project id and server key must be configured")
        self.project_id = project_id
        self.server_key = server_key
        self.send_url = f"{base_url.rstrip('/')}/projects/{project_id}/messages:send"
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

    @staticmethod
    def build_payload(message: PushMessage, token: str) -> dict[str, Any]:
        android_notification: dict[str, Any] = {"sound": "default", "channel_id": ANDROID_CHANNEL_ID}
        aps: dict[str, Any] = {"sound": "default", "badge": 1}
        if message.high_priority:
            android_notification["notification_priority"] = "PRIORITY_HIGH"
            aps["content-available"] = 1
        if message.accent_color:
            android_notification["color"] = message.accent_color

        notification: dict[str, Any] = {"title": message.title, "body": message.body}
        apns: dict[str, Any] = {"payload": {"aps": aps}}
        if message.image_url:
            notification["image"] = message.image_url
            android_notification["image"] = message.image_url
            apns["fcm_options"] = {"image": message.image_url}

        return {
            "message": {
                "token": token,
                "notification": notification,
                "data": {"type": message.type, **message.data},
                "android": {"priority": "high", "notification": android_notification},
                "apns": apns,
            }
        }

    async def send(self, message: PushMessage, token: str) -> DeliveryResult:
        try:
            resp = await self.client.post(
                self.send_url,
                json=self.build_payload(message, token),
                headers={
                    "Authorization": f"Bearer {self.server_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            logger.warning("FCM request failed", extra={"token_prefix": token[:8], "error": str(exc)})
            return DeliveryResult(success=False, error=str(exc) or type(exc).__name__)

        if not resp.is_success:
            logger.warning("FCM rejected message", extra={"token_prefix": token[:8], "status": resp.status_code})
            return DeliveryResult(success=False, error=resp.text)
        return DeliveryResult(success=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()


def build_provider(settings: Settings, client: httpx.AsyncClient | None = None) -> BaseNotificationProvider:
    if settings.notification_provider == "mock":
        return MockNotificationProvider()
    if settings.notification_provider != "fcm":
        raise ConfigurationError(f"Unsupported NOTIFICATION_PROVIDER: {settings.notification_provider}")
    return FCMNotificationProvider(
        project_id=settings.firebase_project_id,
        server_key=settings.firebase_server_key,
        base_url=settings.fcm_base_url,
        timeout_seconds=settings.fcm_timeout_seconds,
        client=client,
    )
