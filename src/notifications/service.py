from __future__ import annotations

import logging
import math
from typing import Any

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.models.notification import PushMessage
from src.models.schemas import (
    DriverLocationNotificationRequest,
    OrderNotificationRequest,
    PromotionalNotificationRequest,
)
from src.notifications.dispatch import count_sent, dispatch, dispatch_in_batches
from src.notifications.providers import BaseNotificationProvider
from src.notifications.templates import driver_proximity_template, order_status_template
from src.storage.repository import DeviceRepository, NotificationLogRepository
from src.utils.geo import estimate_eta_minutes, haversine_km

logger = logging.getLogger(__name__)

PROMO_ACCENT_COLOR = "#FF6B35"
NO_DEVICES = {"success": False, "message": "No devices found"}


class NotificationService:
    def __init__(
        self,
        db: Session,
        provider: BaseNotificationProvider,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.devices = DeviceRepository(db)
        self.logs = NotificationLogRepository(db)
        self.provider = provider

    async def send_order_notification(self, payload: OrderNotificationRequest) -> dict[str, Any]:
        tokens = await run_in_threadpool(self.devices.list_active_tokens, payload.user_id)
        if not tokens:
            logger.info("No active devices for order notification", extra={"user_id": payload.user_id})
            return dict(NO_DEVICES)

        template = order_status_template(payload.status, payload.restaurant_name, payload.estimated_time)
        message = PushMessage(
            title=template.title,
            body=template.body,
            type="order_status",
            data={"order_id": payload.order_id, "status": payload.status},
        )
        results = await dispatch(self.provider, message, tokens)
        sent = count_sent(results)
        logger.info(
            "Order notifications sent",
            extra={"order_id": payload.order_id, "sent": sent, "total": len(results)},
        )
        return {"success": True, "sent": sent, "total": len(results)}

    def resolve_distance_and_eta(self, payload: DriverLocationNotificationRequest) -> tuple[float, int]:
        distance = payload.distance_km
        if distance is None:
            distance = haversine_km(
                payload.driver_lat,
                payload.driver_lng,
                payload.customer_lat,
                payload.customer_lng,
            )
        eta = payload.eta_minutes
        if eta is None:
            return distance, estimate_eta_minutes(distance, self.settings.driver_average_speed_kmh)
        return distance, math.ceil(eta)

    async def send_driver_location_notification(self, payload: DriverLocationNotificationRequest) -> dict[str, Any]:
        tokens = await run_in_threadpool(self.devices.list_active_tokens, payload.user_id)
        if not tokens:
            logger.info("No active devices for driver notification", extra={"user_id": payload.user_id})
            return dict(NO_DEVICES)

        distance, eta = self.resolve_distance_and_eta(payload)
        tier, template = driver_proximity_template(payload.driver_name, distance, eta)
        message = PushMessage(
            title=template.title,
            body=template.body,
            type=tier.value,
            data={
                "order_id": payload.order_id,
                "driver_name": payload.driver_name,
                "driver_phone": payload.driver_phone or "",
                "distance": str(distance),
                "eta": str(eta),
            },
            high_priority=True,
        )
        results = await dispatch(self.provider, message, tokens)
        sent = count_sent(results)
        logger.info(
            "Driver notifications sent",
            extra={"order_id": payload.order_id, "tier": tier.value, "sent": sent, "total": len(results)},
        )
        return {"success": True, "sent": sent, "distance_km": distance, "eta_minutes": eta}

    def resolve_promotional_tokens(self, payload: PromotionalNotificationRequest) -> list[str]:
        devices = self.devices.list_active_devices(payload.target_users or None)
        if devices and payload.target_segments:
            allowed = self.devices.users_in_segments((user_id for user_id, _ in devices), payload.target_segments)
            devices = [device for device in devices if device[0] in allowed]
        return [token for _, token in devices]

    async def send_promotional_notification(self, payload: PromotionalNotificationRequest) -> dict[str, Any]:
        tokens = await run_in_threadpool(self.resolve_promotional_tokens, payload)
        if not tokens:
            logger.info(
                "No devices matched promotional targets",
                extra={"target_users": len(payload.target_users), "target_segments": payload.target_segments},
            )
            return dict(NO_DEVICES)

        message = PushMessage(
            title=payload.title,
            body=payload.body,
            type="promotion",
            data={
                "action_url": payload.action_url or "",
                "restaurant_id": payload.restaurant_id or "",
            },
            image_url=payload.image_url,
            accent_color=PROMO_ACCENT_COLOR,
        )
        results = await dispatch_in_batches(self.provider, message, tokens, self.settings.promo_batch_size)
        sent = count_sent(results)

        try:
            await run_in_threadpool(
                self.logs.log_campaign,
                notification_type="promotional",
                title=payload.title,
                target_count=len(tokens),
                sent_count=sent,
                payload=payload.model_dump(),
            )
        except SQLAlchemyError:
            await run_in_threadpool(self.logs.db.rollback)
            logger.exception("Failed to log promotional campaign", extra={"title": payload.title, "sent": sent})

        logger.info("Promotional campaign sent", extra={"sent": sent, "total_devices": len(tokens)})
        return {"success": True, "sent": sent, "total_devices": len(tokens)}
