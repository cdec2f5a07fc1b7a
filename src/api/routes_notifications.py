from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.models.db import get_db_session
from src.models.schemas import (
    DriverLocationNotificationRequest,
    OrderNotificationRequest,
    PromotionalNotificationRequest,
)
from src.notifications.providers import BaseNotificationProvider, build_provider
from src.notifications.service import NotificationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/notifications", tags=["notifications"])


async def get_notification_provider(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[BaseNotificationProvider]:
    provider = build_provider(settings)
    try:
        yield provider
    finally:
        await provider.aclose()


def get_notification_service(
    db: Session = Depends(get_db_session),
    provider: BaseNotificationProvider = Depends(get_notification_provider),
    settings: Settings = Depends(get_settings),
) -> NotificationService:
    return NotificationService(db=db, provider=provider, settings=settings)


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc)})


@router.post("/order")
async def send_order_notification(
    payload: OrderNotificationRequest,
    service: NotificationService = Depends(get_notification_service),
):
    try:
        return await service.send_order_notification(payload)
    except Exception as exc:
        logger.exception("Error sending order notification", extra={"order_id": payload.order_id})
        return _error(exc)


@router.post("/driver-location")
async def send_driver_location_notification(
    payload: DriverLocationNotificationRequest,
    service: NotificationService = Depends(get_notification_service),
):
    try:
        return await service.send_driver_location_notification(payload)
    except Exception as exc:
        logger.exception("Error sending driver notification", extra={"order_id": payload.order_id})
        return _error(exc)


@router.post("/promotional")
async def send_promotional_notification(
    payload: PromotionalNotificationRequest,
    service: NotificationService = Depends(get_notification_service),
):
    try:
        return await service.send_promotional_notification(payload)
    except Exception as exc:
        logger.exception("Error sending promotional notification", extra={"title": payload.title})
        return _error(exc)
