from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.models.tables import NotificationLog, UserDevice, UserProfile


class DeviceRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_active_tokens(self, user_id: str) -> list[str]:
        stmt = (
            select(UserDevice.fcm_token)
            .where(UserDevice.user_id == user_id, UserDevice.is_active.is_(True))
            .order_by(UserDevice.id.asc())
        )
        return [row[0] for row in self.db.execute(stmt).all()]

    def list_active_devices(self, user_ids: Iterable[str] | None = None) -> list[tuple[str, str]]:
        """Return ``(user_id, fcm_token)`` pairs, optionally restricted to ``user_ids``."""
        stmt = select(UserDevice.user_id, UserDevice.fcm_token).where(UserDevice.is_active.is_(True))
        wanted = list(user_ids or [])
        if wanted:
            stmt = stmt.where(UserDevice.user_id.in_(wanted))
        stmt = stmt.order_by(UserDevice.id.asc())
        return [(row[0], row[1]) for row in self.db.execute(stmt).all()]

    def users_in_segments(self, user_ids: Iterable[str], segments: Iterable[str]) -> set[str]:
        wanted_segments = {s.strip() for s in segments if s and s.strip()}
        ids = list(set(user_ids))
        if not ids or not wanted_segments:
            return set()

        rows = self.db.execute(select(UserProfile.id, UserProfile.segments).where(UserProfile.id.in_(ids))).all()
        return {row[0] for row in rows if wanted_segments.intersection(row[1] or [])}


class NotificationLogRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def log_campaign(
        self,
        notification_type: str,
        title: str,
        target_count: int,
        sent_count: int,
        payload: dict[str, Any],
    ) -> NotificationLog:
        row = NotificationLog(
            type=notification_type,
            title=title,
            target_count=target_count,
            sent_count=sent_count,
            payload=payload,
            created_at=datetime.utcnow(),
        )
        self.db.add(row)
        self.db.commit()
        return row
