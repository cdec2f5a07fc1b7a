from __future__ import annotations

import json
from collections.abc import Generator
from dataclasses import replace

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.config import Settings, get_settings
from src.integrations.paystack_client import PaystackClient
from src.notifications.providers import FCMNotificationProvider

TEST_SETTINGS = replace(
    get_settings(),
    paystack_secret_key="sk_test_123",
    paystack_base_url="https://paystack.test",
    notification_provider="fcm",
    firebase_project_id="demo-project",
    firebase_server_key="server-key",
    fcm_base_url="https://fcm.test/v1",
    promo_batch_size=500,
    driver_average_speed_kmh=30.0,
)


def fcm_handler(calls: list[dict]):
    """FCM stub: tokens starting with ``bad`` are rejected, ``boom`` tokens fail in transport."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        calls.append({"url": str(request.url), "headers": dict(request.headers), "body": body})
        token = body["message"]["token"]
        if token.startswith("boom"):
            raise httpx.ConnectError("connection refused", request=request)
        if token.startswith("bad"):
            return httpx.Response(400, text='{"error": "INVALID_ARGUMENT"}')
        return httpx.Response(200, json={"name": f"projects/demo-project/messages/{token}"})

    return handler


@pytest.fixture
def session_local(tmp_path):
    from src.models import tables  # noqa: F401
    from src.models.db import Base

    engine = create_engine(f"sqlite:///{tmp_path / 'unit.db'}", connect_args={"check_same_thread": False}, future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(session_local):
    db = session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def test_ctx(tmp_path, monkeypatch) -> Generator[dict, None, None]:
    import src.models.db as db_module
    from src.models import tables  # noqa: F401
    from src.models.db import Base

    db_file = tmp_path / "test.db"
    test_url = f"sqlite:///{db_file}"
    engine = create_engine(test_url, connect_args={"check_same_thread": False}, future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    monkeypatch.setattr(db_module, "engine", engine, raising=False)
    monkeypatch.setattr(db_module, "SessionLocal", TestingSessionLocal, raising=False)

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    from src.api.routes import get_paystack_client
    from src.api.routes_notifications import get_notification_provider
    from src.app import app

    fcm_calls: list[dict] = []
    paystack_calls: list[httpx.Request] = []
    paystack_routes: dict[str, httpx.Response] = {}

    def paystack_handler(request: httpx.Request) -> httpx.Response:
        paystack_calls.append(request)
        for prefix, response in paystack_routes.items():
            if request.url.path.startswith(prefix):
                return response
        return httpx.Response(404, json={"status": False, "message": "Not found"})

    async def override_provider(settings: Settings = Depends(get_settings)):
        client = httpx.AsyncClient(transport=httpx.MockTransport(fcm_handler(fcm_calls)))
        try:
            yield FCMNotificationProvider(
                project_id=settings.firebase_project_id,
                server_key=settings.firebase_server_key,
                base_url=settings.fcm_base_url,
                client=client,
            )
        finally:
            await client.aclose()

    async def override_paystack(settings: Settings = Depends(get_settings)):
        client = httpx.AsyncClient(transport=httpx.MockTransport(paystack_handler))
        try:
            yield PaystackClient.from_settings(settings, client=client)
        finally:
            await client.aclose()

    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    app.dependency_overrides[get_notification_provider] = override_provider
    app.dependency_overrides[get_paystack_client] = override_paystack

    with TestClient(app) as client:
        yield {
            "client": client,
            "app": app,
            "session_local": TestingSessionLocal,
            "engine": engine,
            "fcm_calls": fcm_calls,
            "paystack_calls": paystack_calls,
            "paystack_routes": paystack_routes,
        }

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seed_devices():
    from src.models.tables import UserDevice

    def _seed(session_local, devices: list[tuple[str, str, bool]]) -> None:
        with session_local() as db:
            for user_id, token, active in devices:
                db.add(UserDevice(user_id=user_id, fcm_token=token, is_active=active))
            db.commit()

    return _seed


@pytest.fixture
def seed_profiles():
    from src.models.tables import UserProfile

    def _seed(session_local, profiles: dict[str, list[str]]) -> None:
        with session_local() as db:
            for user_id, segments in profiles.items():
                db.add(UserProfile(id=user_id, segments=segments))
            db.commit()

    return _seed
