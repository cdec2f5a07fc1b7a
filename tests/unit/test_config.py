from dataclasses import replace

import src.app as app_module
from src.config import get_settings


def test_main_serves_on_configured_host_and_port(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(app_module, "settings", replace(get_settings(), app_host="127.0.0.1", app_port=9100))
    monkeypatch.setattr(app_module.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    app_module.main()

    assert calls == [("src.app:app", {"host": "127.0.0.1", "port": 9100})]


def test_default_bind_settings() -> None:
    settings = get_settings()

    assert isinstance(settings.app_host, str) and settings.app_host
    assert isinstance(settings.app_port, int)
