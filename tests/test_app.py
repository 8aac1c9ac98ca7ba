# tests/test_app.py

from __future__ import annotations

from taskboard.database import async_url
from taskboard.errors import field_errors, validation_error


async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Taskboard API running"}


def test_async_url():
    assert async_url("postgresql://u:p@db/tb") == "postgresql+asyncpg://u:p@db/tb"
    assert async_url("sqlite:///./tb.sqlite3") == "sqlite+aiosqlite:///./tb.sqlite3"
    assert async_url("sqlite+aiosqlite:///:memory:") == "sqlite+aiosqlite:///:memory:"


def test_field_errors_strip_location():
    errors = [
        {"loc": ("body", "title"), "msg": "Field required"},
        {"loc": ("body", "preferences", 0, "value"), "msg": "Field required"},
        {"loc": ("query", "per_page"), "msg": "too big"},
        {"loc": ("body", "title"), "msg": "second message"},
        {"loc": ("body",), "msg": "not an object"},
    ]
    assert field_errors(errors) == {
        "title": ["Field required", "second message"],
        "preferences.0.value": ["Field required"],
        "per_page": ["too big"],
        "body": ["not an object"],
    }


def test_validation_error_builds_field_map():
    exc = validation_error({"user_ids.1": "The selected user_ids.1 is invalid."})
    assert field_errors(exc.errors()) == {"user_ids.1": ["The selected user_ids.1 is invalid."]}


def test_setup_logging_writes_file(tmp_path):
    import logging

    from taskboard.logging_setup import setup_logging

    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging(log_dir=tmp_path / "logs", console_level="WARNING")
        logging.getLogger("taskboard.test").info("hello from the test")
        logging.getLogger("somelib.client").info("third-party chatter")
        for handler in root.handlers:
            handler.flush()

        content = (tmp_path / "logs" / "taskboard.log").read_text(encoding="utf-8")
        assert "hello from the test" in content
        # The file keeps everything; only the console is filtered
        assert "third-party chatter" in content
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
        logging.captureWarnings(False)


async def test_unhandled_error_envelope(client, make_user, monkeypatch):
    from httpx import ASGITransport, AsyncClient

    from helpers import auth_headers
    from taskboard.main import app
    from taskboard.services import preferences as preference_service

    alice = await make_user("Alice")

    async def broken_get_all(db, user_id):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(preference_service, "get_all", broken_get_all)

    # The `client` fixture keeps the database override installed
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
        response = await raw_client.get("/user/preferences", headers=auth_headers(alice))

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal Server Error", "error": "kaboom"}
    assert response.headers["access-control-allow-origin"] == "*"
