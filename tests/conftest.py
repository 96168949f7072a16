"""Shared fixtures: Telegram update payloads, inbound events, configuration."""

from typing import Any, Dict, Optional

import pytest

from weatherbot.config import Config
from weatherbot.updates import InboundEvent


def telegram_update(
    update_id: int = 1,
    text: Optional[str] = "Paris",
    chat_id: int = 42,
    user_id: int = 7,
) -> Dict[str, Any]:
    """Raw Bot API update as Telegram posts it."""
    message: Dict[str, Any] = {
        "message_id": update_id,
        "date": 1700000000,
        "chat": {"id": chat_id, "type": "private"},
        "from": {
            "id": user_id,
            "is_bot": False,
            "first_name": "Ann",
            "last_name": "Smith",
            "username": "ann",
        },
    }
    if text is not None:
        message["text"] = text
        if text.startswith("/"):
            message["entities"] = [
                {"type": "bot_command", "offset": 0, "length": len(text.split()[0])}
            ]
    return {"update_id": update_id, "message": message}


@pytest.fixture
def make_update():
    return telegram_update


@pytest.fixture
def make_event():
    def _make(text: str = "Paris", command: Optional[str] = None, args: str = "", **kwargs):
        fields = {"update_id": 1, "chat_id": 42, "user_id": 7}
        fields.update(kwargs)
        return InboundEvent(text=text, command=command, args=args, **fields)
    return _make


@pytest.fixture
def valid_config(monkeypatch):
    """A minimal valid configuration, restored after the test."""
    values = {
        "BOT_TOKEN": "123:ABC",
        "WEATHER_API_URL": "http://weather/api",
        "WEATHER_API_METHOD": "GET",
        "EXCHANGE_API_URL": "",
        "USER_SERVICE_URL": "",
        "WEBHOOK_URL": "",
        "WEBHOOK_PATH": "/bot",
        "WEBHOOK_SECRET": "",
        "PORT": 8080,
        "UPSTREAM_TIMEOUT_SECONDS": 15.0,
        "UPSTREAM_MAX_ATTEMPTS": 3,
        "UPSTREAM_RETRY_DELAY_SECONDS": 3.0,
        "UPDATE_QUEUE_SIZE": 100,
        "POLL_TIMEOUT_SECONDS": 60,
        "LOG_LEVEL": "INFO",
        "DEBUG_MODE": False,
        "ENV_ERRORS": [],
    }
    for key, value in values.items():
        monkeypatch.setattr(Config, key, value)
    return Config
