from __future__ import annotations

import asyncio
import http.client
import io
import json
import urllib.error
import urllib.request
from typing import Any

import pytest

from adapters.backend_gateway import BackendGateway
from core.config import RelayConfig
from core.dispatcher import TOKEN_FAILURE_TEXT, CommandDispatcher
from core.models import InboundMessage, ParsedCommand, Text, UserRecord
from core.ports import GatewayError


class DummyResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "DummyResponse":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None


def _config(**overrides: Any) -> RelayConfig:
    values = {
        "bot_token": "1:abc",
        "root_url": "http://thorium.example/",
        "backend_token": "abcdef",
        "request_timeout": 3.0,
    }
    values.update(overrides)
    return RelayConfig(**values)


def _gateway(**overrides: Any) -> BackendGateway:
    return BackendGateway(_config(**overrides))


def test_url_joins_root_token_and_path() -> None:
    gateway = _gateway()
    assert gateway.url_for("message") == "http://thorium.example/abcdef/message"
    assert gateway.url_for("/generate_token/42") == "http://thorium.example/abcdef/generate_token/42"


def test_post_sends_json_and_parses_response(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    def fake_urlopen(request: urllib.request.Request, timeout: float) -> DummyResponse:
        seen["url"] = request.full_url
        seen["method"] = request.get_method()
        seen["body"] = json.loads(request.data.decode("utf-8"))
        seen["content_type"] = request.get_header("Content-type")
        seen["timeout"] = timeout
        return DummyResponse(b'{"ok": true}')

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

    result = _gateway().post("chat_update/new_title", {"title": "New"})

    assert result == {"ok": True}
    assert seen == {
        "url": "http://thorium.example/abcdef/chat_update/new_title",
        "method": "POST",
        "body": {"title": "New"},
        "content_type": "application/json",
        "timeout": 3.0,
    }


def test_get_has_no_body(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: float) -> DummyResponse:
        assert request.get_method() == "GET"
        assert request.data is None
        return DummyResponse(b'{"token": "abc123"}')

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    assert _gateway().get("generate_token/42") == {"token": "abc123"}


def test_http_error_status_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: float) -> DummyResponse:
        raise urllib.error.HTTPError(request.full_url, 500, "Server Error", {}, io.BytesIO(b"oops"))

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(GatewayError, match="500"):
        _gateway().get("generate_token/42")


def test_connection_failure_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: float) -> DummyResponse:
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(GatewayError):
        _gateway().post("message", {})


def test_timeout_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: float) -> DummyResponse:
        raise TimeoutError("timed out")

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(GatewayError):
        _gateway().post("message", {})


def test_invalid_json_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(urllib.request, "urlopen", lambda request, timeout: DummyResponse(b"<html>"))
    with pytest.raises(GatewayError, match="invalid JSON"):
        _gateway().get("generate_token/1")


class TruncatedResponse(DummyResponse):
    def read(self) -> bytes:
        raise http.client.IncompleteRead(b'{"token": ', 15)


def test_truncated_body_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(urllib.request, "urlopen", lambda request, timeout: TruncatedResponse(b""))
    with pytest.raises(GatewayError, match="unreachable"):
        _gateway().get("generate_token/42")


class FakeReplier:
    def __init__(self) -> None:
        self.replies: list[tuple[int, str, bool]] = []
        self.direct: list[tuple[int, str]] = []

    async def reply(self, message: InboundMessage, text: str, markdown: bool = False) -> None:
        self.replies.append((message.chat_id, text, markdown))

    async def send_direct(self, user_id: int, text: str) -> None:
        self.direct.append((user_id, text))


def test_truncated_token_response_gets_the_fallback_reply(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(urllib.request, "urlopen", lambda request, timeout: TruncatedResponse(b""))
    config = _config(dashboard_url="https://dash.example.com/")
    replier = FakeReplier()
    dispatcher = CommandDispatcher(config, BackendGateway(config), replier)
    message = InboundMessage(
        message_id=3,
        chat_id=-500,
        user=UserRecord(id=42, is_bot=False, first_name="Ada"),
        payload=Text(text="/token"),
    )

    asyncio.run(dispatcher.dispatch(ParsedCommand(name="token", arguments=""), message))

    assert replier.replies == [(-500, TOKEN_FAILURE_TEXT, False)]
    assert replier.direct == []
