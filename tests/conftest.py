# tests/conftest.py
"""
Shared pytest fixtures for plpgen tests.

Provides:
- Template archive builders (.plp with data.plab + payload)
- httpx mock transports for the template host and the Telegram Bot API
- In-memory KV store wired into the app
- Async HTTP client against the FastAPI app
"""
import os

# Rate limiting would trip on a long test session from one client address
os.environ["RATE_LIMIT_ENABLED"] = "false"

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from plpgen.core.config import GeneratorSettings, Settings, StoreSettings, TelegramSettings
from plpgen.db import use_store
from plpgen.generation import archive
from plpgen.generation.descriptor import REQUIRED_LAYERS
from plpgen.lib.kv_store import MemoryKeyValueStore
from plpgen.lib.telegram import TelegramClient

TEMPLATE_URL = "https://templates.test/card.plp"

PAYLOAD_ENTRIES = {
    "images/background.png": b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4,
    "fonts/Roboto-Regular.ttf": b"\x00\x01\x00\x00" + b"glyf" * 300,
    "thumbnail.jpg": b"\xff\xd8\xff\xe0" + b"\x10" * 512,
}


# ═══════════════════════════════════════════════════════
# TEMPLATE BUILDERS
# ═══════════════════════════════════════════════════════

def make_layer(text: str = "Placeholder") -> Dict[str, Any]:
    """A text layer shaped like the editor writes it."""
    return {
        "textTextString": text,
        "textTextSize": 42,
        "textTextColor": {
            "0": {"textsIntervalsStart": 0, "textsIntervalsEnd": len(text), "color": -16777216},
        },
        "textTextFont": {
            "0": {"textsIntervalsStart": 0, "textsIntervalsEnd": len(text), "font": "Roboto"},
            "1": {"textsIntervalsStart": 3, "textsIntervalsEnd": len(text), "font": "Roboto-Bold"},
        },
    }


def make_descriptor(layers: Iterable[str] = REQUIRED_LAYERS) -> Dict[str, Any]:
    bundle: Dict[str, Any] = {name: make_layer() for name in layers}
    bundle["image0"] = {"imageSrc": "images/background.png", "x": 0, "y": 0}
    return {"version": 7, "canvasWidth": 1080, "canvasHeight": 1350, "objectsBundle": bundle}


def make_template(
    descriptor: Optional[Dict[str, Any]] = None,
    payload: Optional[Dict[str, bytes]] = None,
    descriptor_entry: str = "data.plab",
) -> bytes:
    entries = dict(PAYLOAD_ENTRIES if payload is None else payload)
    if descriptor_entry:
        entries[descriptor_entry] = json.dumps(descriptor or make_descriptor()).encode("utf-8")
    return archive.pack(entries)


@pytest.fixture
def template_bytes() -> bytes:
    return make_template()


# ═══════════════════════════════════════════════════════
# FIXTURES - Template host
# ═══════════════════════════════════════════════════════

def template_client(body: bytes, status_code: int = 200) -> httpx.AsyncClient:
    """Client whose every GET answers with body."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=body)
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
async def template_http(template_bytes):
    async with template_client(template_bytes) as client:
        yield client


@pytest.fixture
def generator_settings() -> GeneratorSettings:
    return GeneratorSettings(template_url=TEMPLATE_URL, fetch_timeout=5.0)


@pytest.fixture
def progress_events():
    """Sink that records every progress message."""
    events: List[str] = []

    async def sink(message: str) -> None:
        events.append(message)

    sink.events = events
    return sink


# ═══════════════════════════════════════════════════════
# FIXTURES - Telegram
# ═══════════════════════════════════════════════════════

@dataclass
class RecordedCall:
    method: str
    payload: Dict[str, Any]
    content_type: str = ""
    body: bytes = b""


@dataclass
class FakeTelegram:
    """Bot API stand-in; records calls and fails the methods listed in fail."""
    calls: List[RecordedCall] = field(default_factory=list)
    fail: Dict[str, str] = field(default_factory=dict)
    next_message_id: int = 100

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        content_type = request.headers.get("content-type", "")
        payload: Dict[str, Any] = {}
        if content_type.startswith("application/json"):
            payload = json.loads(request.content)
        self.calls.append(RecordedCall(method, payload, content_type, request.content))

        if method in self.fail:
            return httpx.Response(400, json={"ok": False, "description": self.fail[method]})
        self.next_message_id += 1
        return httpx.Response(200, json={"ok": True, "result": {"message_id": self.next_message_id}})

    def texts(self, method: str = "sendMessage") -> List[str]:
        return [c.payload.get("text", "") for c in self.calls if c.method == method]

    def methods(self) -> List[str]:
        return [c.method for c in self.calls]


@pytest.fixture
def fake_telegram() -> FakeTelegram:
    return FakeTelegram()


@pytest.fixture
def telegram_settings() -> TelegramSettings:
    return TelegramSettings(bot_token="123456:TEST-TOKEN", webhook_secret="", api_base="https://tg.test")


@pytest.fixture
async def telegram_client(fake_telegram, telegram_settings):
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_telegram.handler))
    client = TelegramClient(telegram_settings, client=http)
    yield client
    await http.aclose()


@pytest.fixture
def app_settings(generator_settings, telegram_settings) -> Settings:
    return Settings(
        generator=generator_settings,
        telegram=telegram_settings,
        store=StoreSettings(mongodb_url=None),
        admin_code="letmein",
    )


# ═══════════════════════════════════════════════════════
# FIXTURES - Store and API client
# ═══════════════════════════════════════════════════════

@pytest.fixture
def memory_store():
    """Fresh in-memory store installed as the active store."""
    store = MemoryKeyValueStore()
    previous = use_store(store)
    yield store
    use_store(previous)


@pytest.fixture
async def async_client(memory_store):
    """Async HTTP client for testing FastAPI endpoints."""
    from plpgen.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as client:
        yield client
    app.dependency_overrides.clear()
