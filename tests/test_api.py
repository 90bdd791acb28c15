import pytest

from plpgen.api.telegram import SECRET_HEADER, drain_pending_updates, get_wizard
from plpgen.core.config import settings
from plpgen.lib.kv_store import MongoKeyValueStore


class RecordingWizard:
    def __init__(self, fail=False):
        self.updates = []
        self.fail = fail

    async def handle_update(self, update):
        self.updates.append(update)
        if self.fail:
            raise RuntimeError("wizard blew up")


@pytest.fixture
def recording_wizard(async_client):
    from plpgen.main import app

    wizard = RecordingWizard()
    app.dependency_overrides[get_wizard] = lambda: wizard
    return wizard


# ═══════════════════════════════════════════════════════
# HEALTH CHECK
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_healthz(async_client):
    response = await async_client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["ok"] is True


@pytest.mark.asyncio
async def test_api_health(async_client):
    response = await async_client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["store"] == "memory"


# ═══════════════════════════════════════════════════════
# DEBUG
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_debug_reports_presence_only(async_client, monkeypatch):
    monkeypatch.setattr(settings.telegram, "bot_token", "123456:VERY-SECRET")
    monkeypatch.setattr(settings.telegram, "webhook_secret", "hook-secret")
    monkeypatch.setattr(settings.generator, "template_url", "https://templates.test/card.plp")
    monkeypatch.setattr(settings, "admin_code", "letmein")

    response = await async_client.get("/debug")

    assert response.status_code == 200
    assert response.json() == {
        "hasToken": True,
        "tokenLen": len("123456:VERY-SECRET"),
        "hasKV": False,
        "kvBackend": "memory",
        "hasAdmin": True,
        "hasTemplate": True,
        "hasSecret": True,
    }
    for secret in ("VERY-SECRET", "hook-secret", "letmein", "templates.test"):
        assert secret not in response.text


@pytest.mark.asyncio
async def test_debug_with_nothing_configured(async_client, monkeypatch):
    monkeypatch.setattr(settings.telegram, "bot_token", "")
    monkeypatch.setattr(settings, "admin_code", "")

    data = (await async_client.get("/debug")).json()
    assert data["hasToken"] is False
    assert data["tokenLen"] == 0
    assert data["hasAdmin"] is False


@pytest.mark.asyncio
async def test_debug_flags_persistent_store(async_client):
    from plpgen.db import use_store

    previous = use_store(MongoKeyValueStore(collection=None))
    try:
        data = (await async_client.get("/debug")).json()
    finally:
        use_store(previous)
    assert data["hasKV"] is True
    assert data["kvBackend"] == "mongodb"


# ═══════════════════════════════════════════════════════
# WEBHOOK
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_webhook_hands_update_to_wizard(async_client, recording_wizard, monkeypatch):
    monkeypatch.setattr(settings.telegram, "webhook_secret", "")
    update = {"update_id": 10, "message": {"text": "/start", "from": {"id": 1}, "chat": {"id": 1}}}

    response = await async_client.post("/telegram/webhook", json=update)
    await drain_pending_updates()

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert recording_wizard.updates == [update]


@pytest.mark.asyncio
async def test_webhook_checks_secret(async_client, recording_wizard, monkeypatch):
    monkeypatch.setattr(settings.telegram, "webhook_secret", "hook-secret")

    response = await async_client.post("/telegram/webhook", json={"update_id": 1})
    assert response.status_code == 403

    response = await async_client.post(
        "/telegram/webhook", json={"update_id": 1}, headers={SECRET_HEADER: "wrong"}
    )
    assert response.status_code == 403

    response = await async_client.post(
        "/telegram/webhook", json={"update_id": 1}, headers={SECRET_HEADER: "hook-secret"}
    )
    await drain_pending_updates()
    assert response.status_code == 200
    assert recording_wizard.updates == [{"update_id": 1}]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"{not json", b"[1, 2]", b'"text"'])
async def test_webhook_rejects_non_object_bodies(async_client, recording_wizard, monkeypatch, body):
    monkeypatch.setattr(settings.telegram, "webhook_secret", "")

    response = await async_client.post(
        "/telegram/webhook", content=body, headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert recording_wizard.updates == []


@pytest.mark.asyncio
async def test_webhook_survives_wizard_errors(async_client, recording_wizard, monkeypatch):
    monkeypatch.setattr(settings.telegram, "webhook_secret", "")
    recording_wizard.fail = True

    response = await async_client.post("/telegram/webhook", json={"update_id": 3})
    await drain_pending_updates()

    assert response.status_code == 200
    assert recording_wizard.updates == [{"update_id": 3}]


# ═══════════════════════════════════════════════════════
# METRICS
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_metrics_exposes_generation_counters(async_client):
    response = await async_client.get("/metrics")
    assert response.status_code == 200
    assert "plpgen_active_generation_jobs" in response.text
    assert "plpgen_generated_units" in response.text
