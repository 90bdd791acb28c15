import json

import pytest
from faker import Faker

from plpgen.core.config import settings
from plpgen.lib.vip_store import DATA_KEY

# Initialize Faker for realistic test data
fake = Faker()

ADMIN = {"X-Admin-Code": "letmein"}


@pytest.fixture(autouse=True)
def admin_code(monkeypatch):
    monkeypatch.setattr(settings, "admin_code", "letmein")


def vip_payload(**overrides):
    data = {
        "id": str(fake.random_number(digits=9, fix_len=True)),
        "month": fake.month_name(),
        "start_date": fake.date(),
    }
    data.update(overrides)
    return data


# ═══════════════════════════════════════════════════════
# READS
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_list_empty(async_client):
    response = await async_client.get("/vip")
    assert response.status_code == 200
    assert response.json() == {"vip_users": []}


@pytest.mark.asyncio
async def test_get_not_found(async_client):
    response = await async_client.get("/vip/404404")
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


@pytest.mark.asyncio
async def test_corrupt_document_reads_as_empty(async_client, memory_store):
    await memory_store.put(DATA_KEY, "{this is not json")
    response = await async_client.get("/vip")
    assert response.status_code == 200
    assert response.json() == {"vip_users": []}


# ═══════════════════════════════════════════════════════
# WRITES
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_add_then_get(async_client, memory_store):
    user = vip_payload()

    response = await async_client.post("/vip", json=user, headers=ADMIN)
    assert response.status_code == 201
    assert response.json() == {"vip_users": [user]}

    response = await async_client.get(f"/vip/{user['id']}")
    assert response.status_code == 200
    assert response.json() == user

    stored = json.loads(await memory_store.get(DATA_KEY))
    assert stored["vip_users"] == [user]


@pytest.mark.asyncio
async def test_add_keeps_insertion_order(async_client):
    users = [vip_payload() for _ in range(3)]
    for user in users:
        await async_client.post("/vip", json=user, headers=ADMIN)

    response = await async_client.get("/vip")
    assert [u["id"] for u in response.json()["vip_users"]] == [u["id"] for u in users]


@pytest.mark.asyncio
async def test_duplicate_id_rejected(async_client):
    user = vip_payload()
    await async_client.post("/vip", json=user, headers=ADMIN)

    response = await async_client.post("/vip", json=vip_payload(id=user["id"]), headers=ADMIN)
    assert response.status_code == 400
    assert response.json()["detail"] == "User id already exists"


@pytest.mark.asyncio
async def test_numeric_fields_are_stored_as_strings(async_client):
    response = await async_client.post(
        "/vip",
        json={"id": 12345, "month": 3, "start_date": "2025-03-01"},
        headers=ADMIN,
    )
    assert response.status_code == 201
    assert response.json()["vip_users"][0] == {"id": "12345", "month": "3", "start_date": "2025-03-01"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"month": "May", "start_date": "2025-05-01"},
    {"id": "", "month": "May", "start_date": "2025-05-01"},
    {"id": "7", "month": "May"},
])
async def test_incomplete_user_rejected(async_client, body):
    response = await async_client.post("/vip", json=body, headers=ADMIN)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete(async_client):
    keep, drop = vip_payload(), vip_payload()
    await async_client.post("/vip", json=keep, headers=ADMIN)
    await async_client.post("/vip", json=drop, headers=ADMIN)

    response = await async_client.delete(f"/vip/{drop['id']}", headers=ADMIN)
    assert response.status_code == 200
    assert response.json() == {"vip_users": [keep]}


@pytest.mark.asyncio
async def test_delete_missing(async_client):
    response = await async_client.delete("/vip/31337", headers=ADMIN)
    assert response.status_code == 404


# ═══════════════════════════════════════════════════════
# ADMIN CODE
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
@pytest.mark.parametrize("headers", [{}, {"X-Admin-Code": "guess"}])
async def test_writes_need_admin_code(async_client, headers):
    user = vip_payload()

    response = await async_client.post("/vip", json=user, headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Invalid admin code"

    response = await async_client.delete(f"/vip/{user['id']}", headers=headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unset_admin_code_locks_writes(async_client, monkeypatch):
    monkeypatch.setattr(settings, "admin_code", "")

    response = await async_client.post("/vip", json=vip_payload(), headers={"X-Admin-Code": ""})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_reads_need_no_admin_code(async_client):
    user = vip_payload()
    await async_client.post("/vip", json=user, headers=ADMIN)

    response = await async_client.get("/vip")
    assert response.status_code == 200
    assert len(response.json()["vip_users"]) == 1
