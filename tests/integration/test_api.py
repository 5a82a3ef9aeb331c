"""Integration tests for API endpoints."""

import base64

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from civicflow.core.errors import PersistenceError
from civicflow.core.settings import Settings
from civicflow.main import create_app
from civicflow.services.auth_provider import LocalAuthProvider
from civicflow.services.blob_store import MemoryBlobStore


PHOTO = base64.b64encode(b"\xff\xd8jpeg").decode("ascii")
HERE = {"latitude": 44.4268, "longitude": 26.1025}


class FlakyBlobStore(MemoryBlobStore):
    """Accepts writes until fail_writes is switched on."""

    fail_writes = False

    def put(self, key, data):
        if self.fail_writes:
            raise PersistenceError("disk full")
        super().put(key, data)


@pytest.fixture
def blob_store():
    return FlakyBlobStore()


@pytest_asyncio.fixture
async def client(blob_store):
    app = create_app(
        config=Settings(STORAGE_BACKEND="memory", AUTH_PROVIDER="local"),
        blob_store=blob_store,
        auth_provider=LocalAuthProvider(),
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def login(client, email, password):
    resp = await client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


async def login_citizen(client):
    return await login(client, "citizen@example.com", "citizen123")


async def login_municipality(client):
    return await login(client, "municipality@city.example", "municipality123")


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"

    resp = await client.get("/health/db")
    assert resp.status_code == 200
    assert resp.json()["reports_count"] == 0


@pytest.mark.asyncio
async def test_categories(client):
    resp = await client.get("/categories")
    assert resp.status_code == 200
    entries = {entry["category"]: entry for entry in resp.json()}
    assert len(entries) == 28
    assert entries["pothole"]["deadline_days"] == 7
    assert entries["medical_emergency"]["severity_label"] == "Critical"


@pytest.mark.asyncio
async def test_submit_requires_citizen(client):
    payload = {"category": "pothole", **HERE}

    resp = await client.post("/reports", json=payload)
    assert resp.status_code == 401

    await login_municipality(client)
    resp = await client.post("/reports", json=payload)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_report_lifecycle(client):
    await login_citizen(client)
    resp = await client.post("/reports", json={"category": "pothole", "description": "Deep", **HERE})
    assert resp.status_code == 201
    report = resp.json()
    assert report["severity"] == 2
    assert report["is_resolved"] is False
    assert report["reporter_email"] == "citizen@example.com"

    resp = await client.get("/views/me")
    assert [r["id"] for r in resp.json()] == [report["id"]]

    await login_municipality(client)
    resp = await client.get("/views/municipality")
    assert [r["id"] for r in resp.json()] == [report["id"]]

    resp = await client.patch(f"/reports/{report['id']}/status", json={"is_resolved": True})
    assert resp.status_code == 200
    assert resp.json()["resolved_at"] is not None

    resp = await client.get("/views/municipality")
    assert resp.json() == []
    resp = await client.get("/views/municipality", params={"resolved": True})
    assert [r["id"] for r in resp.json()] == [report["id"]]

    resp = await client.get("/views/municipality/counts")
    assert resp.json() == {"active": 0, "resolved": 1, "overdue": 0}


@pytest.mark.asyncio
async def test_medical_reports_go_to_hospital(client):
    await login_citizen(client)
    resp = await client.post("/reports", json={"category": "medical_emergency", **HERE})
    medical_id = resp.json()["id"]

    resp = await client.get("/views/hospital")
    assert [r["id"] for r in resp.json()] == [medical_id]
    resp = await client.get("/views/municipality")
    assert resp.json() == []


@pytest.mark.asyncio
async def test_missing_location_is_rejected(client, blob_store):
    await login_citizen(client)
    writes = blob_store.write_count

    resp = await client.post("/reports", json={"category": "pothole"})
    assert resp.status_code == 422
    assert blob_store.write_count == writes


@pytest.mark.asyncio
async def test_trash_and_custom_reports_need_a_photo(client):
    await login_citizen(client)

    resp = await client.post("/reports", json={"category": "trash", **HERE})
    assert resp.status_code == 422
    resp = await client.post("/reports", json={"category": "trash", "photo_data": PHOTO, **HERE})
    assert resp.status_code == 201
    assert resp.json()["photo_data"] == PHOTO

    resp = await client.post("/reports/custom", json={"description": "Broken bench", **HERE})
    assert resp.status_code == 422
    resp = await client.post("/reports/custom", json={"description": "Broken bench", "photo_data": PHOTO, **HERE})
    assert resp.status_code == 201
    assert resp.json()["category_label"] == "Custom Issue"


@pytest.mark.asyncio
async def test_status_update_on_unknown_report(client, blob_store):
    await login_municipality(client)
    writes = blob_store.write_count

    resp = await client.patch("/reports/nope/status", json={"is_resolved": True})
    assert resp.status_code == 404
    assert blob_store.write_count == writes


@pytest.mark.asyncio
async def test_delete_is_idempotent(client):
    await login_citizen(client)
    resp = await client.post("/reports", json={"category": "graffiti", **HERE})
    report_id = resp.json()["id"]

    assert (await client.delete(f"/reports/{report_id}")).status_code == 200
    assert (await client.delete(f"/reports/{report_id}")).status_code == 200
    assert (await client.get(f"/reports/{report_id}")).status_code == 404

    assert (await client.delete("/reports")).status_code == 200


@pytest.mark.asyncio
async def test_persistence_failure_returns_503(client, blob_store):
    await login_citizen(client)
    blob_store.fail_writes = True

    resp = await client.post("/reports", json={"category": "pothole", **HERE})
    assert resp.status_code == 503

    blob_store.fail_writes = False
    resp = await client.get("/views/me")
    assert resp.json() == []


@pytest.mark.asyncio
async def test_citizen_view_requires_email(client):
    resp = await client.get("/views/citizen")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_register_flow(client):
    form = {
        "email": "ana@example.com",
        "password": "secret1",
        "confirm_password": "secret1",
        "name": "Ana",
        "role": "hospital",
    }
    resp = await client.post("/auth/register", json=form)
    assert resp.status_code == 201
    assert resp.json()["user"]["role"] == "hospital"
    assert resp.json()["token"]

    resp = await client.get("/auth/me")
    assert resp.json()["email"] == "ana@example.com"

    resp = await client.post("/auth/register", json={**form, "email": "ANA@example.com"})
    assert resp.status_code == 409

    resp = await client.post("/auth/register", json={**form, "email": "bob@example.com", "confirm_password": "other1"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_login_and_logout(client):
    resp = await client.post("/auth/login", json={"email": "citizen@example.com", "password": "wrong"})
    assert resp.status_code == 401

    await login_citizen(client)
    assert (await client.get("/auth/me")).status_code == 200

    assert (await client.post("/auth/logout")).status_code == 200
    assert (await client.get("/auth/me")).status_code == 401


@pytest.mark.asyncio
async def test_welcome_flag(client):
    assert (await client.get("/auth/welcome")).json() == {"has_seen_welcome": False}
    assert (await client.post("/auth/welcome")).status_code == 200
    assert (await client.get("/auth/welcome")).json() == {"has_seen_welcome": True}


@pytest.mark.asyncio
async def test_delete_requires_a_signed_in_profile(client):
    await login_citizen(client)
    resp = await client.post("/reports", json={"category": "pothole", **HERE})
    report_id = resp.json()["id"]
    await client.post("/auth/logout")

    assert (await client.delete("/reports")).status_code == 401
    assert (await client.delete(f"/reports/{report_id}")).status_code == 401

    resp = await client.get("/views/municipality")
    assert [r["id"] for r in resp.json()] == [report_id]
