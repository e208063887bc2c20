import json

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.main import app

from conftest import login_admin, record_payload


def _stats(client):
    return client.get("/api/records/stats").json()


def _ids(client, path="/api/records"):
    return [r["id"] for r in client.get(path).json()]


def test_record_lifecycle_scenario(client):
    login_admin(client)
    before = _stats(client)

    resp = client.post("/api/records", json=record_payload(status="Pending"))
    assert resp.status_code == 200
    record_id = resp.json()["id"]
    assert record_id in _ids(client)
    created = _stats(client)
    assert created["pending"] == before["pending"] + 1
    assert created["total"] == before["total"] + 1
    before_delete = client.get(f"/api/records/{record_id}").json()

    assert client.delete(f"/api/records/{record_id}").json() == {"success": True}
    assert record_id not in _ids(client)
    assert record_id in _ids(client, "/api/records/deleted")
    assert _stats(client)["total"] == created["total"] - 1

    assert client.post(f"/api/records/{record_id}/restore").status_code == 200
    restored = client.get(f"/api/records/{record_id}").json()
    assert record_id in _ids(client)
    before_delete.pop("updated_at")
    restored.pop("updated_at")
    assert restored == before_delete

    # Purge without trashing first is rejected and the record survives.
    resp = client.delete(f"/api/records/{record_id}/permanent")
    assert resp.status_code == 409
    assert resp.json()["reason"] == "record_not_trashed"
    assert record_id in _ids(client)


def test_purge_after_trash(client):
    login_admin(client)
    record_id = client.post("/api/records", json=record_payload()).json()["id"]
    client.delete(f"/api/records/{record_id}")

    assert client.delete(f"/api/records/{record_id}/permanent").status_code == 200
    assert record_id not in _ids(client)
    assert record_id not in _ids(client, "/api/records/deleted")
    assert client.get(f"/api/records/{record_id}").status_code == 404


def test_record_response_shape(client):
    user = login_admin(client)
    record_id = client.post("/api/records", json=record_payload()).json()["id"]
    record = client.get(f"/api/records/{record_id}").json()

    assert record["user_id"] == user["id"]
    assert record["is_deleted"] is False
    assert record["status"] == "Pending"
    assert json.loads(record["checklist"]) == {"submitted": True, "verified": False}
    assert record["created_at"] is not None


def test_checklist_string_passes_through(client):
    login_admin(client)
    record_id = client.post("/api/records", json=record_payload(checklist='{"submitted": true}')).json()["id"]
    assert client.get(f"/api/records/{record_id}").json()["checklist"] == '{"submitted": true}'


def test_invalid_status_rejected(client):
    login_admin(client)
    resp = client.post("/api/records", json=record_payload(status="Lost"))
    assert resp.status_code == 422


def test_update_is_full_overwrite(client):
    login_admin(client)
    record_id = client.post("/api/records", json=record_payload()).json()["id"]
    resp = client.put(f"/api/records/{record_id}", json={"patient_name": "John Doe", "status": "Approved"})
    assert resp.status_code == 200

    record = client.get(f"/api/records/{record_id}").json()
    assert record["patient_name"] == "John Doe"
    assert record["status"] == "Approved"
    assert record["insurance"] is None


def test_edit_trashed_record_conflicts(client):
    login_admin(client)
    record_id = client.post("/api/records", json=record_payload()).json()["id"]
    client.delete(f"/api/records/{record_id}")
    resp = client.put(f"/api/records/{record_id}", json=record_payload(status="Denied"))
    assert resp.status_code == 409
    assert resp.json()["reason"] == "record_trashed"


# Unknown ids are reported as 404 rather than a silent success.
def test_missing_record_ids_return_not_found(client):
    login_admin(client)
    assert client.get("/api/records/999").status_code == 404
    assert client.put("/api/records/999", json=record_payload()).status_code == 404
    assert client.delete("/api/records/999").status_code == 404
    assert client.post("/api/records/999/restore").status_code == 404
    resp = client.delete("/api/records/999/permanent")
    assert resp.status_code == 404
    assert resp.json()["reason"] == "not_found"


def test_repeat_soft_delete_is_a_no_op(client):
    login_admin(client)
    record_id = client.post("/api/records", json=record_payload()).json()["id"]
    assert client.delete(f"/api/records/{record_id}").status_code == 200
    assert client.delete(f"/api/records/{record_id}").status_code == 200
    assert _ids(client, "/api/records/deleted") == [record_id]


def test_database_errors_are_generic(client, monkeypatch):
    from authtracker.services.record_service import record_service

    async def broken(db):
        raise OperationalError("SELECT secret_table", {}, Exception("disk I/O error"))

    login_admin(client)
    monkeypatch.setattr(record_service, "list_active", broken)
    resp = client.get("/api/records")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "reason": "internal_error"}


def test_write_is_committed_before_response_is_sent(monkeypatch):
    events = []
    real_commit = AsyncSession.commit

    async def recording_commit(self):
        events.append("commit")
        await real_commit(self)

    async def recording_app(scope, receive, send):
        async def recording_send(message):
            if message["type"] == "http.response.start":
                events.append("response_sent")
            await send(message)
        await app(scope, receive, recording_send)

    monkeypatch.setattr(AsyncSession, "commit", recording_commit)
    with TestClient(recording_app, base_url="https://testserver") as c:
        login_admin(c)
        events.clear()
        resp = c.post("/api/records", json=record_payload())

    assert resp.status_code == 200
    assert "commit" in events
    assert events.index("commit") < events.index("response_sent")


def test_failed_commit_is_reported_and_nothing_is_stored(client, monkeypatch):
    async def locked(self):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    login_admin(client)
    monkeypatch.setattr(AsyncSession, "commit", locked)
    resp = client.post("/api/records", json=record_payload())
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "reason": "internal_error"}

    monkeypatch.undo()
    assert client.get("/api/records").json() == []
