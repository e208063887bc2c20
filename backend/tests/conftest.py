import asyncio
import os
import tempfile

# Point the app at a throwaway SQLite file before any authtracker module reads settings.
_DB_DIR = tempfile.mkdtemp(prefix="authtracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["ADMIN_PASSWORD"] = "admin-password"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_JSON"] = "false"

import pytest
from fastapi.testclient import TestClient

from authtracker.database import async_session, create_tables, drop_tables
from authtracker.main import app, seed_admin_user

ADMIN_PASSWORD = "admin-password"


def run_in_session(fn, *args, **kwargs):
    """Run ``fn(session, *args, **kwargs)`` in its own committed session."""
    async def go():
        async with async_session() as session:
            result = await fn(session, *args, **kwargs)
            await session.commit()
            return result
    return asyncio.run(go())


@pytest.fixture(autouse=True)
def fresh_database():
    async def reset():
        await drop_tables()
        await create_tables()
        await seed_admin_user()
    asyncio.run(reset())
    yield


def _new_client():
    # https so the Secure session cookie round-trips through the cookie jar
    return TestClient(app, base_url="https://testserver")


@pytest.fixture
def client():
    with _new_client() as c:
        yield c


@pytest.fixture
def other_client():
    with _new_client() as c:
        yield c


def login(client, username, password):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["user"]


def login_admin(client):
    return login(client, "admin", ADMIN_PASSWORD)


def create_employee(client, username="bob", password="bob-pw", role="employee"):
    """Create a user through the admin API; ``client`` must be logged in as admin."""
    resp = client.post("/api/users", json={"username": username, "password": password, "role": role})
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]


def record_payload(**overrides):
    payload = {
        "visit_type": "Outpatient",
        "insurance": "Acme Health",
        "insurance_id": "ACM-1001",
        "patient_name": "Jane Roe",
        "dob": "1980-04-02",
        "account_number": "A-77",
        "p_r": "P",
        "doctor_name": "Dr. Patel",
        "procedure_codes": "72148",
        "dx_codes": "M54.5",
        "status": "Pending",
        "request_initiated": "2026-01-05",
        "insurance_portal_name": "Availity",
        "rep_name": "Sam",
        "phone_number": "555-0100",
        "auth_case_number": "C-9",
        "ref_number": "R-1",
        "date_worked": "2026-01-05",
        "call_time_spent": "15m",
        "checklist": {"submitted": True, "verified": False},
        "notes": "initial call",
    }
    payload.update(overrides)
    return payload
