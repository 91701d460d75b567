import asyncio
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="medicare-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("SCANNER_RETRY_DELAY", "0")

import pytest
from fastapi.testclient import TestClient

from medicare.database import engine, Base
from medicare.main import app
import medicare.models  # noqa: F401

ADMIN = {"email": "admin@medicare.demo", "password": "admin123"}
DOCTOR = {"email": "doctor1@medicare.demo", "password": "doctor123"}


async def _reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def client():
    asyncio.run(_reset_database())
    with TestClient(app) as c:
        yield c


def login(client, email, password):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def demo_accounts(client):
    response = client.post("/api/functions/create-demo-accounts")
    assert response.status_code == 200, response.text
    return response.json()["accounts"]


@pytest.fixture
def admin_headers(client, demo_accounts):
    return login(client, **ADMIN)


@pytest.fixture
def doctor_headers(client, demo_accounts):
    return login(client, **DOCTOR)


@pytest.fixture
def register_worker(client, admin_headers):
    def _register(full_name="Maria Santos", age=32, gender="female"):
        response = client.post(
            "/api/workers",
            json={"full_name": full_name, "age": age, "gender": gender},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _register
