import os
import shutil
import tempfile

# Settings are read at import time, so the test environment goes in first
UPLOAD_ROOT = tempfile.mkdtemp(prefix="lexdesk-uploads-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = UPLOAD_ROOT
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DB_CONNECT_RETRIES"] = "1"
os.environ["DB_CONNECT_DELAY"] = "0"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from lexdesk.database import Base, engine  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="session", autouse=True)
def _cleanup_uploads():
    yield
    shutil.rmtree(UPLOAD_ROOT, ignore_errors=True)


@pytest.fixture
def register(client):
    """Register a user and return ``(user, headers)``."""
    def _register(email, role="lawyer", name="Test User", password="secret123", phone=None):
        response = client.post("/api/auth/register", json={
            "name": name,
            "email": email,
            "password": password,
            "role": role,
            "phone": phone,
        })
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}
    return _register


@pytest.fixture
def lawyer(register):
    return register("lawyer@example.com", name="Alice Lawyer", phone="0700000001")


@pytest.fixture
def lawyer_headers(lawyer):
    return lawyer[1]


@pytest.fixture
def other_lawyer_headers(register):
    return register("other@example.com", name="Bob Other")[1]


@pytest.fixture
def client_user_headers(register):
    return register("client@example.com", role="client", name="Carol Client")[1]


@pytest.fixture
def make_client(client, lawyer_headers):
    """Create a Client record through the API and return its JSON."""
    def _make_client(email="acme@example.com", name="Acme Ltd", **extra):
        response = client.post("/api/clients", json={"name": name, "email": email, **extra},
                               headers=lawyer_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _make_client
