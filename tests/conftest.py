"""Shared pytest fixtures.

The app reads its configuration at import time, so the environment is pinned
here before anything from the project is imported. MongoDB is replaced by an
in-memory mongomock database per test and every outbound integration (Brevo,
Documo, reCAPTCHA) is replaced by a recorder.
"""

import os
import tempfile

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = ""
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "s3cret-pass"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["BREVO_API_KEY"] = ""
os.environ["DOCUMO_API_KEY"] = ""
os.environ["RECAPTCHA_SECRET_KEY"] = ""
os.environ["BACKUP_API_KEY"] = ""
os.environ["GOOGLE_SERVICE_ACCOUNT_KEY"] = ""
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="pharmacy-uploads-")

import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import database  # noqa: E402
import email_service  # noqa: E402
import main  # noqa: E402


@pytest.fixture
def mongo(monkeypatch):
    db = mongomock.MongoClient()["kateri-pharmacy-test"]
    monkeypatch.setattr(database, "db", db)
    return db


@pytest.fixture
def outbox(monkeypatch):
    """Records the best-effort notifications instead of sending them."""
    sent = {"requests": [], "orders": []}
    monkeypatch.setattr(email_service, "notify_new_request", lambda request: sent["requests"].append(request))
    monkeypatch.setattr(email_service, "notify_new_order", lambda order: sent["orders"].append(order))
    return sent


@pytest.fixture
def client(mongo, outbox):
    return TestClient(main.app)


@pytest.fixture
def admin_client(mongo, outbox):
    test_client = TestClient(main.app)
    resp = test_client.post("/api/auth/login", json={"username": "admin", "password": "s3cret-pass"})
    assert resp.status_code == 200
    return test_client


@pytest.fixture
def refill_payload():
    return {
        "type": "refill",
        "phone": "4506385760",
        "name": "Mary Jacobs",
        "prescriptions": ["RX-1001", "RX-1002"],
        "deliveryType": "delivery",
        "estimatedTime": "2026-01-06 14:00",
        "comments": "Leave at the front desk",
    }


@pytest.fixture
def consultation_payload():
    return {
        "type": "consultation",
        "phone": "514-555-0199",
        "service": "uti",
        "preferredDateTime": "2026-01-06T15:00:00",
        "additionalNote": "Symptoms since Monday",
    }


@pytest.fixture
def claim_payload():
    return {
        "category": "medications",
        "rxNumber": "RX-2040",
        "productName": "Ozempic 1mg",
        "prescriberName": "Dr. Deer",
        "prescriberLicense": "12345",
        "type": "prior-authorization",
        "claimStatus": "new",
    }
