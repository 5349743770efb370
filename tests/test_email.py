from datetime import datetime, timezone

import httpx
import pytest

import config
import email_service
from email_service import EmailDeliveryError, EmailNotConfiguredError, send_email
from email_templates import order_notification_template, request_notification_subject, request_notification_template


def brevo_reply(status, body):
    return httpx.Response(status, json=body, request=httpx.Request("POST", email_service.BREVO_API_URL))


def test_refill_template():
    html = request_notification_template(
        {
            "id": "req_1",
            "type": "refill",
            "phone": "4506385760",
            "prescriptions": ["RX-1001", "<script>alert(1)</script>"],
            "deliveryType": "pickup",
            "status": "pending",
            "createdAt": datetime(2026, 1, 5, 15, 30, tzinfo=timezone.utc),
        },
        "Kateri Pharmacy",
        dashboard_url="http://localhost:3000/admin",
    )
    assert "New Refill Request" in html
    assert "+1 (450) 638-5760" in html
    assert "RX-1001" in html
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "Monday, January 5, 2026 10:30 AM" in html
    assert "http://localhost:3000/admin" in html


def test_consultation_template():
    request = {"id": "req_2", "type": "consultation", "phone": "123", "service": "travel"}
    html = request_notification_template(request, "Kateri Pharmacy")
    assert "Traveller&#x27;s Health" in html
    assert "View in Admin Dashboard" not in html
    assert request_notification_subject(request) == "New Consultation Request"


def test_order_template():
    html = order_notification_template({"fullName": "Mary & Co", "email": "m@example.com"}, "Kateri Pharmacy")
    assert "Mary &amp; Co" in html


def test_send_email_requires_key(monkeypatch):
    monkeypatch.setattr(config, "BREVO_API_KEY", None)
    with pytest.raises(EmailNotConfiguredError):
        send_email("a@example.com", "Hi", "<p>Hi</p>")


def test_send_email(monkeypatch):
    calls = []

    def fake_post(url, **kwargs):
        calls.append(kwargs)
        return brevo_reply(201, {"messageId": "<m1@brevo>"})

    monkeypatch.setattr(config, "BREVO_API_KEY", "brevo-key")
    monkeypatch.setattr(email_service.httpx, "post", fake_post)

    assert send_email("a@example.com", "Hi", "<p>Hi</p>") == {"messageId": "<m1@brevo>"}
    payload = calls[0]["json"]
    assert payload["to"] == [{"email": "a@example.com"}]
    assert payload["sender"] == {"name": config.PHARMACY_NAME, "email": config.MAIL_FROM}
    assert calls[0]["headers"]["api-key"] == "brevo-key"


def test_send_email_api_error(monkeypatch):
    monkeypatch.setattr(config, "BREVO_API_KEY", "brevo-key")
    monkeypatch.setattr(email_service.httpx, "post", lambda url, **kw: brevo_reply(401, {"message": "Key not found"}))
    with pytest.raises(EmailDeliveryError, match="Key not found"):
        send_email("a@example.com", "Hi", "<p>Hi</p>")


def test_notifications_never_raise(monkeypatch, caplog):
    monkeypatch.setattr(config, "BREVO_API_KEY", None)
    email_service.notify_new_request({"id": "req_1", "type": "refill", "phone": "1"})
    assert "Failed to send email notification for request req_1" in caplog.text


def test_test_email_route(admin_client, monkeypatch):
    sent = []
    monkeypatch.setattr(
        email_service, "send_configuration_check", lambda to=None: sent.append(to) or {"messageId": "m1"}
    )
    resp = admin_client.post("/api/test-email", json={"to": "staff@example.com"})
    assert resp.status_code == 200
    assert resp.json()["messageId"] == "m1"
    assert sent == ["staff@example.com"]


def test_test_email_route_failure(admin_client, monkeypatch):
    monkeypatch.setattr(config, "BREVO_API_KEY", None)
    resp = admin_client.post("/api/test-email")
    assert resp.status_code == 500
    assert resp.json()["error"] == "Email service not configured"
