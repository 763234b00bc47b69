import pytest

from API import create_flask_app
from API.Contact.ledger import LedgerWriter
from API.Contact.service import NotificationSender
from tests.conftest import FakeSheetsSession


@pytest.fixture
def app(config, sender, ledger):
    app = create_flask_app(config, sender=sender, ledger=ledger)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def test_post_contact(client, valid_form, outbox, sheet):
    response = client.post(
        "/api/contact",
        json=valid_form,
        headers={"User-Agent": "pytest-browser", "X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
    )

    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    assert len(outbox) == 1
    assert outbox[0]["message"]["Reply-To"] == "jane@example.com"
    assert sheet.appended[0][5:] == ["203.0.113.9", "pytest-browser"]


def test_post_contact_validation_errors(client, outbox):
    response = client.post("/api/contact", json={"name": "a", "email": "bad", "message": "hi"})

    assert response.status_code == 400
    body = response.get_json()
    assert body["ok"] is False
    assert body["errors"] == [
        {"path": "name", "msg": "Invalid name"},
        {"path": "email", "msg": "Invalid email"},
        {"path": "message", "msg": "Invalid message"},
    ]
    assert outbox == []


def test_post_contact_without_json_body(client):
    response = client.post("/api/contact", data="name=Jane", content_type="text/plain")
    assert response.status_code == 400


def test_get_contact_is_method_not_allowed(client):
    response = client.get("/api/contact")

    assert response.status_code == 405
    assert response.get_json() == {"ok": False, "error": "Method not allowed"}


def test_ledger_failure_keeps_success(config, sender, valid_form, outbox):
    failing = LedgerWriter(config, session_factory=lambda _config: FakeSheetsSession(fail_append=True))
    client = create_flask_app(config, sender=sender, ledger=failing).test_client()

    response = client.post("/api/contact", json=valid_form)

    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    assert len(outbox) == 1


def test_missing_credentials_fail_every_submission(make_config, smtp_factory, ledger, valid_form):
    config = make_config(SMTP_USER=None, SMTP_PASS=None, ENVIRONMENT="production")
    sender = NotificationSender(config, transport_factory=smtp_factory)
    client = create_flask_app(config, sender=sender, ledger=ledger).test_client()

    response = client.post("/api/contact", json=valid_form)

    assert response.status_code == 500
    assert response.get_json() == {"ok": False, "error": "Failed to send message"}


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["ok"] is True
    assert body["service"] == "contact"


def test_cors_allows_configured_origin(client):
    response = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers.get("Access-Control-Allow-Origin") == "http://localhost:5173"


def test_cors_ignores_other_origins(client):
    response = client.get("/api/health", headers={"Origin": "https://evil.example"})
    assert "Access-Control-Allow-Origin" not in response.headers


def test_multiline_name_does_not_break_the_request(client, valid_form, outbox):
    response = client.post("/api/contact", json={**valid_form, "name": "Jane\nX-Note: hi"})

    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    assert outbox[0]["message"]["X-Note"] is None


def test_post_health_is_method_not_allowed(client):
    response = client.post("/api/health")

    assert response.status_code == 405
    assert response.get_json() == {"ok": False, "error": "Method not allowed"}
