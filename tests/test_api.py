import pytest
from fastapi.testclient import TestClient

import main
from config import settings
from tests.conftest import OPERATOR, FakeTransport, make_dispatcher

ALLOWED = "http://localhost:3000"


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def client(fake_transport, monkeypatch):
    monkeypatch.setattr(settings, "ENV", "development")
    monkeypatch.setattr(settings, "ALLOWED_ORIGINS", [ALLOWED])
    main.limiter.reset()
    main.app.dependency_overrides[main.get_dispatcher] = lambda: make_dispatcher(fake_transport)
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()
    main.limiter.reset()


def test_root_reports_running(client):
    r = client.get("/")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "Server is running"
    assert "timestamp" in body


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_send_email_success(client, fake_transport, valid_payload):
    r = client.post("/send-email", json=valid_payload)

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Emails sent successfully"
    assert body["data"]["business_email_id"]
    assert body["data"]["client_email_id"]
    assert sorted(str(m["To"]) for m in fake_transport.sent) == sorted([OPERATOR, "jane@example.com"])


def test_send_email_missing_email(client, fake_transport, valid_payload):
    del valid_payload["email"]
    r = client.post("/send-email", json=valid_payload)

    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Missing required fields"}
    assert fake_transport.sent == []


def test_send_email_invalid_json(client, fake_transport):
    r = client.post("/send-email", content="not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Invalid request body"}
    assert fake_transport.sent == []


def test_transport_failure_includes_detail_outside_production(fake_transport, client, valid_payload):
    fake_transport.fail_for.add("jane@example.com")
    r = client.post("/send-email", json=valid_payload)

    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Error sending email"
    assert "relay refused" in body["detail"]


def test_transport_failure_hides_detail_in_production(fake_transport, client, valid_payload, monkeypatch):
    monkeypatch.setattr(settings, "ENV", "production")
    fake_transport.fail_for.add(OPERATOR)
    r = client.post("/send-email", json=valid_payload)

    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Error sending email"}


def test_disallowed_origin_is_rejected_before_dispatch(client, valid_payload):
    called = []

    def tracking_dispatcher():
        called.append(True)
        return make_dispatcher(FakeTransport())

    main.app.dependency_overrides[main.get_dispatcher] = tracking_dispatcher
    r = client.post("/send-email", json=valid_payload, headers={"Origin": "https://evil.example"})

    assert r.status_code == 403
    assert r.json() == {"success": False, "error": "Not allowed by CORS"}
    assert called == []


def test_allowed_origin_gets_cors_headers(client, valid_payload):
    r = client.post("/send-email", json=valid_payload, headers={"Origin": ALLOWED})
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == ALLOWED


def test_wildcard_origin_setting_disables_gate(client, monkeypatch):
    monkeypatch.setattr(settings, "ALLOWED_ORIGINS", ["*"])
    r = client.get("/", headers={"Origin": "https://anywhere.example"})
    assert r.status_code == 200


def test_rate_limit_on_send_email(client, fake_transport, valid_payload, monkeypatch):
    monkeypatch.setattr(main.limiter, "limit", 2)
    statuses = [client.post("/send-email", json=valid_payload).status_code for _ in range(3)]

    assert statuses == [200, 200, 429]
    assert len(fake_transport.sent) == 4


def test_rate_limit_response_shape(client, valid_payload, monkeypatch):
    monkeypatch.setattr(main.limiter, "limit", 1)
    client.post("/send-email", json=valid_payload)
    r = client.post("/send-email", json=valid_payload)

    assert r.status_code == 429
    assert r.json() == {"success": False, "error": "Too many requests, please try again later."}
    assert int(r.headers["retry-after"]) >= 1


def test_rate_limit_skips_other_routes(client, monkeypatch):
    monkeypatch.setattr(main.limiter, "limit", 1)
    assert all(client.get("/").status_code == 200 for _ in range(5))


def test_rejected_origin_does_not_consume_quota(client, valid_payload, monkeypatch):
    monkeypatch.setattr(main.limiter, "limit", 1)
    for _ in range(3):
        client.post("/send-email", json=valid_payload, headers={"Origin": "https://evil.example"})
    r = client.post("/send-email", json=valid_payload)
    assert r.status_code == 200


def test_non_ascii_email_is_relayed(client, fake_transport):
    payload = {"name": "José", "email": "josé@example.com", "service": "Branding", "message": "hi"}
    r = client.post("/send-email", json=payload)

    assert r.status_code == 200
    assert r.json()["success"] is True
    assert len(fake_transport.sent) == 2


def test_forged_forwarded_for_does_not_reset_quota(client, fake_transport, valid_payload, monkeypatch):
    monkeypatch.setattr(settings, "TRUST_PROXY", False)
    monkeypatch.setattr(main.limiter, "limit", 1)
    statuses = [
        client.post("/send-email", json=valid_payload, headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
        for i in range(5)
    ]

    assert statuses == [200, 429, 429, 429, 429]
    assert len(fake_transport.sent) == 2


def test_trusted_proxy_keys_on_last_hop(client, valid_payload, monkeypatch):
    monkeypatch.setattr(settings, "TRUST_PROXY", True)
    monkeypatch.setattr(main.limiter, "limit", 1)

    first = client.post("/send-email", json=valid_payload, headers={"X-Forwarded-For": "1.1.1.1, 203.0.113.7"})
    forged = client.post("/send-email", json=valid_payload, headers={"X-Forwarded-For": "9.9.9.9, 203.0.113.7"})
    other = client.post("/send-email", json=valid_payload, headers={"X-Forwarded-For": "203.0.113.8"})

    assert [first.status_code, forged.status_code, other.status_code] == [200, 429, 200]


def test_lifespan_starts_and_stops_keepalive(monkeypatch):
    class RecordingPinger:
        def __init__(self):
            self.events = []

        def start(self):
            self.events.append("start")

        async def stop(self):
            self.events.append("stop")

    pinger = RecordingPinger()
    monkeypatch.setattr(main, "pinger", pinger)

    with TestClient(main.app) as c:
        assert c.get("/health").status_code == 200
        assert pinger.events == ["start"]
    assert pinger.events == ["start", "stop"]
