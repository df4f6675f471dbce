from tests.conftest import (
    AUTH_HEADERS,
    TOKEN,
    WEBHOOK_URL,
    FakeIdentity,
    FakeNotifier,
    make_principal,
)


def test_recent_signup_is_delivered(harness):
    r = harness.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert harness.notifier.deliveries == [(WEBHOOK_URL, "secreq - new@secreq.io signed up")]


def test_old_account_is_skipped_without_delivery(harness_factory):
    h = harness_factory(identity=FakeIdentity({TOKEN: make_principal(seconds_old=45)}))
    r = h.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert r.status_code == 200
    assert r.json() == {"ok": True, "skipped": True}
    assert h.notifier.deliveries == []


def test_window_boundary_is_inclusive(harness_factory):
    h = harness_factory(identity=FakeIdentity({TOKEN: make_principal(seconds_old=30)}))
    r = h.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert r.json() == {"ok": True}


def test_missing_created_at_is_not_recent(harness_factory):
    h = harness_factory(identity=FakeIdentity({TOKEN: make_principal(seconds_old=None)}))
    r = h.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert r.json() == {"ok": True, "skipped": True}
    assert h.notifier.deliveries == []


def test_missing_email_uses_placeholder(harness_factory):
    h = harness_factory(identity=FakeIdentity({TOKEN: make_principal(email=None)}))
    h.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert h.notifier.deliveries[0][1] == "secreq - unknown signed up"


def test_second_call_after_window_does_not_deliver_again(harness):
    first = harness.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert first.json() == {"ok": True}

    harness.clock.advance(25)
    second = harness.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)

    assert second.json() == {"ok": True, "skipped": True}
    assert len(harness.notifier.deliveries) == 1


def test_missing_webhook_is_500(harness_factory):
    h = harness_factory(settings={"SLACK_WEBHOOK_URL": None})
    r = h.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert r.status_code == 500
    assert r.json()["message"] == "Missing SLACK_WEBHOOK_URL"
    assert h.identity.calls == 0


def test_unauthenticated_is_401(harness):
    r = harness.client.post("/api/v1/notify-signup")
    assert r.status_code == 401
    assert r.json() == {"message": "Unauthorized"}
    assert harness.notifier.deliveries == []


def test_rejected_webhook_is_502(harness_factory):
    h = harness_factory(notifier=FakeNotifier(ok=False))
    r = h.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert r.status_code == 502
    assert r.json()["message"] == "Failed to notify Slack"


def test_transport_error_is_reported_as_500_with_details(harness_factory):
    h = harness_factory(notifier=FakeNotifier(error=OSError("connection reset")))
    r = h.client.post("/api/v1/notify-signup", headers=AUTH_HEADERS)
    assert r.status_code == 500
    assert r.json() == {"message": "Unexpected error", "details": "connection reset"}
