import logging
import time

import pytest

from donation_api.services.webhook_service import StripeEventType, WebhookService
from tests.conftest import WEBHOOK_SECRET
from tests.helpers.signing import make_event, stripe_signature_header

WEBHOOK_URL = "/api/donate/webhook"


def _post_signed(client, body: bytes, secret: str = WEBHOOK_SECRET, **kwargs):
    headers = {
        "Stripe-Signature": stripe_signature_header(secret, body, **kwargs),
        "Content-Type": "application/json",
    }
    return client.post(WEBHOOK_URL, content=body, headers=headers)


@pytest.fixture
def dispatched(monkeypatch):
    """Event types that reached dispatch, in order."""
    seen = []
    original = WebhookService.handle_event

    def spy(self, event):
        result = original(self, event)
        seen.append(result)
        return result

    monkeypatch.setattr(WebhookService, "handle_event", spy)
    return seen


def test_signed_checkout_completed_is_acknowledged(client, dispatched, caplog):
    body = make_event("checkout.session.completed", {
        "id": "cs_test_123", "object": "checkout.session", "amount_total": 500, "currency": "usd",
    })

    with caplog.at_level(logging.INFO, logger="donation_api.services.webhook_service"):
        response = _post_signed(client, body)

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert dispatched == [StripeEventType.CHECKOUT_SESSION_COMPLETED]
    assert "cs_test_123" in caplog.text
    assert "500 usd" in caplog.text


@pytest.mark.parametrize("event_type, obj", [
    ("payment_intent.succeeded", {"id": "pi_1", "object": "payment_intent", "amount": 1000, "currency": "usd"}),
    ("payment_intent.payment_failed", {"id": "pi_2", "object": "payment_intent"}),
    ("invoice.payment_succeeded", {"id": "in_1", "object": "invoice"}),
    ("invoice.payment_failed", {"id": "in_2", "object": "invoice"}),
])
def test_known_event_types_are_dispatched(client, dispatched, event_type, obj):
    response = _post_signed(client, make_event(event_type, obj))

    assert response.status_code == 200
    assert dispatched == [StripeEventType(event_type)]


def test_wrong_secret_is_rejected_before_dispatch(client, dispatched):
    body = make_event("checkout.session.completed", {"id": "cs_test_123"})

    response = _post_signed(client, body, secret="whsec_someone_else")

    assert response.status_code == 400
    assert response.text.startswith("Webhook Error:")
    assert dispatched == []


def test_tampered_body_is_rejected(client, dispatched):
    body = make_event("payment_intent.succeeded", {"id": "pi_1", "amount": 1000})
    headers = {"Stripe-Signature": stripe_signature_header(WEBHOOK_SECRET, body)}
    tampered = body.replace(b"1000", b"1")

    response = client.post(WEBHOOK_URL, content=tampered, headers=headers)

    assert response.status_code == 400
    assert dispatched == []


def test_stale_signature_is_rejected(client, dispatched):
    body = make_event("payment_intent.succeeded", {"id": "pi_1"})

    response = _post_signed(client, body, timestamp=int(time.time()) - 3600)

    assert response.status_code == 400
    assert dispatched == []


def test_missing_signature_header_is_rejected(client, dispatched):
    body = make_event("payment_intent.succeeded", {"id": "pi_1"})

    response = client.post(WEBHOOK_URL, content=body)

    assert response.status_code == 400
    assert "Stripe-Signature" in response.text
    assert dispatched == []


def test_unknown_event_type_is_acknowledged(client, dispatched, caplog):
    body = make_event("some.unknown.event", {"id": "obj_1"})

    with caplog.at_level(logging.INFO, logger="donation_api.services.webhook_service"):
        response = _post_signed(client, body)

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert dispatched == [StripeEventType.UNHANDLED]
    assert "Unhandled event type: some.unknown.event" in caplog.text


def test_handler_failure_withholds_acknowledgement(client, monkeypatch, caplog):
    def explode(self, event):
        raise RuntimeError("handler blew up")

    monkeypatch.setattr(WebhookService, "_on_checkout_session_completed", explode)
    body = make_event("checkout.session.completed", {"id": "cs_test_123"})

    response = _post_signed(client, body)

    assert response.status_code == 500
    assert response.content == b""
    failures = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert [r.event_id for r in failures] == ["evt_test_001"]


def test_unsigned_webhooks_rejected_without_secret(make_client, dispatched):
    client = make_client(STRIPE_WEBHOOK_SECRET=None)
    body = make_event("payment_intent.succeeded", {"id": "pi_1"})

    response = client.post(WEBHOOK_URL, content=body)

    assert response.status_code == 400
    assert "not configured" in response.text
    assert dispatched == []


def test_unsigned_mode_must_be_enabled_explicitly(make_client, dispatched):
    client = make_client(STRIPE_WEBHOOK_SECRET=None, STRIPE_WEBHOOK_ALLOW_UNSIGNED=True)
    body = make_event("payment_intent.succeeded", {"id": "pi_1", "amount": 1000, "currency": "usd"})

    response = client.post(WEBHOOK_URL, content=body)

    assert response.status_code == 200
    assert dispatched == [StripeEventType.PAYMENT_INTENT_SUCCEEDED]


def test_unsigned_mode_rejects_garbage(make_client, dispatched):
    client = make_client(STRIPE_WEBHOOK_SECRET=None, STRIPE_WEBHOOK_ALLOW_UNSIGNED=True)

    response = client.post(WEBHOOK_URL, content=b"not json at all")

    assert response.status_code == 400
    assert dispatched == []


@pytest.mark.xfail(strict=True, reason="webhook events are logged only; donations are never reconciled")
def test_successful_payment_is_recorded_as_donation(client, store):
    body = make_event("payment_intent.succeeded", {
        "id": "pi_1", "object": "payment_intent", "amount": 1000, "currency": "usd",
        "receipt_email": "donor@example.com",
    })

    response = _post_signed(client, body)

    assert response.status_code == 200
    donations = store.list_donations_by_user("donor@example.com")
    assert [d["status"] for d in donations] == ["succeeded"]
