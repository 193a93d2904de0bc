from unittest.mock import MagicMock

import pytest

from donation_api.services.contact_service import ContactService

CONTACT_URL = "/api/contact"


def test_contact_message_is_stored(client, store):
    response = client.post(CONTACT_URL, json={
        "name": "Jane", "email": "jane@example.com", "message": "How do I give monthly?",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Message received"
    assert body["data"]["email"] == "jane@example.com"
    assert body["data"]["contact_id"]
    assert len(store.contacts) == 1


@pytest.mark.parametrize("payload", [
    {"email": "jane@example.com", "message": "hi"},
    {"name": "Jane", "message": "hi"},
    {"name": "Jane", "email": "jane@example.com", "message": "   "},
    {},
])
def test_missing_fields_are_rejected(client, store, payload):
    response = client.post(CONTACT_URL, json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields"
    assert store.contacts == []


def test_invalid_email_is_rejected(client, store):
    response = client.post(CONTACT_URL, json={"name": "Jane", "email": "not-an-email", "message": "hi"})

    assert response.status_code == 400
    assert store.contacts == []


def test_store_failure_is_a_server_error(client, store, monkeypatch):
    monkeypatch.setattr(store, "create_contact_message", MagicMock(side_effect=RuntimeError("table gone")))

    response = client.post(CONTACT_URL, json={"name": "Jane", "email": "jane@example.com", "message": "hi"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Server error"


def test_contact_unavailable_without_store(make_client):
    client = make_client(DYNAMODB_TABLE_NAME=None)

    response = client.post(CONTACT_URL, json={"name": "Jane", "email": "jane@example.com", "message": "hi"})

    assert response.status_code == 503


def test_notification_is_sent_when_configured(store):
    notifier = MagicMock()
    service = ContactService(store, notification_service=notifier, notify_email="team@example.com")

    service.submit(name="Jane", email="jane@example.com", message="hi")

    notifier.send_contact_notification.assert_called_once()
    email_to, contact = notifier.send_contact_notification.call_args.args
    assert email_to == "team@example.com"
    assert contact.email == "jane@example.com"


def test_notification_failure_does_not_lose_the_message(store):
    notifier = MagicMock()
    notifier.send_contact_notification.side_effect = RuntimeError("SES down")
    service = ContactService(store, notification_service=notifier, notify_email="team@example.com")

    item = service.submit(name="Jane", email="jane@example.com", message="hi")

    assert item["name"] == "Jane"
    assert len(store.contacts) == 1
