from types import SimpleNamespace

import pytest
from starlette.testclient import TestClient

from donation_api.api.main import create_app
from donation_api.core.config import Settings
from donation_api.core.dependencies import (
    get_data_access,
    get_notification_service,
    get_oauth_client,
    get_payment_gateway,
)
from donation_api.services.payment_gateway import StripeGateway

WEBHOOK_SECRET = "whsec_test_secret"
CLIENT_URL = "http://localhost:5173"


class FakeGateway(StripeGateway):
    """Records outbound Stripe calls; webhook verification stays real."""

    def __init__(self):
        super().__init__(api_key="sk_test_dummy")
        self.intent_calls = []
        self.session_calls = []
        self.error = None
        self.intent = SimpleNamespace(id="pi_test_123", client_secret="pi_test_123_secret_abc")
        self.session = SimpleNamespace(id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123")

    def create_payment_intent(self, **kwargs):
        self.intent_calls.append(kwargs)
        if self.error:
            raise self.error
        return self.intent

    def create_checkout_session(self, **kwargs):
        self.session_calls.append(kwargs)
        if self.error:
            raise self.error
        return self.session


class InMemoryDataAccess:
    def __init__(self):
        self.users = {}
        self.contacts = []
        self.donations = []

    def get_user_profile(self, email):
        return self.users.get(email)

    def create_user_profile(self, profile):
        item = profile.model_dump(mode="json")
        self.users.setdefault(profile.email, item)
        return self.users[profile.email]

    def get_user_by_id(self, user_id):
        return next((u for u in self.users.values() if u["user_id"] == user_id), None)

    def create_contact_message(self, contact):
        item = contact.model_dump(mode="json")
        self.contacts.append(item)
        return item

    def create_donation_record(self, donation):
        item = donation.model_dump(mode="json")
        self.donations.append(item)
        return item

    def list_donations_by_user(self, email):
        return [d for d in self.donations if d["email"] == email]


class FakeOAuthClient:
    def __init__(self):
        self.profile = {"sub": "1234", "email": "donor@example.com", "name": "Dana Donor"}
        self.error = None
        self.codes = []

    def authorization_url(self, state):
        return f"https://accounts.example.com/auth?state={state}"

    def exchange_code(self, code):
        self.codes.append(code)
        if self.error:
            raise self.error
        return f"token-for-{code}"

    def fetch_profile(self, access_token):
        return self.profile


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    return InMemoryDataAccess()


@pytest.fixture
def oauth_client():
    return FakeOAuthClient()


@pytest.fixture
def make_client(tmp_path, gateway, store, oauth_client):
    """Build a TestClient against an app with the given settings overrides."""
    clients = []

    def factory(**overrides):
        values = {
            "STRIPE_SECRET_KEY": "sk_test_dummy",
            "STRIPE_WEBHOOK_SECRET": WEBHOOK_SECRET,
            "CLIENT_URL": CLIENT_URL,
            "DYNAMODB_TABLE_NAME": "donations-test",
            "GOOGLE_CLIENT_ID": "google-client",
            "GOOGLE_CLIENT_SECRET": "google-secret",
            "SESSION_SECRET_KEY": "test-session-secret",
            "UPLOAD_DIR": str(tmp_path / "uploads"),
        }
        values.update(overrides)
        settings = Settings(_env_file=None, **values)

        application = create_app(settings)
        application.dependency_overrides[get_payment_gateway] = lambda: gateway
        application.dependency_overrides[get_data_access] = (
            (lambda: store) if settings.DYNAMODB_TABLE_NAME else (lambda: None)
        )
        application.dependency_overrides[get_oauth_client] = lambda: oauth_client
        application.dependency_overrides[get_notification_service] = lambda: None

        client = TestClient(application, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
