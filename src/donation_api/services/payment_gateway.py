import json
import logging

import stripe

logger = logging.getLogger(__name__)


class StripeGateway:
    """
    The only object that talks to Stripe. Built once per process and handed
    to the services that need it, so tests can swap in a fake.

    The API key is passed on every call instead of being set on the global
    ``stripe`` module.
    """

    def __init__(self, api_key: str | None):
        self.api_key = api_key

    def create_payment_intent(self, amount: int, currency: str, description: str, metadata: dict):
        return stripe.PaymentIntent.create(
            api_key=self.api_key,
            amount=amount,
            currency=currency,
            automatic_payment_methods={"enabled": True},
            description=description,
            metadata=metadata
        )

    def create_checkout_session(self, mode: str, line_items: list[dict], success_url: str,
                                cancel_url: str, metadata: dict):
        return stripe.checkout.Session.create(
            api_key=self.api_key,
            mode=mode,
            payment_method_types=["card"],
            line_items=line_items,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata
        )

    def construct_event(self, payload: bytes, signature_header: str, secret: str) -> stripe.Event:
        """
        Verifies ``signature_header`` against the raw ``payload``.

        Raises ``ValueError`` for an unparseable payload and
        ``stripe.SignatureVerificationError`` for a bad signature.
        """
        return stripe.Webhook.construct_event(
            payload=payload,
            sig_header=signature_header,
            secret=secret,
            api_key=self.api_key
        )

    def parse_unsigned_event(self, payload: bytes) -> stripe.Event:
        data = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError("Webhook payload is not a JSON object")
        return stripe.Event.construct_from(data, self.api_key)
