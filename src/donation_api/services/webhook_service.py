import logging
from enum import Enum

import stripe

from donation_api.core.errors import WebhookSignatureError
from donation_api.services.payment_gateway import StripeGateway

logger = logging.getLogger(__name__)


class StripeEventType(str, Enum):
    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
    PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
    INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
    INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
    UNHANDLED = "unhandled"

    @classmethod
    def _missing_(cls, value):
        return cls.UNHANDLED


class WebhookService:
    """
    Verifies and dispatches Stripe webhook events.

    Handlers only log. Nothing here writes donation records, so a successful
    payment is never reconciled with stored data.
    """

    def __init__(self, gateway: StripeGateway, webhook_secret: str | None, allow_unsigned: bool = False):
        self.gateway = gateway
        self.webhook_secret = webhook_secret
        self.allow_unsigned = allow_unsigned
        self._handlers = {
            StripeEventType.CHECKOUT_SESSION_COMPLETED: self._on_checkout_session_completed,
            StripeEventType.PAYMENT_INTENT_SUCCEEDED: self._on_payment_intent_succeeded,
            StripeEventType.PAYMENT_INTENT_FAILED: self._on_payment_intent_failed,
            StripeEventType.INVOICE_PAYMENT_SUCCEEDED: self._on_invoice_payment_succeeded,
            StripeEventType.INVOICE_PAYMENT_FAILED: self._on_invoice_payment_failed,
            StripeEventType.UNHANDLED: self._on_unhandled,
        }

    def parse_event(self, payload: bytes, signature_header: str | None) -> stripe.Event:
        if not self.webhook_secret:
            return self._parse_unsigned(payload)

        if not signature_header:
            logger.warning("Webhook rejected: missing Stripe-Signature header")
            raise WebhookSignatureError("Missing Stripe-Signature header")

        try:
            return self.gateway.construct_event(payload, signature_header, self.webhook_secret)
        except ValueError as e:
            logger.warning(f"Webhook error: Invalid payload - {e}")
            raise WebhookSignatureError(f"Invalid payload: {e}") from e
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook error: Invalid signature - {e}")
            raise WebhookSignatureError(str(e)) from e

    def _parse_unsigned(self, payload: bytes) -> stripe.Event:
        if not self.allow_unsigned:
            logger.error("Webhook rejected: STRIPE_WEBHOOK_SECRET is not configured")
            raise WebhookSignatureError("Webhook signing secret is not configured")

        logger.warning("Accepting unsigned webhook (STRIPE_WEBHOOK_ALLOW_UNSIGNED is on)")
        try:
            return self.gateway.parse_unsigned_event(payload)
        except ValueError as e:
            logger.warning(f"Webhook error: Invalid payload - {e}")
            raise WebhookSignatureError(f"Invalid payload: {e}") from e

    def handle_event(self, event: stripe.Event) -> StripeEventType:
        event_type = StripeEventType(getattr(event, "type", None))
        self._handlers[event_type](event)
        return event_type

    def _on_checkout_session_completed(self, event):
        session = event.data.object
        logger.info(
            f"Checkout session completed: {session.id}, "
            f"amount_total: {getattr(session, 'amount_total', None)} {getattr(session, 'currency', None)} "
            f"(event {event.id})"
        )

    def _on_payment_intent_succeeded(self, event):
        intent = event.data.object
        logger.info(
            f"Payment intent succeeded: {intent.id}, "
            f"amount: {getattr(intent, 'amount', None)} {getattr(intent, 'currency', None)} "
            f"(event {event.id})"
        )

    def _on_payment_intent_failed(self, event):
        intent = event.data.object
        logger.warning(f"Payment intent failed: {intent.id} (event {event.id})")

    def _on_invoice_payment_succeeded(self, event):
        logger.info(f"Subscription payment succeeded: {event.data.object.id} (event {event.id})")

    def _on_invoice_payment_failed(self, event):
        logger.warning(f"Subscription payment failed: {event.data.object.id} (event {event.id})")

    def _on_unhandled(self, event):
        logger.info(f"Unhandled event type: {getattr(event, 'type', None)} (event {getattr(event, 'id', None)})")
