import logging

import stripe

from donation_api.api.schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from donation_api.core.errors import (
    AmountError,
    IncompleteProcessorResponse,
    InvalidAmountRequest,
    InvalidCurrency,
    InvalidCurrencyRequest,
    InvalidProcessorRequest,
    MissingAmount,
    ProcessorFailure,
)
from donation_api.models.donation import DonationFrequency, MonetaryAmount
from donation_api.services.money import normalize_amount, normalize_currency
from donation_api.services.payment_gateway import StripeGateway

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


class DonationService:
    def __init__(self, gateway: StripeGateway, client_url: str):
        self.gateway = gateway
        self.client_url = client_url.rstrip("/")

    def create_payment_intent(self, request: PaymentIntentRequest) -> PaymentIntentResponse:
        amount = self._validate_amount(request.amount, request.currency)

        try:
            intent = self.gateway.create_payment_intent(
                amount=amount.minor_units,
                currency=amount.currency,
                description="Donation",
                metadata={"donor_name": request.name}
            )
        except stripe.InvalidRequestError as e:
            logger.warning(f"Stripe rejected payment intent: {e}", extra={"endpoint": "/payment-intent"})
            raise InvalidProcessorRequest(e.user_message or None) from e
        except Exception as e:
            logger.exception(f"Error in /payment-intent: {e}", extra={"endpoint": "/payment-intent"})
            raise ProcessorFailure() from e

        client_secret = getattr(intent, "client_secret", None)
        if not client_secret:
            logger.error(f"Payment intent {getattr(intent, 'id', None)} returned without a client secret")
            raise IncompleteProcessorResponse()

        logger.info(f"Created payment intent {intent.id} for {amount.minor_units} {amount.currency}")
        return PaymentIntentResponse(clientSecret=client_secret, paymentIntentId=intent.id)

    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSessionResponse:
        amount = self._validate_amount(request.amount, request.currency)
        frequency = DonationFrequency(request.frequency)

        try:
            session = self.gateway.create_checkout_session(
                mode="subscription" if frequency.is_recurring else "payment",
                line_items=[self.build_line_item(amount, request.name, request.frequency)],
                success_url=f"{self.client_url}/success?session_id={CHECKOUT_SESSION_PLACEHOLDER}",
                cancel_url=f"{self.client_url}/cancel",
                metadata={"donor_name": request.name, "frequency": request.frequency}
            )
        except stripe.InvalidRequestError as e:
            logger.warning(f"Stripe rejected checkout session: {e}", extra={"endpoint": "/create-checkout-session"})
            raise InvalidProcessorRequest(e.user_message or "Invalid request to Stripe") from e
        except Exception as e:
            logger.exception(f"Error in /create-checkout-session: {e}", extra={"endpoint": "/create-checkout-session"})
            raise ProcessorFailure("Could not create checkout session") from e

        url = getattr(session, "url", None)
        if not url:
            logger.error(f"Checkout session {getattr(session, 'id', None)} returned without a url")
            raise IncompleteProcessorResponse("Failed to create checkout session")

        logger.info(f"Created {frequency.value} checkout session {session.id}")
        return CheckoutSessionResponse(url=url)

    @staticmethod
    def build_line_item(amount: MonetaryAmount, donor_name: str, raw_frequency: str) -> dict:
        """
        One Stripe line item. ``raw_frequency`` is used verbatim in the product
        label, so an unrecognised value such as "biannual" still reads
        "Biannual Donation" while being billed monthly.
        """
        frequency = DonationFrequency(raw_frequency)

        if not frequency.is_recurring:
            return {
                "price_data": {
                    "currency": amount.currency,
                    "product_data": {"name": f"Donation from {donor_name}"},
                    "unit_amount": amount.minor_units,
                },
                "quantity": 1,
            }

        return {
            "price_data": {
                "currency": amount.currency,
                "product_data": {
                    "name": f"{raw_frequency[:1].upper()}{raw_frequency[1:]} Donation",
                    "description": f"Recurring {raw_frequency} donation by {donor_name}",
                },
                "unit_amount": amount.minor_units,
                "recurring": {"interval": frequency.interval.value},
            },
            "quantity": 1,
        }

    @staticmethod
    def _validate_amount(raw_amount, raw_currency) -> MonetaryAmount:
        if raw_amount is None:
            raise MissingAmount()

        try:
            currency = normalize_currency(raw_currency)
        except InvalidCurrency as e:
            logger.info(f"Rejected donation: {e}")
            raise InvalidCurrencyRequest() from e

        try:
            minor_units = normalize_amount(raw_amount)
        except AmountError as e:
            logger.info(f"Rejected donation: {e}")
            raise InvalidAmountRequest() from e

        return MonetaryAmount(minor_units=minor_units, currency=currency)
