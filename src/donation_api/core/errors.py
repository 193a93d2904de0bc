"""
Error taxonomy for the donation API.

Normalizer errors are plain ``ValueError`` subclasses with no HTTP meaning.
Everything deriving from ``DonationAPIError`` carries the status code and the
message that is safe to show to the client.
"""


class AmountError(ValueError):
    pass


class AmountNotANumber(AmountError):
    pass


class AmountNotPositive(AmountError):
    pass


class InvalidCurrency(ValueError):
    pass


class DonationAPIError(Exception):
    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class DonationValidationError(DonationAPIError):
    status_code = 400


class MissingAmount(DonationValidationError):
    message = "Missing amount in request body"


class InvalidCurrencyRequest(DonationValidationError):
    message = "Invalid currency. Use a 3-letter code like 'usd' or 'aud'."


class InvalidAmountRequest(DonationValidationError):
    message = "Invalid amount"


class ProcessorError(DonationAPIError):
    pass


class InvalidProcessorRequest(ProcessorError):
    status_code = 400
    message = "Invalid payment request"


class IncompleteProcessorResponse(ProcessorError):
    message = "Payment initialization failed"


class ProcessorFailure(ProcessorError):
    message = "Payment failed, try again."


class WebhookSignatureError(DonationAPIError):
    status_code = 400
    message = "Invalid signature"
