"""
Amount and currency normalization for donation requests.

Amounts arrive as whatever the client sent: a JSON number, or a string that
may use a comma as the decimal separator ("12,50"). They are converted to
integer minor units (cents) once, here, so nothing downstream handles floats.
"""
import math
import re

from donation_api.core.errors import AmountNotANumber, AmountNotPositive, InvalidCurrency

DEFAULT_CURRENCY = "usd"

_CURRENCY_RE = re.compile(r"^[a-z]{3}$")
_AMOUNT_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$")


def normalize_amount(raw) -> int:
    """Returns ``raw`` in minor units, rounding half up."""
    text = str(raw).replace(",", ".", 1)
    # float() also takes "1_000", "nan" and "inf"; only plain decimals are amounts
    if not _AMOUNT_RE.match(text):
        raise AmountNotANumber(f"Not a number: {raw!r}")

    scaled = float(text) * 100
    if not math.isfinite(scaled):
        raise AmountNotANumber(f"Not a finite number: {raw!r}")

    minor_units = math.floor(scaled + 0.5)
    if minor_units <= 0:
        raise AmountNotPositive(f"Amount must be positive: {raw!r}")
    return minor_units


def normalize_currency(raw) -> str:
    if raw is None or raw == "":
        return DEFAULT_CURRENCY
    if not isinstance(raw, str):
        raise InvalidCurrency(f"Currency must be a string: {raw!r}")

    currency = raw.strip().lower()
    if not _CURRENCY_RE.match(currency):
        raise InvalidCurrency(f"Not a 3-letter currency code: {raw!r}")
    return currency

