import uuid
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Literal


DonationStatus = Literal["pending", "succeeded", "failed"]


class BillingInterval(str, Enum):
    WEEK = "week"
    MONTH = "month"


class DonationFrequency(str, Enum):
    """
    Billing cadence requested by the donor. Any value other than "one-off"
    or "weekly" is billed monthly.
    """
    ONE_OFF = "one-off"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def _missing_(cls, value):
        return cls.MONTHLY

    @property
    def is_recurring(self) -> bool:
        return self is not DonationFrequency.ONE_OFF

    @property
    def interval(self) -> BillingInterval | None:
        if self is DonationFrequency.WEEKLY:
            return BillingInterval.WEEK
        if self is DonationFrequency.MONTHLY:
            return BillingInterval.MONTH
        return None


class MonetaryAmount(BaseModel):
    model_config = ConfigDict(frozen=True)

    minor_units: int = Field(gt=0)
    currency: str = Field(pattern=r"^[a-z]{3}$")


class Donation(BaseModel):
    donation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    email: EmailStr

    amount: int
    currency: str = "usd"
    status: DonationStatus = "pending"

    payment_id: str | None = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
