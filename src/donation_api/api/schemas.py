from pydantic import BaseModel, EmailStr
from typing import Any, Optional
from datetime import datetime

DEFAULT_DONOR_NAME = "Anonymous Donor"


class PaymentIntentRequest(BaseModel):
    # amount and currency stay untyped; the money normalizer validates them
    amount: Any = None
    name: str = DEFAULT_DONOR_NAME
    currency: Any = None


class PaymentIntentResponse(BaseModel):
    clientSecret: str
    paymentIntentId: str


class CheckoutSessionRequest(PaymentIntentRequest):
    frequency: str = "one-off"


class CheckoutSessionResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True


class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None


class ContactRecord(BaseModel):
    contact_id: str
    name: str
    email: EmailStr
    message: str
    created_at: datetime


class ContactResponse(BaseModel):
    message: str
    data: ContactRecord


class UploadResponse(BaseModel):
    message: str
    fileUrl: str


class UserResponse(BaseModel):
    user_id: str
    email: EmailStr
    name: Optional[str] = None
    created_at: datetime


class HealthResponse(BaseModel):
    ok: bool
    timestamp: int
