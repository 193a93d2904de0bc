import uuid
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr


class UserProfile(BaseModel):
    user_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: EmailStr
    name: str | None = None
    provider: str = "google"
    created_at: datetime = Field(default_factory=datetime.now)


class ContactMessage(BaseModel):
    contact_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    email: EmailStr
    message: str
    created_at: datetime = Field(default_factory=datetime.now)
