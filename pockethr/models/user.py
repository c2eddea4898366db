from datetime import datetime

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class User(Document):
    email: Indexed(str, unique=True)
    name: str | None = None
    company: str | None = None
    role: str = "user"  # "user" | "admin"
    is_active: bool = True
    plan_type: str = "basic"  # "basic" | "premium"
    stripe_customer_id: Indexed(str) | None = None
    stripe_subscription_id: str | None = None
    subscription_status: str | None = None  # active, past_due, canceled, ...
    word_credits_total: int = 0
    word_credits_remaining: int = 0
    last_sign_in_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"


class UserProfile(BaseModel):
    """What auth and admin routes see of a user, whatever the store."""
    id: str
    email: str
    name: str | None = None
    company: str | None = None
    role: str = "user"
    is_active: bool = True
    plan_type: str = "basic"
    subscription_status: str | None = None
    word_credits_remaining: int = 0
    word_credits_total: int = 0
    last_sign_in_at: datetime | None = None
    created_at: datetime | None = None


PROFILE_FIELDS = ("name", "company", "role", "is_active", "plan_type")
