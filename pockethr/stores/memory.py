"""In-process user store for local development and tests."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pockethr.core.exceptions import ConflictError, CreditLookupError, NotFoundError
from pockethr.models.credit_balance import CreditBalance
from pockethr.models.user import UserProfile
from pockethr.stores.base import UserStore


@dataclass
class UserRecord:
    remaining: int = 0
    total: int = 0
    email: str = ""
    name: str | None = None
    company: str | None = None
    role: str = "user"
    is_active: bool = True
    plan_type: str = "basic"
    subscription_status: str | None = None
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    last_sign_in_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {}
        self.events: set[str] = set()

    def add_user(self, user_id: str, remaining: int = 0, total: int = 0, **fields) -> UserRecord:
        fields.setdefault("email", f"{user_id}@example.com")
        record = UserRecord(remaining=remaining, total=total, **fields)
        self.users[user_id] = record
        return record

    def _record(self, user_id: str) -> UserRecord:
        record = self.users.get(user_id)
        if record is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return record

    def _profile(self, user_id: str, record: UserRecord) -> UserProfile:
        return UserProfile(
            id=user_id,
            email=record.email,
            name=record.name,
            company=record.company,
            role=record.role,
            is_active=record.is_active,
            plan_type=record.plan_type,
            subscription_status=record.subscription_status,
            word_credits_remaining=record.remaining,
            word_credits_total=record.total,
            last_sign_in_at=record.last_sign_in_at,
            created_at=record.created_at,
        )

    async def read(self, user_id: str) -> CreditBalance:
        record = self.users.get(user_id)
        if record is None:
            raise CreditLookupError("User not found", details={"user_id": user_id})
        return CreditBalance(remaining=record.remaining, total=record.total)

    async def write(self, user_id: str, remaining: int, total: int | None = None) -> None:
        record = self._record(user_id)
        record.remaining = remaining
        if total is not None:
            record.total = total

    async def set_subscription(
        self,
        user_id: str,
        plan_type: str,
        status: str,
        customer_id: str | None = None,
        subscription_id: str | None = None,
    ) -> None:
        record = self._record(user_id)
        record.plan_type = plan_type
        record.subscription_status = status
        if customer_id is not None:
            record.stripe_customer_id = customer_id
        if subscription_id is not None:
            record.stripe_subscription_id = subscription_id

    async def find_user_id_by_customer(self, customer_id: str) -> str | None:
        for user_id, record in self.users.items():
            if record.stripe_customer_id == customer_id:
                return user_id
        return None

    async def claim_event(self, event_id: str, event_type: str | None = None) -> bool:
        if event_id in self.events:
            return False
        self.events.add(event_id)
        return True

    async def release_event(self, event_id: str) -> None:
        self.events.discard(event_id)

    async def get_profile(self, user_id: str) -> UserProfile:
        return self._profile(user_id, self._record(user_id))

    async def find_profile_by_email(self, email: str) -> UserProfile | None:
        for user_id, record in self.users.items():
            if record.email == email:
                return self._profile(user_id, record)
        return None

    async def create_user(
        self,
        email: str,
        name: str | None = None,
        company: str | None = None,
        role: str = "user",
        credits_total: int = 0,
    ) -> UserProfile:
        if await self.find_profile_by_email(email):
            raise ConflictError("Email already registered", details={"email": email})
        user_id = uuid.uuid4().hex
        record = self.add_user(
            user_id,
            remaining=credits_total,
            total=credits_total,
            email=email,
            name=name,
            company=company,
            role=role,
        )
        return self._profile(user_id, record)

    async def update_profile(self, user_id: str, fields: dict[str, Any]) -> UserProfile:
        record = self._record(user_id)
        for key, value in fields.items():
            setattr(record, key, value)
        return self._profile(user_id, record)

    async def list_profiles(self, limit: int = 50, offset: int = 0) -> list[UserProfile]:
        ordered = sorted(self.users.items(), key=lambda item: item[1].created_at, reverse=True)
        return [self._profile(user_id, record) for user_id, record in ordered[offset:offset + limit]]
