from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

from pockethr.core.config import get_settings
from pockethr.models.credit_balance import CreditBalance
from pockethr.models.user import UserProfile


class UserStore(ABC):
    """Remote user records: word credits, subscription and profile fields."""

    @abstractmethod
    async def read(self, user_id: str) -> CreditBalance:
        """Return the stored balance; raise CreditLookupError if it cannot be read."""
        ...

    @abstractmethod
    async def write(self, user_id: str, remaining: int, total: int | None = None) -> None:
        """Persist remaining (and total when given); NotFoundError for an unknown
        user, PersistenceError when the write fails."""
        ...

    @abstractmethod
    async def set_subscription(
        self,
        user_id: str,
        plan_type: str,
        status: str,
        customer_id: str | None = None,
        subscription_id: str | None = None,
    ) -> None:
        ...

    @abstractmethod
    async def find_user_id_by_customer(self, customer_id: str) -> str | None:
        ...

    @abstractmethod
    async def claim_event(self, event_id: str, event_type: str | None = None) -> bool:
        """Record a webhook event id; False if it was already recorded."""
        ...

    @abstractmethod
    async def release_event(self, event_id: str) -> None:
        """Forget a claimed event so a redelivery is processed again."""
        ...

    # Profiles

    @abstractmethod
    async def get_profile(self, user_id: str) -> UserProfile:
        """Raise NotFoundError for an unknown user."""
        ...

    @abstractmethod
    async def find_profile_by_email(self, email: str) -> UserProfile | None:
        ...

    @abstractmethod
    async def create_user(
        self,
        email: str,
        name: str | None = None,
        company: str | None = None,
        role: str = "user",
        credits_total: int = 0,
    ) -> UserProfile:
        """Raise ConflictError when the email is taken."""
        ...

    @abstractmethod
    async def update_profile(self, user_id: str, fields: dict[str, Any]) -> UserProfile:
        ...

    @abstractmethod
    async def list_profiles(self, limit: int = 50, offset: int = 0) -> list[UserProfile]:
        """Newest first."""
        ...


@lru_cache
def get_user_store() -> UserStore:
    settings = get_settings()
    if settings.user_store_backend == "memory":
        from pockethr.stores.memory import InMemoryUserStore
        return InMemoryUserStore()
    from pockethr.stores.mongo import MongoUserStore
    return MongoUserStore()
