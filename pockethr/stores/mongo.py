from datetime import datetime
from typing import Any

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError, PyMongoError

from pockethr.core.exceptions import ConflictError, CreditLookupError, NotFoundError, PersistenceError
from pockethr.core.logging import get_logger
from pockethr.models.credit_balance import CreditBalance
from pockethr.models.user import User, UserProfile
from pockethr.models.webhook_event import ProcessedWebhookEvent
from pockethr.stores.base import UserStore

log = get_logger(__name__)


def _object_id(user_id: str) -> PydanticObjectId | None:
    try:
        return PydanticObjectId(user_id)
    except (InvalidId, TypeError):
        return None


def _profile(user: User) -> UserProfile:
    return UserProfile(
        id=str(user.id),
        email=user.email,
        name=user.name,
        company=user.company,
        role=user.role,
        is_active=user.is_active,
        plan_type=user.plan_type,
        subscription_status=user.subscription_status,
        word_credits_remaining=max(0, user.word_credits_remaining),
        word_credits_total=max(0, user.word_credits_total),
        last_sign_in_at=user.last_sign_in_at,
        created_at=user.created_at,
    )


class MongoUserStore(UserStore):
    """User store backed by the users collection (via beanie)."""

    async def _get_user(self, user_id: str) -> User | None:
        oid = _object_id(user_id)
        if oid is None:
            return None
        return await User.get(oid)

    async def read(self, user_id: str) -> CreditBalance:
        try:
            user = await self._get_user(user_id)
        except PyMongoError as e:
            log.warning("user_store_read_failed", user_id=user_id, error=str(e))
            raise CreditLookupError(details={"user_id": user_id}) from e
        if not user:
            raise CreditLookupError("User not found", details={"user_id": user_id})
        return CreditBalance(
            remaining=max(0, user.word_credits_remaining),
            total=max(0, user.word_credits_total),
        )

    async def write(self, user_id: str, remaining: int, total: int | None = None) -> None:
        fields = {"word_credits_remaining": remaining}
        if total is not None:
            fields["word_credits_total"] = total
        await self._set(user_id, fields)

    async def set_subscription(
        self,
        user_id: str,
        plan_type: str,
        status: str,
        customer_id: str | None = None,
        subscription_id: str | None = None,
    ) -> None:
        fields = {"plan_type": plan_type, "subscription_status": status}
        if customer_id is not None:
            fields["stripe_customer_id"] = customer_id
        if subscription_id is not None:
            fields["stripe_subscription_id"] = subscription_id
        await self._set(user_id, fields)

    async def _set(self, user_id: str, fields: dict[str, Any]) -> User:
        try:
            user = await self._get_user(user_id)
            if not user:
                raise NotFoundError("User not found", details={"user_id": user_id})
            await user.set({**fields, "updated_at": datetime.utcnow()})
        except PyMongoError as e:
            log.warning("user_store_write_failed", user_id=user_id, error=str(e))
            raise PersistenceError(details={"user_id": user_id}) from e
        return user

    async def find_user_id_by_customer(self, customer_id: str) -> str | None:
        try:
            user = await User.find_one({"stripe_customer_id": customer_id})
        except PyMongoError as e:
            log.warning("user_store_read_failed", customer_id=customer_id, error=str(e))
            raise CreditLookupError("Unable to load user", details={"customer_id": customer_id}) from e
        return str(user.id) if user else None

    async def claim_event(self, event_id: str, event_type: str | None = None) -> bool:
        try:
            await ProcessedWebhookEvent(event_id=event_id, event_type=event_type).insert()
        except DuplicateKeyError:
            return False
        except PyMongoError as e:
            log.warning("webhook_event_claim_failed", event_id=event_id, error=str(e))
            raise PersistenceError("Could not record webhook event", details={"event_id": event_id}) from e
        return True

    async def release_event(self, event_id: str) -> None:
        try:
            await ProcessedWebhookEvent.find_one({"event_id": event_id}).delete()
        except PyMongoError as e:
            log.warning("webhook_event_release_failed", event_id=event_id, error=str(e))
            raise PersistenceError("Could not release webhook event", details={"event_id": event_id}) from e

    async def get_profile(self, user_id: str) -> UserProfile:
        try:
            user = await self._get_user(user_id)
        except PyMongoError as e:
            raise CreditLookupError("Unable to load user", details={"user_id": user_id}) from e
        if not user:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return _profile(user)

    async def find_profile_by_email(self, email: str) -> UserProfile | None:
        try:
            user = await User.find_one({"email": email})
        except PyMongoError as e:
            raise CreditLookupError("Unable to load user", details={"email": email}) from e
        return _profile(user) if user else None

    async def create_user(
        self,
        email: str,
        name: str | None = None,
        company: str | None = None,
        role: str = "user",
        credits_total: int = 0,
    ) -> UserProfile:
        user = User(
            email=email,
            name=name,
            company=company,
            role=role,
            word_credits_total=credits_total,
            word_credits_remaining=credits_total,
        )
        try:
            await user.insert()
        except DuplicateKeyError as e:
            raise ConflictError("Email already registered", details={"email": email}) from e
        except PyMongoError as e:
            log.warning("user_create_failed", email=email, error=str(e))
            raise PersistenceError("Could not create user", details={"email": email}) from e
        log.info("user_created", user_id=str(user.id), email=email)
        return _profile(user)

    async def update_profile(self, user_id: str, fields: dict[str, Any]) -> UserProfile:
        user = await self._set(user_id, fields)
        return _profile(user)

    async def list_profiles(self, limit: int = 50, offset: int = 0) -> list[UserProfile]:
        try:
            users = await User.find_all().sort("-created_at").skip(offset).limit(limit).to_list()
        except PyMongoError as e:
            raise CreditLookupError("Unable to load users") from e
        return [_profile(u) for u in users]
