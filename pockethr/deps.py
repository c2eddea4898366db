"""Shared FastAPI dependencies."""

from dataclasses import dataclass

from fastapi import Depends, Request

from pockethr.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from pockethr.core.logging import bind_user_id
from pockethr.core.security import load_session_cookie
from pockethr.services.credits import CreditLedger
from pockethr.stores.base import UserStore, get_user_store

SESSION_COOKIE_NAME = "pockethr_session"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, resolved from the session cookie."""
    user_id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


async def get_current_user(request: Request) -> Principal:
    """Dependency: load session from cookie and return the caller."""
    cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if not cookie:
        raise UnauthorizedError("Not authenticated")
    payload = load_session_cookie(cookie)
    if not payload:
        raise UnauthorizedError("Invalid or expired session")
    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError("Invalid session")
    bind_user_id(user_id)
    return Principal(user_id=user_id, role=payload.get("role", "user"))


def get_store() -> UserStore:
    return get_user_store()


async def require_admin(
    user: Principal = Depends(get_current_user),
    store: UserStore = Depends(get_store),
) -> Principal:
    """Dependency: require current user to have role admin.

    The role is read from the stored user, so a demotion or a disabled
    account takes effect before the session cookie expires.
    """
    if not user.is_admin:
        raise ForbiddenError("Admin only")
    try:
        profile = await store.get_profile(user.user_id)
    except NotFoundError as e:
        raise UnauthorizedError("User not found") from e
    if profile.role != "admin" or not profile.is_active:
        raise ForbiddenError("Admin only")
    return Principal(user_id=profile.id, role=profile.role)


def get_ledger(store: UserStore = Depends(get_store)) -> CreditLedger:
    return CreditLedger(store)
