"""Sign-in and user administration on top of the user store."""

from datetime import datetime
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from pockethr.core.config import get_settings
from pockethr.core.exceptions import BadRequestError, ForbiddenError, UnauthorizedError
from pockethr.core.logging import get_logger
from pockethr.core.security import session_payload
from pockethr.models.user import PROFILE_FIELDS, UserProfile
from pockethr.stores.base import UserStore

log = get_logger(__name__)


def verify_google_id_token(token: str) -> dict:
    """Verify Google ID token; return decoded claims (sub, email, name, ...)."""
    settings = get_settings()
    try:
        return id_token.verify_oauth2_token(
            token,
            google_requests.Request(),
            settings.google_client_id,
        )
    except (ValueError, GoogleAuthError) as e:
        raise UnauthorizedError(f"Invalid Google token: {e}") from e


async def sign_in(store: UserStore, claims: dict) -> UserProfile:
    """Find or provision the user for verified identity claims."""
    email = claims.get("email")
    if not email:
        raise BadRequestError("Missing email in token")
    if claims.get("email_verified") is False:
        raise UnauthorizedError("Email not verified")
    profile = await store.find_profile_by_email(email)
    if profile is None:
        profile = await store.create_user(
            email,
            name=claims.get("name"),
            credits_total=get_settings().basic_word_credits,
        )
    if not profile.is_active:
        raise ForbiddenError("Account disabled")
    profile = await store.update_profile(profile.id, {"last_sign_in_at": datetime.utcnow()})
    log.info("user_login", user_id=profile.id, email=profile.email)
    return profile


def session_payload_for_user(profile: UserProfile) -> dict:
    return session_payload(profile.id, profile.role)


def clean_profile_update(fields: dict[str, Any]) -> dict[str, Any]:
    """Keep the editable profile fields that were actually sent."""
    out = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None}
    if not out:
        raise BadRequestError("Nothing to update")
    return out
