from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from pockethr.core.config import get_settings
from pockethr.core.security import SESSION_MAX_AGE_SECONDS, create_session_cookie
from pockethr.deps import SESSION_COOKIE_NAME, Principal, get_current_user, get_store
from pockethr.services import users as user_service
from pockethr.stores.base import UserStore

router = APIRouter()


class GoogleAuthRequest(BaseModel):
    id_token: str


@router.post("/google")
async def auth_google(
    body: GoogleAuthRequest,
    response: Response,
    store: UserStore = Depends(get_store),
):
    """Exchange Google ID token for session; set httpOnly cookie."""
    claims = user_service.verify_google_id_token(body.id_token)
    profile = await user_service.sign_in(store, claims)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session_cookie(user_service.session_payload_for_user(profile)),
        max_age=SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=get_settings().session_cookie_secure,
        samesite="lax",
        path="/",
    )
    return {"user": profile.model_dump(mode="json")}


@router.get("/me")
async def auth_me(
    user: Principal = Depends(get_current_user),
    store: UserStore = Depends(get_store),
):
    """Return current user. Requires session cookie."""
    profile = await store.get_profile(user.user_id)
    return profile.model_dump(mode="json")


@router.post("/logout")
async def auth_logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"status": "ok"}
