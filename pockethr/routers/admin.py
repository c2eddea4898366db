from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from pockethr.core.logging import get_logger
from pockethr.deps import Principal, get_ledger, get_store, require_admin
from pockethr.services import users as user_service
from pockethr.services.credits import CreditLedger
from pockethr.stores.base import UserStore

router = APIRouter()
log = get_logger(__name__)


class AllowanceRequest(BaseModel):
    total: int = Field(ge=0)
    reset: bool = True


class CreateUserRequest(BaseModel):
    email: str
    name: str | None = None
    company: str | None = None
    role: Literal["user", "admin"] = "user"
    word_credits: int = Field(default=0, ge=0)


class UpdateUserRequest(BaseModel):
    name: str | None = None
    company: str | None = None
    role: Literal["user", "admin"] | None = None
    is_active: bool | None = None
    plan_type: Literal["basic", "premium"] | None = None


@router.get("/users")
async def admin_list_users(
    admin: Principal = Depends(require_admin),
    store: UserStore = Depends(get_store),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """Admin: users, newest first."""
    profiles = await store.list_profiles(limit=limit, offset=offset)
    return {"users": [p.model_dump(mode="json") for p in profiles], "limit": limit, "offset": offset}


@router.post("/users", status_code=201)
async def admin_create_user(
    body: CreateUserRequest,
    admin: Principal = Depends(require_admin),
    store: UserStore = Depends(get_store),
):
    profile = await store.create_user(
        body.email,
        name=body.name,
        company=body.company,
        role=body.role,
        credits_total=body.word_credits,
    )
    log.info("admin_user_created", admin_id=admin.user_id, user_id=profile.id)
    return profile.model_dump(mode="json")


@router.patch("/users/{user_id}")
async def admin_update_user(
    user_id: str,
    body: UpdateUserRequest,
    admin: Principal = Depends(require_admin),
    store: UserStore = Depends(get_store),
):
    """Admin: change name, company, role, active flag or plan."""
    fields = user_service.clean_profile_update(body.model_dump())
    profile = await store.update_profile(user_id, fields)
    log.info("admin_user_updated", admin_id=admin.user_id, user_id=user_id, fields=sorted(fields))
    return profile.model_dump(mode="json")


@router.put("/users/{user_id}/credits")
async def admin_set_credits(
    user_id: str,
    body: AllowanceRequest,
    admin: Principal = Depends(require_admin),
    ledger: CreditLedger = Depends(get_ledger),
):
    """Admin: set a user's word credit allowance."""
    await ledger.store.get_profile(user_id)
    balance = await ledger.set_allowance(user_id, body.total, reset=body.reset)
    log.info("admin_credits_set", admin_id=admin.user_id, user_id=user_id, total=body.total)
    return {"user_id": user_id, "remaining": balance.remaining, "total": balance.total}
