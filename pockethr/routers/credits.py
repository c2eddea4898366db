from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from pockethr.core.exceptions import InsufficientCreditsError
from pockethr.deps import Principal, get_current_user, get_ledger
from pockethr.services.credit_cache import CreditCache
from pockethr.services.credits import CreditLedger, get_plans, words_for_tokens

router = APIRouter()


class AmountRequest(BaseModel):
    amount: int


class UsageRequest(BaseModel):
    token_count: int = Field(ge=0)


async def _spend(ledger: CreditLedger, user_id: str, amount: int) -> int:
    cache = CreditCache(ledger, user_id)
    await cache.refresh()
    if not cache.loaded:
        raise cache.last_error
    if not await cache.spend(amount):
        raise cache.last_error or InsufficientCreditsError(remaining=cache.remaining, requested=amount)
    return cache.remaining


@router.get("/balance")
async def credits_balance(
    user: Principal = Depends(get_current_user),
    ledger: CreditLedger = Depends(get_ledger),
):
    """Return current word credit balance."""
    balance = await ledger.get_balance(user.user_id)
    return {"remaining": balance.remaining, "total": balance.total}


@router.post("/check")
async def credits_check(
    body: AmountRequest,
    user: Principal = Depends(get_current_user),
    ledger: CreditLedger = Depends(get_ledger),
):
    """Would spending `amount` succeed right now (advisory)."""
    return {"enough": await ledger.has_enough(user.user_id, body.amount)}


@router.post("/spend")
async def credits_spend(
    body: AmountRequest,
    user: Principal = Depends(get_current_user),
    ledger: CreditLedger = Depends(get_ledger),
):
    remaining = await _spend(ledger, user.user_id, body.amount)
    return {"remaining": remaining}


@router.post("/usage")
async def credits_usage(
    body: UsageRequest,
    user: Principal = Depends(get_current_user),
    ledger: CreditLedger = Depends(get_ledger),
):
    """Charge an AI response by its token count."""
    words = words_for_tokens(body.token_count)
    remaining = await _spend(ledger, user.user_id, words)
    return {"words": words, "remaining": remaining}


@router.get("/plans")
async def credits_plans():
    return {"plans": get_plans()}
