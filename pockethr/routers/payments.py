from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel

from pockethr.deps import Principal, get_current_user, get_ledger
from pockethr.services import payments as payments_service
from pockethr.services.credits import CreditLedger

router = APIRouter()


class CheckoutRequest(BaseModel):
    price_id: str | None = None
    customer_email: str | None = None


@router.post("/checkout")
async def create_checkout(
    body: CheckoutRequest,
    user: Principal = Depends(get_current_user),
):
    """Create a Stripe checkout session for the premium subscription."""
    return payments_service.create_checkout_session(user.user_id, body.price_id, body.customer_email)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(..., alias="Stripe-Signature"),
    ledger: CreditLedger = Depends(get_ledger),
):
    """Stripe webhook: subscription lifecycle -> plan and allowance (idempotent)."""
    body = await request.body()
    result = await payments_service.handle_webhook(body, stripe_signature, ledger)
    return {"received": True, "result": result}
