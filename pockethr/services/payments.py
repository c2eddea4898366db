"""Stripe checkout and webhook: subscription status and plan allowances."""

import stripe

from pockethr.core.config import get_settings
from pockethr.core.exceptions import BadRequestError, NotFoundError
from pockethr.core.logging import get_logger
from pockethr.services.credits import CreditLedger

log = get_logger(__name__)

ACTIVE_STATUSES = ("active", "trialing", "past_due")


def create_checkout_session(user_id: str, price_id: str | None = None, customer_email: str | None = None) -> dict:
    """Create a subscription checkout session; the frontend redirects to its url."""
    settings = get_settings()
    if not settings.stripe_secret_key:
        raise BadRequestError("Payments not configured")
    price_id = price_id or settings.stripe_premium_price_id
    try:
        session = stripe.checkout.Session.create(
            api_key=settings.stripe_secret_key,
            payment_method_types=["card"],
            line_items=[{"price": price_id, "quantity": 1}],
            mode="subscription",
            success_url=f"{settings.app_base_url}/account?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.app_base_url}/account",
            client_reference_id=user_id,
            customer_email=customer_email,
        )
    except stripe.StripeError as e:
        log.error("checkout_session_failed", user_id=user_id, price_id=price_id, error=str(e))
        raise BadRequestError("Failed to create checkout session") from e
    log.info("checkout_session_created", user_id=user_id, session_id=session.id, price_id=price_id)
    return {"session_id": session.id, "url": session.url}


def verify_event(payload: bytes, signature: str) -> dict:
    """Check the Stripe-Signature header and return the decoded event."""
    settings = get_settings()
    if not settings.stripe_webhook_secret:
        raise BadRequestError("Webhook secret not configured")
    try:
        event = stripe.Webhook.construct_event(payload, signature, settings.stripe_webhook_secret)
    except ValueError as e:
        raise BadRequestError("Invalid webhook payload") from e
    except stripe.SignatureVerificationError as e:
        raise BadRequestError("Invalid webhook signature") from e
    return event.to_dict()


async def handle_webhook(payload: bytes, signature: str, ledger: CreditLedger) -> str:
    """Verify and dispatch one event; returns "processed", "duplicate" or "ignored"."""
    event = verify_event(payload, signature)
    event_id = event.get("id")
    event_type = event.get("type")
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        log.info("stripe_event_ignored", event_id=event_id, event_type=event_type)
        return "ignored"
    store = ledger.store
    if event_id and not await store.claim_event(event_id, event_type):
        log.info("stripe_event_duplicate", event_id=event_id, event_type=event_type)
        return "duplicate"
    obj = event.get("data", {}).get("object", {})
    try:
        await handler(obj, ledger)
    except Exception:
        if event_id:
            await store.release_event(event_id)
        raise
    log.info("stripe_event_processed", event_id=event_id, event_type=event_type)
    return "processed"


async def _checkout_completed(session: dict, ledger: CreditLedger) -> None:
    user_id = session.get("client_reference_id")
    if not user_id:
        log.warning("checkout_without_user", session_id=session.get("id"))
        return
    try:
        await ledger.store.get_profile(user_id)
    except NotFoundError:
        log.warning("checkout_for_unknown_user", user_id=user_id, session_id=session.get("id"))
        return
    await ledger.store.set_subscription(
        user_id,
        plan_type="premium",
        status="active",
        customer_id=session.get("customer"),
        subscription_id=session.get("subscription"),
    )
    await ledger.set_allowance(user_id, get_settings().premium_word_credits, reset=True)


async def _subscription_updated(subscription: dict, ledger: CreditLedger) -> None:
    customer_id = subscription.get("customer")
    user_id = await ledger.store.find_user_id_by_customer(customer_id) if customer_id else None
    if not user_id:
        log.warning("subscription_without_user", customer_id=customer_id)
        return
    status = subscription.get("status") or "active"
    plan_type = "premium" if status in ACTIVE_STATUSES else "basic"
    await ledger.store.set_subscription(
        user_id,
        plan_type=plan_type,
        status=status,
        customer_id=customer_id,
        subscription_id=subscription.get("id"),
    )


async def _subscription_deleted(subscription: dict, ledger: CreditLedger) -> None:
    customer_id = subscription.get("customer")
    user_id = await ledger.store.find_user_id_by_customer(customer_id) if customer_id else None
    if not user_id:
        log.warning("subscription_without_user", customer_id=customer_id)
        return
    await ledger.store.set_subscription(
        user_id,
        plan_type="basic",
        status="canceled",
        customer_id=customer_id,
        subscription_id=subscription.get("id"),
    )
    await ledger.set_allowance(user_id, get_settings().basic_word_credits, reset=False)


EVENT_HANDLERS = {
    "checkout.session.completed": _checkout_completed,
    "customer.subscription.updated": _subscription_updated,
    "customer.subscription.deleted": _subscription_deleted,
}
