"""Word-credit ledger: balance reads, debits with a zero floor, allowances."""

import math

from pockethr.core.config import get_settings
from pockethr.core.exceptions import BadRequestError, InsufficientCreditsError
from pockethr.core.logging import get_logger
from pockethr.models.credit_balance import CreditBalance
from pockethr.stores.base import UserStore

log = get_logger(__name__)


class CreditLedger:
    """
    Authoritative accounting of a user's word credits.

    The store is the only serialization point: debit is a read followed by a
    write, so two sessions debiting at once can lose an update. Strict
    correctness needs an atomic decrement in the store itself.
    """

    def __init__(self, store: UserStore):
        self.store = store

    async def get_balance(self, user_id: str) -> CreditBalance:
        return await self.store.read(user_id)

    async def debit(self, user_id: str, amount: int) -> int:
        """
        Consume `amount` credits and return the new remaining balance.
        Non-positive amounts charge nothing. Raises InsufficientCreditsError
        without writing when the balance is short.
        """
        balance = await self.store.read(user_id)
        if amount <= 0:
            return balance.remaining
        if balance.remaining < amount:
            log.info("credits_insufficient", user_id=user_id, remaining=balance.remaining, requested=amount)
            raise InsufficientCreditsError(remaining=balance.remaining, requested=amount)
        new_remaining = max(0, balance.remaining - amount)
        await self.store.write(user_id, new_remaining)
        log.info("credits_debited", user_id=user_id, amount=amount, remaining=new_remaining)
        return new_remaining

    async def has_enough(self, user_id: str, amount: int) -> bool:
        """Advisory check; a later debit can still fail."""
        if amount <= 0:
            return True
        balance = await self.store.read(user_id)
        return balance.remaining >= amount

    async def set_allowance(self, user_id: str, total: int, reset: bool = True) -> CreditBalance:
        """
        Grant a plan allowance. With reset the balance is refilled to total;
        otherwise remaining is only capped at the new total.
        """
        if total < 0:
            raise BadRequestError("Credit total cannot be negative", details={"total": total})
        if reset:
            remaining = total
        else:
            current = await self.store.read(user_id)
            remaining = min(current.remaining, total)
        await self.store.write(user_id, remaining, total=total)
        log.info("credits_allowance_set", user_id=user_id, total=total, remaining=remaining, reset=reset)
        return CreditBalance(remaining=remaining, total=total)


def words_for_tokens(token_count: int, words_per_token: float | None = None) -> int:
    """Words charged for an AI response of `token_count` tokens."""
    if token_count <= 0:
        return 0
    if words_per_token is None:
        words_per_token = get_settings().words_per_token
    return math.ceil(token_count * words_per_token)


def get_plans() -> list[dict]:
    s = get_settings()
    return [
        {"id": "basic", "name": "Basic", "price": 0, "interval": "month", "word_credits": s.basic_word_credits},
        {"id": "premium", "name": "Premium", "price": 14.99, "interval": "month", "word_credits": s.premium_word_credits},
        {"id": "pro", "name": "Professional", "price": 39.99, "interval": "month", "word_credits": s.pro_word_credits},
        {"id": "premium_annual", "name": "Premium (annual)", "price": 143.90, "interval": "year", "word_credits": s.premium_word_credits},
        {"id": "pro_annual", "name": "Professional (annual)", "price": 383.90, "interval": "year", "word_credits": s.pro_word_credits},
    ]
