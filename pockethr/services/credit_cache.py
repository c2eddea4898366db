"""Session-local shadow copy of a user's word credits."""

from enum import Enum

from pockethr.core.exceptions import AppError, CreditLookupError, InsufficientCreditsError
from pockethr.core.logging import get_logger
from pockethr.models.credit_balance import CreditBalance
from pockethr.services.credits import CreditLedger

log = get_logger(__name__)

LOAD_FAILED = "Failed to load credits. Please try again."
INSUFFICIENT = "Insufficient credits for this operation"
SPEND_FAILED = "Failed to update credits. Please try again."


class CacheStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class CreditCache:
    """
    Holds the last known balance for one user and applies spends locally
    only after the ledger confirms them. Failures never zero the balance.
    Concurrent in-flight spends are not de-duplicated.
    """

    def __init__(self, ledger: CreditLedger, user_id: str):
        self.ledger = ledger
        self.user_id = user_id
        self.balance = CreditBalance()
        self.status = CacheStatus.IDLE
        self.error: str | None = None
        self.last_error: AppError | None = None
        self.loaded = False

    @property
    def remaining(self) -> int:
        return self.balance.remaining

    def _fail(self, message: str, exc: AppError | None = None) -> None:
        self.status = CacheStatus.ERROR
        self.error = message
        self.last_error = exc

    def _succeed(self) -> None:
        self.status = CacheStatus.SUCCESS
        self.error = None
        self.last_error = None

    async def refresh(self) -> CreditBalance:
        self.status = CacheStatus.LOADING
        try:
            balance = await self.ledger.get_balance(self.user_id)
        except CreditLookupError as e:
            log.warning("credit_cache_refresh_failed", user_id=self.user_id, error=e.message)
            self._fail(LOAD_FAILED, e)
            return self.balance
        self.balance = balance
        self.loaded = True
        self._succeed()
        return self.balance

    async def spend(self, amount: int) -> bool:
        if amount <= 0:
            return True
        self.status = CacheStatus.LOADING
        if self.balance.remaining < amount:
            self._fail(INSUFFICIENT, InsufficientCreditsError(remaining=self.balance.remaining, requested=amount))
            return False
        try:
            await self.ledger.debit(self.user_id, amount)
        except InsufficientCreditsError as e:
            self._fail(INSUFFICIENT, e)
            return False
        except AppError as e:
            log.warning("credit_cache_spend_failed", user_id=self.user_id, amount=amount, code=e.code)
            self._fail(SPEND_FAILED, e)
            return False
        self.balance = self.balance.model_copy(
            update={"remaining": max(0, self.balance.remaining - amount)}
        )
        self._succeed()
        return True
