"""Unit tests for the word-credit ledger (in-memory store)."""

import pytest

from pockethr.core.exceptions import (
    BadRequestError,
    CreditLookupError,
    InsufficientCreditsError,
    PersistenceError,
)

pytestmark = pytest.mark.asyncio


async def test_get_balance(store, ledger):
    store.add_user("u1", remaining=100, total=500)
    balance = await ledger.get_balance("u1")
    assert balance.remaining == 100
    assert balance.total == 500


async def test_get_balance_unknown_user_is_lookup_error(ledger):
    with pytest.raises(CreditLookupError) as exc:
        await ledger.get_balance("missing")
    assert isinstance(exc.value, LookupError)


@pytest.mark.parametrize("remaining,amount", [(1, 1), (100, 30), (100, 100), (500, 1)])
async def test_debit_within_balance(store, ledger, remaining, amount):
    store.add_user("u1", remaining=remaining, total=500)
    new_remaining = await ledger.debit("u1", amount)
    assert new_remaining == remaining - amount
    assert store.users["u1"].remaining == remaining - amount


@pytest.mark.parametrize("remaining,amount", [(0, 1), (10, 25), (99, 100)])
async def test_debit_over_balance_rejected_without_write(store, ledger, remaining, amount):
    store.add_user("u1", remaining=remaining, total=500)
    with pytest.raises(InsufficientCreditsError) as exc:
        await ledger.debit("u1", amount)
    assert exc.value.details == {"remaining": remaining, "requested": amount}
    assert store.users["u1"].remaining == remaining
    assert store.writes == 0


@pytest.mark.parametrize("amount", [0, -1, -50])
async def test_non_positive_debit_is_noop(store, ledger, amount):
    store.add_user("u1", remaining=40, total=100)
    assert await ledger.debit("u1", amount) == 40
    assert store.users["u1"].remaining == 40
    assert store.writes == 0


async def test_debit_write_failure_leaves_balance(store, ledger):
    store.add_user("u1", remaining=200, total=500)
    store.fail_writes = True
    with pytest.raises(PersistenceError):
        await ledger.debit("u1", 50)
    assert store.users["u1"].remaining == 200


async def test_debit_read_failure_propagates(store, ledger):
    store.add_user("u1", remaining=200, total=500)
    store.fail_reads = True
    with pytest.raises(CreditLookupError):
        await ledger.debit("u1", 50)


async def test_sequence_of_debits_never_goes_negative(store, ledger):
    store.add_user("u1", remaining=10, total=10)
    for amount in [3, 4, 5, 3, 1, 2]:
        try:
            await ledger.debit("u1", amount)
        except InsufficientCreditsError:
            pass
        assert store.users["u1"].remaining >= 0
    assert store.users["u1"].remaining == 0


async def test_has_enough(store, ledger):
    store.add_user("u1", remaining=10, total=10)
    assert await ledger.has_enough("u1", 10) is True
    assert await ledger.has_enough("u1", 11) is False
    assert await ledger.has_enough("u1", 0) is True
    assert store.writes == 0


async def test_set_allowance_reset(store, ledger):
    store.add_user("u1", remaining=3, total=1000)
    balance = await ledger.set_allowance("u1", 10000)
    assert (balance.remaining, balance.total) == (10000, 10000)
    assert store.users["u1"].total == 10000


async def test_set_allowance_cap_keeps_lower_remaining(store, ledger):
    store.add_user("u1", remaining=5000, total=10000)
    balance = await ledger.set_allowance("u1", 1000, reset=False)
    assert (balance.remaining, balance.total) == (1000, 1000)
    store.add_user("u2", remaining=200, total=10000)
    balance = await ledger.set_allowance("u2", 1000, reset=False)
    assert (balance.remaining, balance.total) == (200, 1000)


async def test_set_allowance_rejects_negative(store, ledger):
    store.add_user("u1", remaining=5, total=5)
    with pytest.raises(BadRequestError):
        await ledger.set_allowance("u1", -1)

