import hashlib
import hmac
import json
import os
import time
from typing import Generator

import pytest

os.environ.setdefault("USER_STORE_BACKEND", "memory")
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")

from pockethr.core.exceptions import CreditLookupError, PersistenceError  # noqa: E402
from pockethr.services.credits import CreditLedger  # noqa: E402
from pockethr.stores.memory import InMemoryUserStore  # noqa: E402

WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]


class FlakyUserStore(InMemoryUserStore):
    """In-memory store that can be told to fail reads or writes."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False
        self.reads = 0
        self.writes = 0

    async def read(self, user_id):
        self.reads += 1
        if self.fail_reads:
            raise CreditLookupError(details={"user_id": user_id})
        return await super().read(user_id)

    async def write(self, user_id, remaining, total=None):
        self.writes += 1
        if self.fail_writes:
            raise PersistenceError(details={"user_id": user_id})
        await super().write(user_id, remaining, total)


@pytest.fixture
def store() -> FlakyUserStore:
    return FlakyUserStore()


@pytest.fixture
def ledger(store) -> CreditLedger:
    return CreditLedger(store)


@pytest.fixture
def client(store) -> Generator:
    from fastapi.testclient import TestClient

    from pockethr.deps import get_store
    from pockethr.main import app

    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Return a helper that signs the test client in as a user."""
    from pockethr.core.security import create_session_cookie, session_payload
    from pockethr.deps import SESSION_COOKIE_NAME

    def _login(user_id: str, role: str = "user") -> None:
        client.cookies.set(SESSION_COOKIE_NAME, create_session_cookie(session_payload(user_id, role)))

    return _login


def _signed_event(event: dict, secret: str = WEBHOOK_SECRET) -> tuple[bytes, str]:
    """Serialize an event and build a matching Stripe-Signature header."""
    payload = json.dumps(event).encode()
    timestamp = int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.".encode() + payload,
        hashlib.sha256,
    ).hexdigest()
    return payload, f"t={timestamp},v1={signature}"


@pytest.fixture
def sign():
    return _signed_event
