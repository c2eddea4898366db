"""HTTP layer: credits, webhook and admin routes against the in-memory store."""


def test_balance_requires_session(client):
    r = client.get("/v1/credits/balance")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


def test_invalid_cookie_rejected(client):
    client.cookies.set("pockethr_session", "not-a-real-cookie")
    r = client.get("/v1/credits/balance")
    assert r.status_code == 401


def test_balance(client, store, login):
    store.add_user("u1", remaining=100, total=500)
    login("u1")
    r = client.get("/v1/credits/balance")
    assert r.status_code == 200
    assert r.json() == {"remaining": 100, "total": 500}


def test_balance_unavailable_is_not_zero(client, store, login):
    store.add_user("u1", remaining=100, total=500)
    store.fail_reads = True
    login("u1")
    r = client.get("/v1/credits/balance")
    assert r.status_code == 503
    assert r.json()["error"]["code"] == "CREDITS_UNAVAILABLE"


def test_check(client, store, login):
    store.add_user("u1", remaining=10, total=10)
    login("u1")
    assert client.post("/v1/credits/check", json={"amount": 10}).json() == {"enough": True}
    assert client.post("/v1/credits/check", json={"amount": 11}).json() == {"enough": False}


def test_spend(client, store, login):
    store.add_user("u1", remaining=100, total=500)
    login("u1")
    r = client.post("/v1/credits/spend", json={"amount": 30})
    assert r.status_code == 200
    assert r.json() == {"remaining": 70}
    assert store.users["u1"].remaining == 70


def test_spend_insufficient(client, store, login):
    store.add_user("u1", remaining=10, total=500)
    login("u1")
    r = client.post("/v1/credits/spend", json={"amount": 25})
    assert r.status_code == 402
    body = r.json()
    assert body["error"]["code"] == "INSUFFICIENT_CREDITS"
    assert body["error"]["details"] == {"remaining": 10, "requested": 25}
    assert "request_id" in body
    assert store.users["u1"].remaining == 10


def test_spend_write_failure(client, store, login):
    store.add_user("u1", remaining=200, total=500)
    store.fail_writes = True
    login("u1")
    r = client.post("/v1/credits/spend", json={"amount": 50})
    assert r.status_code == 503
    assert r.json()["error"]["code"] == "PERSISTENCE_ERROR"
    assert store.users["u1"].remaining == 200


def test_spend_validation_error(client, store, login):
    store.add_user("u1", remaining=1, total=1)
    login("u1")
    r = client.post("/v1/credits/spend", json={"amount": "lots"})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_usage_charges_words_for_tokens(client, store, login):
    store.add_user("u1", remaining=1000, total=1000)
    login("u1")
    r = client.post("/v1/credits/usage", json={"token_count": 200})
    assert r.status_code == 200
    assert r.json() == {"words": 150, "remaining": 850}


def test_plans(client):
    r = client.get("/v1/credits/plans")
    assert r.status_code == 200
    assert [p["id"] for p in r.json()["plans"]][:3] == ["basic", "premium", "pro"]


def test_webhook_endpoint(client, store, sign):
    store.add_user("u1", remaining=0, total=1000)
    payload, sig = sign({
        "id": "evt_api_1",
        "type": "checkout.session.completed",
        "data": {"object": {"client_reference_id": "u1", "customer": "cus_1"}},
    })
    r = client.post(
        "/v1/payments/webhook",
        content=payload,
        headers={"Stripe-Signature": sig, "Content-Type": "application/json"},
    )
    assert r.status_code == 200
    assert r.json() == {"received": True, "result": "processed"}
    assert store.users["u1"].plan_type == "premium"


def test_webhook_bad_signature(client, sign):
    payload, _ = sign({"id": "evt_api_2", "type": "checkout.session.completed", "data": {"object": {}}})
    r = client.post("/v1/payments/webhook", content=payload, headers={"Stripe-Signature": "t=1,v1=bad"})
    assert r.status_code == 400


def test_admin_set_credits(client, store, login):
    store.add_user("u2", remaining=5, total=1000)
    store.add_user("admin-1", role="admin")
    login("admin-1", role="admin")
    r = client.put("/v1/admin/users/u2/credits", json={"total": 50000})
    assert r.status_code == 200
    assert r.json() == {"user_id": "u2", "remaining": 50000, "total": 50000}


def test_admin_route_forbidden_for_users(client, store, login):
    store.add_user("u2", remaining=5, total=1000)
    login("u1")
    r = client.put("/v1/admin/users/u2/credits", json={"total": 50000})
    assert r.status_code == 403
    assert store.users["u2"].total == 1000


def test_admin_set_credits_unknown_user_is_not_found(client, store, login):
    store.add_user("admin-1", role="admin")
    login("admin-1", role="admin")
    r = client.put("/v1/admin/users/nobody/credits", json={"total": 500})
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"
    assert "nobody" not in store.users


def test_webhook_for_unknown_user_is_acknowledged(client, store, sign):
    payload, sig = sign({
        "id": "evt_ghost",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_ghost", "client_reference_id": "ghost"}},
    })
    r = client.post(
        "/v1/payments/webhook",
        content=payload,
        headers={"Stripe-Signature": sig, "Content-Type": "application/json"},
    )
    assert r.status_code == 200
    assert r.json() == {"received": True, "result": "processed"}
    assert "evt_ghost" in store.events
