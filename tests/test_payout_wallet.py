# tests/test_payout_wallet.py
import asyncio
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from autotradehub.database import Database
from autotradehub.errors import AlreadyPaidOutError, PayoutNotEligibleError
from autotradehub.main import create_app
from autotradehub.payout import PayoutService, calculate_payout

db = Database()
client = TestClient(create_app(db))


def reset():
    client.post("/reset")


def seed_order(order_id="o1", status="completed", rate=10, partner_id="P1", **extra):
    if db.get("partner_profiles", "P1") is None:
        db.insert("partner_profiles", {"id": "P1", "user_id": "U1", "store_name": "Laurent Motors", "commission_rate": rate})
    db.insert("orders", {
        "id": order_id,
        "order_number": f"ATH-{order_id}",
        "partner_id": partner_id,
        "total_amount": Decimal("1000"),
        "base_cost_total": Decimal("600"),
        "status": status,
        "paid_out": False,
        **extra,
    })


def test_payout_arithmetic():
    b = calculate_payout(Decimal("1000"), Decimal("600"), 10)
    assert b.commission_earnings == Decimal("100")
    assert b.order_profit == Decimal("400")
    assert b.total_payout_amount == Decimal("1100")


def test_commission_rate_defaults_to_ten_percent():
    b = calculate_payout(Decimal("250"), None, None)
    assert b.commission_rate == 10.0
    assert b.commission_earnings == Decimal("25")
    assert b.total_payout_amount == Decimal("275")


def test_zero_commission_rate_uses_default():
    b = calculate_payout(Decimal("1000"), Decimal("600"), 0)
    assert b.commission_rate == 10.0
    assert b.commission_earnings == Decimal("100")
    assert b.total_payout_amount == Decimal("1100")

    reset()
    seed_order(rate=0)
    r = client.post("/orders/o1/payout")
    assert r.status_code == 200
    assert r.json()["breakdown"]["commission_earnings"] == 100.0
    assert client.get("/wallet/U1").json()["balance"] == 1100.0


def test_payout_credits_wallet_and_marks_order():
    reset()
    seed_order()
    r = client.post("/orders/o1/payout")
    assert r.status_code == 200
    body = r.json()
    assert body["partner_user_id"] == "U1"
    assert body["breakdown"]["total_payout_amount"] == 1100.0

    w = client.get("/wallet/U1").json()
    assert w["balance"] == 1100.0

    order = db.get("orders", "o1")
    assert order["paid_out"] is True
    assert order["payout_amount"] == Decimal("1100")
    assert order["payout_date"] is not None

    txs = client.get("/wallet/U1/transactions").json()
    assert len(txs) == 1
    assert txs[0]["type"] == "commission"
    assert txs[0]["order_id"] == "o1"


def test_second_payout_is_rejected_and_balance_unchanged():
    reset()
    seed_order()
    service = PayoutService(db)
    asyncio.run(service.process_order_payout("o1"))
    with pytest.raises(AlreadyPaidOutError):
        asyncio.run(service.process_order_payout("o1"))

    assert db.get("wallet_balances", "U1")["balance"] == Decimal("1100")
    assert len(db.select("wallet_transactions", order_id="o1")) == 1

    r = client.post("/orders/o1/payout")
    assert r.status_code == 409
    assert r.json() == {"error": "Order has already been paid out to the partner"}


def test_payouts_accumulate_on_existing_balance():
    reset()
    seed_order("o1")
    seed_order("o2")
    client.post("/orders/o1/payout")
    client.post("/orders/o2/payout")
    assert client.get("/wallet/U1").json()["balance"] == 2200.0


def test_order_must_be_completed_or_delivered():
    reset()
    seed_order("o1", status="shipped")
    seed_order("o2", status="delivered")
    with pytest.raises(PayoutNotEligibleError):
        asyncio.run(PayoutService(db).process_order_payout("o1"))
    assert db.get("orders", "o1")["paid_out"] is False

    r = client.post("/orders/o1/payout")
    assert r.status_code == 409
    assert client.post("/orders/o2/payout").status_code == 200


def test_unknown_order_and_missing_partner():
    reset()
    r = client.post("/orders/nope/payout")
    assert r.status_code == 404
    assert r.json() == {"error": "Order not found"}

    seed_order("o3", partner_id="ghost")
    r = client.post("/orders/o3/payout")
    assert r.status_code == 404
    assert r.json()["error"] == "Partner information not found for this order"


def test_failure_after_claim_surfaces_error(monkeypatch):
    reset()
    seed_order()
    service = PayoutService(db)

    async def boom(user_id, amount):
        raise RuntimeError("wallet_balances unavailable")

    monkeypatch.setattr(service, "_credit_wallet", boom)
    with pytest.raises(RuntimeError, match="wallet_balances unavailable"):
        asyncio.run(service.process_order_payout("o1"))
    # the claim is kept, so a retry can't double pay
    assert db.get("orders", "o1")["paid_out"] is True
    assert db.get("wallet_balances", "U1") is None


def test_empty_wallet_reads_as_zero():
    reset()
    assert client.get("/wallet/nobody").json()["balance"] == 0.0
    assert client.get("/wallet/nobody/transactions").json() == []
