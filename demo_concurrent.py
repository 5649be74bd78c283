import asyncio
from sdk.hubclient import HubClient


async def attempt_payout(client, label, order_id):
    try:
        r = await client.process_payout_async(order_id)
        body = r.json()
        if r.status_code == 200:
            amount = body["breakdown"]["total_payout_amount"]
            print(f"✅ {label} credited {amount} to {body['partner_user_id']}")
        elif r.status_code == 409:
            print(f"❌ {label} rejected: {body.get('error')}")
        else:
            print(f"⚠️  {label} unexpected response {r.status_code}: {body}")
    except Exception as e:
        print(f"❌ {label} unexpected failure: {e}")


async def main():
    c = HubClient(base_url="http://127.0.0.1:8085")

    try:
        c.reset()
    except Exception:
        pass
    c.seed()

    order = c.lookup_order("ATH-1001")
    print(f"\n🧾 Order {order['order_number']} total {order['total_amount']} ({order['status']})")
    print("👛 Wallet before:", c.view_wallet("user-laurent"))

    print("\n⚡ Firing two payouts for the same order...")
    await asyncio.gather(
        attempt_payout(c, "request A", order["id"]),
        attempt_payout(c, "request B", order["id"]),
    )

    print("\n👛 Wallet after:", c.view_wallet("user-laurent"))
    print("🧾 Transactions:", c.list_transactions("user-laurent"))


if __name__ == "__main__":
    asyncio.run(main())
