#!/usr/bin/env python
from autotradehub.cart import CartAggregator
from autotradehub.errors import InvalidPriceError
from autotradehub.models import PartnerProduct, Product
from sdk.hubclient import HubClient


def main():
    c = HubClient(base_url="http://127.0.0.1:8085", user_id="user-alice")

    # -----------------------------
    # Reset and seed for demo
    # -----------------------------
    print("Resetting store...")
    c.reset()
    print(c.seed())

    # -----------------------------
    # Catalog (normalized rows)
    # -----------------------------
    print("\nListing products...")
    for p in c.list_products():
        print(f"  {p['id']}: {p['title']} stock={p['stock_quantity']} images={len(p['images'])}")

    # -----------------------------
    # Partner store and prices
    # -----------------------------
    print("\nLaurent Motors store (looked up by profile id)...")
    print(c.store_products("profile-laurent"))

    print("\nResolving prices...")
    print(c.resolve_price("prod-porsche-911", "profile-laurent"))
    print(c.resolve_price("prod-porsche-911"))
    print(c.resolve_price("prod-ford-ranger"))

    # -----------------------------
    # Local cart
    # -----------------------------
    print("\nFilling a local cart...")
    cart = CartAggregator()
    porsche = Product.model_validate(c.get_product("prod-porsche-911"))
    listing = c.resolve_price("prod-porsche-911", "profile-laurent")
    cart.add_item(porsche, PartnerProduct.model_validate(listing["partner_product"]), 1)
    cart.add_item(Product.model_validate(c.get_product("prod-toyota-hilux")), None, 2)
    try:
        cart.add_item(Product.model_validate(c.get_product("prod-ford-ranger")))
    except InvalidPriceError as e:
        print(f"  rejected: {e}")
    print(f"  lines={cart.get_item_count()} units={cart.get_unit_count()} total={cart.get_total()}")

    # -----------------------------
    # Reconcile historical data
    # -----------------------------
    print("\nReconciling data...")
    print(c.reconcile())
    print("Harbor store after partner id repair:", c.store_products("profile-harbor"))

    # -----------------------------
    # Public order lookup
    # -----------------------------
    print("\nLooking up ATH-1001...")
    print(c.lookup_order("ATH-1001"))

    # -----------------------------
    # Payout, twice
    # -----------------------------
    print("\nPaying out order-1001...")
    print(c.process_payout("order-1001").json())
    print("Second attempt:", c.process_payout("order-1001").json())
    print("Wallet:", c.view_wallet("user-laurent"))
    print("Transactions:", c.list_transactions("user-laurent"))

    # -----------------------------
    # Customer payment methods
    # -----------------------------
    print("\nAdding a payment method for alice...")
    print(c.add_payment_method("bank_transfer", "chase", {"last4": "4821"}, is_default=True))
    print(c.payment_methods())


if __name__ == "__main__":
    main()
