# sdk/hubclient.py
import requests
import httpx
from typing import Any, Dict, List, Optional


class HubClient:
    def __init__(self, base_url: str = "http://localhost:8085", user_id: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        if user_id:
            self.session.headers.update({"X-User-Id": user_id})

    def reset(self):
        return self.session.post(f"{self.base_url}/reset", timeout=self.timeout).json()

    def seed(self):
        r = self.session.post(f"{self.base_url}/seed", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Catalog
    def list_products(self, category: Optional[str] = None, active_only: bool = True) -> List[Dict[str, Any]]:
        params = {"active_only": "true" if active_only else "false"}
        if category:
            params["category"] = category
        r = self.session.get(f"{self.base_url}/products", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, product_id: str):
        r = self.session.get(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Partner products
    def store_products(self, partner: str):
        r = self.session.get(f"{self.base_url}/partners/{partner}/products", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def list_partner_product(self, partner: str, product_id: str, selling_price: float):
        r = self.session.post(f"{self.base_url}/partners/{partner}/products", json={
            "product_id": product_id, "selling_price": selling_price
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delist_partner_product(self, partner: str, product_id: str):
        r = self.session.delete(f"{self.base_url}/partners/{partner}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def resolve_price(self, product_id: str, partner: Optional[str] = None):
        if partner:
            url = f"{self.base_url}/partners/{partner}/products/{product_id}/price"
        else:
            url = f"{self.base_url}/pricing/{product_id}"
        r = self.session.get(url, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Payouts / wallet
    def process_payout(self, order_id: str):
        # no raise_for_status here, callers inspect 404/409 bodies
        return self.session.post(f"{self.base_url}/orders/{order_id}/payout", timeout=self.timeout)

    async def process_payout_async(self, order_id: str):
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(f"{self.base_url}/orders/{order_id}/payout")

    def view_wallet(self, user_id: str):
        r = self.session.get(f"{self.base_url}/wallet/{user_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def list_transactions(self, user_id: str):
        r = self.session.get(f"{self.base_url}/wallet/{user_id}/transactions", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Public order lookup
    def lookup_order(self, order_ref: str) -> Optional[Dict[str, Any]]:
        r = self.session.get(f"{self.base_url}/public/orders/{order_ref}", timeout=self.timeout)
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()

    # Payment methods (needs user_id)
    def payment_methods(self):
        r = self.session.get(f"{self.base_url}/customer/payment-methods", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def add_payment_method(self, payment_type: str, provider: str, account_details: Dict[str, Any], is_default: bool = False):
        r = self.session.post(f"{self.base_url}/customer/payment-methods", json={
            "payment_type": payment_type,
            "provider": provider,
            "account_details": account_details,
            "is_default": is_default,
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Email
    def send_password_reset(self, to: str, name: str, reset_link: str):
        r = self.session.post(f"{self.base_url}/email/reset-password", json={
            "to": to, "name": name, "resetLink": reset_link
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Admin
    def reconcile(self, rules: Optional[List[str]] = None):
        r = self.session.post(f"{self.base_url}/admin/reconcile", json={"rules": rules}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()


if __name__ == "__main__":
    import argparse
    import json
    from autotradehub.config import settings

    parser = argparse.ArgumentParser(description="AutoTradeHub CLI")
    parser.add_argument("--base-url", default=settings.API_BASE_URL)
    parser.add_argument("--user-id", help="Customer id sent as X-User-Id")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # Catalog / pricing commands
    # ---------------------------
    lp = subparsers.add_parser("list-products", help="List catalog products")
    lp.add_argument("--category", help="Filter products by category")
    lp.add_argument("--include-inactive", action="store_true", help="Also list inactive products")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True)

    sp = subparsers.add_parser("store-products", help="List a partner's store")
    sp.add_argument("--partner", required=True, help="Partner profile id or user id")

    pr = subparsers.add_parser("price", help="Resolve the price of a product")
    pr.add_argument("--product-id", required=True)
    pr.add_argument("--partner", help="Partner profile id or user id")

    lst = subparsers.add_parser("list-product", help="List a catalog product in a partner store")
    lst.add_argument("--partner", required=True)
    lst.add_argument("--product-id", required=True)
    lst.add_argument("--price", type=float, required=True, help="Selling price")

    dl = subparsers.add_parser("delist-product", help="Remove a product from a partner store")
    dl.add_argument("--partner", required=True)
    dl.add_argument("--product-id", required=True)

    # ---------------------------
    # Orders / wallet commands
    # ---------------------------
    po = subparsers.add_parser("payout", help="Pay out a completed order")
    po.add_argument("--order-id", required=True)

    lo = subparsers.add_parser("lookup-order", help="Public order lookup by id or order number")
    lo.add_argument("--order", required=True)

    vw = subparsers.add_parser("view-wallet", help="View wallet balance")
    vw.add_argument("--user-id", dest="wallet_user", required=True)

    tx = subparsers.add_parser("transactions", help="List wallet transactions")
    tx.add_argument("--user-id", dest="wallet_user", required=True)

    # ---------------------------
    # Admin commands
    # ---------------------------
    subparsers.add_parser("payment-methods", help="List the customer's payment methods")
    subparsers.add_parser("seed", help="Load the demo data set")
    rc = subparsers.add_parser("reconcile", help="Run data reconciliation rules")
    rc.add_argument("--rule", action="append", help="Rule name (repeatable, default: all)")

    args = parser.parse_args()
    c = HubClient(base_url=args.base_url, user_id=args.user_id)

    if args.command == "list-products":
        out = c.list_products(args.category, active_only=not args.include_inactive)
    elif args.command == "get-product":
        out = c.get_product(args.product_id)
    elif args.command == "store-products":
        out = c.store_products(args.partner)
    elif args.command == "price":
        out = c.resolve_price(args.product_id, args.partner)
    elif args.command == "list-product":
        out = c.list_partner_product(args.partner, args.product_id, args.price)
    elif args.command == "delist-product":
        out = c.delist_partner_product(args.partner, args.product_id)
    elif args.command == "payout":
        out = c.process_payout(args.order_id).json()
    elif args.command == "lookup-order":
        out = c.lookup_order(args.order) or {"error": "Order not found"}
    elif args.command == "view-wallet":
        out = c.view_wallet(args.wallet_user)
    elif args.command == "transactions":
        out = c.list_transactions(args.wallet_user)
    elif args.command == "payment-methods":
        out = c.payment_methods()
    elif args.command == "seed":
        out = c.seed()
    else:
        out = c.reconcile(args.rule)
    print(json.dumps(out, indent=2))
