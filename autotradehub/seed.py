from decimal import Decimal

from .database import Database

# Demo data set: two partners, a handful of vehicles, one completed order.
SEED_PRODUCTS: list[dict] = [
    {"id": "prod-bugatti-chiron", "sku": "BUG-CHI-21", "title": "Bugatti Chiron", "make": "Bugatti", "model": "Chiron",
     "category": "supercar", "original_price": Decimal("2999000.00"), "stock_quantity": 2,
     "images": ["https://res.cloudinary.com/demo/image/upload/chiron-front.jpg"]},
    {"id": "prod-porsche-911", "sku": "POR-911-23", "title": "", "make": "Porsche", "model": "911 Carrera",
     "category": "sports", "original_price": Decimal("114400.00"), "stock_quantity": None,
     "images": "https://res.cloudinary.com/demo/image/upload/911.jpg"},
    {"id": "prod-toyota-hilux", "sku": "TOY-HIL-22", "title": "Toyota Hilux Double Cab", "make": "Toyota",
     "model": "Hilux", "category": "truck", "original_price": Decimal("38500.00"), "stock_quantity": 14,
     "images": None},
    {"id": "prod-ford-ranger", "sku": "FOR-RAN-22", "title": "Ford Ranger Raptor", "make": "Ford", "model": "Ranger",
     "category": "truck", "original_price": Decimal("0"), "stock_quantity": 0, "images": []},
]

SEED_PARTNERS: list[dict] = [
    {"id": "profile-laurent", "user_id": "user-laurent", "store_name": "Laurent Motors", "commission_rate": 15.0},
    {"id": "profile-harbor", "user_id": "user-harbor", "store_name": "Harbor Auto Trade", "commission_rate": None},
]

SEED_PARTNER_PRODUCTS: list[dict] = [
    {"id": "pp-laurent-chiron", "partner_id": "user-laurent", "product_id": "prod-bugatti-chiron",
     "selling_price": Decimal("3150000.00"), "is_active": True},
    {"id": "pp-laurent-911", "partner_id": "user-laurent", "product_id": "prod-porsche-911",
     "selling_price": Decimal("119900.00"), "is_active": True},
    # written with the profile id, the historical mistake reconcile() repairs
    {"id": "pp-harbor-hilux", "partner_id": "profile-harbor", "product_id": "prod-toyota-hilux",
     "selling_price": Decimal("41250.00"), "is_active": True},
]

SEED_USERS: list[dict] = [
    {"id": "user-alice", "email": "alice@example.com", "name": "Alice Buyer"},
    {"id": "user-laurent", "email": "laurent@example.com", "name": "Laurent"},
    {"id": "user-harbor", "email": "harbor@example.com", "name": "Harbor"},
]

SEED_ORDERS: list[dict] = [
    {"id": "order-1001", "order_number": "ATH-1001", "partner_id": "profile-laurent", "customer_id": "user-alice",
     "total_amount": Decimal("119900.00"), "base_cost_total": Decimal("114400.00"), "currency": "USD",
     "status": "completed", "payment_status": "paid", "shipping_fee": Decimal("1200.00"),
     "tax_fee": Decimal("9592.00"), "paid_out": False},
    {"id": "order-1002", "order_number": "ATH-1002", "partner_id": "profile-harbor", "customer_id": "user-alice",
     "total_amount": Decimal("41250.00"), "base_cost_total": Decimal("38500.00"), "currency": "USD",
     "status": "shipped", "payment_status": "paid", "shipping_fee": Decimal("800.00"),
     "tax_fee": Decimal("3300.00"), "paid_out": False},
]

SEED_ORDER_ITEMS: list[dict] = [
    {"id": "item-1001-1", "order_id": "order-1001", "product_name": "Porsche 911 Carrera", "quantity": 1,
     "unit_price": Decimal("119900.00"), "total_price": Decimal("119900.00")},
    {"id": "item-1002-1", "order_id": "order-1002", "product_name": "Toyota Hilux Double Cab", "quantity": 1,
     "unit_price": Decimal("41250.00"), "total_price": Decimal("41250.00")},
]


def seed_database(db: Database) -> int:
    """Load the demo data set into an empty database. Returns rows inserted."""
    if db.count("products"):
        return 0
    inserted = 0
    for table, rows in (
        ("products", SEED_PRODUCTS),
        ("partner_profiles", SEED_PARTNERS),
        ("partner_products", SEED_PARTNER_PRODUCTS),
        ("users", SEED_USERS),
        ("orders", SEED_ORDERS),
        ("order_items", SEED_ORDER_ITEMS),
    ):
        for row in rows:
            db.insert(table, row)
            inserted += 1
    return inserted
