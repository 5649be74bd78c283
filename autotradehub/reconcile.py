"""
Idempotent data reconciliation.

Each rule inspects one table and rewrites the rows that break a catalog
invariant. Running the same rule set twice changes nothing the second time.
"""
import logging
from typing import Callable, Dict, Iterable, Optional

from .catalog import display_title
from .config import settings
from .database import Database
from .errors import ValidationError

logger = logging.getLogger(__name__)


def fix_stock(db: Database) -> int:
    changed = 0
    for row in db.select("products"):
        stock = row.get("stock_quantity")
        if stock is None or stock <= 0:
            db.update("products", row["id"], {"stock_quantity": settings.DEFAULT_STOCK_QUANTITY})
            changed += 1
    return changed


def fix_images(db: Database) -> int:
    changed = 0
    for row in db.select("products"):
        images = row.get("images")
        if isinstance(images, list) and images:
            continue
        if isinstance(images, str) and images:
            fixed = [images]
        else:
            fixed = [settings.PLACEHOLDER_IMAGE_URL]
        db.update("products", row["id"], {"images": fixed})
        changed += 1
    return changed


def fix_titles(db: Database) -> int:
    changed = 0
    for row in db.select("products"):
        if (row.get("title") or "").strip():
            continue
        db.update("products", row["id"], {"title": display_title(row)})
        changed += 1
    return changed


def fix_partner_ids(db: Database) -> int:
    """Rewrite partner_products.partner_id values that hold a profile row id."""
    changed = 0
    for row in db.select("partner_products"):
        profile = db.get("partner_profiles", row["partner_id"])
        if profile is None or not profile.get("user_id") or profile["user_id"] == row["partner_id"]:
            continue
        user_id = profile["user_id"]
        duplicate = db.select("partner_products", partner_id=user_id, product_id=row["product_id"], is_active=True)
        values = {"partner_id": user_id}
        if duplicate and row.get("is_active"):
            values["is_active"] = False
        db.update("partner_products", row["id"], values)
        logger.info("Partner product %s: partner_id %s -> %s", row["id"], row["partner_id"], user_id)
        changed += 1
    return changed


RULES: Dict[str, Callable[[Database], int]] = {
    "stock": fix_stock,
    "images": fix_images,
    "titles": fix_titles,
    "partner_ids": fix_partner_ids,
}


def reconcile(db: Database, rules: Optional[Iterable[str]] = None) -> Dict[str, int]:
    names = list(rules) if rules else list(RULES)
    unknown = [n for n in names if n not in RULES]
    if unknown:
        raise ValidationError(f"unknown reconciliation rules: {', '.join(unknown)}")

    report = {}
    for name in names:
        report[name] = RULES[name](db)
    logger.info("Reconciliation report: %s", report)
    return report
