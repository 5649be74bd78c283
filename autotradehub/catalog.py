import logging
from typing import Any, Dict, List, Optional

from .config import settings
from .database import Database
from .models import Product

logger = logging.getLogger(__name__)


def display_title(row: Dict[str, Any]) -> str:
    title = (row.get("title") or "").strip()
    if title:
        return title
    return " ".join(p for p in (row.get("make"), row.get("model")) if p) or "Untitled product"


def normalize_images(images: Any) -> List[str]:
    if isinstance(images, (list, tuple)):
        return [str(i) for i in images if i]
    if images:
        return [str(images)]
    return []


def normalize_product_row(row: Dict[str, Any], default_stock: Optional[int] = None) -> Product:
    """Turn a raw products row into a Product with every field present."""
    stock = row.get("stock_quantity")
    if stock is None:
        stock = default_stock if default_stock is not None else settings.DEFAULT_STOCK_QUANTITY
    data = {
        **row,
        "title": display_title(row),
        "images": normalize_images(row.get("images")),
        "stock_quantity": stock,
    }
    return Product.model_validate(data)


class CatalogReader:
    def __init__(self, db: Database, default_stock: Optional[int] = None):
        self.db = db
        self.default_stock = default_stock

    async def get_product(self, product_id: str) -> Optional[Product]:
        row = self.db.get("products", product_id)
        if row is None:
            return None
        return normalize_product_row(row, self.default_stock)

    async def list_products(self, category: Optional[str] = None, active_only: bool = True) -> List[Product]:
        out = []
        for row in self.db.select("products"):
            if category and row.get("category") != category:
                continue
            if active_only and not row.get("is_active", True):
                continue
            out.append(normalize_product_row(row, self.default_stock))
        return out
