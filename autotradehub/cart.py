"""
Client-side cart.

The cart is a single list of CartItem, written to durable storage as one JSON
array under a fixed key after every mutation. Writes are fire-and-forget: a
failed write is logged and the in-memory cart stays authoritative. Two
processes sharing the same storage overwrite each other (last write wins).
"""
import json
import logging
import os
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import TypeAdapter

from .catalog import display_title
from .config import settings
from .errors import InvalidPriceError, ValidationError
from .models import CartItem, PartnerProduct, Product

logger = logging.getLogger(__name__)

_cart_adapter = TypeAdapter(List[CartItem])


def _check_quantity(quantity) -> None:
    # bool is an int subclass, True must not count as 1
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity must be an integer")


# ---------------------------
# Storage backends
# ---------------------------
class CartStorage:
    def load(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def save(self, key: str, blob: str) -> None:
        raise NotImplementedError


class MemoryCartStorage(CartStorage):
    def __init__(self):
        self.blobs: Dict[str, str] = {}

    def load(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self.blobs[key] = blob


class FileCartStorage(CartStorage):
    """One JSON file per storage key inside a directory."""

    def __init__(self, directory: Optional[str] = None):
        self.directory = directory or settings.CART_STORAGE_DIR

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def save(self, key: str, blob: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        with open(self._path(key), "w", encoding="utf-8") as f:
            f.write(blob)


# ---------------------------
# Aggregator
# ---------------------------
class CartAggregator:
    def __init__(self, storage: Optional[CartStorage] = None, storage_key: Optional[str] = None):
        self.storage = storage or MemoryCartStorage()
        self.storage_key = storage_key or settings.CART_STORAGE_KEY
        self.items: List[CartItem] = self._load()

    def _load(self) -> List[CartItem]:
        try:
            blob = self.storage.load(self.storage_key)
            if not blob:
                return []
            return _cart_adapter.validate_json(blob)
        except Exception as e:
            logger.warning("Discarding unreadable cart under %r: %s", self.storage_key, e)
            return []

    def _persist(self) -> None:
        try:
            blob = _cart_adapter.dump_json(self.items, context={"exact_money": True}).decode("utf-8")
            self.storage.save(self.storage_key, blob)
        except Exception as e:
            logger.error("Failed to persist cart under %r: %s", self.storage_key, e)

    # ---------------------------
    # Mutations
    # ---------------------------
    def add_item(self, product: Product, partner_product: Optional[PartnerProduct] = None, quantity: int = 1) -> CartItem:
        _check_quantity(quantity)
        if quantity < 1:
            raise ValidationError("quantity must be a positive integer")

        price = (partner_product.selling_price if partner_product else None) or product.original_price
        if price is None or price <= 0:
            logger.error("Invalid price for product %s: %s", product.id, price)
            raise InvalidPriceError(f"Invalid price for product {product.id}")

        partner_id = partner_product.partner_id if partner_product else ""
        for idx, item in enumerate(self.items):
            if item.product.id == product.id and item.partner_id == partner_id:
                # unit price is fixed at the time the line was created
                updated = item.model_copy(update={"quantity": item.quantity + quantity})
                self.items[idx] = updated
                self._persist()
                return updated

        title = display_title(product.model_dump())
        item = CartItem(
            product=product,
            partner_product=partner_product,
            quantity=quantity,
            unit_price=Decimal(price),
            name=title,
            title=title,
            partner_id=partner_id,
            partner_store_name=(partner_product.partner_store_name if partner_product else None) or "Partner Store",
        )
        self.items.append(item)
        self._persist()
        return item

    def remove_item(self, product_id: str) -> None:
        self.items = [i for i in self.items if i.product.id != product_id]
        self._persist()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        _check_quantity(quantity)
        if quantity <= 0:
            self.remove_item(product_id)
            return
        self.items = [
            i.model_copy(update={"quantity": quantity}) if i.product.id == product_id else i
            for i in self.items
        ]
        self._persist()

    def clear_cart(self) -> None:
        self.items = []
        self._persist()

    def clear_partner_cart(self, partner_id: str) -> None:
        self.items = [i for i in self.items if i.partner_id != partner_id]
        self._persist()

    # ---------------------------
    # Queries
    # ---------------------------
    def get_total(self) -> Decimal:
        return sum((i.subtotal for i in self.items), Decimal("0"))

    def get_item_count(self) -> int:
        return len(self.items)

    def get_unit_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def get_partner_cart_items(self, partner_id: str) -> List[CartItem]:
        return [i for i in self.items if i.partner_id == partner_id]

    def get_partner_store_name(self, partner_id: str) -> str:
        for i in self.items:
            if i.partner_id == partner_id and i.partner_product and i.partner_product.partner_store_name:
                return i.partner_product.partner_store_name
        return "Partner Store"

    def to_json(self) -> str:
        return _cart_adapter.dump_json(self.items).decode("utf-8")
