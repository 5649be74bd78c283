import logging
import re
from typing import Optional

from .database import Database
from .errors import ValidationError
from .models import PublicOrder, PublicOrderItem

logger = logging.getLogger(__name__)

# order ids are uuid hex, order numbers look like ATH-2024-0001
ORDER_REF_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_order_ref(order_ref: Optional[str]) -> str:
    ref = (order_ref or "").strip()
    if not ORDER_REF_PATTERN.match(ref):
        raise ValidationError("Invalid order ID format")
    return ref


class OrderLookupService:
    """Public, unauthenticated order view: no customer or partner fields."""

    def __init__(self, db: Database):
        self.db = db

    async def get_public_order(self, order_ref: str) -> Optional[PublicOrder]:
        ref = validate_order_ref(order_ref)
        row = self.db.get("orders", ref)
        if row is None:
            matches = self.db.select("orders", order_number=ref)
            row = matches[0] if matches else None
        if row is None:
            logger.info("Public order lookup miss for %s", ref)
            return None

        items = [PublicOrderItem.model_validate(i) for i in self.db.select("order_items", order_id=row["id"])]
        return PublicOrder.model_validate({**row, "items": items})
