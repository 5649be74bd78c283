"""
Partner product resolution.

`partner_products.partner_id` holds the partner's *user* id, while the
storefront usually hands around the partner *profile* row id. Every lookup
translates the identifier first; `find_partner_product` deliberately does not,
so callers that already hold a user id can query the table as-is.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from .catalog import CatalogReader
from .database import Database, utcnow
from .errors import InvalidPriceError, PartnerNotFoundError, ProductNotFoundError
from .models import (
    CatalogPrice,
    InvalidPrice,
    PartnerPrice,
    PartnerProduct,
    PartnerProfile,
    PriceResolution,
    StoreListing,
)

logger = logging.getLogger(__name__)


class PartnerProductResolver:
    def __init__(self, db: Database, catalog: Optional[CatalogReader] = None):
        self.db = db
        self.catalog = catalog or CatalogReader(db)

    # ---------------------------
    # Identity translation
    # ---------------------------
    def get_profile(self, partner_identifier: str) -> Optional[PartnerProfile]:
        row = self.db.get("partner_profiles", partner_identifier)
        if row is None:
            rows = self.db.select("partner_profiles", user_id=partner_identifier)
            row = rows[0] if rows else None
        return PartnerProfile.model_validate(row) if row else None

    def to_user_id(self, partner_identifier: str) -> str:
        profile = self.db.get("partner_profiles", partner_identifier)
        if profile is None:
            return partner_identifier
        if not profile.get("user_id"):
            raise PartnerNotFoundError(f"Partner profile {partner_identifier} has no user_id")
        return profile["user_id"]

    # ---------------------------
    # Queries
    # ---------------------------
    def find_partner_product(self, partner_id: str, product_id: str) -> Optional[PartnerProduct]:
        rows = self.db.select("partner_products", partner_id=partner_id, product_id=product_id, is_active=True)
        return PartnerProduct.model_validate(rows[0]) if rows else None

    async def resolve(self, partner_identifier: Optional[str], product_id: str) -> Optional[PriceResolution]:
        """Return the price to charge for a product, or None if the product doesn't exist."""
        product = await self.catalog.get_product(product_id)
        if product is None:
            return None

        if partner_identifier:
            user_id = self.to_user_id(partner_identifier)
            partner_product = self.find_partner_product(user_id, product_id)
            if partner_product is not None and partner_product.selling_price:
                if partner_product.selling_price < 0:
                    return InvalidPrice(reason="partner selling price is negative", price=partner_product.selling_price)
                profile = self.get_profile(user_id)
                if profile is not None:
                    partner_product.partner_store_name = profile.store_name
                return PartnerPrice(price=partner_product.selling_price, partner_product=partner_product)
            if partner_product is not None:
                logger.warning("Partner product %s has no selling price, using catalog price", partner_product.id)
            else:
                logger.info("No active listing for partner %s / product %s, using catalog price", user_id, product_id)

        price = product.original_price
        if price is None or price <= 0:
            return InvalidPrice(reason=f"product {product_id} has no valid price", price=price)
        return CatalogPrice(price=price)

    async def list_store_products(self, partner_identifier: str) -> List[StoreListing]:
        user_id = self.to_user_id(partner_identifier)
        profile = self.get_profile(user_id)
        out = []
        for row in self.db.select("partner_products", partner_id=user_id, is_active=True):
            product = await self.catalog.get_product(row["product_id"])
            if product is None:
                logger.warning("Listing %s points at missing product %s", row["id"], row["product_id"])
                continue
            partner_product = PartnerProduct.model_validate(row)
            if profile is not None:
                partner_product.partner_store_name = profile.store_name
            out.append(StoreListing(partner_product=partner_product, product=product))
        out.sort(key=lambda l: l.partner_product.created_at or utcnow(), reverse=True)
        return out

    # ---------------------------
    # Listing management
    # ---------------------------
    async def list_product(self, partner_identifier: str, product_id: str, selling_price: Decimal) -> PartnerProduct:
        if selling_price is None or selling_price <= 0:
            raise InvalidPriceError("selling_price must be > 0")
        if await self.catalog.get_product(product_id) is None:
            raise ProductNotFoundError("product not found")

        user_id = self.to_user_id(partner_identifier)
        existing = self.db.select("partner_products", partner_id=user_id, product_id=product_id)
        if existing:
            row = self.db.update(
                "partner_products", existing[0]["id"], {"selling_price": selling_price, "is_active": True}
            )
        else:
            row = self.db.insert("partner_products", {
                "partner_id": user_id,
                "product_id": product_id,
                "selling_price": selling_price,
                "is_active": True,
            })
        logger.info("Partner %s listed product %s at %s", user_id, product_id, selling_price)
        return PartnerProduct.model_validate(row)

    async def delist_product(self, partner_identifier: str, product_id: str) -> int:
        user_id = self.to_user_id(partner_identifier)
        return self.db.update_where(
            "partner_products",
            {"partner_id": user_id, "product_id": product_id, "is_active": True},
            {"is_active": False},
        )
