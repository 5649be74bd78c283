# autotradehub/models.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, PlainSerializer, SerializationInfo, computed_field


def _money_json(value: Decimal, info: SerializationInfo):
    # exact_money keeps every digit, used for the persisted cart
    if info.context and info.context.get("exact_money"):
        return str(value)
    return float(value)


# Money is Decimal in memory and a plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(_money_json, when_used="json")]


class Product(BaseModel):
    id: str
    title: str
    make: Optional[str] = None
    model: Optional[str] = None
    original_price: Optional[Money] = None
    stock_quantity: int = 10
    images: List[str] = Field(default_factory=list)
    sku: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True


class PartnerProfile(BaseModel):
    id: str
    user_id: Optional[str] = None
    store_name: str = "Partner Store"
    commission_rate: Optional[float] = None
    partner_status: str = "approved"


class PartnerProduct(BaseModel):
    id: str
    partner_id: str
    product_id: str
    selling_price: Optional[Money] = None
    is_active: bool = True
    partner_store_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StoreListing(BaseModel):
    partner_product: PartnerProduct
    product: Product


class CartItem(BaseModel):
    product: Product
    partner_product: Optional[PartnerProduct] = None
    quantity: int = Field(gt=0)
    unit_price: Money = Field(gt=0)
    name: str
    title: str
    partner_id: str = ""
    partner_store_name: str = "Partner Store"

    @computed_field
    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity


# ---------------------------
# Price resolution
# ---------------------------
class PartnerPrice(BaseModel):
    kind: Literal["partner"] = "partner"
    price: Money
    partner_product: PartnerProduct


class CatalogPrice(BaseModel):
    kind: Literal["catalog"] = "catalog"
    price: Money


class InvalidPrice(BaseModel):
    kind: Literal["invalid"] = "invalid"
    reason: str
    price: Optional[Money] = None


PriceResolution = Annotated[
    Union[PartnerPrice, CatalogPrice, InvalidPrice],
    Field(discriminator="kind"),
]


# ---------------------------
# Orders, wallets, payouts
# ---------------------------
class OrderItem(BaseModel):
    id: str
    order_id: str
    product_name: str
    quantity: int
    unit_price: Money
    total_price: Money


class Order(BaseModel):
    id: str
    order_number: str
    partner_id: Optional[str] = None
    customer_id: Optional[str] = None
    total_amount: Money = Decimal("0")
    base_cost_total: Optional[Money] = None
    currency: str = "USD"
    status: str = "pending"
    payment_status: str = "pending"
    shipping_fee: Money = Decimal("0")
    tax_fee: Money = Decimal("0")
    paid_out: bool = False
    payout_amount: Optional[Money] = None
    payout_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PublicOrderItem(BaseModel):
    id: str
    product_name: str
    quantity: int
    unit_price: Money
    total_price: Money


class PublicOrder(BaseModel):
    id: str
    order_number: str
    total_amount: Money
    currency: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    payment_status: str
    shipping_fee: Money
    tax_fee: Money
    items: List[PublicOrderItem] = Field(default_factory=list)
    isPublicView: bool = True
    accessType: str = "public"


class WalletTransaction(BaseModel):
    id: str
    user_id: str
    order_id: Optional[str] = None
    amount: Money
    type: str
    status: str = "completed"
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class WalletBalance(BaseModel):
    user_id: str
    balance: Money = Decimal("0")
    updated_at: Optional[datetime] = None


class PayoutBreakdown(BaseModel):
    total_amount: Money
    base_cost_total: Money
    commission_rate: float
    commission_earnings: Money
    order_profit: Money
    total_payout_amount: Money


class PayoutResult(BaseModel):
    order_id: str
    partner_user_id: str
    transaction_id: str
    breakdown: PayoutBreakdown
    payout_date: datetime


# ---------------------------
# Customers
# ---------------------------
class User(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class PaymentMethod(BaseModel):
    id: str
    customer_id: str
    payment_type: str
    provider: str
    account_details: Dict[str, Any] = Field(default_factory=dict)
    is_default: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
