from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ListProductIn(BaseModel):
    product_id: str
    selling_price: Decimal


class PaymentMethodIn(BaseModel):
    payment_type: Optional[str] = None
    provider: Optional[str] = None
    account_details: Optional[Dict[str, Any]] = None
    is_default: bool = False


class ResetPasswordEmailIn(BaseModel):
    to: Optional[str] = None
    name: Optional[str] = None
    resetLink: Optional[str] = None


class ContactEmailIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class ReconcileIn(BaseModel):
    rules: Optional[List[str]] = None


def _missing(payload: BaseModel, *fields: str) -> List[str]:
    return [f for f in fields if not getattr(payload, f)]
