import logging
from typing import List

from .database import Database
from .errors import ValidationError
from .models import PaymentMethod, User

logger = logging.getLogger(__name__)


class PaymentMethodService:
    def __init__(self, db: Database):
        self.db = db

    async def list_methods(self, user: User) -> List[PaymentMethod]:
        rows = self.db.select("customer_payment_methods", customer_id=user.id, is_active=True)
        # is_default DESC, created_at DESC
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        rows.sort(key=lambda r: bool(r.get("is_default")), reverse=True)
        return [PaymentMethod.model_validate(r) for r in rows]

    async def add_method(
        self,
        user: User,
        payment_type: str,
        provider: str,
        account_details: dict,
        is_default: bool = False,
    ) -> PaymentMethod:
        if not payment_type or not provider or not account_details:
            raise ValidationError("Missing required fields: payment_type, provider, account_details")

        if is_default:
            self.db.update_where("customer_payment_methods", {"customer_id": user.id}, {"is_default": False})

        # TODO: encrypt account_details at rest once a key management service is wired in
        row = self.db.insert("customer_payment_methods", {
            "customer_id": user.id,
            "payment_type": payment_type,
            "provider": provider,
            "account_details": account_details,
            "is_default": is_default,
            "is_active": True,
        })
        logger.info("Added %s payment method for customer %s", payment_type, user.id)
        return PaymentMethod.model_validate(row)
