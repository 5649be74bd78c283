"""
Partner payouts for completed orders.

A payout credits the partner's wallet with the order total plus a commission
bonus. The `paid_out` flag is claimed with a conditional update before any
wallet row is touched, so an order is paid out at most once even when two
requests race.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from .config import settings
from .database import Database, utcnow
from .errors import (
    AlreadyPaidOutError,
    OrderNotFoundError,
    PartnerNotFoundError,
    PayoutNotEligibleError,
)
from .models import Order, PartnerProfile, PayoutBreakdown, PayoutResult, WalletBalance, WalletTransaction

logger = logging.getLogger(__name__)

PAYOUT_ELIGIBLE_STATUSES = ("completed", "delivered")
CENT = Decimal("0.01")


def _dec(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def calculate_payout(total_amount, base_cost_total, commission_rate: Optional[float] = None) -> PayoutBreakdown:
    """
    commission = total * rate / 100
    profit     = total - base cost
    payout     = base cost + profit + commission  (== total + commission)
    """
    # a stored rate of 0 means "not configured"
    rate = commission_rate or settings.DEFAULT_COMMISSION_RATE
    total = _dec(total_amount)
    base = _dec(base_cost_total)

    commission = (total * _dec(rate) / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)
    profit = total - base
    payout = base + profit + commission
    return PayoutBreakdown(
        total_amount=total,
        base_cost_total=base,
        commission_rate=float(rate),
        commission_earnings=commission,
        order_profit=profit,
        total_payout_amount=payout,
    )


class PayoutService:
    def __init__(self, db: Database):
        self.db = db

    def _load_order(self, order_id: str) -> Order:
        row = self.db.get("orders", order_id)
        if row is None:
            raise OrderNotFoundError("Order not found")
        return Order.model_validate(row)

    def _load_partner(self, order: Order) -> PartnerProfile:
        row = self.db.get("partner_profiles", order.partner_id) if order.partner_id else None
        if row is None or not row.get("user_id"):
            raise PartnerNotFoundError("Partner information not found for this order")
        return PartnerProfile.model_validate(row)

    async def process_order_payout(self, order_id: str) -> PayoutResult:
        logger.info("Processing payout for order %s", order_id)
        order = self._load_order(order_id)

        if order.paid_out:
            logger.warning("Order %s has already been paid out on %s", order_id, order.payout_date)
            raise AlreadyPaidOutError(order_id)
        partner = self._load_partner(order)
        if order.status not in PAYOUT_ELIGIBLE_STATUSES:
            raise PayoutNotEligibleError("Order must be completed or delivered before payout")

        breakdown = calculate_payout(order.total_amount, order.base_cost_total, partner.commission_rate)
        logger.info(
            "Partner payout calculation for order %s: total=%s base=%s profit=%s rate=%s commission=%s payout=%s",
            order_id,
            breakdown.total_amount,
            breakdown.base_cost_total,
            breakdown.order_profit,
            breakdown.commission_rate,
            breakdown.commission_earnings,
            breakdown.total_payout_amount,
        )

        # sole gate for the wallet mutation
        claimed = self.db.update_where("orders", {"id": order_id, "paid_out": False}, {"paid_out": True})
        if claimed == 0:
            logger.warning("Lost payout claim for order %s", order_id)
            raise AlreadyPaidOutError(order_id)

        try:
            transaction = self._record_transaction(order, partner, breakdown)
            await self._credit_wallet(partner.user_id, breakdown.total_payout_amount)
            payout_date = utcnow()
            self.db.update("orders", order_id, {
                "payout_amount": breakdown.total_payout_amount,
                "payout_date": payout_date,
            })
        except Exception:
            # the order stays claimed; a half-applied payout needs manual review
            logger.exception("Payout for order %s failed after claim", order_id)
            raise

        logger.info("Payout processed: %s added to wallet of %s", breakdown.total_payout_amount, partner.user_id)
        return PayoutResult(
            order_id=order_id,
            partner_user_id=partner.user_id,
            transaction_id=transaction.id,
            breakdown=breakdown,
            payout_date=payout_date,
        )

    def _record_transaction(self, order: Order, partner: PartnerProfile, b: PayoutBreakdown) -> WalletTransaction:
        row = self.db.insert("wallet_transactions", {
            "user_id": partner.user_id,
            "order_id": order.id,
            "type": "commission",
            "amount": b.total_payout_amount,
            "status": "completed",
            "description": (
                f"Payout from Order #{order.order_number} - Profit: ${b.order_profit}, "
                f"Commission: ${b.commission_earnings}, Total: ${b.total_payout_amount}, "
                f"Rate: {b.commission_rate:.0f}%"
            ),
        })
        return WalletTransaction.model_validate(row)

    async def _credit_wallet(self, user_id: str, amount: Decimal) -> WalletBalance:
        async with self.db.lock(f"wallet:{user_id}"):
            current = self.db.get("wallet_balances", user_id)
            if current is None:
                row = self.db.insert("wallet_balances", {"user_id": user_id, "balance": amount}, key="user_id")
            else:
                row = self.db.update("wallet_balances", user_id, {"balance": _dec(current["balance"]) + amount})
        return WalletBalance.model_validate(row)

    # ---------------------------
    # Wallet reads
    # ---------------------------
    async def get_wallet(self, user_id: str) -> WalletBalance:
        row = self.db.get("wallet_balances", user_id)
        if row is None:
            return WalletBalance(user_id=user_id, balance=Decimal("0"))
        return WalletBalance.model_validate(row)

    async def list_transactions(self, user_id: str) -> List[WalletTransaction]:
        rows = self.db.select("wallet_transactions", user_id=user_id)
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [WalletTransaction.model_validate(r) for r in rows]
