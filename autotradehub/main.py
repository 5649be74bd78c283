# autotradehub/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .catalog import CatalogReader
from .config import settings
from .core import (
    ContactEmailIn,
    ListProductIn,
    PaymentMethodIn,
    ReconcileIn,
    ResetPasswordEmailIn,
    _missing,
)
from .database import Database
from .errors import NotFoundError, TradeHubError, ValidationError
from .mailer import Mailer
from .models import User
from .orders import OrderLookupService
from .payment_methods import PaymentMethodService
from .payout import PayoutService
from .reconcile import reconcile
from .resolver import PartnerProductResolver
from .seed import seed_database

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# ---------------------------
# Dependencies
# ---------------------------
def get_db(request: Request) -> Database:
    return request.app.state.db


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_current_user(x_user_id: Optional[str] = Header(None), db: Database = Depends(get_db)) -> User:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    row = db.get("users", x_user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="user not found")
    return User.model_validate(row)


def create_app(db: Optional[Database] = None, mailer: Optional[Mailer] = None) -> FastAPI:
    database = db or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)
        await database.connect()
        yield
        await database.close()
        logger.info("Shutting down...")

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.db = database
    app.state.mailer = mailer or Mailer()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------------------------
    # Error rendering
    # ---------------------------
    @app.exception_handler(TradeHubError)
    async def tradehub_error_handler(request: Request, exc: TradeHubError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # ---------------------------
    # Catalog
    # ---------------------------
    @app.get("/products")
    async def list_products(category: Optional[str] = None, active_only: bool = True, db: Database = Depends(get_db)):
        return await CatalogReader(db).list_products(category=category, active_only=active_only)

    @app.get("/products/{product_id}")
    async def get_product(product_id: str, db: Database = Depends(get_db)):
        product = await CatalogReader(db).get_product(product_id)
        if product is None:
            raise NotFoundError("product not found")
        return product

    # ---------------------------
    # Partner products / pricing
    # ---------------------------
    @app.get("/partners/{partner}/products")
    async def list_store_products(partner: str, db: Database = Depends(get_db)):
        return await PartnerProductResolver(db).list_store_products(partner)

    @app.post("/partners/{partner}/products", status_code=201)
    async def list_partner_product(partner: str, payload: ListProductIn, db: Database = Depends(get_db)):
        return await PartnerProductResolver(db).list_product(partner, payload.product_id, payload.selling_price)

    @app.delete("/partners/{partner}/products/{product_id}")
    async def delist_partner_product(partner: str, product_id: str, db: Database = Depends(get_db)):
        deactivated = await PartnerProductResolver(db).delist_product(partner, product_id)
        return {"partner": partner, "product_id": product_id, "deactivated": deactivated}

    @app.get("/partners/{partner}/products/{product_id}/price")
    async def resolve_partner_price(partner: str, product_id: str, db: Database = Depends(get_db)):
        resolution = await PartnerProductResolver(db).resolve(partner, product_id)
        if resolution is None:
            raise NotFoundError("product not found")
        return resolution

    @app.get("/pricing/{product_id}")
    async def resolve_catalog_price(product_id: str, db: Database = Depends(get_db)):
        resolution = await PartnerProductResolver(db).resolve(None, product_id)
        if resolution is None:
            raise NotFoundError("product not found")
        return resolution

    # ---------------------------
    # Payouts / wallet
    # ---------------------------
    @app.post("/orders/{order_id}/payout")
    async def process_payout(order_id: str, db: Database = Depends(get_db)):
        return await PayoutService(db).process_order_payout(order_id)

    @app.get("/wallet/{user_id}")
    async def get_wallet(user_id: str, db: Database = Depends(get_db)):
        return await PayoutService(db).get_wallet(user_id)

    @app.get("/wallet/{user_id}/transactions")
    async def list_wallet_transactions(user_id: str, db: Database = Depends(get_db)):
        return await PayoutService(db).list_transactions(user_id)

    # ---------------------------
    # Public order lookup
    # ---------------------------
    @app.get("/public/orders/{order_ref}")
    async def public_order(order_ref: str, db: Database = Depends(get_db)):
        order = await OrderLookupService(db).get_public_order(order_ref)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    # ---------------------------
    # Customer payment methods
    # ---------------------------
    @app.get("/customer/payment-methods")
    async def get_payment_methods(user: User = Depends(get_current_user), db: Database = Depends(get_db)):
        methods = await PaymentMethodService(db).list_methods(user)
        return {"paymentMethods": methods, "customer": {"id": user.id, "email": user.email}}

    @app.post("/customer/payment-methods", status_code=201)
    async def add_payment_method(
        payload: PaymentMethodIn,
        user: User = Depends(get_current_user),
        db: Database = Depends(get_db),
    ):
        method = await PaymentMethodService(db).add_method(
            user,
            payload.payment_type,
            payload.provider,
            payload.account_details,
            payload.is_default,
        )
        return {"paymentMethod": method, "message": "Payment method added successfully"}

    # ---------------------------
    # Email
    # ---------------------------
    @app.post("/email/reset-password")
    async def email_reset_password(payload: ResetPasswordEmailIn, mailer: Mailer = Depends(get_mailer)):
        if _missing(payload, "to", "name", "resetLink"):
            raise ValidationError("Missing required fields: to, name, resetLink")
        return await mailer.send_password_reset(payload.to, payload.name, payload.resetLink)

    @app.post("/email/contact")
    async def email_contact(payload: ContactEmailIn, mailer: Mailer = Depends(get_mailer)):
        if _missing(payload, "name", "email", "subject", "message"):
            raise ValidationError("Missing required fields: name, email, subject, message")
        return await mailer.send_contact(payload.name, payload.email, payload.subject, payload.message)

    # ---------------------------
    # Admin / utility
    # ---------------------------
    @app.post("/admin/reconcile")
    async def run_reconcile(payload: Optional[ReconcileIn] = None, db: Database = Depends(get_db)):
        report = reconcile(db, payload.rules if payload else None)
        return {"report": report}

    @app.post("/seed")
    async def seed(db: Database = Depends(get_db)):
        return {"inserted": seed_database(db)}

    @app.post("/reset")
    async def reset_all(db: Database = Depends(get_db)):
        db.reset()
        return {"status": "reset"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("autotradehub.main:app", host="0.0.0.0", port=8085)
