# tests/test_resolver.py
import asyncio
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from autotradehub.database import Database
from autotradehub.errors import InvalidPriceError, PartnerNotFoundError, ProductNotFoundError
from autotradehub.main import create_app
from autotradehub.models import CatalogPrice, InvalidPrice, PartnerPrice
from autotradehub.resolver import PartnerProductResolver


def make_db():
    db = Database()
    db.insert("partner_profiles", {"id": "P1", "user_id": "U1", "store_name": "Laurent Motors", "commission_rate": 12})
    db.insert("products", {"id": "prod-1", "title": "BMW M3", "original_price": Decimal("500")})
    db.insert("products", {"id": "prod-2", "title": "", "make": "Kia", "model": "Ceed", "original_price": Decimal("0")})
    db.insert("partner_products", {
        "id": "pp-1", "partner_id": "U1", "product_id": "prod-1",
        "selling_price": Decimal("650"), "is_active": True,
    })
    return db


def test_profile_id_translates_to_user_id():
    resolver = PartnerProductResolver(make_db())
    assert resolver.to_user_id("P1") == "U1"
    # user ids pass through untouched
    assert resolver.to_user_id("U1") == "U1"


def test_translated_lookup_finds_row_and_raw_profile_id_does_not():
    resolver = PartnerProductResolver(make_db())

    assert resolver.find_partner_product("P1", "prod-1") is None
    assert resolver.find_partner_product("U1", "prod-1").id == "pp-1"

    res = asyncio.run(resolver.resolve("P1", "prod-1"))
    assert isinstance(res, PartnerPrice)
    assert res.price == Decimal("650")
    assert res.partner_product.partner_id == "U1"
    assert res.partner_product.partner_store_name == "Laurent Motors"


def test_resolving_with_user_id_gives_same_price():
    resolver = PartnerProductResolver(make_db())
    res = asyncio.run(resolver.resolve("U1", "prod-1"))
    assert isinstance(res, PartnerPrice)
    assert res.price == Decimal("650")


def test_no_listing_falls_back_to_catalog_price():
    resolver = PartnerProductResolver(make_db())
    res = asyncio.run(resolver.resolve("someone-else", "prod-1"))
    assert isinstance(res, CatalogPrice)
    assert res.price == Decimal("500")

    res = asyncio.run(resolver.resolve(None, "prod-1"))
    assert isinstance(res, CatalogPrice)


def test_inactive_listing_is_ignored():
    db = make_db()
    db.update("partner_products", "pp-1", {"is_active": False})
    res = asyncio.run(PartnerProductResolver(db).resolve("P1", "prod-1"))
    assert isinstance(res, CatalogPrice)


def test_zero_catalog_price_is_invalid():
    res = asyncio.run(PartnerProductResolver(make_db()).resolve(None, "prod-2"))
    assert isinstance(res, InvalidPrice)
    assert res.kind == "invalid"


def test_missing_product_resolves_to_none():
    assert asyncio.run(PartnerProductResolver(make_db()).resolve("P1", "nope")) is None


def test_profile_without_user_id_is_an_error():
    db = make_db()
    db.insert("partner_profiles", {"id": "P2", "user_id": None, "store_name": "Orphan"})
    with pytest.raises(PartnerNotFoundError):
        PartnerProductResolver(db).to_user_id("P2")


def test_listing_a_product_writes_user_id():
    db = make_db()
    resolver = PartnerProductResolver(db)
    pp = asyncio.run(resolver.list_product("P1", "prod-2", Decimal("18000")))
    assert pp.partner_id == "U1"
    assert db.select("partner_products", partner_id="P1") == []

    # relisting updates the existing row instead of adding a second one
    asyncio.run(resolver.list_product("P1", "prod-2", Decimal("17500")))
    rows = db.select("partner_products", partner_id="U1", product_id="prod-2")
    assert len(rows) == 1
    assert rows[0]["selling_price"] == Decimal("17500")


def test_listing_rejects_bad_price_and_unknown_product():
    resolver = PartnerProductResolver(make_db())
    with pytest.raises(InvalidPriceError):
        asyncio.run(resolver.list_product("P1", "prod-1", Decimal("0")))
    with pytest.raises(ProductNotFoundError):
        asyncio.run(resolver.list_product("P1", "nope", Decimal("10")))


def test_delist_is_soft_and_idempotent():
    db = make_db()
    resolver = PartnerProductResolver(db)
    assert asyncio.run(resolver.delist_product("P1", "prod-1")) == 1
    assert asyncio.run(resolver.delist_product("P1", "prod-1")) == 0
    assert db.get("partner_products", "pp-1")["is_active"] is False


def test_store_listing_joins_products():
    listings = asyncio.run(PartnerProductResolver(make_db()).list_store_products("P1"))
    assert len(listings) == 1
    assert listings[0].product.title == "BMW M3"
    assert listings[0].partner_product.partner_store_name == "Laurent Motors"


# ---------------------------
# HTTP
# ---------------------------
client = TestClient(create_app(make_db()))


def test_price_endpoint_translates_profile_id():
    r = client.get("/partners/P1/products/prod-1/price")
    assert r.status_code == 200
    body = r.json()
    assert body["kind"] == "partner"
    assert body["price"] == 650.0


def test_catalog_price_endpoint():
    assert client.get("/pricing/prod-1").json() == {"kind": "catalog", "price": 500.0}
    assert client.get("/pricing/prod-2").json()["kind"] == "invalid"
    r = client.get("/pricing/missing")
    assert r.status_code == 404
    assert r.json() == {"error": "product not found"}


def test_list_product_endpoint_validates_price():
    r = client.post("/partners/P1/products", json={"product_id": "prod-1", "selling_price": 0})
    assert r.status_code == 400
    assert r.json()["error"] == "selling_price must be > 0"
