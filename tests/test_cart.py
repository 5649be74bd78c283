# tests/test_cart.py
import json
import logging
from decimal import Decimal

import pytest

from autotradehub.cart import CartAggregator, CartStorage, FileCartStorage, MemoryCartStorage
from autotradehub.errors import InvalidPriceError, ValidationError
from autotradehub.models import PartnerProduct, Product


def make_product(pid="p1", price="100", title="Audi A4"):
    return Product(id=pid, title=title, make="Audi", model="A4", original_price=Decimal(price))


def make_listing(pid="p1", partner="U1", price="120", store="Laurent Motors"):
    return PartnerProduct(
        id=f"pp-{partner}-{pid}", partner_id=partner, product_id=pid,
        selling_price=Decimal(price), partner_store_name=store,
    )


def assert_subtotals(cart):
    for item in cart.items:
        assert item.subtotal == item.quantity * item.unit_price


def test_adding_same_product_twice_increments_quantity():
    cart = CartAggregator()
    p = make_product()
    cart.add_item(p, None, 1)
    cart.add_item(p, None, 2)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3
    assert cart.items[0].subtotal == Decimal("300")
    assert_subtotals(cart)


def test_zero_price_without_partner_is_rejected():
    storage = MemoryCartStorage()
    cart = CartAggregator(storage)
    with pytest.raises(InvalidPriceError):
        cart.add_item(make_product(price="0"))
    assert cart.items == []
    assert storage.load(cart.storage_key) is None


def test_missing_catalog_price_is_rejected():
    cart = CartAggregator()
    with pytest.raises(InvalidPriceError):
        cart.add_item(Product(id="p9", title="No price"))
    assert cart.get_item_count() == 0


def test_partner_price_takes_precedence():
    cart = CartAggregator()
    item = cart.add_item(make_product(price="100"), make_listing(price="120"), 2)
    assert item.unit_price == Decimal("120")
    assert item.subtotal == Decimal("240")
    assert item.partner_id == "U1"
    assert item.partner_store_name == "Laurent Motors"


def test_zero_partner_price_falls_back_to_catalog_price():
    cart = CartAggregator()
    item = cart.add_item(make_product(price="100"), make_listing(price="0"))
    assert item.unit_price == Decimal("100")


def test_non_positive_quantity_is_rejected():
    cart = CartAggregator()
    with pytest.raises(ValidationError):
        cart.add_item(make_product(), None, 0)
    assert cart.items == []


def test_non_integer_quantity_is_rejected():
    cart = CartAggregator()
    with pytest.raises(ValidationError):
        cart.add_item(make_product(), None, True)
    with pytest.raises(ValidationError):
        cart.add_item(make_product(), None, 1.5)
    assert cart.items == []


def test_update_quantity_rejects_non_integer():
    storage = MemoryCartStorage()
    cart = CartAggregator(storage)
    cart.add_item(make_product(price="100"), None, 2)
    before = storage.load(cart.storage_key)

    for bad in (2.5, "3", True):
        with pytest.raises(ValidationError):
            cart.update_quantity("p1", bad)

    assert cart.items[0].quantity == 2
    assert cart.get_total() == Decimal("200")
    assert storage.load(cart.storage_key) == before


def test_unit_price_is_fixed_at_add_time():
    cart = CartAggregator()
    cart.add_item(make_product(price="100"))
    cart.add_item(make_product(price="150"), None, 1)
    assert cart.items[0].unit_price == Decimal("100")
    assert cart.items[0].quantity == 2
    assert_subtotals(cart)

    cart.update_quantity("p1", 7)
    assert cart.items[0].unit_price == Decimal("100")
    assert cart.items[0].subtotal == Decimal("700")


def test_same_product_from_two_partners_keeps_two_lines():
    cart = CartAggregator()
    p = make_product()
    cart.add_item(p, make_listing(partner="U1", price="120"))
    cart.add_item(p, make_listing(partner="U2", price="110", store="Harbor"))
    assert cart.get_item_count() == 2
    cart.remove_item("p1")
    assert cart.items == []


def test_update_quantity_zero_equals_remove():
    a, b = CartAggregator(), CartAggregator()
    for cart in (a, b):
        cart.add_item(make_product("p1"), None, 2)
        cart.add_item(make_product("p2", price="50"), None, 1)
    a.update_quantity("p1", 0)
    b.remove_item("p1")
    assert a.items == b.items
    assert [i.product.id for i in a.items] == ["p2"]


def test_remove_missing_item_is_noop():
    cart = CartAggregator()
    cart.add_item(make_product())
    cart.remove_item("nope")
    assert cart.get_item_count() == 1


def test_total_and_item_count():
    cart = CartAggregator()
    cart.add_item(make_product("p1", price="19.99"), None, 3)
    cart.add_item(make_product("p2", price="5.01"), None, 5)
    assert cart.get_item_count() == 2
    assert cart.get_unit_count() == 8
    assert cart.get_total() == Decimal("19.99") * 3 + Decimal("5.01") * 5
    assert cart.get_total() == sum(i.subtotal for i in cart.items)


def test_partner_cart_filter_and_clear():
    cart = CartAggregator()
    cart.add_item(make_product("p1"), make_listing("p1", "U1"))
    cart.add_item(make_product("p2"), make_listing("p2", "U2", store="Harbor"))
    cart.add_item(make_product("p3"))

    assert [i.product.id for i in cart.get_partner_cart_items("U1")] == ["p1"]
    assert cart.get_partner_store_name("U2") == "Harbor"
    assert cart.get_partner_store_name("nobody") == "Partner Store"

    cart.clear_partner_cart("U1")
    assert sorted(i.product.id for i in cart.items) == ["p2", "p3"]
    cart.clear_cart()
    assert cart.items == []


def test_cart_is_persisted_and_reloaded():
    storage = MemoryCartStorage()
    cart = CartAggregator(storage, "auto_vault_cart")
    cart.add_item(make_product("p1", price="250.50"), make_listing("p1", price="260.75"), 2)
    cart.add_item(make_product("p2"), None, 1)

    blob = json.loads(storage.load("auto_vault_cart"))
    assert isinstance(blob, list) and len(blob) == 2
    assert Decimal(blob[0]["subtotal"]) == Decimal("521.50")

    reloaded = CartAggregator(storage, "auto_vault_cart")
    assert reloaded.get_item_count() == 2
    assert reloaded.get_total() == cart.get_total()
    assert reloaded.items[0].partner_id == "U1"
    assert_subtotals(reloaded)


def test_unreadable_blob_starts_empty():
    storage = MemoryCartStorage()
    storage.save("auto_vault_cart", "{not json")
    cart = CartAggregator(storage, "auto_vault_cart")
    assert cart.items == []


class BrokenStorage(CartStorage):
    def load(self, key):
        return None

    def save(self, key, blob):
        raise OSError("disk full")


def test_failed_write_keeps_in_memory_state(caplog):
    cart = CartAggregator(BrokenStorage())
    with caplog.at_level(logging.ERROR):
        cart.add_item(make_product())
    assert cart.get_item_count() == 1
    assert "Failed to persist cart" in caplog.text


def test_file_storage_round_trip(tmp_path):
    storage = FileCartStorage(str(tmp_path / "carts"))
    cart = CartAggregator(storage, "auto_vault_cart")
    cart.add_item(make_product(), None, 4)
    assert (tmp_path / "carts" / "auto_vault_cart.json").exists()

    again = CartAggregator(FileCartStorage(str(tmp_path / "carts")), "auto_vault_cart")
    assert again.items[0].quantity == 4
    assert again.get_total() == Decimal("400")


def test_persisted_prices_keep_every_digit():
    storage = MemoryCartStorage()
    cart = CartAggregator(storage)
    cart.add_item(make_product(price="12345678901234567.89"), None, 1)

    reloaded = CartAggregator(storage)
    assert reloaded.items[0].unit_price == Decimal("12345678901234567.89")
    assert reloaded.get_total() == cart.get_total()
