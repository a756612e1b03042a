import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from decimal import Decimal

import pytest

from shopcore.cart import (
    add_item,
    clear,
    get_items,
    get_quantity,
    is_empty,
    item_count,
    remove_item,
    remove_item_completely,
    update_quantity,
)
from shopcore.catalog import (
    all_products,
    get_product,
    is_in_stock,
    products_by_category,
    sample_catalog,
    update_stock,
)
from shopcore.domain import Cart
from shopcore.errors import InsufficientStock, InvalidQuantity, NotFound, NotInCart


@pytest.fixture
def catalog():
    return sample_catalog()


@pytest.fixture
def cart(catalog):
    """2 шоколадки и 3 печенья"""
    return add_item(catalog, 1, 2, Cart()).bind(lambda c: add_item(catalog, 2, 3, c)).value


# ============ Каталог ============


def test_get_product_found_and_not_found(catalog):
    assert get_product(catalog, 1).get_or_else(None).name == "Chocolate"
    assert get_product(catalog, 999).is_none()


def test_update_stock_returns_new_catalog(catalog):
    updated = update_stock(catalog, 1, 3)

    assert updated[1].stock == 3
    assert catalog[1].stock == 10  # исходный снимок не тронут
    assert updated[2] is catalog[2]


def test_update_stock_unknown_id_is_noop(catalog):
    assert update_stock(catalog, 42, 1) == catalog


def test_products_by_category_ignores_case(catalog):
    names = [p.name for p in products_by_category(catalog, "sweets")]
    assert names == ["Chocolate", "Candy"]


def test_all_products_sorted_by_id(catalog):
    assert [p.id for p in all_products(catalog)] == [1, 2, 3, 4, 5]


def test_is_in_stock(catalog):
    assert is_in_stock(catalog[3], 5)
    assert not is_in_stock(catalog[3], 6)


# ============ add_item ============


def test_add_item_to_empty_cart(catalog):
    result = add_item(catalog, 1, 2, Cart())

    assert result.is_right
    assert get_quantity(1, result.value) == 2


def test_add_item_accumulates_single_entry(catalog, cart):
    result = add_item(catalog, 1, 3, cart)

    assert len(result.value.entries) == 2
    assert get_quantity(1, result.value) == 5


def test_add_item_unknown_product(catalog):
    assert add_item(catalog, 999, 1, Cart()).value == NotFound(999)


@pytest.mark.parametrize("qty", [0, -3])
def test_add_item_invalid_quantity(catalog, qty):
    result = add_item(catalog, 1, qty, Cart())
    assert result.is_left
    assert result.value == InvalidQuantity(qty)


def test_add_item_insufficient_stock(catalog):
    result = add_item(catalog, 1, 1000, Cart())

    assert result.is_left
    assert result.value == InsufficientStock(product_id=1, needed=1000, available=10)


def test_add_item_checks_accumulated_quantity(catalog, cart):
    """В корзине 2 из 10 шоколадок: ещё 9 уже не помещается"""
    result = add_item(catalog, 1, 9, cart)

    assert result.value == InsufficientStock(product_id=1, needed=11, available=10)
    assert get_quantity(1, cart) == 2


def test_add_item_sequence_never_exceeds_stock(catalog):
    state = Cart()
    for _ in range(15):
        result = add_item(catalog, 3, 1, state)
        if result.is_right:
            state = result.value

    assert get_quantity(3, state) == catalog[3].stock


# ============ remove_item ============


def test_remove_item_decrements(cart):
    result = remove_item(2, 1, cart)
    assert get_quantity(2, result.value) == 2


def test_remove_item_to_zero_deletes_entry(cart):
    result = remove_item(1, 2, cart)
    assert 1 not in result.value.entries


def test_remove_more_than_present_is_not_an_error(cart):
    result = remove_item(1, 50, cart)

    assert result.is_right
    assert 1 not in result.value.entries
    assert get_quantity(2, result.value) == 3


def test_remove_item_not_in_cart(cart):
    assert remove_item(5, 1, cart).value == NotInCart(5)


def test_remove_item_invalid_quantity(cart):
    assert remove_item(1, 0, cart).value == InvalidQuantity(0)


def test_add_then_remove_returns_empty_cart(catalog):
    result = add_item(catalog, 4, 3, Cart()).bind(lambda c: remove_item(4, 3, c))
    assert result.value == Cart()


def test_remove_item_completely(cart):
    assert 2 not in remove_item_completely(2, cart).entries
    assert remove_item_completely(5, cart) == cart


# ============ update_quantity ============


def test_update_quantity_sets_absolute_value(catalog, cart):
    assert get_quantity(1, update_quantity(catalog, 1, 7, cart).value) == 7


def test_update_quantity_zero_removes(catalog, cart):
    assert 1 not in update_quantity(catalog, 1, 0, cart).value.entries


def test_update_quantity_respects_stock(catalog, cart):
    assert update_quantity(catalog, 3, 6, cart).value == InsufficientStock(3, needed=6, available=5)


# ============ Доступ ============


def test_clear_and_is_empty(cart):
    assert not is_empty(cart)
    assert is_empty(clear(cart))


def test_get_items_and_item_count(cart):
    items = sorted(get_items(cart), key=lambda e: e.product_id)

    assert [(e.product_id, e.quantity) for e in items] == [(1, 2), (2, 3)]
    assert item_count(cart) == 5
    assert items[0].product.unit_price == Decimal("15.00")


def test_operations_do_not_mutate_original(catalog, cart):
    before = dict(cart.entries)
    add_item(catalog, 5, 1, cart)
    remove_item(1, 1, cart)
    remove_item_completely(2, cart)

    assert cart.entries == before
