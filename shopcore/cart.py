from typing import List

from .catalog import get_product, is_in_stock
from .domain import Cart, CartEntry, Catalog, Product
from .errors import CartError, InsufficientStock, InvalidQuantity, NotFound, NotInCart
from .ftypes import Either


# ============ Доступ к корзине ============


def get_quantity(product_id: int, cart: Cart) -> int:
    """Текущее количество товара в корзине (0, если строки нет)"""
    entry = cart.entries.get(product_id)
    return entry.quantity if entry is not None else 0


def get_items(cart: Cart) -> List[CartEntry]:
    return sorted(cart.entries.values(), key=lambda e: e.product_id)


def item_count(cart: Cart) -> int:
    """Общее количество единиц товара"""
    return sum(e.quantity for e in cart.entries.values())


def is_empty(cart: Cart) -> bool:
    return not cart.entries


# ============ Изменение корзины (чистые функции) ============


def _with_quantity(cart: Cart, product: Product, quantity: int) -> Cart:
    return Cart(entries={**cart.entries, product.id: CartEntry(product, quantity)})


def _without(cart: Cart, product_id: int) -> Cart:
    return Cart(entries={pid: e for pid, e in cart.entries.items() if pid != product_id})


def _reserve(product: Product, required: int, cart: Cart) -> Either[CartError, Cart]:
    if not is_in_stock(product, required):
        return Either.left(InsufficientStock(product.id, needed=required, available=product.stock))
    return Either.right(_with_quantity(cart, product, required))


def add_item(catalog: Catalog, product_id: int, qty: int, cart: Cart) -> Either[CartError, Cart]:
    """
    Добавляет qty единиц товара. Количество накапливается в одной строке,
    суммарное количество сверяется с остатком на складе.
    """
    if qty < 1:
        return Either.left(InvalidQuantity(qty))

    return (
        get_product(catalog, product_id)
        .to_either(NotFound(product_id))
        .bind(lambda product: _reserve(product, get_quantity(product_id, cart) + qty, cart))
    )


def update_quantity(catalog: Catalog, product_id: int, qty: int, cart: Cart) -> Either[CartError, Cart]:
    """
    Устанавливает абсолютное количество товара.
    qty == 0 удаляет строку, отрицательное количество — InvalidQuantity.
    """
    if qty < 0:
        return Either.left(InvalidQuantity(qty))
    if qty == 0:
        return Either.right(_without(cart, product_id))

    return (
        get_product(catalog, product_id)
        .to_either(NotFound(product_id))
        .bind(lambda product: _reserve(product, qty, cart))
    )


def remove_item(product_id: int, qty: int, cart: Cart) -> Either[CartError, Cart]:
    """
    Уменьшает количество на qty. Если остаётся <= 0, строка удаляется:
    убрать больше, чем лежит в корзине, не ошибка.
    """
    if qty < 1:
        return Either.left(InvalidQuantity(qty))

    entry = cart.entries.get(product_id)
    if entry is None:
        return Either.left(NotInCart(product_id))

    remaining = entry.quantity - qty
    if remaining <= 0:
        return Either.right(_without(cart, product_id))
    return Either.right(_with_quantity(cart, entry.product, remaining))


def remove_item_completely(product_id: int, cart: Cart) -> Cart:
    return _without(cart, product_id)


def clear(cart: Cart) -> Cart:
    return Cart()
