"""
Оформление заказа.

checkout превращает корзину в Order и возвращает НОВЫЙ каталог с уменьшенными
остатками. Предполагается одна активная сессия на снимок каталога: остатки
повторно не проверяются, блокировок и отката нет. Если вызывающему нужно
делить каталог между сессиями, он сам сериализует вызовы checkout.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from functools import reduce
from typing import Optional, Sequence, Tuple

import structlog

from .cart import get_items, item_count
from .catalog import get_product, update_stock
from .config import CheckoutConfig
from .discounts import cart_discount, find_best_discount
from .domain import Cart, CartEntry, Catalog, DiscountRule, Order
from .errors import EmptyCart, SaveError
from .ftypes import Either
from .pricing import ZERO, cart_subtotal, shipping_fee, total
from .sink import OrderSink

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutReceipt:
    """
    Результат place_order. Заказ и новый каталог есть всегда;
    location / save_error описывают исход сохранения.
    """

    order: Order
    catalog: Catalog
    applied_rule: Optional[DiscountRule]
    location: Optional[str] = None
    save_error: Optional[SaveError] = None

    @property
    def saved(self) -> bool:
        return self.save_error is None


def _decrement(catalog: Catalog, entry: CartEntry) -> Catalog:
    product = get_product(catalog, entry.product_id)
    if product.is_none():
        log.warning("stock_product_missing", product_id=entry.product_id, quantity=entry.quantity)
        return catalog
    current = product.value.stock
    new_stock = current - entry.quantity
    if new_stock < 0:
        # корзина старше каталога; остаток не уходит ниже нуля
        log.warning(
            "stock_underflow",
            product_id=entry.product_id,
            stock=current,
            quantity=entry.quantity,
        )
        new_stock = 0
    return update_stock(catalog, entry.product_id, new_stock)


def _clamp_discount(discount: Decimal, subtotal: Decimal) -> Decimal:
    clamped = min(max(discount, ZERO), subtotal)
    if clamped != discount:
        log.warning("discount_clamped", requested=str(discount), applied=str(clamped))
    return clamped


def checkout(
    config: CheckoutConfig,
    catalog: Catalog,
    cart: Cart,
    discount_amount: Decimal = ZERO,
) -> Either[EmptyCart, Tuple[Order, Catalog]]:
    """
    Корзина -> (Order, обновлённый каталог).

    discount_amount выбирается выше по стеку (например, find_best_discount)
    и здесь не пересчитывается, только ограничивается диапазоном [0, subtotal].
    Налог считается с подытога после скидки, доставка — по количеству единиц.
    """
    if not cart.entries:
        return Either.left(EmptyCart())

    entries = get_items(cart)
    updated_catalog = reduce(_decrement, entries, catalog)

    subtotal = cart_subtotal(cart)
    discount = _clamp_discount(discount_amount, subtotal)
    discounted = subtotal - discount
    tax_amount = discounted * config.tax_rate
    shipping = shipping_fee(item_count(cart), *config.shipping_tiers)

    order = Order(
        order_id=str(uuid.uuid4()),
        items=tuple(entries),
        subtotal=subtotal,
        discount=discount,
        tax=tax_amount,
        shipping=shipping,
        total=total(discounted, tax_amount, shipping),
        timestamp=datetime.now(timezone.utc),
    )
    log.info(
        "checkout_completed",
        order_id=order.order_id,
        lines=len(order.items),
        total=str(order.total),
    )
    return Either.right((order, updated_catalog))


def _save(sink: OrderSink, order: Order) -> Either[SaveError, str]:
    try:
        return sink.save(order)
    except Exception as e:
        return Either.left(SaveError(str(e)))


def place_order(
    config: CheckoutConfig,
    catalog: Catalog,
    cart: Cart,
    rules: Sequence[DiscountRule],
    sink: OrderSink,
) -> Either[EmptyCart, CheckoutReceipt]:
    """
    Полный сценарий: лучшая скидка -> checkout -> sink.save(order) ровно один раз.

    Ошибка сохранения НЕ отменяет списание остатков: она логируется как
    warning и возвращается в CheckoutReceipt.save_error, а решение о том,
    отбросить ли новый каталог, остаётся за вызывающим кодом.
    """
    best = find_best_discount(cart, rules)
    discount = best.map(lambda rule: cart_discount(cart, rule)).get_or_else(ZERO)

    def persist(result: Tuple[Order, Catalog]) -> CheckoutReceipt:
        order, updated_catalog = result

        def failed(error: SaveError) -> CheckoutReceipt:
            log.warning("order_save_failed", order_id=order.order_id, reason=error.reason)
            return CheckoutReceipt(order, updated_catalog, best.value, save_error=error)

        def stored(location: str) -> CheckoutReceipt:
            log.info("order_saved", order_id=order.order_id, location=location)
            return CheckoutReceipt(order, updated_catalog, best.value, location=location)

        return _save(sink, order).fold(failed, stored)

    return checkout(config, catalog, cart, discount).map(persist)
