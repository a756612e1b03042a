from decimal import Decimal
from typing import Iterable, Tuple

from .cart import get_items, item_count
from .compose import pipe_either
from .domain import Cart, CartEntry, PriceBreakdown
from .errors import EmptyCart, InvalidRate, InvalidShippingTiers, PricingError
from .ftypes import Either, Maybe

ZERO = Decimal("0")
ONE = Decimal("1")

ShippingTiers = Tuple[Decimal, Decimal, Decimal]


# ============ Подытоги ============


def item_subtotal(entry: CartEntry) -> Decimal:
    """Цена строки: количество × цена за единицу"""
    return entry.product.unit_price * entry.quantity


def subtotal_of(entries: Iterable[CartEntry]) -> Decimal:
    return sum((item_subtotal(e) for e in entries), ZERO)


def cart_subtotal(cart: Cart) -> Decimal:
    return subtotal_of(cart.entries.values())


# ============ Налог ============


def validate_tax_rate(rate: Decimal) -> Either[InvalidRate, Decimal]:
    if rate < ZERO or rate > ONE:
        return Either.left(InvalidRate(rate))
    return Either.right(rate)


def tax(amount: Decimal, rate: Decimal) -> Either[InvalidRate, Decimal]:
    """Налог amount × rate, ставка только в [0, 1]"""
    return validate_tax_rate(rate).map(lambda r: amount * r)


# ============ Доставка ============


def shipping_fee(count: int, tier1: Decimal, tier2: Decimal, tier3: Decimal) -> Decimal:
    """
    Плоский тариф по количеству единиц:
      0 -> 0, 1..5 -> tier1, 6..10 -> tier2, 11+ -> tier3
    """
    if count <= 0:
        return ZERO
    if count <= 5:
        return tier1
    if count <= 10:
        return tier2
    return tier3


def cart_shipping(cart: Cart, tiers: ShippingTiers) -> Decimal:
    return shipping_fee(item_count(cart), *tiers)


def shipping_with_free_threshold(
    subtotal: Decimal, count: int, free_threshold: Decimal, tiers: ShippingTiers
) -> Decimal:
    """Бесплатная доставка начиная с free_threshold"""
    if subtotal >= free_threshold:
        return ZERO
    return shipping_fee(count, *tiers)


def validate_shipping_tiers(tiers: ShippingTiers) -> Either[InvalidShippingTiers, ShippingTiers]:
    if len(tiers) != 3 or any(t < ZERO for t in tiers):
        return Either.left(InvalidShippingTiers(tuple(tiers)))
    return Either.right(tiers)


# ============ Итог ============


def total(subtotal: Decimal, tax_amount: Decimal, shipping: Decimal) -> Decimal:
    return subtotal + tax_amount + shipping


def cart_breakdown(
    cart: Cart, tax_rate: Decimal, tiers: ShippingTiers, discount: Decimal = ZERO
) -> Either[InvalidRate, PriceBreakdown]:
    """
    Разбивка цены корзины. Налог считается с подытога за вычетом discount;
    при discount == 0 это то же самое, что cart_total.
    """
    subtotal = cart_subtotal(cart)
    taxable = subtotal - discount
    shipping = cart_shipping(cart, tiers)
    return tax(taxable, tax_rate).map(
        lambda t: PriceBreakdown(
            subtotal=subtotal,
            discount=discount,
            tax=t,
            shipping=shipping,
            total=total(taxable, t, shipping),
        )
    )


def cart_total(cart: Cart, tax_rate: Decimal, tiers: ShippingTiers) -> Either[InvalidRate, Decimal]:
    """subtotal -> tax(subtotal) -> shipping(кол-во единиц) -> total, без скидки"""
    return cart_breakdown(cart, tax_rate, tiers).map(lambda b: b.total)


def validate_cart_not_empty(cart: Cart) -> Either[EmptyCart, Cart]:
    return Either.left(EmptyCart()) if not cart.entries else Either.right(cart)


def cart_total_validated(
    cart: Cart, tax_rate: Decimal, tiers: ShippingTiers
) -> Either[PricingError, Decimal]:
    """cart_total с проверкой корзины, ставки налога и тарифов доставки"""
    run = pipe_either(
        validate_cart_not_empty,
        lambda c: validate_tax_rate(tax_rate).map(lambda _: c),
        lambda c: validate_shipping_tiers(tiers).map(lambda _: c),
        lambda c: cart_total(c, tax_rate, tiers),
    )
    return run(cart)


def compare_carts(
    cart1: Cart, cart2: Cart, tax_rate: Decimal, tiers: ShippingTiers
) -> Either[InvalidRate, Decimal]:
    """Разница итогов: total(cart1) - total(cart2)"""
    return cart_total(cart1, tax_rate, tiers).bind(
        lambda t1: cart_total(cart2, tax_rate, tiers).map(lambda t2: t1 - t2)
    )


# ============ Статистика корзины ============


def average_item_price(cart: Cart) -> Maybe[Decimal]:
    """Средняя цена за единицу по строкам (без учёта количества)"""
    items = get_items(cart)
    if not items:
        return Maybe.nothing()
    return Maybe.some(sum((e.product.unit_price for e in items), ZERO) / len(items))


def average_price_per_unit(cart: Cart) -> Maybe[Decimal]:
    count = item_count(cart)
    if count == 0:
        return Maybe.nothing()
    return Maybe.some(cart_subtotal(cart) / count)


def most_expensive_item(cart: Cart) -> Maybe[CartEntry]:
    items = get_items(cart)
    return Maybe.of(max(items, key=lambda e: e.product.unit_price) if items else None)


def cheapest_item(cart: Cart) -> Maybe[CartEntry]:
    items = get_items(cart)
    return Maybe.of(min(items, key=lambda e: e.product.unit_price) if items else None)


def price_per_item(total_price: Decimal, quantity: int) -> Maybe[Decimal]:
    if quantity <= 0:
        return Maybe.nothing()
    return Maybe.some(total_price / quantity)
