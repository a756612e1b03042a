"""
Движок скидок.

Правило применяется к строке корзины, только если выполнены ВСЕ заданные
фильтры (активность, минимальная сумма корзины, минимальное количество,
категории, id товаров). Незаданный фильтр считается выполненным.

Скидка правила по корзине — сумма скидок по всем подходящим строкам;
каждая строка ограничена своим подытогом, общего потолка на корзину нет.
FixedAmount применяется к КАЖДОЙ подходящей строке отдельно.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from .compose import pipe
from .domain import (
    BuyXGetY,
    Cart,
    CartEntry,
    DiscountKind,
    DiscountResult,
    DiscountRule,
    FixedAmount,
    Percentage,
    PriceBreakdown,
)
from .errors import InvalidRate
from .ftypes import Either, Maybe
from .pricing import ZERO, ShippingTiers, cart_breakdown, cart_subtotal, item_subtotal


# ============ Проверка применимости ============


def meets_minimum_purchase(subtotal: Decimal, rule: DiscountRule) -> bool:
    return rule.minimum_purchase is None or subtotal >= rule.minimum_purchase


def meets_minimum_quantity(quantity: int, rule: DiscountRule) -> bool:
    return rule.minimum_quantity is None or quantity >= rule.minimum_quantity


def matches_category(category: str, rule: DiscountRule) -> bool:
    """Сравнение категорий без учёта регистра"""
    if rule.applicable_categories is None:
        return True
    return category.lower() in {c.lower() for c in rule.applicable_categories}


def matches_product(product_id: int, rule: DiscountRule) -> bool:
    return rule.applicable_product_ids is None or product_id in rule.applicable_product_ids


def is_rule_applicable(entry: CartEntry, subtotal: Decimal, rule: DiscountRule) -> bool:
    return (
        rule.active
        and meets_minimum_purchase(subtotal, rule)
        and meets_minimum_quantity(entry.quantity, rule)
        and matches_category(entry.product.category, rule)
        and matches_product(entry.product_id, rule)
    )


# ============ Скидка на строку ============


def _percentage_amount(price: Decimal, rate: Decimal) -> Decimal:
    # ставка вне [0, 1] скидки не даёт
    if rate < 0 or rate > 1:
        return ZERO
    return price * rate


def _buy_x_get_y_amount(entry: CartEntry, kind: BuyXGetY) -> Decimal:
    if kind.buy < 1 or entry.quantity < kind.buy:
        return ZERO
    free_units = (entry.quantity // kind.buy) * kind.free
    return free_units * entry.product.unit_price


def entry_discount(entry: CartEntry, rule: DiscountRule) -> Decimal:
    """
    Сумма скидки правила на одну строку, без проверки применимости.
    Результат всегда в [0, item_subtotal(entry)].
    """
    original = item_subtotal(entry)
    kind = rule.kind

    if isinstance(kind, Percentage):
        amount = _percentage_amount(original, kind.rate)
    elif isinstance(kind, FixedAmount):
        amount = kind.amount
    elif isinstance(kind, BuyXGetY):
        amount = _buy_x_get_y_amount(entry, kind)
    else:
        amount = ZERO

    return max(ZERO, min(amount, original))


def entry_discount_result(
    entry: CartEntry, rule: DiscountRule, subtotal: Decimal
) -> Maybe[DiscountResult]:
    """Детали применения правила к строке, Nothing если правило не подходит"""
    if not is_rule_applicable(entry, subtotal, rule):
        return Maybe.nothing()

    original = item_subtotal(entry)
    amount = entry_discount(entry, rule)
    return Maybe.some(
        DiscountResult(
            original_price=original,
            discount_amount=amount,
            final_price=original - amount,
            description=f"{rule.name}: {rule.description or describe(rule.kind)}",
        )
    )


# ============ Скидка на корзину ============


def cart_discount(cart: Cart, rule: DiscountRule) -> Decimal:
    subtotal = cart_subtotal(cart)
    return sum(
        (
            entry_discount(entry, rule)
            for entry in cart.entries.values()
            if is_rule_applicable(entry, subtotal, rule)
        ),
        ZERO,
    )


def applicable_discounts(cart: Cart, rules: Iterable[DiscountRule]) -> List[Tuple[DiscountRule, Decimal]]:
    """
    Все правила с положительной скидкой, по убыванию суммы.
    Сортировка стабильная: при равенстве сохраняется порядок rules.
    """
    ranked = pipe(
        lambda rs: filter(lambda r: r.active, rs),
        lambda rs: ((r, cart_discount(cart, r)) for r in rs),
        lambda pairs: filter(lambda pair: pair[1] > 0, pairs),
        lambda pairs: sorted(pairs, key=lambda pair: pair[1], reverse=True),
    )
    return ranked(rules)


def find_best_discount(cart: Cart, rules: Sequence[DiscountRule]) -> Maybe[DiscountRule]:
    ranked = applicable_discounts(cart, rules)
    return Maybe.of(ranked[0][0] if ranked else None)


def cart_breakdown_with_discount(
    cart: Cart, rule: DiscountRule, tax_rate: Decimal, tiers: ShippingTiers
) -> Either[InvalidRate, PriceBreakdown]:
    """Разбивка цены с одним правилом: налог с подытога за вычетом скидки"""
    return cart_breakdown(cart, tax_rate, tiers, discount=cart_discount(cart, rule))


def cart_total_with_discount(
    cart: Cart, rule: DiscountRule, tax_rate: Decimal, tiers: ShippingTiers
) -> Either[InvalidRate, Decimal]:
    return cart_breakdown_with_discount(cart, rule, tax_rate, tiers).map(lambda b: b.total)


def cart_total_with_multiple_discounts(
    cart: Cart, rules: Iterable[DiscountRule], tax_rate: Decimal, tiers: ShippingTiers
) -> Either[InvalidRate, Decimal]:
    """
    Все активные правила суммируются. Сумма скидок ограничена подытогом,
    поэтому подытог после скидки не бывает отрицательным.
    """
    combined = sum((cart_discount(cart, r) for r in rules if r.active), ZERO)
    capped = min(combined, cart_subtotal(cart))
    return cart_breakdown(cart, tax_rate, tiers, discount=capped).map(lambda b: b.total)


# ============ Конструкторы правил ============


def describe(kind: DiscountKind) -> str:
    if isinstance(kind, Percentage):
        return f"{kind.rate * 100:.0f}% off"
    if isinstance(kind, FixedAmount):
        return f"{kind.amount:.2f} off"
    if isinstance(kind, BuyXGetY):
        return f"Buy {kind.buy} Get {kind.free} Free"
    return ""


def percentage_rule(rule_id: str, name: str, rate: Decimal) -> DiscountRule:
    kind = Percentage(rate)
    return DiscountRule(id=rule_id, name=name, kind=kind, description=describe(kind))


def fixed_amount_rule(rule_id: str, name: str, amount: Decimal) -> DiscountRule:
    kind = FixedAmount(amount)
    return DiscountRule(id=rule_id, name=name, kind=kind, description=describe(kind))


def buy_x_get_y_rule(rule_id: str, name: str, buy: int, free: int) -> DiscountRule:
    """Минимальное количество по умолчанию равно buy"""
    kind = BuyXGetY(buy, free)
    return DiscountRule(
        id=rule_id, name=name, kind=kind, minimum_quantity=buy, description=describe(kind)
    )


def with_minimum_purchase(minimum: Decimal, rule: DiscountRule) -> DiscountRule:
    return replace(rule, minimum_purchase=minimum)


def for_categories(categories: Iterable[str], rule: DiscountRule) -> DiscountRule:
    return replace(rule, applicable_categories=frozenset(categories))


def for_products(product_ids: Iterable[int], rule: DiscountRule) -> DiscountRule:
    return replace(rule, applicable_product_ids=frozenset(product_ids))


def deactivate(rule: DiscountRule) -> DiscountRule:
    return replace(rule, active=False)


# ============ Готовые акции ============

TEN_PERCENT_OFF = percentage_rule("10PCT", "10% Off", Decimal("0.10"))
TWENTY_PERCENT_OFF = percentage_rule("20PCT", "20% Off", Decimal("0.20"))
FIFTY_OFF_OVER_300 = with_minimum_purchase(
    Decimal("300"), fixed_amount_rule("50OFF300", "50 Off", Decimal("50"))
)
BUY_2_GET_1 = buy_x_get_y_rule("B2G1", "Buy 2 Get 1 Free", 2, 1)
BUY_3_GET_2 = buy_x_get_y_rule("B3G2", "Buy 3 Get 2 Free", 3, 2)
SWEETS_15 = for_categories(["Sweets"], percentage_rule("SWEETS15", "Sweets Sale", Decimal("0.15")))
SNACKS_25 = for_categories(["Snacks"], percentage_rule("SNACKS25", "Snacks Promo", Decimal("0.25")))

PROMOTIONS: Tuple[DiscountRule, ...] = (
    TEN_PERCENT_OFF,
    TWENTY_PERCENT_OFF,
    FIFTY_OFF_OVER_300,
    BUY_2_GET_1,
    BUY_3_GET_2,
    SWEETS_15,
    SNACKS_25,
)
