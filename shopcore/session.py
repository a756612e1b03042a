from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Tuple

import structlog

from . import cart as carts
from .checkout import CheckoutReceipt, place_order
from .config import DEFAULT_CONFIG, CheckoutConfig
from .discounts import applicable_discounts, cart_discount, find_best_discount
from .domain import Cart, Catalog, DiscountRule, Order, PriceBreakdown
from .errors import CartError, EmptyCart, InvalidRate
from .ftypes import Either
from .pricing import ZERO, cart_breakdown
from .sink import OrderSink

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ShopSession:
    """
    Состояние одной покупательской сессии: снимок каталога, корзина,
    конфигурация и правила скидок. Иммутабельно; каждая операция
    возвращает новую сессию, владелец сессии сам хранит актуальную.
    """

    catalog: Catalog
    cart: Cart = field(default_factory=Cart)
    config: CheckoutConfig = DEFAULT_CONFIG
    rules: Tuple[DiscountRule, ...] = ()
    orders: Tuple[Order, ...] = ()

    def _apply(self, action: str, result: Either[CartError, Cart]) -> "Either[CartError, ShopSession]":
        if result.is_left:
            log.debug("cart_rejected", action=action, error=result.value.kind)
        return result.map(lambda new_cart: replace(self, cart=new_cart))

    def add(self, product_id: int, qty: int = 1) -> "Either[CartError, ShopSession]":
        return self._apply("add", carts.add_item(self.catalog, product_id, qty, self.cart))

    def set_quantity(self, product_id: int, qty: int) -> "Either[CartError, ShopSession]":
        return self._apply(
            "set_quantity", carts.update_quantity(self.catalog, product_id, qty, self.cart)
        )

    def remove(self, product_id: int, qty: int = 1) -> "Either[CartError, ShopSession]":
        return self._apply("remove", carts.remove_item(product_id, qty, self.cart))

    def remove_all(self, product_id: int) -> "ShopSession":
        return replace(self, cart=carts.remove_item_completely(product_id, self.cart))

    def clear(self) -> "ShopSession":
        return replace(self, cart=carts.clear(self.cart))

    def best_discount(self) -> Decimal:
        return (
            find_best_discount(self.cart, self.rules)
            .map(lambda rule: cart_discount(self.cart, rule))
            .get_or_else(ZERO)
        )

    def offers(self):
        return applicable_discounts(self.cart, self.rules)

    def breakdown(self) -> Either[InvalidRate, PriceBreakdown]:
        """Предпросмотр цены с лучшей доступной скидкой"""
        return cart_breakdown(
            self.cart,
            self.config.tax_rate,
            self.config.shipping_tiers,
            discount=self.best_discount(),
        )

    def checkout(self, sink: OrderSink) -> "Either[EmptyCart, Tuple[ShopSession, CheckoutReceipt]]":
        """
        Оформляет корзину. Новая сессия получает обновлённый каталог и пустую
        корзину даже при ошибке сохранения (см. CheckoutReceipt.save_error).
        """
        return place_order(self.config, self.catalog, self.cart, self.rules, sink).map(
            lambda receipt: (
                replace(
                    self,
                    catalog=receipt.catalog,
                    cart=Cart(),
                    orders=self.orders + (receipt.order,),
                ),
                receipt,
            )
        )
