"""
Типизированные ошибки ядра.

Каждая ошибка — иммутабельный dataclass с тегом `kind` и полями,
достаточными для того, чтобы слой представления сам собрал сообщение.
Ошибки возвращаются внутри Either.left, а не бросаются.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Tuple, Union


@dataclass(frozen=True)
class InvalidQuantity:
    quantity: int
    kind: ClassVar[str] = "invalid_quantity"


@dataclass(frozen=True)
class NotFound:
    product_id: int
    kind: ClassVar[str] = "not_found"


@dataclass(frozen=True)
class InsufficientStock:
    product_id: int
    needed: int
    available: int
    kind: ClassVar[str] = "insufficient_stock"


@dataclass(frozen=True)
class NotInCart:
    product_id: int
    kind: ClassVar[str] = "not_in_cart"


@dataclass(frozen=True)
class InvalidRate:
    rate: Decimal
    kind: ClassVar[str] = "invalid_rate"


@dataclass(frozen=True)
class InvalidShippingTiers:
    tiers: Tuple[Decimal, ...]
    kind: ClassVar[str] = "invalid_shipping_tiers"


@dataclass(frozen=True)
class EmptyCart:
    kind: ClassVar[str] = "empty_cart"


@dataclass(frozen=True)
class InvalidConfig:
    errors: Tuple[str, ...]
    kind: ClassVar[str] = "invalid_config"


@dataclass(frozen=True)
class SaveError:
    reason: str
    kind: ClassVar[str] = "save_error"


CartError = Union[InvalidQuantity, NotFound, InsufficientStock, NotInCart]
PricingError = Union[InvalidRate, InvalidShippingTiers, EmptyCart]
