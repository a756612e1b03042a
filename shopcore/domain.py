from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, FrozenSet, Optional, Tuple, Union


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    unit_price: Decimal
    category: str
    stock: int
    description: str = ""


# id -> Product; каталог не мутируется, операции возвращают новый dict
Catalog = Dict[int, Product]


@dataclass(frozen=True)
class CartEntry:
    product: Product
    quantity: int  # всегда >= 1

    @property
    def product_id(self) -> int:
        return self.product.id


@dataclass(frozen=True)
class Cart:
    entries: Dict[int, CartEntry] = field(default_factory=dict)


# ============ Виды скидок ============


@dataclass(frozen=True)
class Percentage:
    rate: Decimal  # 0..1


@dataclass(frozen=True)
class FixedAmount:
    amount: Decimal


@dataclass(frozen=True)
class BuyXGetY:
    buy: int
    free: int


DiscountKind = Union[Percentage, FixedAmount, BuyXGetY]


@dataclass(frozen=True)
class DiscountRule:
    id: str
    name: str
    kind: DiscountKind
    minimum_purchase: Optional[Decimal] = None
    minimum_quantity: Optional[int] = None
    applicable_categories: Optional[FrozenSet[str]] = None
    applicable_product_ids: Optional[FrozenSet[int]] = None
    active: bool = True
    description: str = ""


@dataclass(frozen=True)
class DiscountResult:
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    description: str


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


@dataclass(frozen=True)
class Order:
    order_id: str
    items: Tuple[CartEntry, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    timestamp: datetime
