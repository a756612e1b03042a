from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List

from .domain import Catalog, Product
from .ftypes import Maybe


def make_catalog(products: Iterable[Product]) -> Catalog:
    """Собирает каталог id -> Product"""
    return {p.id: p for p in products}


def get_product(catalog: Catalog, product_id: int) -> Maybe[Product]:
    """Безопасный поиск товара по ID"""
    return Maybe.of(catalog.get(product_id))


def update_stock(catalog: Catalog, product_id: int, new_stock: int) -> Catalog:
    """
    Возвращает новый каталог с заменённым товаром (copy-on-write).
    Неизвестный id — каталог без изменений.
    """
    return (
        get_product(catalog, product_id)
        .map(lambda p: {**catalog, product_id: replace(p, stock=new_stock)})
        .get_or_else(catalog)
    )


def all_products(catalog: Catalog) -> List[Product]:
    return sorted(catalog.values(), key=lambda p: p.id)


def products_by_category(catalog: Catalog, category: str) -> List[Product]:
    """Товары категории, без учёта регистра"""
    wanted = category.lower()
    return [p for p in all_products(catalog) if p.category.lower() == wanted]


def is_in_stock(product: Product, quantity: int) -> bool:
    return product.stock >= quantity


def sample_catalog() -> Catalog:
    """Демонстрационный каталог магазина"""
    return make_catalog(
        (
            Product(1, "Chocolate", Decimal("15.00"), "Sweets", 10, "Delicious milk chocolate bar"),
            Product(2, "Biscuits", Decimal("10.00"), "Snacks", 20, "Crunchy butter biscuits"),
            Product(3, "Ice Cream", Decimal("12.50"), "Frozen", 5, "Vanilla ice cream tub"),
            Product(4, "Cookies", Decimal("8.00"), "Snacks", 15, "Chocolate chip cookies"),
            Product(5, "Candy", Decimal("5.00"), "Sweets", 30, "Assorted fruit candies"),
        )
    )
