# shopcore/ftypes.py
# Maybe and Either for the checkout core.
# Every cart / pricing / checkout operation returns one of these instead of raising.

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
L = TypeVar("L")
R = TypeVar("R")

# Maybe (optional value)


@dataclass(frozen=True)
class Maybe(Generic[T]):
    """
    Optional-значение: товар в каталоге, лучшая скидка, статистика корзины.
    Maybe.some(value) / Maybe.nothing() / Maybe.of(value_or_none).
    """

    value: Optional[T]

    @staticmethod
    def some(value: T) -> "Maybe[T]":
        return Maybe(value)

    @staticmethod
    def nothing() -> "Maybe[None]":
        return Maybe(None)

    @staticmethod
    def of(value: Optional[T]) -> "Maybe[T]":
        return Maybe.some(value) if value is not None else Maybe.nothing()

    def __init__(self, value: Optional[T]):
        object.__setattr__(self, "value", value)

    def is_some(self) -> bool:
        return self.value is not None

    def is_none(self) -> bool:
        return self.value is None

    def map(self, fn: Callable[[T], U]) -> "Maybe[U]":
        return Maybe.some(fn(self.value)) if self.is_some() else Maybe.nothing()

    def bind(self, fn: Callable[[T], "Maybe[U]"]) -> "Maybe[U]":
        return fn(self.value) if self.is_some() else Maybe.nothing()

    def get_or_else(self, default: U) -> T | U:
        return self.value if self.is_some() else default

    def to_either(self, error: L) -> "Either[L, T]":
        """Nothing превращается в Left(error)"""
        return Either.right(self.value) if self.is_some() else Either.left(error)

    def __repr__(self) -> str:
        return f"Some({self.value})" if self.is_some() else "Nothing"


# Either (Left / Right)


@dataclass(frozen=True)
class Either(Generic[L, R]):
    """
    Either<L, R>: Left — типизированная ошибка из shopcore.errors,
    Right — результат (новая корзина, сумма, заказ).

    Вызывающий код ветвится по is_left / is_right и читает .value,
    исключения ядро не бросает.
    """

    is_left: bool
    value: Union[L, R]

    @staticmethod
    def left(value: L) -> "Either[L, R]":
        return Either(True, value)

    @staticmethod
    def right(value: R) -> "Either[L, R]":
        return Either(False, value)

    def __init__(self, is_left: bool, value: Union[L, R]):
        object.__setattr__(self, "is_left", is_left)
        object.__setattr__(self, "value", value)

    @property
    def is_right(self) -> bool:
        return not self.is_left

    def map(self, fn: Callable[[R], U]) -> "Either[L, U]":
        return Either.right(fn(self.value)) if not self.is_left else self  # type: ignore[return-value]

    def bind(self, fn: Callable[[R], "Either[L, U]"]) -> "Either[L, U]":
        return fn(self.value) if not self.is_left else self  # type: ignore[return-value]

    def fold(self, on_left: Callable[[L], U], on_right: Callable[[R], U]) -> U:
        return on_left(self.value) if self.is_left else on_right(self.value)  # type: ignore[arg-type]

    def get_or_else(self, default: U) -> R | U:
        return self.value if not self.is_left else default  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Left({self.value})" if self.is_left else f"Right({self.value})"
