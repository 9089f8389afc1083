# cart_core/ftypes.py
# Maybe / Either for lookups and form parsing that must not raise.

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, Type, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
L = TypeVar("L")
R = TypeVar("R")


@dataclass(frozen=True)
class Maybe(Generic[T]):
    """
    Значение, которого может не быть (поиск товара, купона по коду).
    Maybe.some(value) / Maybe.nothing()
    """

    value: Optional[T] = None

    @staticmethod
    def some(value: T) -> "Maybe[T]":
        return Maybe(value)

    @staticmethod
    def nothing() -> "Maybe[T]":
        return Maybe(None)

    @staticmethod
    def first(predicate: Callable[[T], bool], items) -> "Maybe[T]":
        """Первый элемент, удовлетворяющий предикату"""
        return Maybe(next((x for x in items if predicate(x)), None))

    def is_some(self) -> bool:
        return self.value is not None

    def is_none(self) -> bool:
        return self.value is None

    def map(self, fn: Callable[[T], U]) -> "Maybe[U]":
        return Maybe.some(fn(self.value)) if self.is_some() else Maybe.nothing()

    def get_or_else(self, default: U) -> T | U:
        return self.value if self.is_some() else default

    def __repr__(self) -> str:
        return f"Some({self.value})" if self.is_some() else "Nothing"


@dataclass(frozen=True)
class Either(Generic[L, R]):
    """
    Left: ошибка (обычно dict {"error": ...}), Right: успешное значение.
    """

    is_left: bool
    value: Union[L, R]

    @staticmethod
    def left(value: L) -> "Either[L, R]":
        return Either(True, value)

    @staticmethod
    def right(value: R) -> "Either[L, R]":
        return Either(False, value)

    @staticmethod
    def attempt(
        fn: Callable[[], R], errors: Tuple[Type[BaseException], ...]
    ) -> "Either[dict, R]":
        """Выполняет fn, перечисленные исключения превращает в Left"""
        try:
            return Either.right(fn())
        except errors as exc:
            return Either.left({"error": str(exc), "type": type(exc).__name__})

    @property
    def is_right(self) -> bool:
        return not self.is_left

    def map(self, fn: Callable[[R], U]) -> "Either[L, U]":
        return Either.right(fn(self.value)) if self.is_right else self  # type: ignore[return-value]

    def bind(self, fn: Callable[[R], "Either[L, U]"]) -> "Either[L, U]":
        return fn(self.value) if self.is_right else self  # type: ignore[return-value]

    def get_or_else(self, default: U) -> R | U:
        return self.value if self.is_right else default  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Left({self.value})" if self.is_left else f"Right({self.value})"
