from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class DiscountTier:
    quantity: int  # минимальное количество для скидки
    rate: float  # 0.1 == 10%


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: int  # целые единицы валюты
    stock: int
    discounts: Tuple[DiscountTier, ...] = ()


@dataclass(frozen=True)
class CartItem:
    product: Product  # снимок товара на момент добавления
    quantity: int


@dataclass(frozen=True)
class Coupon:
    name: str
    code: str
    discount_type: str  # "amount" | "percentage"
    discount_value: float


@dataclass(frozen=True)
class Cart:
    items: Tuple[CartItem, ...] = ()
    selected_coupon: Optional[Coupon] = None


@dataclass(frozen=True)
class LinePrice:
    before_discount: float
    after_discount: float


@dataclass(frozen=True)
class CartTotals:
    total_before_discount: int
    total_after_discount: int
    total_discount: int


AMOUNT = "amount"
PERCENTAGE = "percentage"
COUPON_TYPES = (AMOUNT, PERCENTAGE)
