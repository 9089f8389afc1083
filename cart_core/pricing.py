import math
from functools import reduce
from typing import Iterable, Optional, Tuple

from .domain import AMOUNT, Cart, CartItem, CartTotals, Coupon, DiscountTier, LinePrice


def round_half_up(value: float) -> int:
    """Округление до целого, .5 всегда вверх (как в браузерной версии)"""
    return int(math.floor(value + 0.5))


# ============ Скидка по количеству ============


def get_max_discount_rate(discounts: Iterable[DiscountTier], quantity: int) -> float:
    """
    Максимальная ставка среди всех уровней, порог которых достигнут.
    Уровни не отсортированы, пороги могут повторяться, поэтому смотрим все.
    """
    return reduce(
        lambda best, tier: max(best, tier.rate) if quantity >= tier.quantity else best,
        discounts,
        0,
    )


def get_max_applicable_discount(item: CartItem) -> float:
    """Ставка, применённая к строке корзины"""
    return get_max_discount_rate(item.product.discounts, item.quantity)


# ============ Строка корзины ============


def price_line(item: CartItem) -> LinePrice:
    """Цена строки до и после скидки, без округления"""
    before = item.product.price * item.quantity
    rate = get_max_applicable_discount(item)
    return LinePrice(before_discount=before, after_discount=before * (1 - rate))


def calculate_item_total(item: CartItem) -> float:
    return price_line(item).after_discount


# ============ Купон ============


def apply_coupon(subtotal: float, coupon: Optional[Coupon]) -> float:
    """
    amount: вычитаем сумму, но не ниже нуля.
    percentage: умножаем на (1 - v/100) без нижней границы.
    """
    if coupon is None:
        return subtotal
    if coupon.discount_type == AMOUNT:
        return max(0, subtotal - coupon.discount_value)
    return subtotal * (1 - coupon.discount_value / 100)


# ============ Итоги корзины ============


def calculate_cart_total(
    items: Tuple[CartItem, ...], coupon: Optional[Coupon] = None
) -> CartTotals:
    """
    Суммируем строки, применяем купон к сумме после скидок,
    округляем каждую из трёх величин отдельно.
    """

    def accumulate(acc: Tuple[float, float], item: CartItem) -> Tuple[float, float]:
        line = price_line(item)
        return acc[0] + line.before_discount, acc[1] + line.after_discount

    before, after_raw = reduce(accumulate, items, (0, 0))
    after = apply_coupon(after_raw, coupon)

    return CartTotals(
        total_before_discount=round_half_up(before),
        total_after_discount=round_half_up(after),
        total_discount=round_half_up(before - after),
    )


def cart_totals(cart: Cart) -> CartTotals:
    return calculate_cart_total(cart.items, cart.selected_coupon)
