import time
from dataclasses import replace
from typing import Optional, Tuple

from cart_core.domain import COUPON_TYPES, AMOUNT, Coupon, DiscountTier, Product
from cart_core.ftypes import Either

EDITABLE_FIELDS = ("name", "price", "stock")
RATE_MULTIPLIER = 100


# ============ Правки товара (возвращают новый Product) ============


def update_product_field(product: Product, field: str, value) -> Product:
    """Заменяет одно поле товара: name, price или stock"""
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Field '{field}' is not editable")
    if field == "name":
        return replace(product, name=str(value))
    return replace(product, **{field: int(value)})


def add_discount_to_product(product: Product, tier: DiscountTier) -> Product:
    return replace(product, discounts=product.discounts + (tier,))


def remove_discount_from_product(product: Product, index: int) -> Product:
    """Удаляет уровень скидки по индексу; неверный индекс ничего не меняет"""
    return replace(
        product,
        discounts=tuple(d for i, d in enumerate(product.discounts) if i != index),
    )


def create_product_with_id(
    name: str,
    price: int,
    stock: int,
    discounts: Tuple[DiscountTier, ...] = (),
    now: Optional[float] = None,
) -> Product:
    """id нового товара: текущее время в миллисекундах"""
    ts = time.time() if now is None else now
    return Product(
        id=str(int(ts * 1000)),
        name=name,
        price=int(price),
        stock=int(stock),
        discounts=tuple(discounts),
    )


# ============ Подписи для админки ============


def format_number(value: float) -> str:
    value = round(float(value), 2)
    return str(int(value)) if value.is_integer() else str(value)


def format_percent(rate: float) -> str:
    return f"{format_number(rate * RATE_MULTIPLIER)}%"


def describe_discount(tier: DiscountTier) -> str:
    return f"{tier.quantity} шт. и больше: скидка {format_percent(tier.rate)}"


def describe_coupon(coupon: Coupon) -> str:
    if coupon.discount_type == AMOUNT:
        value = f"{format_number(coupon.discount_value)} ₸"
    else:
        value = f"{format_number(coupon.discount_value)}%"
    return f"{coupon.name} ({coupon.code}): {value}"


# ============ Разбор форм (Either вместо исключений) ============


def _require(predicate, error: str):
    """Шаг для bind: значение проходит дальше или превращается в Left"""
    return lambda value: Either.right(value) if predicate(value) else Either.left({"error": error})


def _convert(fn, error: str):
    """Шаг для bind: приведение типа, TypeError/ValueError превращаются в Left"""

    def step(value):
        try:
            return Either.right(fn(value))
        except (TypeError, ValueError):
            return Either.left({"error": error})

    return step


def parse_discount_form(quantity, percent) -> Either[dict, DiscountTier]:
    """
    Форма уровня скидки: количество и процент (0-100).
    Right(DiscountTier) с rate = percent / 100 или Left({"error": ...})
    """
    return (
        Either.right((quantity, percent))
        .bind(_convert(lambda qp: (int(qp[0]), float(qp[1])), "Количество и процент должны быть числами"))
        .bind(_require(lambda qp: qp[0] > 0, "Количество должно быть больше нуля"))
        .bind(_require(lambda qp: 0 <= qp[1] < RATE_MULTIPLIER, "Процент скидки должен быть в диапазоне [0, 100)"))
        .map(lambda qp: DiscountTier(quantity=qp[0], rate=qp[1] / RATE_MULTIPLIER))
    )


def parse_coupon_form(name: str, code: str, discount_type: str, value) -> Either[dict, Coupon]:
    """Форма купона: тип amount/percentage и неотрицательное значение"""
    return (
        Either.right((name.strip(), code.strip()))
        .bind(_require(all, "Нужны название и код купона"))
        .bind(_require(lambda _: discount_type in COUPON_TYPES, f"Неизвестный тип купона: {discount_type}"))
        .bind(lambda _: _convert(float, "Значение купона должно быть числом")(value))
        .bind(_require(lambda amount: amount >= 0, "Значение купона не может быть отрицательным"))
        .map(
            lambda amount: Coupon(
                name=name.strip(), code=code.strip(), discount_type=discount_type, discount_value=amount
            )
        )
    )


def parse_product_form(name: str, price, stock) -> Either[dict, Tuple[str, int, int]]:
    """Форма нового товара: непустое имя, неотрицательные цена и остаток"""
    to_ints = _convert(lambda ps: (int(ps[0]), int(ps[1])), "Цена и остаток должны быть целыми числами")
    return (
        Either.right(name.strip())
        .bind(_require(bool, "Нужно название товара"))
        .bind(lambda _: to_ints((price, stock)))
        .bind(_require(lambda ps: ps[0] >= 0 and ps[1] >= 0, "Цена и остаток не могут быть отрицательными"))
        .map(lambda ps: (name.strip(), ps[0], ps[1]))
    )
