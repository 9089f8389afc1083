import json
from typing import Callable, Optional, Tuple

from .domain import COUPON_TYPES, Cart, CartItem, Coupon, DiscountTier, Product
from .ftypes import Maybe
from .logging_config import get_logger

logger = get_logger(__name__)


# ============ Загрузка данных ============


def product_from_dict(data: dict) -> Product:
    return Product(
        id=str(data["id"]),
        name=str(data["name"]),
        price=int(data["price"]),
        stock=int(data["stock"]),
        discounts=tuple(
            DiscountTier(quantity=int(d["quantity"]), rate=float(d["rate"]))
            for d in data.get("discounts", [])
        ),
    )


def coupon_from_dict(data: dict) -> Coupon:
    """
    Принимает и camelCase (discountType), и snake_case ключи.
    Тип купона вне amount/percentage -> ValueError.
    """
    discount_type = data.get("discountType", data.get("discount_type"))
    if discount_type not in COUPON_TYPES:
        raise ValueError(f"coupon {data.get('code')!r}: unknown discount type {discount_type!r}")
    return Coupon(
        name=str(data["name"]),
        code=str(data["code"]),
        discount_type=discount_type,
        discount_value=float(data.get("discountValue", data.get("discount_value", 0))),
    )


def load_seed(path: str) -> Tuple[Tuple[Product, ...], Tuple[Coupon, ...]]:
    """Загружает seed.json и возвращает кортежи товаров и купонов"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    products = tuple(map(product_from_dict, data.get("products", [])))
    coupons = tuple(map(coupon_from_dict, data.get("coupons", [])))
    logger.info("seed loaded: %d products, %d coupons from %s", len(products), len(coupons), path)
    return products, coupons


# ============ Операции с корзиной (чистые функции) ============


def add_to_cart(cart: Cart, product: Product) -> Cart:
    """
    Новый товар добавляется с количеством 1.
    Повторное добавление: +1, но не больше остатка на складе.
    """
    existing = next((item for item in cart.items if item.product.id == product.id), None)

    if existing is None:
        return Cart(items=cart.items + (CartItem(product, 1),), selected_coupon=cart.selected_coupon)

    updated_items = tuple(
        CartItem(item.product, min(item.quantity + 1, product.stock))
        if item.product.id == product.id
        else item
        for item in cart.items
    )
    return Cart(items=updated_items, selected_coupon=cart.selected_coupon)


def remove_from_cart(cart: Cart, product_id: str) -> Cart:
    """Возвращает Cart без строки product_id (если её нет, корзина не меняется)"""
    filtered = tuple(filter(lambda item: item.product.id != product_id, cart.items))
    return Cart(items=filtered, selected_coupon=cart.selected_coupon)


def update_quantity(cart: Cart, product_id: str, new_quantity: int) -> Cart:
    """
    Количество зажимается в [0, stock]; 0 удаляет строку.
    Для товара не из корзины ничего не меняется.
    """

    def clamp(item: CartItem) -> Optional[CartItem]:
        if item.product.id != product_id:
            return item
        quantity = max(0, min(new_quantity, item.product.stock))
        return CartItem(item.product, quantity) if quantity > 0 else None

    updated = tuple(filter(None, map(clamp, cart.items)))
    return Cart(items=updated, selected_coupon=cart.selected_coupon)


def select_coupon(cart: Cart, coupon: Optional[Coupon]) -> Cart:
    """Купон всегда один: новый заменяет старый, None снимает"""
    return Cart(items=cart.items, selected_coupon=coupon)


def get_remaining_stock(cart: Cart, product: Product) -> int:
    """Остаток с учётом того, что уже лежит в корзине"""
    in_cart = sum(item.quantity for item in cart.items if item.product.id == product.id)
    return product.stock - in_cart


# ============ Фильтры (замыкания) ============


def by_name(term: str) -> Callable[[Product], bool]:
    """Поиск по подстроке в названии без учёта регистра"""
    needle = term.lower()
    return lambda p: needle in p.name.lower()


def by_in_stock() -> Callable[[Product], bool]:
    return lambda p: p.stock > 0


def search_products(products: Tuple[Product, ...], term: str) -> Tuple[Product, ...]:
    """Пустой запрос возвращает все товары"""
    # запрос из одних пробелов считается пустым
    if not term or not term.strip():
        return tuple(products)
    return tuple(filter(by_name(term), products))


# ============ Безопасный поиск ============


def find_coupon_by_code(coupons: Tuple[Coupon, ...], code: str) -> Maybe[Coupon]:
    return Maybe.first(lambda c: c.code == code, coupons)


def find_product_by_id(products: Tuple[Product, ...], product_id: str) -> Maybe[Product]:
    return Maybe.first(lambda p: p.id == product_id, products)


# ============ Коллекции каталога ============


def replace_product(products: Tuple[Product, ...], updated: Product) -> Tuple[Product, ...]:
    return tuple(updated if p.id == updated.id else p for p in products)


def append_product(products: Tuple[Product, ...], product: Product) -> Tuple[Product, ...]:
    return tuple(products) + (product,)


def append_coupon(coupons: Tuple[Coupon, ...], coupon: Coupon) -> Tuple[Coupon, ...]:
    return tuple(coupons) + (coupon,)
