"""
Кэш корзины в локальном key-value хранилище (JSON-файл).

Аналог localStorage: весь файл это словарь {ключ: значение}, корзина лежит
целиком под одним ключом. Ошибка чтения никогда не выходит наружу:
load() возвращает пустую корзину.
"""

import json
import os
import tempfile
from dataclasses import asdict
from typing import Optional, Set

from .domain import Cart, CartItem
from .ftypes import Either
from .logging_config import get_logger
from .transforms import coupon_from_dict, product_from_dict

logger = get_logger(__name__)

DECODE_ERRORS = (OSError, ValueError, KeyError, TypeError, AttributeError)


def cart_to_dict(cart: Cart) -> dict:
    return asdict(cart)


def check_item(item: CartItem, seen_ids: Set[str]) -> CartItem:
    """Строка корзины из хранилища: 1 <= quantity <= stock, id товара не повторяется"""
    product_id = item.product.id
    if product_id in seen_ids:
        raise ValueError(f"duplicate cart line for product {product_id}")
    if not 1 <= item.quantity <= item.product.stock:
        raise ValueError(
            f"product {product_id}: quantity {item.quantity} outside [1, {item.product.stock}]"
        )
    seen_ids.add(product_id)
    return item


def cart_from_dict(data: dict) -> Cart:
    """Обратное к cart_to_dict; строки, нарушающие правила корзины -> ValueError"""
    seen_ids: Set[str] = set()
    items = tuple(
        check_item(
            CartItem(product=product_from_dict(i["product"]), quantity=int(i["quantity"])),
            seen_ids,
        )
        for i in data.get("items", [])
    )
    coupon_data: Optional[dict] = data.get("selected_coupon")
    coupon = coupon_from_dict(coupon_data) if coupon_data else None
    return Cart(items=items, selected_coupon=coupon)


class CartStorage:
    """Хранилище корзины под ключом key в файле path"""

    def __init__(self, path: str, key: str = "cart"):
        self.path = path
        self.key = key

    def _read_store(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            store = json.load(f)
        if not isinstance(store, dict):
            raise ValueError(f"store {self.path} is not a JSON object")
        return store

    def load_result(self) -> Either[dict, Cart]:
        """Right(Cart): успех или пустое хранилище; Left(error): битые данные"""

        def read() -> Cart:
            value = self._read_store().get(self.key)
            return cart_from_dict(value) if value is not None else Cart()

        return Either.attempt(read, DECODE_ERRORS)

    def load(self) -> Cart:
        result = self.load_result()
        if result.is_left:
            logger.warning("cart store %s unreadable, starting empty: %s", self.path, result.value)
            return Cart()
        return result.value

    def save(self, cart: Cart) -> None:
        """
        Перезаписывает значение ключа; OSError пробрасывается вызывающему.
        Файл пишется во временный рядом и подменяется через os.replace,
        так что сбой записи оставляет прежнее содержимое хранилища.
        """
        try:
            store = self._read_store()
        except (ValueError, OSError):
            store = {}
        store[self.key] = cart_to_dict(cart)

        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(prefix=".cart-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(store, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

