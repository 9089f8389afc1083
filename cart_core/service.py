from typing import Optional, Tuple

from .domain import Cart, CartTotals, Coupon, Product
from .ftypes import Maybe
from .logging_config import get_logger
from .pricing import cart_totals
from .storage import CartStorage
from .transforms import (
    add_to_cart,
    append_coupon,
    append_product,
    find_coupon_by_code,
    find_product_by_id,
    get_remaining_stock,
    remove_from_cart,
    replace_product,
    search_products,
    select_coupon,
    update_quantity,
)

logger = get_logger(__name__)


class CartService:
    """
    Единственный владелец корзины в сессии.
    Каждое действие заменяет Cart новым значением, затем (если включено)
    сохраняет корзину в хранилище.
    """

    def __init__(self, storage: Optional[CartStorage] = None):
        self.storage = storage
        self.cart = storage.load() if storage else Cart()

    def _commit(self, cart: Cart) -> Cart:
        self.cart = cart
        if self.storage is not None:
            try:
                self.storage.save(cart)
            except OSError as exc:
                logger.warning("cart not persisted to %s: %s", self.storage.path, exc)
        return cart

    def add(self, product: Product) -> Cart:
        cart = add_to_cart(self.cart, product)
        logger.info("add product=%s qty=%d", product.id, self.quantity_of(product.id, cart))
        return self._commit(cart)

    def remove(self, product_id: str) -> Cart:
        logger.info("remove product=%s", product_id)
        return self._commit(remove_from_cart(self.cart, product_id))

    def update_quantity(self, product_id: str, new_quantity: int) -> Cart:
        cart = update_quantity(self.cart, product_id, new_quantity)
        logger.info(
            "update product=%s requested=%d qty=%d",
            product_id,
            new_quantity,
            self.quantity_of(product_id, cart),
        )
        return self._commit(cart)

    def select_coupon(self, coupon: Optional[Coupon]) -> Cart:
        logger.info("coupon selected: %s", coupon.code if coupon else None)
        return self._commit(select_coupon(self.cart, coupon))

    def clear(self) -> Cart:
        logger.info("cart cleared")
        return self._commit(Cart())

    def totals(self) -> CartTotals:
        return cart_totals(self.cart)

    def remaining_stock(self, product: Product) -> int:
        return get_remaining_stock(self.cart, product)

    def quantity_of(self, product_id: str, cart: Optional[Cart] = None) -> int:
        """Количество товара в корзине (0, если строки нет)"""
        cart = self.cart if cart is None else cart
        return (
            Maybe.first(lambda i: i.product.id == product_id, cart.items)
            .map(lambda i: i.quantity)
            .get_or_else(0)
        )


class CatalogService:
    """Товары и купоны сессии: поиск и правки из админки"""

    def __init__(self, products: Tuple[Product, ...], coupons: Tuple[Coupon, ...]):
        self.products = tuple(products)
        self.coupons = tuple(coupons)

    def search(self, term: str) -> Tuple[Product, ...]:
        return search_products(self.products, term)

    def get_product(self, product_id: str) -> Maybe[Product]:
        return find_product_by_id(self.products, product_id)

    def get_coupon(self, code: str) -> Maybe[Coupon]:
        return find_coupon_by_code(self.coupons, code)

    def update_product(self, updated: Product) -> None:
        self.products = replace_product(self.products, updated)
        logger.info("product updated: %s", updated.id)

    def add_product(self, product: Product) -> None:
        self.products = append_product(self.products, product)
        logger.info("product added: %s", product.id)

    def add_coupon(self, coupon: Coupon) -> None:
        self.coupons = append_coupon(self.coupons, coupon)
        logger.info("coupon added: %s", coupon.code)
