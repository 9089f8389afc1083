import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import json
import pytest
from cart_core.domain import Cart, CartItem, Coupon, DiscountTier, Product
from cart_core.transforms import (
    add_to_cart,
    append_coupon,
    append_product,
    coupon_from_dict,
    find_coupon_by_code,
    find_product_by_id,
    get_remaining_stock,
    load_seed,
    remove_from_cart,
    replace_product,
    search_products,
    select_coupon,
    update_quantity,
)

SEED_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "seed.json")


@pytest.fixture
def phone():
    return Product(id="p1", name="Phone", price=1000, stock=10, discounts=(DiscountTier(10, 0.1),))


@pytest.fixture
def laptop():
    return Product(id="p2", name="Laptop", price=5000, stock=3)


@pytest.fixture
def coupon():
    return Coupon(name="10%", code="PERCENT10", discount_type="percentage", discount_value=10)


def quantities(cart: Cart) -> dict:
    return {item.product.id: item.quantity for item in cart.items}


# ============ Добавление ============


def test_add_new_product_with_quantity_one(phone):
    cart = add_to_cart(Cart(), phone)
    assert cart.items == (CartItem(phone, 1),)


def test_add_existing_product_increments(phone):
    cart = add_to_cart(add_to_cart(Cart(), phone), phone)
    assert quantities(cart) == {"p1": 2}


def test_add_capped_at_stock():
    """При остатке 1 повторное добавление не увеличивает количество"""
    single = Product(id="s", name="Single", price=100, stock=1)
    cart = add_to_cart(add_to_cart(Cart(), single), single)
    assert quantities(cart) == {"s": 1}


def test_add_out_of_stock_product_inserts_line():
    """Первое добавление товара с нулевым остатком не блокируется"""
    empty = Product(id="e", name="Empty", price=100, stock=0)
    cart = add_to_cart(Cart(), empty)
    assert quantities(cart) == {"e": 1}


def test_add_caps_by_stock_of_passed_product(phone):
    old = Product(id="p1", name="Phone", price=1000, stock=2)
    cart = Cart(items=(CartItem(old, 2),))
    cart = add_to_cart(cart, phone)
    assert quantities(cart) == {"p1": 3}
    assert cart.items[0].product == old


def test_add_keeps_order_and_coupon(phone, laptop, coupon):
    cart = select_coupon(Cart(), coupon)
    cart = add_to_cart(add_to_cart(cart, phone), laptop)
    assert [i.product.id for i in cart.items] == ["p1", "p2"]
    assert cart.selected_coupon == coupon


def test_add_does_not_mutate_input(phone):
    cart = Cart()
    add_to_cart(cart, phone)
    assert cart.items == ()


# ============ Удаление ============


def test_remove_from_cart(phone, laptop):
    cart = add_to_cart(add_to_cart(Cart(), phone), laptop)
    cart = remove_from_cart(cart, "p1")
    assert quantities(cart) == {"p2": 1}


def test_remove_missing_is_noop(phone):
    cart = add_to_cart(Cart(), phone)
    assert remove_from_cart(cart, "nope") == cart
    assert remove_from_cart(remove_from_cart(cart, "p1"), "p1") == Cart()


# ============ Изменение количества ============


def test_update_quantity_sets_value(phone):
    cart = update_quantity(add_to_cart(Cart(), phone), "p1", 7)
    assert quantities(cart) == {"p1": 7}


def test_update_quantity_clamped_to_stock(laptop):
    cart = update_quantity(add_to_cart(Cart(), laptop), "p2", 99)
    assert quantities(cart) == {"p2": 3}


def test_update_negative_quantity_removes_line(phone):
    cart = update_quantity(add_to_cart(Cart(), phone), "p1", -5)
    assert cart.items == ()


def test_update_zero_quantity_removes_line(phone, laptop):
    cart = add_to_cart(add_to_cart(Cart(), phone), laptop)
    cart = update_quantity(cart, "p1", 0)
    assert quantities(cart) == {"p2": 1}


def test_update_missing_product_is_noop(phone):
    cart = add_to_cart(Cart(), phone)
    assert update_quantity(cart, "nope", 5) == cart


def test_update_quantity_idempotent(laptop):
    cart = add_to_cart(Cart(), laptop)
    once = update_quantity(cart, "p2", 10)
    twice = update_quantity(once, "p2", quantities(once)["p2"])
    assert once == twice


# ============ Купон ============


def test_select_coupon_replaces_previous(coupon):
    other = Coupon(name="5000", code="AMOUNT5000", discount_type="amount", discount_value=5000)
    cart = select_coupon(select_coupon(Cart(), coupon), other)
    assert cart.selected_coupon == other


def test_select_none_clears_coupon(coupon, phone):
    cart = add_to_cart(select_coupon(Cart(), coupon), phone)
    cart = select_coupon(cart, None)
    assert cart.selected_coupon is None
    assert quantities(cart) == {"p1": 1}


# ============ Остаток и поиск ============


def test_remaining_stock(phone, laptop):
    cart = update_quantity(add_to_cart(Cart(), phone), "p1", 4)
    assert get_remaining_stock(cart, phone) == 6
    assert get_remaining_stock(cart, laptop) == 3


def test_search_empty_term_returns_all(phone, laptop):
    assert search_products((phone, laptop), "") == (phone, laptop)
    assert search_products((phone, laptop), "   ") == (phone, laptop)


def test_search_case_insensitive(phone, laptop):
    assert search_products((phone, laptop), "LAP") == (laptop,)
    assert search_products((phone, laptop), "o") == (phone, laptop)
    assert search_products((phone, laptop), "tablet") == ()


def test_find_coupon_by_code(coupon):
    assert find_coupon_by_code((coupon,), "PERCENT10").get_or_else(None) == coupon
    assert find_coupon_by_code((coupon,), "NOPE").is_none()


def test_load_seed():
    products, coupons = load_seed(SEED_PATH)
    assert len(products) == 3
    assert products[0].discounts == (DiscountTier(10, 0.1), DiscountTier(20, 0.2))
    assert {c.discount_type for c in coupons} == {"amount", "percentage"}


def test_load_seed_rejects_coupon_without_type(tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text(
        json.dumps({"products": [], "coupons": [{"name": "c", "code": "c", "discountValue": 5000}]}),
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="discount type"):
        load_seed(str(seed))


def test_coupon_from_dict_accepts_both_key_styles():
    camel = coupon_from_dict({"name": "a", "code": "A", "discountType": "amount", "discountValue": 5})
    snake = coupon_from_dict({"name": "a", "code": "A", "discount_type": "amount", "discount_value": 5})
    assert camel == snake == Coupon(name="a", code="A", discount_type="amount", discount_value=5.0)


# ============ Коллекции каталога ============


def test_replace_product_matched_by_id(phone, laptop):
    cheaper = Product(id="p1", name="Phone", price=1, stock=10)
    assert replace_product((phone, laptop), cheaper) == (cheaper, laptop)


def test_append_product_and_find(phone):
    products = append_product((), phone)
    assert find_product_by_id(products, "p1").get_or_else(None) == phone
    assert find_product_by_id(products, "p9").is_none()


def test_append_coupon(coupon):
    assert append_coupon((), coupon) == (coupon,)
