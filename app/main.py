import sys
import os
import streamlit as st

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from cart_core.config import load_settings
from cart_core.logging_config import setup_logging, get_logger
from cart_core.domain import AMOUNT, PERCENTAGE
from cart_core.pricing import get_max_applicable_discount, price_line
from cart_core.service import CartService, CatalogService
from cart_core.storage import CartStorage
from cart_core.transforms import by_in_stock, load_seed
from Admin_Service.catalog import (
    add_discount_to_product,
    create_product_with_id,
    describe_coupon,
    describe_discount,
    format_percent,
    parse_coupon_form,
    parse_discount_form,
    parse_product_form,
    remove_discount_from_product,
    update_product_field,
)

settings = load_settings()
setup_logging(settings.log_level)
logger = get_logger("app")


# ============ Кэширование данных ============
@st.cache_data
def get_data(path: str):
    return load_seed(path)


# ============ Инициализация ============
st.set_page_config(
    page_title="Shop Cart",
    page_icon="🛒",
    layout="wide",
)

if "catalog" not in st.session_state:
    products, coupons = get_data(settings.seed_path)
    st.session_state.catalog = CatalogService(products, coupons)

if "cart_service" not in st.session_state:
    storage = (
        CartStorage(settings.cart_store_path, settings.cart_store_key)
        if settings.cart_persistence
        else None
    )
    st.session_state.cart_service = CartService(storage)
    logger.info("session started, cart persistence=%s", settings.cart_persistence)

if "editing_product" not in st.session_state:
    st.session_state.editing_product = None

catalog: CatalogService = st.session_state.catalog
cart_service: CartService = st.session_state.cart_service


def format_price(amount: float) -> str:
    """Целые единицы с разделителем тысяч"""
    return f"{round(amount):,} ₸".replace(",", " ")


# ============ HEADER ============
st.title("🛒 Корзина и управление магазином")

with st.sidebar:
    st.header("📂 Навигация")
    page = st.radio(
        "Раздел:",
        ["🛒 Корзина", "⚙️ Админ"],
        label_visibility="collapsed",
    )
    st.divider()
    st.caption(
        "💾 Кэш корзины: "
        + ("включён" if settings.cart_persistence else "выключен")
    )


# ============ PAGE: КОРЗИНА ============
if page == "🛒 Корзина":
    search_term = st.text_input("🔍 Поиск по названию", key="search_term")
    only_in_stock = st.checkbox("Только в наличии", key="only_in_stock")

    found = catalog.search(search_term)
    if only_in_stock:
        found = tuple(filter(by_in_stock(), found))

    col_products, col_cart = st.columns(2)

    with col_products:
        st.subheader("📦 Товары")
        if not found:
            st.warning("Товары не найдены.")
        for p in found:
            remaining = cart_service.remaining_stock(p)
            with st.container(border=True):
                cols = st.columns([4, 2, 2])
                with cols[0]:
                    st.markdown(f"**{p.name}**")
                    st.caption(f"В наличии: {remaining}")
                    for tier in p.discounts:
                        st.caption(describe_discount(tier))
                with cols[1]:
                    st.write(format_price(p.price))
                with cols[2]:
                    if st.button(
                        "➕ В корзину" if remaining > 0 else "Нет в наличии",
                        key=f"add_{p.id}",
                        disabled=remaining <= 0,
                    ):
                        cart_service.add(p)
                        st.rerun()

    with col_cart:
        st.subheader("🧺 Корзина")
        cart = cart_service.cart

        if not cart.items:
            st.info("Корзина пуста.")

        for item in cart.items:
            line = price_line(item)
            rate = get_max_applicable_discount(item)
            with st.container(border=True):
                cols = st.columns([4, 1, 1, 1])
                with cols[0]:
                    st.markdown(f"**{item.product.name}**")
                    caption = f"{format_price(item.product.price)} × {item.quantity}"
                    if rate > 0:
                        caption += f" (скидка {format_percent(rate)})"
                    st.caption(caption)
                    st.write(format_price(line.after_discount))
                with cols[1]:
                    if st.button("➖", key=f"dec_{item.product.id}"):
                        cart_service.update_quantity(item.product.id, item.quantity - 1)
                        st.rerun()
                with cols[2]:
                    if st.button("➕", key=f"inc_{item.product.id}"):
                        cart_service.update_quantity(item.product.id, item.quantity + 1)
                        st.rerun()
                with cols[3]:
                    if st.button("🗑️", key=f"remove_{item.product.id}"):
                        cart_service.remove(item.product.id)
                        st.rerun()

        st.divider()

        # Купон
        st.markdown("##### 🎟️ Купон")
        codes = [c.code for c in catalog.coupons]
        selected = cart.selected_coupon
        choice = st.selectbox(
            "Купон",
            ["—"] + codes,
            index=codes.index(selected.code) + 1 if selected and selected.code in codes else 0,
            format_func=lambda code: code
            if code == "—"
            else describe_coupon(catalog.get_coupon(code).get_or_else(None)),
            label_visibility="collapsed",
        )
        chosen = catalog.get_coupon(choice).get_or_else(None)
        if chosen != selected:
            cart_service.select_coupon(chosen)
            st.rerun()

        # Итоги
        totals = cart_service.totals()
        st.markdown("##### 🧾 Итого")
        st.write(f"Сумма до скидки: {format_price(totals.total_before_discount)}")
        st.write(f"Скидка: {format_price(totals.total_discount)}")
        st.markdown(f"### 💰 К оплате: **{format_price(totals.total_after_discount)}**")

        if cart.items and st.button("Очистить корзину", key="clear_cart"):
            cart_service.clear()
            st.rerun()


# ============ PAGE: АДМИН ============
elif page == "⚙️ Админ":
    col_products, col_coupons = st.columns(2)

    with col_products:
        st.subheader("📦 Управление товарами")

        with st.expander("➕ Новый товар"):
            with st.form("new_product", clear_on_submit=True):
                name = st.text_input("Название")
                price = st.number_input("Цена", min_value=0, step=100)
                stock = st.number_input("Остаток", min_value=0, step=1)
                if st.form_submit_button("Добавить"):
                    result = parse_product_form(name, price, stock)
                    if result.is_right:
                        catalog.add_product(create_product_with_id(*result.value))
                        st.rerun()
                    else:
                        st.error(result.value["error"])

        for p in catalog.products:
            with st.expander(f"{p.name} — {format_price(p.price)} (остаток: {p.stock})"):
                if st.session_state.editing_product != p.id:
                    for tier in p.discounts:
                        st.write(describe_discount(tier))
                    if st.button("Изменить", key=f"edit_{p.id}"):
                        st.session_state.editing_product = p.id
                        st.rerun()
                    continue

                new_name = st.text_input("Название", p.name, key=f"name_{p.id}")
                new_price = st.number_input("Цена", min_value=0, value=p.price, key=f"price_{p.id}")
                new_stock = st.number_input("Остаток", min_value=0, value=p.stock, key=f"stock_{p.id}")

                st.markdown("**Скидки**")
                for index, tier in enumerate(p.discounts):
                    cols = st.columns([4, 1])
                    cols[0].write(describe_discount(tier))
                    if cols[1].button("Удалить", key=f"rm_disc_{p.id}_{index}"):
                        catalog.update_product(remove_discount_from_product(p, index))
                        st.rerun()

                cols = st.columns(3)
                tier_qty = cols[0].number_input("Количество", min_value=0, step=1, key=f"tier_qty_{p.id}")
                tier_pct = cols[1].number_input("Скидка, %", min_value=0, max_value=99, key=f"tier_pct_{p.id}")
                if cols[2].button("Добавить скидку", key=f"add_disc_{p.id}"):
                    result = parse_discount_form(tier_qty, tier_pct)
                    if result.is_right:
                        catalog.update_product(add_discount_to_product(p, result.value))
                        st.rerun()
                    else:
                        st.error(result.value["error"])

                if st.button("Готово", key=f"done_{p.id}", type="primary"):
                    updated = update_product_field(p, "name", new_name)
                    updated = update_product_field(updated, "price", new_price)
                    updated = update_product_field(updated, "stock", new_stock)
                    catalog.update_product(updated)
                    st.session_state.editing_product = None
                    st.rerun()

    with col_coupons:
        st.subheader("🎟️ Управление купонами")

        with st.form("new_coupon", clear_on_submit=True):
            c_name = st.text_input("Название купона")
            c_code = st.text_input("Код купона")
            c_type = st.selectbox(
                "Тип",
                [AMOUNT, PERCENTAGE],
                format_func=lambda t: "Сумма (₸)" if t == AMOUNT else "Процент (%)",
            )
            c_value = st.number_input("Значение", min_value=0.0, step=1.0)
            if st.form_submit_button("Добавить купон"):
                result = parse_coupon_form(c_name, c_code, c_type, c_value)
                if result.is_right:
                    catalog.add_coupon(result.value)
                    st.rerun()
                else:
                    st.error(result.value["error"])

        for coupon in catalog.coupons:
            st.write(f"• {describe_coupon(coupon)}")
