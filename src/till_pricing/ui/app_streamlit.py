"""
Streamlit till screen.

Features:
- Category tabs with search and one button per product unit
- Basket with +/- controls, deal notes and undo
- Total, cash received, quick cash buttons and change
- Admin panel (PIN gated) for band and override prices, import/export
"""
import streamlit as st
import pandas as pd
from datetime import datetime

from till_pricing.config.logging_config import configure_logging
from till_pricing.config.settings import get_settings
from till_pricing.engine import format_pence, resolve_units_and_prices
from till_pricing.exceptions import TillError
from till_pricing.services.admin_gate import AdminGate
from till_pricing.services.basket import Basket
from till_pricing.services.catalog_service import CatalogService


st.set_page_config(
    page_title="Pub Till",
    layout="wide",
    initial_sidebar_state="collapsed"
)


@st.cache_resource
def get_catalog():
    """Get cached catalog service instance."""
    configure_logging()
    return CatalogService(get_settings())


try:
    catalog = get_catalog()
    settings = catalog.settings
except TillError as e:
    st.error(f"System Error: {e.message}")
    st.stop()

if 'basket' not in st.session_state:
    st.session_state.basket = Basket()
if 'admin' not in st.session_state:
    st.session_state.admin = AdminGate()

basket: Basket = st.session_state.basket
admin: AdminGate = st.session_state.admin
if "cash_text" not in st.session_state:
    st.session_state.cash_text = ""


# ============================================================================
# CUSTOM CSS & STYLING
# ============================================================================
st.markdown("""
    <style>
        .block-container {
            padding-top: 1.5rem;
            padding-bottom: 1rem;
        }
        div.stButton > button {
            width: 100%;
            min-height: 3rem;
            font-weight: 700;
        }
        .stMetric {
            background-color: #f0f2f6;
            padding: 10px;
            border-radius: 5px;
        }
    </style>
""", unsafe_allow_html=True)


def add_to_basket(product, unit):
    basket.add(product, unit, catalog.band_lookup())


def cash_typed():
    basket.set_cash_from_text(st.session_state.cash_text)


def set_cash(pence):
    basket.set_cash(pence)
    st.session_state.cash_text = f"{pence / 100:.2f}"


def clear_sale():
    basket.clear()
    st.session_state.cash_text = ""


# Admin widgets keep their own value once keyed, so edits go through
# on_change and the keys are dropped whenever the catalog is replaced.
ADMIN_KEY_PREFIX = "admin-"


def forget_admin_widgets():
    for key in [k for k in st.session_state if str(k).startswith(ADMIN_KEY_PREFIX)]:
        del st.session_state[key]


def band_price_changed(band_id, unit, key):
    try:
        catalog.update_band_price(band_id, unit, round(st.session_state[key] * 100))
    except TillError as e:
        st.session_state.admin_message = ("error", e.message)


def override_price_changed(product_id, unit, key):
    try:
        catalog.update_override_price(product_id, unit, round(st.session_state[key] * 100))
    except TillError as e:
        st.session_state.admin_message = ("error", e.message)


def pin_enabled_changed():
    catalog.set_pin_enabled(st.session_state[f"{ADMIN_KEY_PREFIX}pin_enabled"])


def pin_changed():
    key = f"{ADMIN_KEY_PREFIX}new_pin"
    catalog.set_pin(st.session_state[key])
    # A blank entry falls back to the default PIN; redraw with what was stored
    del st.session_state[key]


def apply_import():
    upload = st.session_state.get("import_json")
    if upload is None:
        return
    try:
        catalog.import_json(upload.getvalue().decode("utf-8", errors="replace"))
    except TillError as e:
        st.session_state.admin_message = ("error", e.message)
        return
    forget_admin_widgets()
    st.session_state.admin_message = ("success", "Imported config.")


def reset_catalog():
    catalog.reset_defaults()
    forget_admin_widgets()
    st.session_state.admin_message = ("success", "Reset.")


def render_product(product, key_prefix):
    units, prices = resolve_units_and_prices(product, catalog.band_lookup())
    with st.container(border=True):
        st.markdown(f"**{product.name}**")
        cols = st.columns(len(units))
        for col, unit in zip(cols, units):
            with col:
                st.button(
                    f"{unit}\n{format_pence(prices.get(unit, 0))}",
                    key=f"{key_prefix}-{product.id}-{unit}",
                    on_click=add_to_basket,
                    args=(product, unit),
                )


# ============================================================================
# HEADER
# ============================================================================
head_left, head_right = st.columns([4, 1])
with head_left:
    st.title("Pub Till")
    st.caption(f"Bands + overrides • Totals + change | {datetime.now().strftime('%Y-%m-%d')}")
with head_right:
    if st.button("⚙️ Edit prices"):
        admin.open(catalog.document.pin_enabled)


# ============================================================================
# ADMIN PANEL
# ============================================================================
if admin.is_open:
    with st.container(border=True):
        top_left, top_right = st.columns([4, 1])
        top_left.subheader("Admin")
        if top_right.button("Close"):
            admin.close()
            st.rerun()

        if not admin.authorised:
            st.caption("Enter PIN to edit prices.")
            pin_entry = st.text_input("PIN", type="password", key="pin_entry")
            if st.button("Unlock"):
                try:
                    admin.try_pin(pin_entry, catalog.document.pin)
                    st.rerun()
                except TillError as e:
                    st.error(e.message)
        else:
            st.markdown("##### Price Bands")
            for band in catalog.bands:
                st.markdown(f"**{band.name}**")
                cols = st.columns(max(len(band.units), 1))
                for col, unit in zip(cols, band.units):
                    key = f"{ADMIN_KEY_PREFIX}band-{band.id}-{unit}"
                    col.number_input(
                        unit,
                        min_value=0.0,
                        value=band.prices_pence.get(unit, 0) / 100,
                        step=0.10,
                        format="%.2f",
                        key=key,
                        on_change=band_price_changed,
                        args=(band.id, unit, key),
                    )

            st.markdown("##### Overrides (individually priced)")
            for product in catalog.override_products():
                st.markdown(f"**{product.name}** · {product.category}")
                prices = product.pricing.prices_pence
                cols = st.columns(max(len(product.pricing.units), 1))
                for col, unit in zip(cols, product.pricing.units):
                    key = f"{ADMIN_KEY_PREFIX}override-{product.id}-{unit}"
                    col.number_input(
                        unit,
                        min_value=0.0,
                        value=prices.get(unit, 0) / 100,
                        step=0.10,
                        format="%.2f",
                        key=key,
                        on_change=override_price_changed,
                        args=(product.id, unit, key),
                    )

            st.markdown("##### Import / Export")
            c1, c2, c3 = st.columns(3)
            with c1:
                st.download_button(
                    "Export JSON",
                    data=catalog.export_json(),
                    file_name=settings.export_filename,
                    mime="application/json",
                )
            with c2:
                upload = st.file_uploader("Import JSON", type=["json"], key="import_json")
                st.button("Apply import", disabled=upload is None, on_click=apply_import)
            with c3:
                st.button("Reset Defaults", type="secondary", on_click=reset_catalog)

            message = st.session_state.pop("admin_message", None)
            if message:
                kind, text = message
                if kind == "error":
                    st.error(text)
                else:
                    st.success(text)

            st.markdown("##### PIN")
            st.checkbox(
                "Require PIN to edit prices",
                value=catalog.document.pin_enabled,
                key=f"{ADMIN_KEY_PREFIX}pin_enabled",
                on_change=pin_enabled_changed,
            )
            st.text_input(
                "New PIN",
                value=catalog.document.pin,
                key=f"{ADMIN_KEY_PREFIX}new_pin",
                on_change=pin_changed,
            )

            with st.expander("📊 Price list"):
                st.dataframe(catalog.price_list_frame(), hide_index=True, width="stretch")


# ============================================================================
# MAIN: PRODUCTS | BASKET
# ============================================================================
col_products, col_basket = st.columns([1.8, 1.2], gap="large")

with col_products:
    search = st.text_input("Search", placeholder="Search (e.g. guin, goose)", label_visibility="collapsed")
    categories = catalog.categories()
    if categories:
        tabs = st.tabs(categories)
        for tab, category in zip(tabs, categories):
            with tab:
                for product in catalog.pinned_products(category):
                    render_product(product, f"pin-{category}")
                products = catalog.filter_products(category, search)
                if not products:
                    st.caption("No products match.")
                grid = st.columns(2)
                for i, product in enumerate(products):
                    with grid[i % 2]:
                        render_product(product, category)

with col_basket:
    lookup = catalog.product_lookup()
    head, undo = st.columns([3, 1])
    head.subheader("Basket")
    if undo.button("Undo", disabled=not len(basket)):
        basket.undo_last_add()
        st.rerun()

    if not len(basket):
        st.caption("Tap a product to add it.")
    for line in list(basket.lines):
        priced = basket.line_total(line, lookup)
        with st.container(border=True):
            c1, c2 = st.columns([3, 2])
            c1.markdown(f"**{line.label}**  \n{format_pence(line.price_pence)} × {line.qty}")
            c2.markdown(f"**{format_pence(priced.total_pence)}**")
            if priced.deal_note:
                c2.caption(f"Deal: {priced.deal_note}")
            b1, b2, b3 = st.columns(3)
            b1.button("−", key=f"dec-{line.key}", on_click=basket.decrement, args=(line.key,))
            b2.button("+", key=f"inc-{line.key}", on_click=basket.increment, args=(line.key,))
            b3.button("Remove", key=f"rm-{line.key}", on_click=basket.remove, args=(line.key,))

    total = basket.total(lookup)
    st.metric("Total", format_pence(total))

    st.text_input("Cash received", key="cash_text", placeholder="0.00", on_change=cash_typed)

    quick = st.columns(len(settings.quick_cash_pence) + 1)
    for col, pence in zip(quick, settings.quick_cash_pence):
        col.button(format_pence(pence), key=f"cash-{pence}", on_click=set_cash, args=(pence,))
    quick[-1].button("Exact", on_click=set_cash, args=(total,))

    change = basket.change(lookup)
    st.metric("Change" if change >= 0 else "Still owed", format_pence(abs(change)))

    if len(basket):
        summary = pd.DataFrame(basket.summary(lookup)["lines"])
        with st.expander("Ticket"):
            st.dataframe(summary[["label", "qty", "total_pence", "deal_note"]], hide_index=True)

    st.button("Clear sale", type="primary", on_click=clear_sale)
