from __future__ import annotations

import asyncio
import logging

import altair as alt
import pandas as pd
import streamlit as st

from apps.ui.transformers import coins_to_frame, format_usd, portfolio_to_frame
from core.portfolio_store import PortfolioStore

logger = logging.getLogger(__name__)

COIN_NAME_KEY = "coin_name_input"
COIN_PICK_KEY = "coin_pick"
AMOUNT_KEY = "amount_input"
SEARCH_KEY = "search_input"
CATALOG_PICK_KEY = "catalog_pick"

DARK_CSS = """
<style>
.stApp { background-color: #121212; color: #e0e0e0; }
</style>
"""


def _select_by_name(store: PortfolioStore, widget_key: str) -> None:
    name = st.session_state.get(widget_key)
    if name:
        store.set_selected_coin(store.get_coin_by_name(name))
    st.session_state[widget_key] = ""


def render_header(store: PortfolioStore) -> None:
    title_col, toggle_col = st.columns([4, 1])
    title_col.title("Crypto Portfolio")
    toggle_col.toggle(
        "Dark" if store.dark_mode else "Light",
        value=store.dark_mode,
        on_change=store.toggle_dark_mode,
    )
    if store.dark_mode:
        st.markdown(DARK_CSS, unsafe_allow_html=True)


def render_error(store: PortfolioStore) -> None:
    if not store.error:
        return
    message_col, dismiss_col = st.columns([5, 1])
    message_col.error(store.error)
    dismiss_col.button("Dismiss", on_click=store.clear_error)


def render_add_form(store: PortfolioStore) -> None:
    # Widgets mirror the store; the store is the source of truth.
    st.session_state[COIN_NAME_KEY] = store.coin_name
    if not store.coin_amount:
        st.session_state[AMOUNT_KEY] = ""

    with st.container(border=True):
        name_col, amount_col, button_col = st.columns([3, 2, 2])

        name_col.text_input(
            "Coin name",
            key=COIN_NAME_KEY,
            on_change=lambda: store.set_coin_name(st.session_state[COIN_NAME_KEY]),
        )
        name_col.selectbox(
            "Matching coins",
            [""] + [coin.name for coin in store.filtered_coins],
            key=COIN_PICK_KEY,
            disabled=store.loading,
            on_change=_select_by_name,
            args=(store, COIN_PICK_KEY),
        )
        if store.selected_coin is not None:
            name_col.caption(f"Selected: {store.selected_coin.name} ({store.selected_coin.symbol})")

        amount_col.text_input(
            "Amount",
            key=AMOUNT_KEY,
            placeholder="0.5, 1, 2.5",
            on_change=lambda: store.set_coin_amount(st.session_state[AMOUNT_KEY]),
        )

        label = "Adding..." if store.adding_to_portfolio else "Add to Portfolio"
        if button_col.button(label, disabled=not store.can_add, use_container_width=True):
            with st.spinner("Fetching current price..."):
                asyncio.run(store.add_to_portfolio())
            st.rerun()


def render_portfolio(store: PortfolioStore) -> None:
    header_col, refresh_col, clear_col = st.columns([4, 1, 1])
    header_col.subheader("Your Portfolio")
    items = store.portfolio
    if not items:
        st.info("Your portfolio is empty")
        return

    if refresh_col.button("Updating..." if store.loading else "Refresh Prices", disabled=store.loading):
        with st.spinner("Refreshing prices..."):
            asyncio.run(store.update_all_prices())
        st.rerun()
    clear_col.button("Clear", on_click=store.clear_portfolio)

    df = portfolio_to_frame(items)
    for row in df.itertuples(index=False):
        coin_col, amount_col, price_col, total_col, refresh_item_col, delete_col = st.columns([3, 2, 2, 2, 1, 1])
        coin_col.write(row.coin)
        amount_col.write(f"{row.amount:g}")
        price_col.write(format_usd(row.price))
        total_col.write(format_usd(row.total))
        if refresh_item_col.button("Refresh", key=f"refresh-{row.id}"):
            asyncio.run(store.update_item_price(row.id))
            st.rerun()
        delete_col.button("Delete", key=f"delete-{row.id}", on_click=store.remove_from_portfolio, args=(row.id,))

    st.metric("Total Value", f"${float(store.total_portfolio_value):,.2f}")
    _render_allocation(df)


def _render_allocation(df: pd.DataFrame) -> None:
    priced = df.dropna(subset=["total"])
    if priced.empty or priced["total"].sum() <= 0:
        return
    st.subheader("Allocation")
    chart = (
        alt.Chart(priced)
        .mark_arc()
        .encode(
            theta=alt.Theta(field="total", type="quantitative"),
            color=alt.Color(field="coin", type="nominal"),
            tooltip=[
                alt.Tooltip(field="coin", type="nominal"),
                alt.Tooltip(field="total", type="quantitative", format=",.2f"),
                alt.Tooltip(field="weight", type="quantitative", format=".2%"),
            ],
        )
    )
    st.altair_chart(chart, use_container_width=True)


def render_catalog(store: PortfolioStore) -> None:
    st.subheader("Available Cryptocurrencies")
    st.session_state[SEARCH_KEY] = store.search_query
    st.text_input(
        "Search...",
        key=SEARCH_KEY,
        placeholder="Search by name or symbol",
        on_change=lambda: store.set_search_query(st.session_state[SEARCH_KEY]),
    )

    if store.loading:
        st.caption("Loading coins...")
        return

    coins = store.searched_coins
    if not coins and store.search_query:
        st.info(f'No results for "{store.search_query}"')
        return
    st.dataframe(coins_to_frame(coins), use_container_width=True, hide_index=True)
    st.selectbox(
        "Select a coin to add",
        [""] + [coin.name for coin in coins],
        key=CATALOG_PICK_KEY,
        on_change=_select_by_name,
        args=(store, CATALOG_PICK_KEY),
    )
