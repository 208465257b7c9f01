from __future__ import annotations

import asyncio
import logging

import streamlit as st
from pydantic import ValidationError

from adapters.pricing.coinpaprika import CoinPaprikaClient
from adapters.storage.local_storage import JsonFileLocalStorage
from adapters.storage.persistence import LocalStoragePersistence
from apps.ui import views
from core.portfolio_store import PortfolioStore
from core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

STORE_KEY = "portfolio_store"


def _configure_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        logger.exception("Failed to load settings")
        st.error("Invalid settings. Check .env or environment variables.")
        st.code(str(exc))
        st.stop()


def build_store(settings: Settings) -> PortfolioStore:
    persistence = LocalStoragePersistence(JsonFileLocalStorage(settings.storage_path))
    return PortfolioStore(
        CoinPaprikaClient.from_settings(settings),
        persistence,
        portfolio_key=settings.portfolio_key,
        dark_mode_key=settings.dark_mode_key,
        catalog_limit=settings.catalog_limit,
        suggestion_limit=settings.suggestion_limit,
    )


def _get_store(settings: Settings) -> PortfolioStore:
    store = st.session_state.get(STORE_KEY)
    if store is None:
        logger.info("Creating portfolio store for new session")
        store = build_store(settings)
        with st.spinner("Loading coins..."):
            asyncio.run(store.initialize())
        st.session_state[STORE_KEY] = store
    return store


def main() -> None:
    st.set_page_config(page_title="Crypto Portfolio", layout="wide")
    settings = _load_settings()
    _configure_logging(settings.log_level)

    store = _get_store(settings)

    views.render_header(store)
    views.render_error(store)
    views.render_add_form(store)
    st.divider()
    views.render_portfolio(store)
    st.divider()
    views.render_catalog(store)


if __name__ == "__main__":
    main()
