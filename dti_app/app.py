"""Application bootstrap: wires config, catalog, outfit storage and sessions."""

from __future__ import annotations

import locale
import logging

from dti_app.config import AppConfig
from dti_app.logging_config import configure_logging, get_logger, log_event
from memory.outfit_session import OutfitSessionManager
from memory.outfit_store import JSONOutfitStore, OutfitStore, SQLiteOutfitStore
from tools.appearance_lookup import AppearanceCache
from tools.catalog_store import SQLiteCatalogStore

LOGGER = get_logger(__name__)


def apply_collation_locale(name: str) -> bool:
    """Set LC_COLLATE so zone labels and item names sort the way the user reads them."""

    try:
        locale.setlocale(locale.LC_COLLATE, name)
    except locale.Error:
        log_event(LOGGER, logging.WARNING, "collation_locale_unavailable", locale=name)
        return False
    return True


class DressToImpressApp:
    """Owns the shared collaborators; each open outfit gets its own session."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging(self.config.log_level)
        apply_collation_locale(self.config.collation_locale)

        self.catalog = SQLiteCatalogStore(self.config.catalog_db_path or "data/catalog.db")
        self.outfit_store = self._build_outfit_store()
        # Shared across sessions: entries are only ever added, never evicted.
        self.appearance_cache = AppearanceCache()
        log_event(
            LOGGER,
            logging.INFO,
            "app_started",
            environment=self.config.environment or "local",
            outfit_store_backend=self.config.outfit_store_backend,
        )

    def _build_outfit_store(self) -> OutfitStore:
        if self.config.outfit_store_backend.lower() == "sqlite":
            return SQLiteOutfitStore(self.config.outfit_store_path or "data/outfits.db")
        return JSONOutfitStore(self.config.outfit_store_path or "data/outfits")

    def new_session(self) -> OutfitSessionManager:
        return OutfitSessionManager(
            catalog=self.catalog,
            store=self.outfit_store,
            lookup=self.appearance_cache,
            config=self.config,
        )

    def open_outfit(self, query_string: str = "", outfit_id: str | None = None) -> OutfitSessionManager:
        """Open a session on the outfit a URL points at."""

        session = self.new_session()
        session.open_from_url(query_string, outfit_id=outfit_id)
        return session


__all__ = ["DressToImpressApp", "apply_collation_locale"]
