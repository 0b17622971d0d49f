"""Host-side owner of the current outfit state.

The manager holds the one live :class:`OutfitState`, fetches appearance data
before each transition, and runs the pure reducer. Nothing here is global: the
application creates as many managers as it has open outfits.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, List, Optional

from dti_app.config import AppConfig
from dti_app.logging_config import get_logger, log_event, operation_context
from logic.outfit_reducer import TransitionResult, outfit_state_reducer
from logic.outfit_url import build_outfit_query_string, outfit_for_path
from logic.outfit_view import FetchedOutfitData, OutfitView, build_outfit_view
from memory.outfit_store import OutfitNotFound, OutfitStore
from models.actions import OutfitAction, RemoveItem, ResetToSavedOutfitData, SetSpeciesAndColor, UnwearItem, WearItem
from models.outfit_state import EMPTY_OUTFIT_STATE, OutfitState
from tools.appearance_lookup import AppearanceCache
from tools.catalog_store import CatalogError, CatalogStore, UnknownSpeciesColor, prime_appearance_cache

LOGGER = get_logger(__name__)

_ITEM_ACTIONS = (WearItem, UnwearItem, RemoveItem)
_UPSTREAM_ERRORS = (CatalogError, sqlite3.Error)


class OutfitSessionManager:
    """Coordinates loading, transitions, saving and read views for one outfit."""

    def __init__(
        self,
        catalog: Optional[CatalogStore] = None,
        store: Optional[OutfitStore] = None,
        lookup: Optional[AppearanceCache] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.lookup = lookup if lookup is not None else AppearanceCache()
        self.config = config or AppConfig()
        self._state: OutfitState = EMPTY_OUTFIT_STATE

    @property
    def state(self) -> OutfitState:
        return self._state

    @property
    def query_string(self) -> str:
        return build_outfit_query_string(self._state)

    def open_from_url(self, query_string: str = "", outfit_id: Optional[str] = None) -> TransitionResult:
        """Start from a URL; ``/outfits/<id>`` URLs load the saved outfit instead."""

        if outfit_id is not None:
            return self.open_saved(outfit_id)
        self._state = outfit_for_path(
            None,
            query_string,
            default_species_id=self.config.default_species_id,
            default_color_id=self.config.default_color_id,
            default_pose=self.config.default_pose,
        )
        return TransitionResult(state=self._state)

    def open_saved(self, outfit_id: str) -> TransitionResult:
        """Load a saved outfit; an unknown id falls back to the empty outfit."""

        if self.store is None:
            raise RuntimeError("No outfit store configured")
        with operation_context("session:open_saved", outfit_id=outfit_id):
            try:
                saved = self.store.load_outfit(outfit_id)
            except OutfitNotFound as exc:
                log_event(LOGGER, logging.WARNING, "outfit_not_found", outfit_id=outfit_id)
                self._state = EMPTY_OUTFIT_STATE
                return TransitionResult(state=self._state, error=exc)
            return self.dispatch(ResetToSavedOutfitData(saved_outfit_data=saved))

    def _prime_for(self, action: OutfitAction) -> None:
        state = self._state
        if self.catalog is None or state.species_id is None or state.color_id is None:
            return
        item_ids: List[str] = list(state.all_item_ids)
        if isinstance(action, _ITEM_ACTIONS):
            item_ids.append(str(action.item_id))
            item_ids.extend(str(item_id) for item_id in action.item_ids_to_reconsider)
        still_missing = prime_appearance_cache(self.lookup, self.catalog, item_ids, state.species_id, state.color_id)
        if still_missing:
            log_event(LOGGER, logging.INFO, "catalog_items_unknown", item_ids=still_missing)

    def dispatch(self, action: OutfitAction) -> TransitionResult:
        """Fetch what the action needs, then apply it. Failures leave the state as it was.

        Switching to a species/color pair the catalog does not know is refused.
        """

        with operation_context("session:dispatch", outfit_id=self._state.id):
            if isinstance(action, SetSpeciesAndColor) and self.catalog is not None:
                try:
                    known = self.catalog.is_valid_species_color(action.species_id, action.color_id)
                except _UPSTREAM_ERRORS as exc:
                    log_event(LOGGER, logging.WARNING, "catalog_fetch_failed", details=str(exc))
                    return TransitionResult(state=self._state, error=exc)
                if not known:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "species_color_rejected",
                        species_id=action.species_id,
                        color_id=action.color_id,
                    )
                    return TransitionResult(
                        state=self._state, error=UnknownSpeciesColor(action.species_id, action.color_id)
                    )
            if isinstance(action, _ITEM_ACTIONS):
                try:
                    self._prime_for(action)
                except _UPSTREAM_ERRORS as exc:
                    log_event(LOGGER, logging.WARNING, "catalog_fetch_failed", details=str(exc))
                    return TransitionResult(state=self._state, error=exc)
            result = outfit_state_reducer(self._state, action, self.lookup)
            self._state = result.state
            return result

    def dispatch_all(self, actions: Iterable[OutfitAction]) -> List[TransitionResult]:
        return [self.dispatch(action) for action in actions]

    def save(self, user_id: Optional[str] = None, outfit_id: Optional[str] = None) -> str:
        """Persist the current state; pass ``outfit_id`` to overwrite that saved outfit."""

        if self.store is None:
            raise RuntimeError("No outfit store configured")
        state = self._state.evolve(id=outfit_id) if outfit_id else self._state
        outfit_id = self.store.save_outfit(state, user_id=user_id)
        self._state = self._state.evolve(id=outfit_id)
        log_event(LOGGER, logging.INFO, "outfit_saved", outfit_id=outfit_id, user_id=user_id)
        return outfit_id

    def fetch(self) -> Optional[FetchedOutfitData]:
        """Fetch catalog data for the current state, or ``None`` if it cannot be fetched."""

        state = self._state
        if self.catalog is None or state.species_id is None or state.color_id is None:
            return None
        try:
            items = self.catalog.get_items(state.all_item_ids, state.species_id, state.color_id)
            pet_appearances = self.catalog.get_pet_appearances(state.species_id, state.color_id)
        except _UPSTREAM_ERRORS as exc:
            log_event(LOGGER, logging.WARNING, "catalog_fetch_failed", details=str(exc))
            return None
        return FetchedOutfitData(
            species_id=state.species_id,
            color_id=state.color_id,
            items=items,
            pet_appearances=pet_appearances,
        )

    def view(self, fetched: Optional[FetchedOutfitData] = None) -> OutfitView:
        """Derived view of the current state; pass ``fetched`` to reuse earlier data."""

        return build_outfit_view(self._state, fetched if fetched is not None else self.fetch(), self.config.base_url)


__all__ = ["OutfitSessionManager"]
