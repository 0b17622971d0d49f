"""The outfit state reducer: one pure transition per action."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from dti_app.logging_config import get_logger, log_event
from logic.conflicts import find_item_conflicts, reconsider_items
from models.actions import (
    OutfitAction,
    RemoveItem,
    Rename,
    ResetToSavedOutfitData,
    SetPose,
    SetSpeciesAndColor,
    UnknownActionError,
    UnwearItem,
    WearItem,
)
from models.outfit_state import OutfitState, from_saved_outfit_data
from tools.appearance_lookup import AppearanceLookup, MissingAppearanceData

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """New state after an action, or the unchanged state plus the failure."""

    state: OutfitState
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _wear_item(state: OutfitState, action: WearItem, lookup: AppearanceLookup) -> OutfitState:
    item_id = str(action.item_id)
    conflicting_ids = find_item_conflicts(item_id, state, lookup)
    state = state.evolve(
        worn_item_ids=(state.worn_item_ids - conflicting_ids) | {item_id},
        closeted_item_ids=(state.closeted_item_ids | conflicting_ids) - {item_id},
    )
    return reconsider_items(action.item_ids_to_reconsider, state, lookup)


def _unwear_item(state: OutfitState, action: UnwearItem, lookup: AppearanceLookup) -> OutfitState:
    item_id = str(action.item_id)
    state = state.evolve(
        worn_item_ids=state.worn_item_ids - {item_id},
        closeted_item_ids=state.closeted_item_ids | {item_id},
    )
    # Never put back the item that was just taken off.
    to_reconsider = [other for other in action.item_ids_to_reconsider if str(other) != item_id]
    return reconsider_items(to_reconsider, state, lookup)


def _remove_item(state: OutfitState, action: RemoveItem, lookup: AppearanceLookup) -> OutfitState:
    item_id = str(action.item_id)
    state = state.evolve(
        worn_item_ids=state.worn_item_ids - {item_id},
        closeted_item_ids=state.closeted_item_ids - {item_id},
    )
    to_reconsider = [other for other in action.item_ids_to_reconsider if str(other) != item_id]
    return reconsider_items(to_reconsider, state, lookup)


def _transition(state: OutfitState, action: OutfitAction, lookup: AppearanceLookup) -> OutfitState:
    if isinstance(action, Rename):
        return state.evolve(name=action.outfit_name)
    if isinstance(action, SetSpeciesAndColor):
        # Worn items stay worn even if they no longer fit; incompatibility is
        # reported by the views instead.
        return state.evolve(
            species_id=action.species_id,
            color_id=action.color_id,
            pose=action.pose,
            appearance_id=None,
        )
    if isinstance(action, SetPose):
        return state.evolve(pose=action.pose, appearance_id=action.appearance_id or None)
    if isinstance(action, WearItem):
        return _wear_item(state, action, lookup)
    if isinstance(action, UnwearItem):
        return _unwear_item(state, action, lookup)
    if isinstance(action, RemoveItem):
        return _remove_item(state, action, lookup)
    if isinstance(action, ResetToSavedOutfitData):
        return from_saved_outfit_data(action.saved_outfit_data)
    raise UnknownActionError(f"unexpected action {action!r}")


def outfit_state_reducer(state: OutfitState, action: OutfitAction, lookup: AppearanceLookup) -> TransitionResult:
    """Apply one action to ``state``.

    Missing appearance data aborts the whole action and returns the original
    state with the error attached. Unknown actions raise
    :class:`UnknownActionError`.
    """

    log_event(LOGGER, logging.INFO, "outfit_action", action=type(action).__name__, outfit_id=state.id)
    try:
        new_state = _transition(state, action, lookup)
    except MissingAppearanceData as exc:
        log_event(
            LOGGER,
            logging.WARNING,
            "outfit_action_aborted",
            action=type(action).__name__,
            missing_item_ids=exc.item_ids,
            species_id=exc.species_id,
            color_id=exc.color_id,
        )
        return TransitionResult(state=state, error=exc)
    return TransitionResult(state=new_state)


__all__ = ["TransitionResult", "outfit_state_reducer"]
