"""Zone conflict detection between a candidate item and the worn items."""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, Optional

from models.outfit_state import OutfitState, sorted_item_ids
from models.zones import ZoneSets, get_item_zones
from tools.appearance_lookup import AppearanceLookup, MissingAppearanceData

logger = logging.getLogger(__name__)


def zone_sets_conflict(a: ZoneSets, b: ZoneSets) -> bool:
    """Two items conflict if either one occupies a zone the other occupies or restricts."""

    return bool(a.occupies & b.occupies_or_restricts) or bool(b.occupies & a.occupies_or_restricts)


def find_conflicts(
    candidate_item_id: str,
    worn_item_ids: Iterable[str],
    lookup: AppearanceLookup,
    species_id: Optional[str],
    color_id: Optional[str],
) -> FrozenSet[str]:
    """Return the worn item ids that must come off before the candidate goes on.

    Raises :class:`MissingAppearanceData` if the lookup lacks data for the
    candidate or any worn item. An incompatible candidate conflicts with
    nothing.
    """

    candidate_item_id = str(candidate_item_id)
    worn = [item_id for item_id in sorted_item_ids(worn_item_ids) if item_id != candidate_item_id]
    appearances = lookup.get_appearances([candidate_item_id, *worn], species_id, color_id)

    candidate_zones = get_item_zones(appearances[candidate_item_id])
    if not candidate_zones.occupies:
        return frozenset()

    conflicting = set()
    for worn_item_id in worn:
        if zone_sets_conflict(candidate_zones, get_item_zones(appearances[worn_item_id])):
            conflicting.add(worn_item_id)
    return frozenset(conflicting)


def find_item_conflicts(item_id: str, state: OutfitState, lookup: AppearanceLookup) -> FrozenSet[str]:
    return find_conflicts(item_id, state.worn_item_ids, lookup, state.species_id, state.color_id)


def reconsider_items(item_ids_to_reconsider: Iterable[str], state: OutfitState, lookup: AppearanceLookup) -> OutfitState:
    """Re-wear each candidate that no longer conflicts with anything worn.

    Candidates are checked one at a time against the state as it evolves, so
    a restored candidate can block a later one. Restored items leave the
    closet.
    """

    for item_id in item_ids_to_reconsider:
        item_id = str(item_id)
        if find_item_conflicts(item_id, state, lookup):
            logger.debug("Item %s still conflicts; leaving it in place", item_id)
            continue
        if item_id not in state.worn_item_ids:
            logger.debug("Restoring reconsidered item %s", item_id)
        state = state.evolve(
            worn_item_ids=state.worn_item_ids | {item_id},
            closeted_item_ids=state.closeted_item_ids - {item_id},
        )
    return state


__all__ = [
    "MissingAppearanceData",
    "find_conflicts",
    "find_item_conflicts",
    "reconsider_items",
    "zone_sets_conflict",
]
