"""Read views derived from outfit state plus fetched catalog data."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from logic.layers import choose_pet_appearance, get_visible_layers
from logic.outfit_url import build_outfit_url
from logic.zone_grouping import ZoneGroup, get_incompatible_items, get_zones_and_items
from models.item import Item
from models.outfit_state import OutfitState, sorted_item_ids
from models.zones import Layer, PetAppearance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchedOutfitData:
    """Catalog data fetched for one species/color, possibly for an older state."""

    species_id: Optional[str]
    color_id: Optional[str]
    items: Sequence[Item] = ()
    pet_appearances: Sequence[PetAppearance] = ()

    def matches(self, state: OutfitState) -> bool:
        return self.species_id == state.species_id and self.color_id == state.color_id


@dataclass(frozen=True)
class OutfitView:
    state: OutfitState
    url: str
    zones_and_items: List[ZoneGroup] = field(default_factory=list)
    incompatible_items: List[Item] = field(default_factory=list)
    visible_layers: List[Layer] = field(default_factory=list)
    pet_appearance: Optional[PetAppearance] = None

    @property
    def worn_item_ids(self) -> List[str]:
        return sorted_item_ids(self.state.worn_item_ids)

    @property
    def closeted_item_ids(self) -> List[str]:
        return sorted_item_ids(self.state.closeted_item_ids)

    @property
    def all_item_ids(self) -> List[str]:
        return self.state.all_item_ids


def build_outfit_view(state: OutfitState, fetched: Optional[FetchedOutfitData], base_url: str) -> OutfitView:
    """Project the state into everything the preview and item panels show.

    Fetched data for a different species/color is stale and ignored, as are
    fetched items no longer in the outfit. The view then shows what it can.
    """

    url = build_outfit_url(state, base_url)
    if fetched is None or not fetched.matches(state):
        if fetched is not None:
            logger.info(
                "Ignoring stale catalog data for species=%s color=%s", fetched.species_id, fetched.color_id
            )
        return OutfitView(state=state, url=url)

    outfit_item_ids = set(state.all_item_ids)
    items_by_id: Dict[str, Item] = {item.id: item for item in fetched.items if item.id in outfit_item_ids}
    worn_ids = sorted_item_ids(state.worn_item_ids)
    closeted_ids = sorted_item_ids(state.closeted_item_ids)

    pet_appearance = choose_pet_appearance(fetched.pet_appearances, state.pose, state.appearance_id)
    worn_appearances = [items_by_id[item_id].appearance for item_id in worn_ids if item_id in items_by_id]

    return OutfitView(
        state=state,
        url=url,
        zones_and_items=get_zones_and_items(items_by_id, worn_ids, closeted_ids),
        incompatible_items=get_incompatible_items(items_by_id.values()),
        visible_layers=get_visible_layers(pet_appearance, worn_appearances),
        pet_appearance=pet_appearance,
    )


__all__ = ["FetchedOutfitData", "OutfitView", "build_outfit_view"]
