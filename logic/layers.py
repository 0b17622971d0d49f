"""Visible layer projection for the outfit preview."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from models.zones import ItemAppearance, Layer, PetAppearance

logger = logging.getLogger(__name__)


def choose_pet_appearance(
    pet_appearances: Sequence[PetAppearance], pose: Optional[str], appearance_id: Optional[str] = None
) -> Optional[PetAppearance]:
    """Pick the pet appearance to draw: an explicit variant id wins over the pose."""

    if appearance_id is not None:
        for appearance in pet_appearances:
            if appearance.id == str(appearance_id):
                return appearance
        logger.info("Appearance variant %s not found; falling back to pose %s", appearance_id, pose)
    for appearance in pet_appearances:
        if appearance.pose == pose:
            return appearance
    return None


def get_visible_layers(
    pet_appearance: Optional[PetAppearance], item_appearances: Iterable[Optional[ItemAppearance]]
) -> List[Layer]:
    """Return the pet and item layers to paint, bottom of the stack first.

    Incompatible items contribute nothing. Pet layers in a zone restricted by a
    worn item are hidden, as are item layers in a zone the pet restricts. If two
    layers still share a zone id, the later one wins, with item layers coming
    after pet layers in worn order.
    """

    if pet_appearance is None:
        return []

    compatible = [appearance for appearance in item_appearances if appearance is not None and appearance.is_compatible]
    item_restricted_zone_ids = {zone.id for appearance in compatible for zone in appearance.restricted_zones}
    pet_restricted_zone_ids = {zone.id for zone in pet_appearance.restricted_zones}

    candidates = [
        layer for layer in pet_appearance.layers if layer.zone.id not in item_restricted_zone_ids
    ] + [
        layer
        for appearance in compatible
        for layer in appearance.layers
        if layer.zone.id not in pet_restricted_zone_ids
    ]

    by_zone: Dict[str, Layer] = {}
    for layer in candidates:
        if layer.zone.id in by_zone:
            logger.debug("Zone %s has more than one layer; keeping layer %s", layer.zone.id, layer.id)
            del by_zone[layer.zone.id]
        by_zone[layer.zone.id] = layer

    return sorted(by_zone.values(), key=lambda layer: layer.zone.depth)


__all__ = ["choose_pet_appearance", "get_visible_layers"]
