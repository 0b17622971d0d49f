"""Zone, layer and appearance value types.

Zones are the layering slots of the pet canvas. Conflict detection works on
zone ids, while the grouping shown to users works on zone labels, because
several distinct zones share a label such as "Hat".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

LAYER_SOURCES = ("pet", "item")


@dataclass(frozen=True)
class Zone:
    id: str
    depth: int
    label: str


@dataclass(frozen=True)
class Layer:
    """One visual asset painted into a single zone."""

    id: str
    zone: Zone
    source: str = "item"
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.source not in LAYER_SOURCES:
            raise ValueError(f"Unsupported layer source '{self.source}'. Allowed: {list(LAYER_SOURCES)}")


@dataclass(frozen=True)
class Appearance:
    """Layers plus restricted zones for one species/color (and pose, for pets)."""

    layers: Tuple[Layer, ...] = ()
    restricted_zones: Tuple[Zone, ...] = ()

    @property
    def is_compatible(self) -> bool:
        return len(self.layers) > 0


@dataclass(frozen=True)
class ItemAppearance(Appearance):
    item_id: str = ""


@dataclass(frozen=True)
class PetAppearance(Appearance):
    id: str = ""
    species_id: str = ""
    color_id: str = ""
    pose: str = "UNKNOWN"


@dataclass(frozen=True)
class ZoneSets:
    occupies: FrozenSet[str] = field(default_factory=frozenset)
    occupies_or_restricts: FrozenSet[str] = field(default_factory=frozenset)


EMPTY_ZONE_SETS = ZoneSets()


def get_item_zones(appearance: Optional[Appearance]) -> ZoneSets:
    """Return the zone ids an appearance occupies, and occupies or restricts.

    Incompatible appearances (no layers) occupy nothing, and their restricted
    zones are ignored as well since the item is never drawn.
    """

    if appearance is None or not appearance.is_compatible:
        return EMPTY_ZONE_SETS
    occupies = frozenset(layer.zone.id for layer in appearance.layers)
    restricts = frozenset(zone.id for zone in appearance.restricted_zones)
    return ZoneSets(occupies=occupies, occupies_or_restricts=occupies | restricts)


__all__ = [
    "Appearance",
    "EMPTY_ZONE_SETS",
    "ItemAppearance",
    "LAYER_SOURCES",
    "Layer",
    "PetAppearance",
    "Zone",
    "ZoneSets",
    "get_item_zones",
]
