"""Actions accepted by the outfit state reducer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


class UnknownActionError(ValueError):
    """Raised for an action the reducer does not recognise."""


@dataclass(frozen=True)
class Rename:
    outfit_name: Optional[str]


@dataclass(frozen=True)
class SetSpeciesAndColor:
    species_id: str
    color_id: str
    pose: str


@dataclass(frozen=True)
class SetPose:
    pose: str
    appearance_id: Optional[str] = None


@dataclass(frozen=True)
class WearItem:
    item_id: str
    item_ids_to_reconsider: Tuple[str, ...] = ()


@dataclass(frozen=True)
class UnwearItem:
    item_id: str
    item_ids_to_reconsider: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RemoveItem:
    item_id: str
    item_ids_to_reconsider: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResetToSavedOutfitData:
    saved_outfit_data: Any


OutfitAction = Rename | SetSpeciesAndColor | SetPose | WearItem | UnwearItem | RemoveItem | ResetToSavedOutfitData

ACTION_TYPES: Dict[str, type] = {
    "rename": Rename,
    "setSpeciesAndColor": SetSpeciesAndColor,
    "setPose": SetPose,
    "wearItem": WearItem,
    "unwearItem": UnwearItem,
    "removeItem": RemoveItem,
    "resetToSavedOutfitData": ResetToSavedOutfitData,
}


__all__ = [
    "ACTION_TYPES",
    "OutfitAction",
    "RemoveItem",
    "Rename",
    "ResetToSavedOutfitData",
    "SetPose",
    "SetSpeciesAndColor",
    "UnknownActionError",
    "UnwearItem",
    "WearItem",
]
