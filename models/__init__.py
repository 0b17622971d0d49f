"""Model package exports."""

from models.item import Item
from models.outfit_state import EMPTY_OUTFIT_STATE, OutfitState
from models.zones import Appearance, ItemAppearance, Layer, PetAppearance, Zone

__all__ = [
    "Appearance",
    "EMPTY_OUTFIT_STATE",
    "Item",
    "ItemAppearance",
    "Layer",
    "OutfitState",
    "PetAppearance",
    "Zone",
]
