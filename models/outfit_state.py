"""Outfit state: the pet body, pose and the worn/closeted item partition."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, FrozenSet, Iterable, List, Mapping, Optional, Tuple


def item_id_sort_key(item_id: str) -> Tuple[int, int, str]:
    """Sort numeric ids numerically and ahead of any non-numeric ids."""

    text = str(item_id)
    if text.isdigit():
        return (0, int(text), text)
    return (1, 0, text)


def sorted_item_ids(item_ids: Iterable[str]) -> List[str]:
    return sorted({str(item_id) for item_id in item_ids}, key=item_id_sort_key)


def _as_id(value: Any) -> Optional[str]:
    return None if value is None or value == "" else str(value)


@dataclass(frozen=True)
class OutfitState:
    """Immutable outfit state. Transitions always build a new instance.

    ``appearance_id`` picks one pet appearance when a pose has more than one
    art variant; it is ``None`` in the common case.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    species_id: Optional[str] = None
    color_id: Optional[str] = None
    pose: Optional[str] = None
    appearance_id: Optional[str] = None
    worn_item_ids: FrozenSet[str] = field(default_factory=frozenset)
    closeted_item_ids: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        worn = frozenset(str(item_id) for item_id in self.worn_item_ids)
        closeted = frozenset(str(item_id) for item_id in self.closeted_item_ids)
        overlap = worn & closeted
        if overlap:
            raise ValueError(f"Items cannot be both worn and closeted: {sorted_item_ids(overlap)}")
        object.__setattr__(self, "worn_item_ids", worn)
        object.__setattr__(self, "closeted_item_ids", closeted)
        for key in ("id", "species_id", "color_id", "appearance_id"):
            object.__setattr__(self, key, _as_id(getattr(self, key)))

    @property
    def all_item_ids(self) -> List[str]:
        return sorted_item_ids(self.worn_item_ids) + sorted_item_ids(self.closeted_item_ids)

    def evolve(self, **changes: Any) -> "OutfitState":
        return replace(self, **changes)


EMPTY_OUTFIT_STATE = OutfitState()


def _field(data: Any, key: str, default: Any = None) -> Any:
    if isinstance(data, Mapping):
        return data.get(key, default)
    return getattr(data, key, default)


def from_saved_outfit_data(saved_outfit_data: Any) -> OutfitState:
    """Build a state from persisted outfit data, as a mapping or attribute object.

    Missing data yields :data:`EMPTY_OUTFIT_STATE`. Species, color and pose
    stay ``None`` when absent rather than falling back to a default pet. An
    item listed as both worn and closeted is kept as worn.
    """

    if not saved_outfit_data:
        return EMPTY_OUTFIT_STATE

    worn = frozenset(str(item_id) for item_id in (_field(saved_outfit_data, "worn_item_ids") or []))
    closeted = frozenset(str(item_id) for item_id in (_field(saved_outfit_data, "closeted_item_ids") or []))
    return OutfitState(
        id=_field(saved_outfit_data, "id"),
        name=_field(saved_outfit_data, "name"),
        species_id=_field(saved_outfit_data, "species_id"),
        color_id=_field(saved_outfit_data, "color_id"),
        pose=_field(saved_outfit_data, "pose"),
        appearance_id=_field(saved_outfit_data, "appearance_id"),
        worn_item_ids=worn,
        closeted_item_ids=closeted - worn,
    )


def to_saved_outfit_data(state: OutfitState) -> dict:
    """Serialise a state into the plain dict shape the outfit stores persist."""

    return {
        "id": state.id,
        "name": state.name,
        "species_id": state.species_id,
        "color_id": state.color_id,
        "pose": state.pose,
        "appearance_id": state.appearance_id,
        "worn_item_ids": sorted_item_ids(state.worn_item_ids),
        "closeted_item_ids": sorted_item_ids(state.closeted_item_ids),
    }


__all__ = [
    "EMPTY_OUTFIT_STATE",
    "OutfitState",
    "from_saved_outfit_data",
    "item_id_sort_key",
    "sorted_item_ids",
    "to_saved_outfit_data",
]
