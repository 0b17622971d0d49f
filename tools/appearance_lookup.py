"""Appearance lookup interface and the append-only in-memory cache.

The reducer never fetches anything itself. Appearance data is fetched ahead of
a transition and primed into an :class:`AppearanceCache`; the conflict
resolver then reads it synchronously through the :class:`AppearanceLookup`
contract.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from models.outfit_state import sorted_item_ids
from models.zones import ItemAppearance

LOGGER = logging.getLogger(__name__)

CacheKey = Tuple[str, str, str]


class MissingAppearanceData(LookupError):
    """Appearance data for some items has not been fetched for this body yet."""

    def __init__(self, item_ids: Iterable[str], species_id: Optional[str], color_id: Optional[str]) -> None:
        self.item_ids = sorted_item_ids(item_ids)
        self.species_id = species_id
        self.color_id = color_id
        super().__init__(
            f"No appearance data for items {self.item_ids} "
            f"on species={species_id} color={color_id}"
        )


class AppearanceLookup(ABC):
    """Read-only, batch-capable source of item appearances."""

    @abstractmethod
    def get_appearances(
        self, item_ids: Iterable[str], species_id: Optional[str], color_id: Optional[str]
    ) -> Dict[str, ItemAppearance]:
        """Return appearances keyed by item id, or raise :class:`MissingAppearanceData`."""

    def get_appearance(self, item_id: str, species_id: Optional[str], color_id: Optional[str]) -> ItemAppearance:
        return self.get_appearances([item_id], species_id, color_id)[str(item_id)]


class AppearanceCache(AppearanceLookup):
    """Append-only cache keyed by ``(item_id, species_id, color_id)``.

    Entries are never evicted during a session, so switching species and back
    again does not refetch. Reads take no lock: writers only ever add keys.
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, ItemAppearance] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def has(self, item_id: str, species_id: Optional[str], color_id: Optional[str]) -> bool:
        return (str(item_id), str(species_id), str(color_id)) in self._entries

    def missing_item_ids(
        self, item_ids: Iterable[str], species_id: Optional[str], color_id: Optional[str]
    ) -> List[str]:
        return [item_id for item_id in sorted_item_ids(item_ids) if not self.has(item_id, species_id, color_id)]

    def prime(self, species_id: str, color_id: str, appearances: Mapping[str, ItemAppearance]) -> int:
        """Add fetched appearances for one body; returns how many were new."""

        added = 0
        for item_id, appearance in appearances.items():
            key = (str(item_id), str(species_id), str(color_id))
            if key not in self._entries:
                added += 1
            self._entries[key] = appearance
        LOGGER.debug("Primed %s new appearances for species=%s color=%s", added, species_id, color_id)
        return added

    def get_appearances(
        self, item_ids: Iterable[str], species_id: Optional[str], color_id: Optional[str]
    ) -> Dict[str, ItemAppearance]:
        wanted = sorted_item_ids(item_ids)
        missing = [item_id for item_id in wanted if not self.has(item_id, species_id, color_id)]
        if missing:
            raise MissingAppearanceData(missing, species_id, color_id)
        return {item_id: self._entries[(item_id, str(species_id), str(color_id))] for item_id in wanted}


__all__ = ["AppearanceCache", "AppearanceLookup", "MissingAppearanceData"]
