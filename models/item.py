"""Catalog item model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from models.zones import ItemAppearance


@dataclass(frozen=True)
class Item:
    """An item as fetched for one species/color.

    ``appearance`` is ``None`` when the item has no data for the body at all,
    which is treated the same as an appearance with zero layers.
    """

    id: str
    name: str
    is_nc: bool = False
    is_pb: bool = False
    thumbnail_url: Optional[str] = None
    appearance: Optional[ItemAppearance] = None

    @property
    def is_compatible(self) -> bool:
        return self.appearance is not None and self.appearance.is_compatible


__all__ = ["Item"]
