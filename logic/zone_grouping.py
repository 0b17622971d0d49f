"""Zone groupings and incompatible items for the "items in this outfit" panel."""

from __future__ import annotations

import locale
import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Dict, Iterable, List, Mapping, Sequence, Set

from models.item import Item

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneGroup:
    zone_label: str
    items: List[Item]


def _collate(a: str, b: str) -> int:
    return locale.strcoll(a, b)


_label_key = cmp_to_key(_collate)


def sort_items_by_name(items: Iterable[Item]) -> List[Item]:
    return sorted(items, key=lambda item: (_label_key(item.name), item.id))


def _resolve(item_ids: Sequence[str], items_by_id: Mapping[str, Item]) -> List[Item]:
    return [items_by_id[item_id] for item_id in item_ids if item_id in items_by_id]


def group_by_zone_label(worn_items: Sequence[Item], closeted_items: Sequence[Item]) -> List[ZoneGroup]:
    """Group compatible items by the label of every zone they occupy.

    Labels, not ids, are the grouping key: several zones share labels like
    "Hat" and this view deliberately lumps them together. Singleton groups
    are dropped once their item is already shown, or will be shown, in a group
    with other items.
    """

    items_by_zone_label: Dict[str, List[Item]] = {}
    for item in [*worn_items, *closeted_items]:
        if not item.is_compatible:
            continue
        seen_labels: Set[str] = set()
        for layer in item.appearance.layers:
            label = layer.zone.label
            if label in seen_labels:
                continue
            seen_labels.add(label)
            items_by_zone_label.setdefault(label, []).append(item)

    groups = [
        ZoneGroup(zone_label=label, items=sort_items_by_name(items))
        for label, items in items_by_zone_label.items()
    ]
    groups.sort(key=lambda group: _label_key(group.zone_label))

    item_ids_with_conflicts = {item.id for group in groups if len(group.items) > 1 for item in group.items}
    item_ids_we_have_seen: Set[str] = set()
    kept: List[ZoneGroup] = []
    for group in groups:
        if len(group.items) > 1:
            item_ids_we_have_seen.update(item.id for item in group.items)
            kept.append(group)
            continue
        item = group.items[0]
        if item.id in item_ids_we_have_seen or item.id in item_ids_with_conflicts:
            continue
        item_ids_we_have_seen.add(item.id)
        kept.append(group)
    return kept


def get_zones_and_items(
    items_by_id: Mapping[str, Item], worn_item_ids: Sequence[str], closeted_item_ids: Sequence[str]
) -> List[ZoneGroup]:
    """Resolve ids against fetched items, skipping any not fetched yet, and group them."""

    return group_by_zone_label(_resolve(worn_item_ids, items_by_id), _resolve(closeted_item_ids, items_by_id))


def get_incompatible_items(items: Iterable[Item]) -> List[Item]:
    """Items with no layers for the current species/color, sorted by name."""

    return sort_items_by_name(item for item in items if not item.is_compatible)


__all__ = [
    "ZoneGroup",
    "get_incompatible_items",
    "get_zones_and_items",
    "group_by_zone_label",
    "sort_items_by_name",
]
