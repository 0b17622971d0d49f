"""Zone grouping and incompatible item listing."""

from __future__ import annotations

from logic.zone_grouping import get_incompatible_items, get_zones_and_items, group_by_zone_label
from models.item import Item
from models.zones import ItemAppearance, Layer, Zone

BACKGROUND = Zone(id="3", depth=1, label="Background")
SHIRT = Zone(id="26", depth=10, label="Shirt/Dress")
JACKET = Zone(id="28", depth=12, label="Jacket")
HAT_A = Zone(id="40", depth=30, label="Hat")
HAT_B = Zone(id="41", depth=31, label="Hat")


def _item(item_id: str, name: str, zones) -> Item:
    appearance = ItemAppearance(
        item_id=item_id,
        layers=tuple(Layer(id=f"{item_id}-{zone.id}", zone=zone) for zone in zones),
    )
    return Item(id=item_id, name=name, appearance=appearance)


def _labels(groups):
    return [(group.zone_label, [item.id for item in group.items]) for group in groups]


def test_groups_by_label_not_zone_id() -> None:
    groups = group_by_zone_label([_item("1", "Feathered Hat", [HAT_A])], [_item("2", "Straw Hat", [HAT_B])])
    assert _labels(groups) == [("Hat", ["1", "2"])]


def test_groups_sorted_by_label_and_items_by_name() -> None:
    worn = [_item("1", "Zebra Shirt", [SHIRT]), _item("2", "Aurora Background", [BACKGROUND])]
    closeted = [_item("3", "Apple Shirt", [SHIRT])]
    assert _labels(group_by_zone_label(worn, closeted)) == [
        ("Background", ["2"]),
        ("Shirt/Dress", ["3", "1"]),
    ]


def test_singleton_dropped_when_item_already_in_bigger_group() -> None:
    gown = _item("1", "Elegant Gown", [SHIRT, JACKET])
    shirt = _item("2", "Blue Shirt", [SHIRT])
    groups = group_by_zone_label([gown], [shirt])
    assert _labels(groups) == [("Shirt/Dress", ["2", "1"])]


def test_multi_zone_item_without_conflicts_keeps_first_group_only() -> None:
    gown = _item("1", "Elegant Gown", [SHIRT, JACKET])
    assert _labels(group_by_zone_label([gown], [])) == [("Jacket", ["1"])]


def test_item_with_two_zones_of_same_label_listed_once() -> None:
    double_hat = _item("1", "Double Hat", [HAT_A, HAT_B])
    assert _labels(group_by_zone_label([double_hat], [])) == [("Hat", ["1"])]


def test_incompatible_items_are_not_grouped() -> None:
    blank = Item(id="9", name="Unfinished Cape", appearance=ItemAppearance(item_id="9"))
    unknown = Item(id="8", name="Mystery Box")
    groups = group_by_zone_label([blank, unknown], [])
    assert groups == []
    assert [item.id for item in get_incompatible_items([unknown, blank])] == ["8", "9"]


def test_unfetched_ids_are_skipped() -> None:
    items = {"1": _item("1", "Blue Shirt", [SHIRT])}
    assert _labels(get_zones_and_items(items, ["1", "404"], ["405"])) == [("Shirt/Dress", ["1"])]
