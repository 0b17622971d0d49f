"""Evaluation scenarios replaying realistic outfit editing sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from models.zones import Zone
from tools.catalog_store import SQLiteCatalogStore

ZONES: List[Zone] = [
    Zone(id="3", depth=3, label="Background"),
    Zone(id="15", depth=15, label="Body"),
    Zone(id="26", depth=26, label="Shirt/Dress"),
    Zone(id="28", depth=28, label="Jacket"),
    Zone(id="34", depth=34, label="Head"),
    Zone(id="40", depth=40, label="Hat"),
    Zone(id="41", depth=41, label="Hat"),
]

# species_id, color_id -> body_id
PET_TYPES: Dict[Tuple[str, str], str] = {
    ("1", "8"): "93",
    ("2", "8"): "106",
}

PET_APPEARANCES: List[Dict[str, object]] = [
    {"id": "2", "species_id": "1", "color_id": "8", "pose": "HAPPY_FEM", "layers": [("p-2-body", "15"), ("p-2-head", "34")]},
    {"id": "3", "species_id": "1", "color_id": "8", "pose": "HAPPY_FEM", "layers": [("p-3-body", "15"), ("p-3-head", "34")]},
    {"id": "5", "species_id": "1", "color_id": "8", "pose": "SAD_MASC", "layers": [("p-5-body", "15"), ("p-5-head", "34")]},
    {"id": "20", "species_id": "2", "color_id": "8", "pose": "HAPPY_FEM", "layers": [("p-20-body", "15"), ("p-20-head", "34")]},
]

# item_id -> (name, [(layer_id, zone_id, body_id)], restricted_zone_ids)
ITEMS: Dict[str, Tuple[str, List[Tuple[str, str, str]], List[str]]] = {
    "100": ("Starry Background", [("L100", "3", "0")], []),
    "101": ("Haunted Woods Background", [("L101", "3", "0")], []),
    "200": ("Blue Shirt", [("L200-a", "26", "93"), ("L200-b", "26", "106")], []),
    "201": ("Elegant Gown", [("L201-a", "26", "93"), ("L201-b", "28", "93")], []),
    "300": ("Leather Jacket", [("L300", "28", "0")], []),
    "400": ("Feathered Hat", [("L400", "40", "0")], []),
    "401": ("Straw Hat", [("L401", "41", "0")], ["40"]),
    "500": ("Acara Wings", [("L500", "28", "93")], []),
    "600": ("Unfinished Cape", [], []),
    "700": ("Full Face Mask", [("L700", "41", "0")], ["34"]),
}


def seed_catalog(store: SQLiteCatalogStore) -> SQLiteCatalogStore:
    """Fill a catalog with a small, hand-checked fixture set."""

    for zone in ZONES:
        store.add_zone(zone)
    for (species_id, color_id), body_id in PET_TYPES.items():
        store.add_pet_type(species_id, color_id, body_id)
    for appearance in PET_APPEARANCES:
        store.add_pet_appearance(
            str(appearance["id"]),
            str(appearance["species_id"]),
            str(appearance["color_id"]),
            str(appearance["pose"]),
            layers=appearance["layers"],
        )
    for item_id, (name, layers, restricted_zone_ids) in ITEMS.items():
        store.add_item(item_id, name, restricted_zone_ids=restricted_zone_ids)
        for layer_id, zone_id, body_id in layers:
            store.add_item_layer(layer_id, item_id, zone_id, body_id=body_id)
    return store


@dataclass
class EvaluationScenario:
    name: str
    description: str
    query_string: str
    actions: List[Dict[str, object]]
    expectations: Dict[str, object] = field(default_factory=dict)


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="background_trial_restores_previous",
        description="Trying on a new background and discarding it brings the old one back.",
        query_string="species=1&color=8&pose=HAPPY_FEM&objects[]=100&objects[]=200",
        actions=[
            {"type": "wearItem", "itemId": "101", "itemIdsToReconsider": ["100", "200"]},
            {"type": "removeItem", "itemId": "101", "itemIdsToReconsider": ["100", "200"]},
        ],
        expectations={"worn": ["100", "200"], "closeted": [], "aborted": 0},
    ),
    EvaluationScenario(
        name="gown_displaces_shirt_and_jacket",
        description="A gown covering two zones closets both items, and taking it off restores them.",
        query_string="species=1&color=8&pose=HAPPY_FEM&objects[]=200&objects[]=300",
        actions=[
            {"type": "wearItem", "itemId": "201"},
            {"type": "unwearItem", "itemId": "201", "itemIdsToReconsider": ["200", "300", "201"]},
        ],
        expectations={"worn": ["200", "300"], "closeted": ["201"], "aborted": 0},
    ),
    EvaluationScenario(
        name="restricted_zone_conflict",
        description="A hat restricting another hat's zone displaces it.",
        query_string="species=1&color=8&pose=HAPPY_FEM&objects[]=400",
        actions=[{"type": "wearItem", "itemId": "401"}],
        expectations={"worn": ["401"], "closeted": ["400"], "aborted": 0},
    ),
    EvaluationScenario(
        name="species_switch_keeps_worn_items",
        description="Switching bodies keeps items worn and reports the ones that no longer fit.",
        query_string="species=1&color=8&pose=HAPPY_FEM&objects[]=500&objects[]=200",
        actions=[{"type": "setSpeciesAndColor", "speciesId": "2", "colorId": "8", "pose": "HAPPY_FEM"}],
        expectations={"worn": ["200", "500"], "closeted": [], "aborted": 0, "incompatible": ["500"]},
    ),
    EvaluationScenario(
        name="unknown_item_fails_closed",
        description="Wearing an item the catalog does not know leaves the outfit untouched.",
        query_string="species=1&color=8&pose=HAPPY_FEM&objects[]=100",
        actions=[{"type": "wearItem", "itemId": "999"}],
        expectations={"worn": ["100"], "closeted": [], "aborted": 1},
    ),
]


__all__ = ["EvaluationScenario", "ITEMS", "PET_APPEARANCES", "PET_TYPES", "SCENARIOS", "ZONES", "seed_catalog"]
