"""Catalog service abstractions and a SQLite implementation.

The catalog holds zones, items, pet bodies and their layers. Item layers are
stored per body; a layer with body id ``"0"`` fits every body.
"""
from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models.item import Item
from models.outfit_state import sorted_item_ids
from models.zones import ItemAppearance, Layer, PetAppearance, Zone
from tools.appearance_lookup import AppearanceCache
from tools.observability import instrument_operation

ALL_BODIES = "0"


class CatalogError(RuntimeError):
    """The catalog could not answer a request, e.g. an unknown species/color pair."""


class UnknownSpeciesColor(CatalogError):
    """The catalog has no pet body for this species/color pair."""

    def __init__(self, species_id: str, color_id: str) -> None:
        self.species_id = species_id
        self.color_id = color_id
        super().__init__(f"No pet type for species={species_id} color={color_id}")


class CatalogStore:
    """Read interface for catalog data consumed by the outfit engine."""

    def get_zone(self, zone_id: str) -> Optional[Zone]:
        raise NotImplementedError

    def is_valid_species_color(self, species_id: str, color_id: str) -> bool:
        raise NotImplementedError

    def get_items(self, item_ids: Iterable[str], species_id: str, color_id: str) -> List[Item]:
        raise NotImplementedError

    def get_pet_appearances(self, species_id: str, color_id: str) -> List[PetAppearance]:
        raise NotImplementedError

    def fetch_item_appearances(
        self, item_ids: Iterable[str], species_id: str, color_id: str
    ) -> Dict[str, ItemAppearance]:
        raise NotImplementedError


class SQLiteCatalogStore(CatalogStore):
    """Local SQLite-backed catalog."""

    def __init__(self, database_path: str | Path = "data/catalog.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS zones (
                    id TEXT PRIMARY KEY,
                    depth INTEGER NOT NULL,
                    label TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS pet_types (
                    species_id TEXT NOT NULL,
                    color_id TEXT NOT NULL,
                    body_id TEXT NOT NULL,
                    PRIMARY KEY (species_id, color_id)
                );
                CREATE TABLE IF NOT EXISTS items (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    is_nc INTEGER DEFAULT 0,
                    is_pb INTEGER DEFAULT 0,
                    thumbnail_url TEXT,
                    restricted_zone_ids TEXT
                );
                CREATE TABLE IF NOT EXISTS item_layers (
                    id TEXT PRIMARY KEY,
                    item_id TEXT NOT NULL,
                    body_id TEXT NOT NULL,
                    zone_id TEXT NOT NULL,
                    image_url TEXT
                );
                CREATE TABLE IF NOT EXISTS pet_appearances (
                    id TEXT PRIMARY KEY,
                    species_id TEXT NOT NULL,
                    color_id TEXT NOT NULL,
                    pose TEXT NOT NULL,
                    restricted_zone_ids TEXT
                );
                CREATE TABLE IF NOT EXISTS pet_layers (
                    id TEXT PRIMARY KEY,
                    pet_appearance_id TEXT NOT NULL,
                    zone_id TEXT NOT NULL,
                    image_url TEXT
                );
                """
            )

    def add_zone(self, zone: Zone) -> Zone:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO zones (id, depth, label) VALUES (?, ?, ?)",
                (zone.id, zone.depth, zone.label),
            )
        return zone

    def add_pet_type(self, species_id: str, color_id: str, body_id: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO pet_types (species_id, color_id, body_id) VALUES (?, ?, ?)",
                (str(species_id), str(color_id), str(body_id)),
            )

    def add_item(
        self,
        item_id: str,
        name: str,
        *,
        is_nc: bool = False,
        is_pb: bool = False,
        thumbnail_url: Optional[str] = None,
        restricted_zone_ids: Sequence[str] = (),
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO items (id, name, is_nc, is_pb, thumbnail_url, restricted_zone_ids)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(item_id),
                    name,
                    int(is_nc),
                    int(is_pb),
                    thumbnail_url,
                    json.dumps([str(zone_id) for zone_id in restricted_zone_ids]),
                ),
            )

    def set_item_restricted_zones(self, item_id: str, restricted_zone_ids: Sequence[str]) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE items SET restricted_zone_ids = ? WHERE id = ?",
                (json.dumps([str(zone_id) for zone_id in restricted_zone_ids]), str(item_id)),
            )
            if cursor.rowcount == 0:
                raise CatalogError(f"Unknown item {item_id}")

    def add_item_layer(
        self, layer_id: str, item_id: str, zone_id: str, body_id: str = ALL_BODIES, image_url: Optional[str] = None
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO item_layers (id, item_id, body_id, zone_id, image_url) VALUES (?, ?, ?, ?, ?)",
                (str(layer_id), str(item_id), str(body_id), str(zone_id), image_url),
            )

    def add_pet_appearance(
        self,
        appearance_id: str,
        species_id: str,
        color_id: str,
        pose: str,
        layers: Sequence[Tuple[str, str]] = (),
        restricted_zone_ids: Sequence[str] = (),
    ) -> None:
        """Store a pet appearance; ``layers`` are ``(layer_id, zone_id)`` pairs."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO pet_appearances (id, species_id, color_id, pose, restricted_zone_ids)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(appearance_id),
                    str(species_id),
                    str(color_id),
                    pose,
                    json.dumps([str(zone_id) for zone_id in restricted_zone_ids]),
                ),
            )
            conn.executemany(
                "INSERT OR REPLACE INTO pet_layers (id, pet_appearance_id, zone_id) VALUES (?, ?, ?)",
                [(str(layer_id), str(appearance_id), str(zone_id)) for layer_id, zone_id in layers],
            )

    def _zones_by_id(self, conn: sqlite3.Connection) -> Dict[str, Zone]:
        rows = conn.execute("SELECT id, depth, label FROM zones").fetchall()
        return {row["id"]: Zone(id=row["id"], depth=int(row["depth"]), label=row["label"]) for row in rows}

    @staticmethod
    def _resolve_zone(zones: Dict[str, Zone], zone_id: str) -> Zone:
        zone = zones.get(zone_id)
        if zone is None:
            raise CatalogError(f"Unknown zone {zone_id}")
        return zone

    def _body_id(self, conn: sqlite3.Connection, species_id: str, color_id: str) -> str:
        row = conn.execute(
            "SELECT body_id FROM pet_types WHERE species_id = ? AND color_id = ?",
            (str(species_id), str(color_id)),
        ).fetchone()
        if row is None:
            raise UnknownSpeciesColor(species_id, color_id)
        return row["body_id"]

    def is_valid_species_color(self, species_id: str, color_id: str) -> bool:
        with self._connect() as conn:
            try:
                self._body_id(conn, species_id, color_id)
            except UnknownSpeciesColor:
                return False
        return True

    def get_zone(self, zone_id: str) -> Optional[Zone]:
        with self._connect() as conn:
            return self._zones_by_id(conn).get(str(zone_id))

    def _load_items(self, item_ids: Iterable[str], species_id: str, color_id: str) -> List[Item]:
        wanted = sorted_item_ids(item_ids)
        if not wanted:
            return []
        placeholders = ", ".join("?" for _ in wanted)
        with self._connect() as conn:
            body_id = self._body_id(conn, species_id, color_id)
            zones = self._zones_by_id(conn)
            item_rows = conn.execute(f"SELECT * FROM items WHERE id IN ({placeholders})", wanted).fetchall()
            layer_rows = conn.execute(
                f"SELECT * FROM item_layers WHERE item_id IN ({placeholders}) AND body_id IN (?, ?) ORDER BY id",
                [*wanted, body_id, ALL_BODIES],
            ).fetchall()

        layers_by_item: Dict[str, List[Layer]] = {}
        for row in layer_rows:
            layers_by_item.setdefault(row["item_id"], []).append(
                Layer(
                    id=row["id"],
                    zone=self._resolve_zone(zones, row["zone_id"]),
                    source="item",
                    image_url=row["image_url"],
                )
            )

        items = []
        for row in item_rows:
            restricted = [self._resolve_zone(zones, zone_id) for zone_id in json.loads(row["restricted_zone_ids"] or "[]")]
            appearance = ItemAppearance(
                item_id=row["id"],
                layers=tuple(layers_by_item.get(row["id"], [])),
                restricted_zones=tuple(restricted),
            )
            items.append(
                Item(
                    id=row["id"],
                    name=row["name"],
                    is_nc=bool(row["is_nc"]),
                    is_pb=bool(row["is_pb"]),
                    thumbnail_url=row["thumbnail_url"],
                    appearance=appearance,
                )
            )
        return sorted(items, key=lambda item: wanted.index(item.id))

    @instrument_operation("get_items")
    def get_items(self, item_ids: Iterable[str], species_id: str, color_id: str) -> List[Item]:
        """Fetch items with their appearance on the given body; unknown ids are skipped."""

        return self._load_items(item_ids, species_id, color_id)

    @instrument_operation("fetch_item_appearances")
    def fetch_item_appearances(
        self, item_ids: Iterable[str], species_id: str, color_id: str
    ) -> Dict[str, ItemAppearance]:
        return {item.id: item.appearance for item in self._load_items(item_ids, species_id, color_id)}

    @instrument_operation("get_pet_appearances")
    def get_pet_appearances(self, species_id: str, color_id: str) -> List[PetAppearance]:
        with self._connect() as conn:
            zones = self._zones_by_id(conn)
            appearance_rows = conn.execute(
                "SELECT * FROM pet_appearances WHERE species_id = ? AND color_id = ? ORDER BY id",
                (str(species_id), str(color_id)),
            ).fetchall()
            appearances = []
            for row in appearance_rows:
                layer_rows = conn.execute(
                    "SELECT * FROM pet_layers WHERE pet_appearance_id = ? ORDER BY id",
                    (row["id"],),
                ).fetchall()
                layers = tuple(
                    Layer(
                        id=layer["id"],
                        zone=self._resolve_zone(zones, layer["zone_id"]),
                        source="pet",
                        image_url=layer["image_url"],
                    )
                    for layer in layer_rows
                )
                restricted = tuple(
                    self._resolve_zone(zones, zone_id) for zone_id in json.loads(row["restricted_zone_ids"] or "[]")
                )
                appearances.append(
                    PetAppearance(
                        id=row["id"],
                        species_id=row["species_id"],
                        color_id=row["color_id"],
                        pose=row["pose"],
                        layers=layers,
                        restricted_zones=restricted,
                    )
                )
        return appearances


def prime_appearance_cache(
    cache: AppearanceCache, catalog: CatalogStore, item_ids: Iterable[str], species_id: str, color_id: str
) -> List[str]:
    """Fetch whatever the cache lacks for this body; returns the ids still missing.

    Ids the catalog does not know stay missing, so a later transition that
    needs them fails closed.
    """

    missing = cache.missing_item_ids(item_ids, species_id, color_id)
    if not missing:
        return []
    fetched = catalog.fetch_item_appearances(missing, species_id, color_id)
    cache.prime(species_id, color_id, fetched)
    return [item_id for item_id in missing if item_id not in fetched]


__all__ = [
    "ALL_BODIES",
    "CatalogError",
    "CatalogStore",
    "SQLiteCatalogStore",
    "UnknownSpeciesColor",
    "prime_appearance_cache",
]
