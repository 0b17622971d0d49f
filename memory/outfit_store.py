"""Saved outfit persistence: a store interface with JSON-file and SQLite backends."""
from __future__ import annotations

import json
import re
import sqlite3
import time
from pathlib import Path
from typing import Optional
from uuid import uuid4

from logic.validation import OUTFIT_ID_PATTERN, SavedOutfitData
from models.outfit_state import OutfitState, to_saved_outfit_data


class OutfitNotFound(KeyError):
    """No saved outfit has the requested id."""

    def __init__(self, outfit_id: str) -> None:
        self.outfit_id = outfit_id
        super().__init__(f"Unknown outfit {outfit_id}")


class InvalidOutfitId(ValueError):
    """An outfit id is not safe to use as a file name or URL segment."""


_OUTFIT_ID_RE = re.compile(OUTFIT_ID_PATTERN)


def is_valid_outfit_id(outfit_id: object) -> bool:
    return isinstance(outfit_id, str) and _OUTFIT_ID_RE.fullmatch(outfit_id) is not None


def check_outfit_id(outfit_id: str) -> str:
    if not is_valid_outfit_id(outfit_id):
        raise InvalidOutfitId(f"Invalid outfit id {outfit_id!r}")
    return outfit_id


class OutfitStore:
    """Interface for saved outfit persistence."""

    def save_outfit(self, state: OutfitState, user_id: Optional[str] = None) -> str:
        raise NotImplementedError

    def load_outfit(self, outfit_id: str) -> SavedOutfitData:
        raise NotImplementedError

    def outfit_exists(self, outfit_id: str) -> bool:
        raise NotImplementedError

    def delete_outfit(self, outfit_id: str) -> bool:
        raise NotImplementedError


def _record_for(state: OutfitState, outfit_id: str, user_id: Optional[str]) -> dict:
    record = to_saved_outfit_data(state)
    record["id"] = outfit_id
    record["creator_id"] = user_id
    return record


class JSONOutfitStore(OutfitStore):
    """One JSON file per outfit, suitable for local runs."""

    def __init__(self, base_dir: str | Path = "data/outfits") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, outfit_id: str) -> Path:
        path = (self.base_dir / f"{check_outfit_id(outfit_id)}.json").resolve()
        if path.parent != self.base_dir.resolve():
            raise InvalidOutfitId(f"Invalid outfit id {outfit_id!r}")
        return path

    def save_outfit(self, state: OutfitState, user_id: Optional[str] = None) -> str:
        outfit_id = check_outfit_id(state.id or str(uuid4()))
        record = _record_for(state, outfit_id, user_id)
        record["updated_at"] = time.time()
        self._path(outfit_id).write_text(json.dumps(record, indent=2))
        return outfit_id

    def load_outfit(self, outfit_id: str) -> SavedOutfitData:
        if not is_valid_outfit_id(outfit_id):
            raise OutfitNotFound(outfit_id)
        path = self._path(outfit_id)
        if not path.exists():
            raise OutfitNotFound(outfit_id)
        return SavedOutfitData.model_validate(json.loads(path.read_text()))

    def outfit_exists(self, outfit_id: str) -> bool:
        return is_valid_outfit_id(outfit_id) and self._path(outfit_id).exists()

    def delete_outfit(self, outfit_id: str) -> bool:
        if not is_valid_outfit_id(outfit_id):
            return False
        path = self._path(outfit_id)
        if not path.exists():
            return False
        path.unlink()
        return True


class SQLiteOutfitStore(OutfitStore):
    """SQLite-backed outfit store for lightweight durability."""

    def __init__(self, db_path: str | Path = "data/outfits.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS outfits (
                    id TEXT PRIMARY KEY,
                    name TEXT,
                    creator_id TEXT,
                    species_id TEXT,
                    color_id TEXT,
                    pose TEXT,
                    appearance_id TEXT,
                    updated_at REAL
                );
                CREATE TABLE IF NOT EXISTS outfit_items (
                    outfit_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    is_worn INTEGER NOT NULL,
                    PRIMARY KEY (outfit_id, item_id),
                    FOREIGN KEY(outfit_id) REFERENCES outfits(id)
                );
                """
            )

    def save_outfit(self, state: OutfitState, user_id: Optional[str] = None) -> str:
        outfit_id = check_outfit_id(state.id or str(uuid4()))
        record = _record_for(state, outfit_id, user_id)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO outfits(id, name, creator_id, species_id, color_id, pose, appearance_id, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name, species_id=excluded.species_id, color_id=excluded.color_id,
                    pose=excluded.pose, appearance_id=excluded.appearance_id, updated_at=excluded.updated_at
                """,
                (
                    outfit_id,
                    record["name"],
                    record["creator_id"],
                    record["species_id"],
                    record["color_id"],
                    record["pose"],
                    record["appearance_id"],
                    time.time(),
                ),
            )
            conn.execute("DELETE FROM outfit_items WHERE outfit_id = ?", (outfit_id,))
            conn.executemany(
                "INSERT INTO outfit_items(outfit_id, item_id, is_worn) VALUES (?, ?, ?)",
                [(outfit_id, item_id, 1) for item_id in record["worn_item_ids"]]
                + [(outfit_id, item_id, 0) for item_id in record["closeted_item_ids"]],
            )
        return outfit_id

    def load_outfit(self, outfit_id: str) -> SavedOutfitData:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM outfits WHERE id = ?", (outfit_id,)).fetchone()
            if row is None:
                raise OutfitNotFound(outfit_id)
            item_rows = conn.execute(
                "SELECT item_id, is_worn FROM outfit_items WHERE outfit_id = ?", (outfit_id,)
            ).fetchall()
        return SavedOutfitData(
            id=row["id"],
            name=row["name"],
            creator_id=row["creator_id"],
            species_id=row["species_id"],
            color_id=row["color_id"],
            pose=row["pose"],
            appearance_id=row["appearance_id"],
            worn_item_ids=[item["item_id"] for item in item_rows if item["is_worn"]],
            closeted_item_ids=[item["item_id"] for item in item_rows if not item["is_worn"]],
        )

    def outfit_exists(self, outfit_id: str) -> bool:
        with self._connect() as conn:
            row = conn.execute("SELECT 1 FROM outfits WHERE id = ? LIMIT 1", (outfit_id,)).fetchone()
        return row is not None

    def delete_outfit(self, outfit_id: str) -> bool:
        with self._connect() as conn:
            conn.execute("DELETE FROM outfit_items WHERE outfit_id = ?", (outfit_id,))
            cursor = conn.execute("DELETE FROM outfits WHERE id = ?", (outfit_id,))
            return cursor.rowcount > 0


__all__ = [
    "InvalidOutfitId",
    "JSONOutfitStore",
    "OutfitNotFound",
    "OutfitStore",
    "SQLiteOutfitStore",
    "check_outfit_id",
    "is_valid_outfit_id",
]
