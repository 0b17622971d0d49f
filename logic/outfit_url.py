"""Shareable outfit URLs and outfit equality.

The query string is the canonical encoding of an unsaved outfit: item ids are
written in a stable order, so two states with the same fields always encode to
the same bytes.
"""

from __future__ import annotations

from typing import List, Optional, Tuple
from urllib.parse import parse_qs, urlencode

from dti_app.config import DEFAULT_BASE_URL, DEFAULT_COLOR_ID, DEFAULT_POSE, DEFAULT_SPECIES_ID
from models.outfit_state import EMPTY_OUTFIT_STATE, OutfitState, sorted_item_ids


def build_outfit_query_string(state: OutfitState) -> str:
    params: List[Tuple[str, str]] = [
        ("name", state.name or ""),
        ("species", state.species_id or ""),
        ("color", state.color_id or ""),
        ("pose", state.pose or ""),
    ]
    params.extend(("objects[]", item_id) for item_id in sorted_item_ids(state.worn_item_ids))
    params.extend(("closet[]", item_id) for item_id in sorted_item_ids(state.closeted_item_ids))
    if state.appearance_id is not None:
        # "state" is the legacy name for a pet appearance in old-style URLs.
        params.append(("state", state.appearance_id))
    return urlencode(params)


def build_outfit_url(state: OutfitState, base_url: str = DEFAULT_BASE_URL) -> str:
    base_url = base_url.rstrip("/")
    if state.id:
        return f"{base_url}/outfits/{state.id}"
    return f"{base_url}/outfits/new?{build_outfit_query_string(state)}"


def parse_outfit_query_string(
    query_string: str,
    default_species_id: str = DEFAULT_SPECIES_ID,
    default_color_id: str = DEFAULT_COLOR_ID,
    default_pose: str = DEFAULT_POSE,
) -> OutfitState:
    """Parse an unsaved outfit, filling in the default pet where unspecified."""

    params = parse_qs(query_string.lstrip("?"), keep_blank_values=True)

    def first(key: str) -> Optional[str]:
        values = params.get(key)
        return values[0] if values and values[0] != "" else None

    worn = frozenset(params.get("objects[]", []))
    closeted = frozenset(params.get("closet[]", []))
    return OutfitState(
        id=None,
        name=first("name"),
        species_id=first("species") or default_species_id,
        color_id=first("color") or default_color_id,
        pose=first("pose") or default_pose,
        appearance_id=first("state"),
        worn_item_ids=worn,
        closeted_item_ids=closeted - worn,
    )


def outfit_for_path(outfit_id: Optional[str], query_string: str = "", **defaults: str) -> OutfitState:
    """State implied by a URL: ``/outfits/<id>`` ignores the query string entirely."""

    if outfit_id is not None:
        return EMPTY_OUTFIT_STATE.evolve(id=outfit_id)
    return parse_outfit_query_string(query_string, **defaults)


def outfit_states_are_equal(a: OutfitState, b: OutfitState) -> bool:
    """Whether two states describe the same customization (ids are not compared)."""

    return build_outfit_query_string(a) == build_outfit_query_string(b)


__all__ = [
    "build_outfit_query_string",
    "build_outfit_url",
    "outfit_for_path",
    "outfit_states_are_equal",
    "parse_outfit_query_string",
]
