"""Outfit URL encoding, parsing and equality."""

from __future__ import annotations

from urllib.parse import parse_qs

from logic.outfit_url import (
    build_outfit_query_string,
    build_outfit_url,
    outfit_for_path,
    outfit_states_are_equal,
    parse_outfit_query_string,
)
from models.outfit_state import OutfitState


def _state(**overrides) -> OutfitState:
    fields = dict(name="Spooky", species_id="1", color_id="8", pose="HAPPY_FEM")
    fields.update(overrides)
    return OutfitState(**fields)


def test_query_string_lists_ids_in_stable_order() -> None:
    state = _state(worn_item_ids=["37229", "38916", "10"], closeted_item_ids=["abc", "2"])
    query = build_outfit_query_string(state)
    assert query == (
        "name=Spooky&species=1&color=8&pose=HAPPY_FEM"
        "&objects%5B%5D=10&objects%5B%5D=37229&objects%5B%5D=38916"
        "&closet%5B%5D=2&closet%5B%5D=abc"
    )


def test_insertion_order_does_not_change_encoding() -> None:
    a = _state(worn_item_ids=["1", "2", "3"])
    b = _state(worn_item_ids=["3", "1", "2"])
    assert build_outfit_query_string(a) == build_outfit_query_string(b)
    assert outfit_states_are_equal(a, b)


def test_appearance_variant_written_as_state_param() -> None:
    query = build_outfit_query_string(_state(appearance_id="17"))
    assert parse_qs(query)["state"] == ["17"]
    assert "state" not in parse_qs(build_outfit_query_string(_state()))


def test_parse_round_trips_the_customization() -> None:
    state = _state(worn_item_ids=["1", "2"], closeted_item_ids=["3"], appearance_id="4")
    parsed = parse_outfit_query_string(build_outfit_query_string(state))
    assert parsed == state


def test_parse_fills_in_default_pet() -> None:
    parsed = parse_outfit_query_string("objects[]=5")
    assert (parsed.species_id, parsed.color_id, parsed.pose) == ("1", "8", "HAPPY_FEM")
    assert parsed.name is None
    assert parsed.worn_item_ids == {"5"}


def test_parse_uses_configured_defaults() -> None:
    parsed = parse_outfit_query_string("?name=", default_species_id="2", default_color_id="9", default_pose="SAD_MASC")
    assert (parsed.species_id, parsed.color_id, parsed.pose) == ("2", "9", "SAD_MASC")


def test_parse_keeps_sets_disjoint() -> None:
    parsed = parse_outfit_query_string("objects[]=1&closet[]=1&closet[]=2")
    assert parsed.worn_item_ids == {"1"}
    assert parsed.closeted_item_ids == {"2"}


def test_saved_outfit_url_uses_id_only() -> None:
    state = _state(id="123", worn_item_ids=["1"])
    assert build_outfit_url(state, "https://example.test/") == "https://example.test/outfits/123"


def test_unsaved_outfit_url_embeds_query() -> None:
    url = build_outfit_url(_state(worn_item_ids=["1"]), "https://example.test")
    assert url.startswith("https://example.test/outfits/new?name=Spooky")


def test_saved_path_ignores_query_string() -> None:
    state = outfit_for_path("55", "species=9&objects[]=1")
    assert state.id == "55"
    assert state.species_id is None
    assert not state.worn_item_ids


def test_equality_ignores_id_but_not_items() -> None:
    assert outfit_states_are_equal(_state(id="1"), _state(id="2"))
    assert not outfit_states_are_equal(_state(worn_item_ids=["1"]), _state(closeted_item_ids=["1"]))
