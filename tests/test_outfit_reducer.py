"""Outfit state reducer transitions and invariants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import pytest

from logic.outfit_reducer import outfit_state_reducer
from logic.outfit_url import build_outfit_query_string
from logic.validation import action_from_dict
from models.actions import (
    RemoveItem,
    Rename,
    ResetToSavedOutfitData,
    SetPose,
    SetSpeciesAndColor,
    UnknownActionError,
    UnwearItem,
    WearItem,
)
from models.outfit_state import EMPTY_OUTFIT_STATE, OutfitState
from models.zones import ItemAppearance, Layer, Zone
from tools.appearance_lookup import AppearanceCache, MissingAppearanceData

Z1 = Zone(id="1", depth=1, label="Background")
Z2 = Zone(id="2", depth=2, label="Foreground")
Z3 = Zone(id="3", depth=3, label="Hat")


def _appearance(item_id: str, zones: Sequence[Zone], restricted: Sequence[Zone] = ()) -> ItemAppearance:
    return ItemAppearance(
        item_id=item_id,
        layers=tuple(Layer(id=f"{item_id}-{zone.id}", zone=zone) for zone in zones),
        restricted_zones=tuple(restricted),
    )


APPEARANCES: Dict[str, ItemAppearance] = {
    "A": _appearance("A", [Z1]),
    "B": _appearance("B", [Z1, Z2]),
    "C": _appearance("C", [Z2]),
    "D": _appearance("D", [Z3]),
    "X": _appearance("X", []),
}


@pytest.fixture()
def lookup() -> AppearanceCache:
    cache = AppearanceCache()
    cache.prime("1", "8", APPEARANCES)
    return cache


def _state(worn: Sequence[str] = (), closeted: Sequence[str] = ()) -> OutfitState:
    return OutfitState(species_id="1", color_id="8", pose="HAPPY_FEM", worn_item_ids=worn, closeted_item_ids=closeted)


def _apply(state, actions, lookup):
    for action in actions:
        result = outfit_state_reducer(state, action, lookup)
        assert result.ok, result.error
        state = result.state
    return state


def test_rename_only_changes_name(lookup: AppearanceCache) -> None:
    state = _state(worn=["A"])
    result = outfit_state_reducer(state, Rename(outfit_name="Spooky"), lookup)
    assert result.state.name == "Spooky"
    assert result.state.worn_item_ids == state.worn_item_ids


def test_wear_moves_conflicts_to_closet(lookup: AppearanceCache) -> None:
    state = _apply(_state(worn=["A", "D"]), [WearItem(item_id="C")], lookup)
    state = _apply(state, [WearItem(item_id="B")], lookup)
    assert state.worn_item_ids == {"B", "D"}
    assert state.closeted_item_ids == {"A", "C"}


def test_wear_takes_item_out_of_closet(lookup: AppearanceCache) -> None:
    state = _apply(_state(worn=["B"], closeted=["A"]), [WearItem(item_id="A")], lookup)
    assert state.worn_item_ids == {"A"}
    assert state.closeted_item_ids == {"B"}


def test_reconsideration_round_trip(lookup: AppearanceCache) -> None:
    # B covers both zones, A and C one each: C displaces B, then A fits again.
    state = _state(worn=["A"])
    state = _apply(state, [WearItem(item_id="B")], lookup)
    assert state.worn_item_ids == {"B"}
    assert state.closeted_item_ids == {"A"}

    state = _apply(state, [WearItem(item_id="C", item_ids_to_reconsider=("A",))], lookup)
    assert state.worn_item_ids == {"C", "A"}
    assert state.closeted_item_ids == {"B"}


def test_conflict_symmetry(lookup: AppearanceCache) -> None:
    state = _apply(_state(worn=["B"]), [WearItem(item_id="A"), WearItem(item_id="B")], lookup)
    assert "B" in state.worn_item_ids
    assert "A" not in state.worn_item_ids
    assert "A" in state.closeted_item_ids


def test_unwear_is_idempotent(lookup: AppearanceCache) -> None:
    state = _state(worn=["D"], closeted=["A"])
    once = _apply(state, [UnwearItem(item_id="A")], lookup)
    twice = _apply(once, [UnwearItem(item_id="A")], lookup)
    assert once == twice
    assert "A" in twice.closeted_item_ids
    assert twice.worn_item_ids == {"D"}


def test_unwear_never_restores_the_unworn_item(lookup: AppearanceCache) -> None:
    state = _apply(_state(worn=["A"]), [UnwearItem(item_id="A", item_ids_to_reconsider=("A",))], lookup)
    assert state.worn_item_ids == frozenset()
    assert state.closeted_item_ids == {"A"}


def test_remove_deletes_from_both_sets_and_reconsiders(lookup: AppearanceCache) -> None:
    state = _state(worn=["B"], closeted=["A", "C"])
    state = _apply(state, [RemoveItem(item_id="B", item_ids_to_reconsider=("A", "B", "C"))], lookup)
    assert state.worn_item_ids == {"A", "C"}
    assert state.closeted_item_ids == frozenset()


def test_incompatible_item_is_added_without_side_effects(lookup: AppearanceCache) -> None:
    state = _apply(_state(worn=["A", "C"]), [WearItem(item_id="X")], lookup)
    assert state.worn_item_ids == {"A", "C", "X"}
    assert state.closeted_item_ids == frozenset()


def test_missing_data_aborts_and_keeps_state(lookup: AppearanceCache) -> None:
    state = _state(worn=["A"])
    result = outfit_state_reducer(state, WearItem(item_id="unknown"), lookup)
    assert not result.ok
    assert isinstance(result.error, MissingAppearanceData)
    assert result.state is state


def test_missing_data_during_reconsideration_aborts_whole_action(lookup: AppearanceCache) -> None:
    state = _state(worn=["A"])
    result = outfit_state_reducer(state, UnwearItem(item_id="A", item_ids_to_reconsider=("ghost",)), lookup)
    assert not result.ok
    assert result.state is state


def test_species_switch_preserves_worn_items(lookup: AppearanceCache) -> None:
    state = _state(worn=["A", "D"], closeted=["C"]).evolve(appearance_id="42")
    result = outfit_state_reducer(state, SetSpeciesAndColor(species_id="2", color_id="9", pose="SAD_MASC"), lookup)
    assert result.state.worn_item_ids == {"A", "D"}
    assert result.state.closeted_item_ids == {"C"}
    assert (result.state.species_id, result.state.color_id, result.state.pose) == ("2", "9", "SAD_MASC")
    assert result.state.appearance_id is None


def test_item_actions_after_species_switch_need_new_data(lookup: AppearanceCache) -> None:
    state = _apply(_state(worn=["A"]), [SetSpeciesAndColor(species_id="2", color_id="8", pose="HAPPY_FEM")], lookup)
    result = outfit_state_reducer(state, WearItem(item_id="B"), lookup)
    assert not result.ok
    assert result.state.worn_item_ids == {"A"}


def test_set_pose_with_and_without_variant(lookup: AppearanceCache) -> None:
    state = _apply(_state(), [SetPose(pose="SAD_FEM", appearance_id="17")], lookup)
    assert (state.pose, state.appearance_id) == ("SAD_FEM", "17")
    state = _apply(state, [SetPose(pose="HAPPY_MASC")], lookup)
    assert (state.pose, state.appearance_id) == ("HAPPY_MASC", None)


def test_reset_overwrites_everything(lookup: AppearanceCache) -> None:
    saved = {
        "id": "77",
        "name": "Saved",
        "species_id": "3",
        "color_id": "4",
        "pose": "SICK_MASC",
        "worn_item_ids": ["A"],
        "closeted_item_ids": ["A", "B"],
    }
    state = _apply(_state(worn=["C", "D"]).evolve(name="Old"), [ResetToSavedOutfitData(saved)], lookup)
    assert state.id == "77"
    assert state.name == "Saved"
    assert state.worn_item_ids == {"A"}
    assert state.closeted_item_ids == {"B"}


def test_reset_with_no_data_gives_empty_state(lookup: AppearanceCache) -> None:
    state = _apply(_state(worn=["A"]), [ResetToSavedOutfitData(None)], lookup)
    assert state == EMPTY_OUTFIT_STATE


def test_unknown_action_is_fatal(lookup: AppearanceCache) -> None:
    @dataclass(frozen=True)
    class Dance:
        style: str

    with pytest.raises(UnknownActionError):
        outfit_state_reducer(_state(), Dance(style="waltz"), lookup)
    with pytest.raises(UnknownActionError):
        action_from_dict({"type": "dance"})


@pytest.mark.parametrize(
    "actions",
    [
        [{"type": "wearItem", "itemId": "A"}, {"type": "wearItem", "itemId": "B"}, {"type": "wearItem", "itemId": "C", "itemIdsToReconsider": ["A"]}],
        [{"type": "wearItem", "itemId": "D"}, {"type": "unwearItem", "itemId": "D"}, {"type": "wearItem", "itemId": "D"}],
        [{"type": "wearItem", "itemId": "B"}, {"type": "removeItem", "itemId": "B", "itemIdsToReconsider": ["A", "C"]}, {"type": "unwearItem", "itemId": "C"}],
    ],
)
def test_worn_and_closeted_stay_disjoint(lookup: AppearanceCache, actions) -> None:
    state = _state(worn=["A"], closeted=["C"])
    for payload in actions:
        state = outfit_state_reducer(state, action_from_dict(payload), lookup).state
        assert not (state.worn_item_ids & state.closeted_item_ids)


def test_serialization_ignores_insertion_order(lookup: AppearanceCache) -> None:
    first = _apply(_state(), [WearItem(item_id="A"), WearItem(item_id="D")], lookup)
    second = _apply(_state(), [WearItem(item_id="D"), WearItem(item_id="A")], lookup)
    assert build_outfit_query_string(first) == build_outfit_query_string(second)


def test_state_rejects_overlapping_sets() -> None:
    with pytest.raises(ValueError):
        OutfitState(worn_item_ids={"1"}, closeted_item_ids={"1"})
