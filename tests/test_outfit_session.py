"""Host session: priming, dispatch, save/load and views."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dti_app.config import AppConfig
from evaluation.scenarios import seed_catalog
from logic.outfit_view import FetchedOutfitData, build_outfit_view
from memory.outfit_session import OutfitSessionManager
from memory.outfit_store import JSONOutfitStore, OutfitNotFound
from models.actions import Rename, SetPose, SetSpeciesAndColor, UnwearItem, WearItem
from tools.appearance_lookup import MissingAppearanceData
from tools.catalog_store import CatalogError, SQLiteCatalogStore, UnknownSpeciesColor


@pytest.fixture()
def session(tmp_path) -> OutfitSessionManager:
    catalog = seed_catalog(SQLiteCatalogStore(tmp_path / "catalog.db"))
    return OutfitSessionManager(
        catalog=catalog,
        store=JSONOutfitStore(tmp_path / "outfits"),
        config=AppConfig(base_url="https://example.test"),
    )


def test_open_from_url_uses_defaults(session: OutfitSessionManager) -> None:
    session.open_from_url("objects[]=100")
    assert (session.state.species_id, session.state.color_id, session.state.pose) == ("1", "8", "HAPPY_FEM")
    assert session.state.worn_item_ids == {"100"}


def test_dispatch_fetches_before_wearing(session: OutfitSessionManager) -> None:
    session.open_from_url("objects[]=100&objects[]=200")
    result = session.dispatch(WearItem(item_id="101"))
    assert result.ok
    assert session.state.worn_item_ids == {"101", "200"}
    assert session.state.closeted_item_ids == {"100"}
    assert session.lookup.has("101", "1", "8")


def test_unknown_item_leaves_state_untouched(session: OutfitSessionManager) -> None:
    session.open_from_url("objects[]=100")
    before = session.state
    result = session.dispatch(WearItem(item_id="999"))
    assert isinstance(result.error, MissingAppearanceData)
    assert session.state is before


def test_catalog_failure_is_reported_not_raised(session: OutfitSessionManager) -> None:
    session.open_from_url("species=77&color=8&objects[]=100")
    result = session.dispatch(UnwearItem(item_id="100"))
    assert isinstance(result.error, CatalogError)
    assert session.state.worn_item_ids == {"100"}
    assert session.fetch() is None


def test_non_item_actions_need_no_catalog(session: OutfitSessionManager) -> None:
    session.open_from_url("species=77&color=8")
    results = session.dispatch_all([Rename(outfit_name="Mine"), SetPose(pose="SAD_MASC")])
    assert all(result.ok for result in results)
    assert session.state.name == "Mine"


def test_view_projects_layers_and_groups(session: OutfitSessionManager) -> None:
    session.open_from_url("objects[]=100&objects[]=700&closet[]=401")
    view = session.view()
    assert view.url.startswith("https://example.test/outfits/new?")
    assert view.pet_appearance.id == "2"
    # The mask restricts the head zone, so only the pet body layer remains.
    assert [layer.id for layer in view.visible_layers] == ["L100", "p-2-body", "L700"]
    assert [(group.zone_label, [item.id for item in group.items]) for group in view.zones_and_items] == [
        ("Background", ["100"]),
        ("Hat", ["700", "401"]),
    ]


def test_view_uses_pose_variant(session: OutfitSessionManager) -> None:
    session.open_from_url("state=3")
    assert session.view().pet_appearance.id == "3"
    session.dispatch(SetPose(pose="SAD_MASC"))
    assert session.view().pet_appearance.id == "5"


def test_stale_fetched_data_is_ignored(session: OutfitSessionManager) -> None:
    session.open_from_url("objects[]=200")
    fetched = session.fetch()
    session.dispatch(SetSpeciesAndColor(species_id="2", color_id="8", pose="HAPPY_FEM"))
    assert not fetched.matches(session.state)
    view = session.view(fetched)
    assert view.visible_layers == []
    assert view.worn_item_ids == ["200"]


def test_view_without_data_still_has_url() -> None:
    view = build_outfit_view(
        OutfitSessionManager().state.evolve(id="9"),
        FetchedOutfitData(species_id=None, color_id=None),
        "https://example.test",
    )
    assert view.url == "https://example.test/outfits/9"
    assert view.zones_and_items == []


def test_save_then_open_saved(session: OutfitSessionManager) -> None:
    session.open_from_url("name=Spooky&objects[]=100&closet[]=101&state=3")
    outfit_id = session.save(user_id="u1")
    assert session.state.id == outfit_id

    other = OutfitSessionManager(catalog=session.catalog, store=session.store, config=session.config)
    result = other.open_from_url(outfit_id=outfit_id)
    assert result.ok
    assert other.state == session.state
    assert other.view().url == f"https://example.test/outfits/{outfit_id}"


def test_open_unknown_saved_outfit_falls_back_to_empty(session: OutfitSessionManager) -> None:
    result = session.open_saved("missing")
    assert isinstance(result.error, OutfitNotFound)
    assert session.state.worn_item_ids == frozenset()
    assert session.state.id is None


def test_corrupt_saved_outfit_raises_validation_error(session: OutfitSessionManager) -> None:
    (session.store.base_dir / "bad.json").write_text('{"id": "bad", "pose": "DANCING"}')
    with pytest.raises(ValidationError):
        session.open_saved("bad")


def test_save_requires_store() -> None:
    with pytest.raises(RuntimeError):
        OutfitSessionManager().save()


def test_switch_to_unknown_species_color_is_refused(session: OutfitSessionManager) -> None:
    session.open_from_url("species=1&color=8&objects[]=100")
    before = session.state
    result = session.dispatch(SetSpeciesAndColor(species_id="99", color_id="99", pose="HAPPY_FEM"))
    assert isinstance(result.error, UnknownSpeciesColor)
    assert session.state is before
    assert session.dispatch(WearItem(item_id="101")).ok


def test_switch_without_catalog_is_not_checked() -> None:
    session = OutfitSessionManager()
    result = session.dispatch(SetSpeciesAndColor(species_id="99", color_id="99", pose="HAPPY_FEM"))
    assert result.ok
    assert session.state.species_id == "99"
