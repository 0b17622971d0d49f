"""Lightweight evaluation harness for deterministic outfit editing scenarios."""

from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Dict, List

from dti_app.config import AppConfig
from evaluation.scenarios import EvaluationScenario, SCENARIOS, seed_catalog
from logic.validation import action_from_dict
from memory.outfit_session import OutfitSessionManager
from memory.outfit_store import JSONOutfitStore
from models.outfit_state import sorted_item_ids
from tools.catalog_store import SQLiteCatalogStore


def _evaluate_expectations(expectations: Dict[str, object], session: OutfitSessionManager, aborted: int) -> Dict[str, bool]:
    state = session.state
    checks: Dict[str, bool] = {
        "disjoint": not (state.worn_item_ids & state.closeted_item_ids),
    }
    if "worn" in expectations:
        checks["worn"] = sorted_item_ids(state.worn_item_ids) == list(expectations["worn"])
    if "closeted" in expectations:
        checks["closeted"] = sorted_item_ids(state.closeted_item_ids) == list(expectations["closeted"])
    if "aborted" in expectations:
        checks["aborted"] = aborted == int(expectations["aborted"])
    if "incompatible" in expectations:
        incompatible = [item.id for item in session.view().incompatible_items]
        checks["incompatible"] = incompatible == list(expectations["incompatible"])
    return checks


def run_scenario(scenario: EvaluationScenario) -> Dict[str, object]:
    with TemporaryDirectory() as tmpdir:
        catalog = seed_catalog(SQLiteCatalogStore(Path(tmpdir) / "catalog.db"))
        session = OutfitSessionManager(
            catalog=catalog,
            store=JSONOutfitStore(Path(tmpdir) / "outfits"),
            config=AppConfig(),
        )
        session.open_from_url(scenario.query_string)
        results = session.dispatch_all(action_from_dict(action) for action in scenario.actions)
        aborted = sum(1 for result in results if not result.ok)
        checks = _evaluate_expectations(scenario.expectations, session, aborted)
        return {
            "scenario": scenario.name,
            "passed": all(checks.values()),
            "checks": checks,
            "query_string": session.query_string,
        }


def run_evaluation_suite() -> List[Dict[str, object]]:
    return [run_scenario(scenario) for scenario in SCENARIOS]


def run_smoke_checks() -> List[str]:
    results = run_evaluation_suite()
    return [f"{result['scenario']}: {'passed' if result['passed'] else 'failed'}" for result in results]


__all__ = ["run_evaluation_suite", "run_scenario", "run_smoke_checks"]
