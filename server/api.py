"""FastAPI server exposing outfit transitions, views and saved outfits."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from pydantic import ValidationError

from dti_app.app import DressToImpressApp
from logic.outfit_url import build_outfit_url
from logic.outfit_view import OutfitView
from logic.validation import ApplyActionRequest, SaveOutfitRequest, action_from_dict, validation_failure
from memory.outfit_store import OutfitNotFound
from models.actions import UnknownActionError
from models.item import Item
from models.outfit_state import sorted_item_ids
from models.zones import Layer


def _layer_payload(layer: Layer) -> Dict[str, Any]:
    return {
        "id": layer.id,
        "source": layer.source,
        "image_url": layer.image_url,
        "zone": {"id": layer.zone.id, "depth": layer.zone.depth, "label": layer.zone.label},
    }


def _item_payload(item: Item) -> Dict[str, Any]:
    return {"id": item.id, "name": item.name, "is_nc": item.is_nc, "is_pb": item.is_pb}


def _view_payload(view: OutfitView) -> Dict[str, Any]:
    state = view.state
    return {
        "id": state.id,
        "name": state.name,
        "species_id": state.species_id,
        "color_id": state.color_id,
        "pose": state.pose,
        "appearance_id": state.appearance_id,
        "worn_item_ids": view.worn_item_ids,
        "closeted_item_ids": view.closeted_item_ids,
        "url": view.url,
        "zones_and_items": [
            {"zone_label": group.zone_label, "items": [_item_payload(item) for item in group.items]}
            for group in view.zones_and_items
        ],
        "incompatible_items": [_item_payload(item) for item in view.incompatible_items],
        "visible_layers": [_layer_payload(layer) for layer in view.visible_layers],
    }


def create_app(dti: DressToImpressApp | None = None) -> FastAPI:
    """Build the FastAPI instance around an application container."""

    dti = dti or DressToImpressApp()
    app = FastAPI(title="Dress to Impress", version="0.1.0")

    @app.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness check."""

        return {
            "status": "ok",
            "service": "dress-to-impress",
            "environment": dti.config.environment or "local",
        }

    @app.post("/outfits/apply")
    async def apply_action(request: ApplyActionRequest) -> dict:
        """Apply one action to the outfit encoded in ``query_string``."""

        try:
            action = action_from_dict(request.action.model_dump())
        except UnknownActionError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=validation_failure("Invalid action", exc)) from exc

        session = dti.open_outfit(request.query_string)
        result = session.dispatch(action)
        if not result.ok:
            raise HTTPException(
                status_code=409,
                detail={"message": str(result.error), "query_string": session.query_string},
            )
        return {
            "status": "ok",
            "query_string": session.query_string,
            "url": build_outfit_url(result.state, dti.config.base_url),
            "worn_item_ids": sorted_item_ids(result.state.worn_item_ids),
            "closeted_item_ids": sorted_item_ids(result.state.closeted_item_ids),
        }

    @app.get("/outfits/view")
    async def view_outfit(request: Request) -> dict:
        """Visible layers and item groupings for the outfit in the query string."""

        session = dti.open_outfit(request.url.query)
        return _view_payload(session.view())

    @app.post("/outfits")
    async def save_outfit(request: SaveOutfitRequest) -> dict:
        session = dti.open_outfit(request.query_string)
        outfit_id = session.save(user_id=request.user_id, outfit_id=request.outfit_id)
        return {"id": outfit_id, "url": build_outfit_url(session.state, dti.config.base_url)}

    @app.get("/outfits/{outfit_id}")
    async def load_outfit(outfit_id: str) -> dict:
        session = dti.new_session()
        try:
            result = session.open_saved(outfit_id)
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=validation_failure("Invalid saved outfit", exc)) from exc
        if isinstance(result.error, OutfitNotFound):
            raise HTTPException(status_code=404, detail=f"Outfit {outfit_id} not found")
        return _view_payload(session.view())

    return app


def get_app() -> FastAPI:
    """Expose a FastAPI instance for ASGI servers (``uvicorn --factory``)."""

    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=int("8080"), reload=False)
