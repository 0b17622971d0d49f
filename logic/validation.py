"""Pydantic schemas for persisted outfits, reducer actions and HTTP payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from models.actions import (
    OutfitAction,
    RemoveItem,
    Rename,
    ResetToSavedOutfitData,
    SetPose,
    SetSpeciesAndColor,
    UnknownActionError,
    UnwearItem,
    WearItem,
)
from models.outfit_state import sorted_item_ids
from models.poses import validate_pose

OUTFIT_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


class SavedOutfitData(BaseModel):
    """Persisted outfit record, as returned by an outfit store."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    name: Optional[str] = None
    creator_id: Optional[str] = None
    species_id: Optional[str] = None
    color_id: Optional[str] = None
    pose: Optional[str] = None
    appearance_id: Optional[str] = None
    worn_item_ids: List[str] = Field(default_factory=list)
    closeted_item_ids: List[str] = Field(default_factory=list)

    @field_validator("pose")
    @classmethod
    def _validate_pose(cls, pose: Optional[str]) -> Optional[str]:
        return validate_pose(pose) if pose else None

    @field_validator("worn_item_ids", "closeted_item_ids")
    @classmethod
    def _sort_ids(cls, item_ids: List[str]) -> List[str]:
        return sorted_item_ids(item_ids)


class _ActionInput(BaseModel):
    """Wire fields arrive camelCase (``itemId``) but snake_case is accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    type: str


class RenameInput(_ActionInput):
    outfit_name: Optional[str] = None


class SetSpeciesAndColorInput(_ActionInput):
    species_id: str = Field(min_length=1)
    color_id: str = Field(min_length=1)
    pose: str

    @field_validator("pose")
    @classmethod
    def _validate_pose(cls, pose: str) -> str:
        return validate_pose(pose)


class SetPoseInput(_ActionInput):
    pose: str
    appearance_id: Optional[str] = None

    @field_validator("pose")
    @classmethod
    def _validate_pose(cls, pose: str) -> str:
        return validate_pose(pose)


class ItemActionInput(_ActionInput):
    item_id: str = Field(min_length=1)
    item_ids_to_reconsider: List[str] = Field(default_factory=list)


class ResetToSavedOutfitDataInput(_ActionInput):
    saved_outfit_data: Optional[SavedOutfitData] = None


ACTION_INPUTS: Dict[str, type[_ActionInput]] = {
    "rename": RenameInput,
    "setSpeciesAndColor": SetSpeciesAndColorInput,
    "setPose": SetPoseInput,
    "wearItem": ItemActionInput,
    "unwearItem": ItemActionInput,
    "removeItem": ItemActionInput,
    "resetToSavedOutfitData": ResetToSavedOutfitDataInput,
}

_ITEM_ACTIONS = {"wearItem": WearItem, "unwearItem": UnwearItem, "removeItem": RemoveItem}


def action_from_dict(payload: Mapping[str, Any]) -> OutfitAction:
    """Build a reducer action from its wire form, e.g. ``{"type": "wearItem", "itemId": "1"}``.

    Raises :class:`UnknownActionError` for an unrecognised ``type`` and
    :class:`ValidationError` when a required field is missing or malformed.
    """

    action_type = payload.get("type")
    input_model = ACTION_INPUTS.get(action_type) if isinstance(action_type, str) else None
    if input_model is None:
        raise UnknownActionError(f"unexpected action {dict(payload)!r}")
    data = input_model.model_validate(dict(payload))

    if isinstance(data, RenameInput):
        return Rename(outfit_name=data.outfit_name)
    if isinstance(data, SetSpeciesAndColorInput):
        return SetSpeciesAndColor(species_id=data.species_id, color_id=data.color_id, pose=data.pose)
    if isinstance(data, SetPoseInput):
        return SetPose(pose=data.pose, appearance_id=data.appearance_id or None)
    if isinstance(data, ResetToSavedOutfitDataInput):
        return ResetToSavedOutfitData(saved_outfit_data=data.saved_outfit_data)
    return _ITEM_ACTIONS[action_type](item_id=data.item_id, item_ids_to_reconsider=tuple(data.item_ids_to_reconsider))


class ActionPayload(BaseModel):
    """Wire form of a reducer action; extra keys carry the action's fields."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(min_length=1)


class ApplyActionRequest(BaseModel):
    query_string: str = ""
    action: ActionPayload


class SaveOutfitRequest(BaseModel):
    query_string: str = ""
    outfit_id: Optional[str] = Field(default=None, pattern=OUTFIT_ID_PATTERN)
    user_id: Optional[str] = None


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    return ValidationResult(message=message, details=exc.errors(include_context=False, include_url=False)).model_dump()


__all__ = [
    "ACTION_INPUTS",
    "ActionPayload",
    "ApplyActionRequest",
    "ItemActionInput",
    "OUTFIT_ID_PATTERN",
    "RenameInput",
    "ResetToSavedOutfitDataInput",
    "SaveOutfitRequest",
    "SavedOutfitData",
    "SetPoseInput",
    "SetSpeciesAndColorInput",
    "ValidationResult",
    "action_from_dict",
    "validation_failure",
]
