"""Canonical pose taxonomy.

A pose pairs an emotion with a gender presentation, plus two special poses
for pets that predate the emotion/gender art (``UNCONVERTED``) or whose pose
was never labelled (``UNKNOWN``).
"""

from typing import Dict, List, Tuple

EMOTIONS = ["HAPPY", "SAD", "SICK"]
GENDER_PRESENTATIONS = ["MASCULINE", "FEMININE"]

_GENDER_SUFFIXES: Dict[str, str] = {"MASCULINE": "MASC", "FEMININE": "FEM"}

POSES: List[str] = [
    f"{emotion}_{suffix}" for suffix in ("MASC", "FEM") for emotion in EMOTIONS
] + ["UNCONVERTED", "UNKNOWN"]


def _normalize_key(value: str) -> str:
    return value.strip().upper().replace("-", "_").replace(" ", "_")


def validate_pose(value: str) -> str:
    """Validate and normalise a pose value.

    Raises a :class:`ValueError` if the pose is not one of :data:`POSES`.
    """

    key = _normalize_key(value)
    if key not in POSES:
        raise ValueError(f"Unsupported pose '{value}'. Allowed: {POSES}")
    return key


def pose_from_parts(emotion: str, gender_presentation: str) -> str:
    emotion_key = _normalize_key(emotion)
    gender_key = _normalize_key(gender_presentation)
    if emotion_key not in EMOTIONS or gender_key not in _GENDER_SUFFIXES:
        raise ValueError(f"Unsupported pose parts '{emotion}', '{gender_presentation}'")
    return f"{emotion_key}_{_GENDER_SUFFIXES[gender_key]}"


def pose_parts(pose: str) -> Tuple[str, str] | None:
    """Split a pose into ``(emotion, gender_presentation)``, or ``None`` for special poses."""

    key = validate_pose(pose)
    emotion, _, suffix = key.partition("_")
    for gender, gender_suffix in _GENDER_SUFFIXES.items():
        if suffix == gender_suffix:
            return emotion, gender
    return None


__all__ = [
    "EMOTIONS",
    "GENDER_PRESENTATIONS",
    "POSES",
    "pose_from_parts",
    "pose_parts",
    "validate_pose",
]
