import pytest

from models.poses import POSES, pose_from_parts, pose_parts, validate_pose


def test_pose_taxonomy():
    assert len(POSES) == 8
    assert validate_pose(" happy-fem ") == "HAPPY_FEM"
    with pytest.raises(ValueError):
        validate_pose("DANCING")


def test_pose_parts_round_trip():
    assert pose_from_parts("sad", "masculine") == "SAD_MASC"
    assert pose_parts("SICK_FEM") == ("SICK", "FEMININE")
    assert pose_parts("UNCONVERTED") is None
