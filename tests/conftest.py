"""Shared fixtures: small rigs and BVH texts."""

import pytest

from bvhtools.data.rig import Rig


SIMPLE_BVH = """HIERARCHY
ROOT Hips
{
\tOFFSET 0.0 0.0 0.0
\tCHANNELS 6 Xposition Yposition Zposition Zrotation Xrotation Yrotation
\tJOINT Spine
\t{
\t\tOFFSET 0.0 10.0 0.0
\t\tCHANNELS 3 Zrotation Xrotation Yrotation
\t\tEnd Site
\t\t{
\t\t\tOFFSET 0.0 5.0 0.0
\t\t}
\t}
}
MOTION
Frames: 2
Frame Time: 0.5
1.0 2.0 3.0 10.0 20.0 30.0 5.0 6.0 7.0
-1.0 -2.0 -3.0 0.0 0.0 0.0 0.0 0.0 0.0
"""

BRANCHING_BVH = """HIERARCHY
ROOT Hips
{
  OFFSET 0 0 0
  CHANNELS 6 Xposition Yposition Zposition Zrotation Xrotation Yrotation
  JOINT Spine
  {
    OFFSET 0 10 0
    CHANNELS 3 Zrotation Xrotation Yrotation
    JOINT Head
    {
      OFFSET 0 5 0
      CHANNELS 3 Zrotation Xrotation Yrotation
      End Site
      {
        OFFSET 0 2 0
      }
    }
  }
  JOINT LeftLeg
  {
    OFFSET 3 -1 0
    CHANNELS 3 Xrotation Yrotation Zrotation
    End Site
    {
      OFFSET 0 -8 0
    }
  }
}
MOTION
Frames: 1
Frame Time: 0.0333333
0 90 0 1 2 3 4 5 6 7 8 9 10 11 12
"""


@pytest.fixture
def simple_bvh():
    return SIMPLE_BVH


@pytest.fixture
def branching_bvh():
    return BRANCHING_BVH


@pytest.fixture
def rig():
    """Rig with Hips -> Spine -> (Head, LeftArm) and Hips -> LeftLeg."""
    rig = Rig()
    hips = rig.add("Hips", position=(0.0, 1.0, 0.0))
    spine = hips.add("Spine", position=(0.0, 0.5, 0.0))
    spine.add("Head", position=(0.0, 0.3, 0.0))
    spine.add("LeftArm", position=(0.2, 0.2, 0.0))
    hips.add("LeftLeg", position=(0.1, -0.1, 0.0))
    return rig


@pytest.fixture
def two_bone_rig():
    """Rig with Hips -> Spine only."""
    rig = Rig()
    hips = rig.add("Hips", position=(0.0, 1.0, 0.0))
    hips.add("Spine", position=(0.0, 0.5, 0.0))
    return rig
