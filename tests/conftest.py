"""
Shared fixtures: BVH documents and small hand-built skeletons.
"""

import numpy as np
import pytest

from rigedit_sdk_python import Armature, BVHImporter, EditSkeletonSession, Skeleton


MINIMAL_BVH = """HIERARCHY
ROOT Hips
{
  OFFSET 0.0 0.0 0.0
  CHANNELS 6 Xposition Yposition Zposition Zrotation Xrotation Yrotation
  JOINT Spine
  {
    OFFSET 0.0 10.0 0.0
    CHANNELS 3 Zrotation Xrotation Yrotation
    End Site
    {
      OFFSET 0.0 10.0 0.0
    }
  }
}
MOTION
Frames: 1
Frame Time: 0.0333333
0.0 0.0 0.0 0.0 0.0 0.0 0.0 0.0 0.0
"""

ROT = "CHANNELS 3 Zrotation Xrotation Yrotation"


def _joint(name, offset, children, indent):
    pad = "  " * indent
    lines = [f"{pad}JOINT {name}", f"{pad}{{", f"{pad}  OFFSET {offset[0]} {offset[1]} {offset[2]}", f"{pad}  {ROT}"]
    if children:
        for child in children:
            lines.extend(_joint(*child, indent + 1))
    else:
        lines.extend([f"{pad}  End Site", f"{pad}  {{", f"{pad}    OFFSET {offset[0]} {offset[1]} {offset[2]}", f"{pad}  }}"])
    lines.append(f"{pad}}}")
    return lines


HUMANOID_JOINTS = [
    ("Spine", (0.0, 10.0, 0.0), [
        ("Head", (0.0, 40.0, 0.0), []),
        ("LeftArm", (15.0, 35.0, 0.0), [("LeftForeArm", (25.0, 0.0, 0.0), [])]),
        ("RightArm", (-15.0, 35.0, 0.0), [("RightForeArm", (-25.0, 0.0, 0.0), [])]),
    ]),
    ("LeftUpLeg", (10.0, 0.0, 0.0), [("LeftLeg", (0.0, -45.0, 0.0), [])]),
    ("RightUpLeg", (-10.0, 0.0, 0.0), [("RightLeg", (0.0, -45.0, 0.0), [])]),
]

HUMANOID_BONE_COUNT = 11


def make_humanoid_bvh(frames):
    """BVH text for an 11-joint humanoid; `frames` is a list of 36-value rows."""
    lines = [
        "HIERARCHY",
        "ROOT Hips",
        "{",
        "  OFFSET 0.0 100.0 0.0",
        "  CHANNELS 6 Xposition Yposition Zposition Zrotation Xrotation Yrotation",
    ]
    for joint in HUMANOID_JOINTS:
        lines.extend(_joint(*joint, 1))
    lines.append("}")
    lines.append("MOTION")
    lines.append(f"Frames: {len(frames)}")
    lines.append("Frame Time: 0.0333333")
    for row in frames:
        lines.append(" ".join(f"{v:.4f}" for v in row))
    return "\n".join(lines) + "\n"


@pytest.fixture
def minimal_bvh():
    return MINIMAL_BVH


@pytest.fixture
def humanoid_bvh():
    rest = [0.0] * 36
    moving = [1.0, 1.0, 2.0, 10.0, 0.0, 0.0] + [0.0, 15.0, 0.0] * 10
    return make_humanoid_bvh([rest, moving])


@pytest.fixture
def humanoid(humanoid_bvh):
    return BVHImporter().parse_bvh_text(humanoid_bvh)


@pytest.fixture
def humanoid_skeleton(humanoid):
    return humanoid.skeleton


def build_arm_skeleton():
    """Small skeleton in meters: Hips at y=1 with mirrored arms and a spine."""
    skeleton = Skeleton()
    hips = skeleton.add_bone("Hips", position=[0.0, 1.0, 0.0])
    skeleton.add_bone("Spine", parent=hips, position=[0.0, 0.2, 0.0])
    left = skeleton.add_bone("LeftArm", parent=hips, position=[0.2, 0.4, 0.0])
    skeleton.add_bone("LeftHand", parent=left, position=[0.25, 0.0, 0.0])
    right = skeleton.add_bone("RightArm", parent=hips, position=[-0.2, 0.4, 0.0])
    skeleton.add_bone("RightHand", parent=right, position=[-0.25, 0.0, 0.0])
    skeleton.update_world_matrices()
    return skeleton


@pytest.fixture
def arm_skeleton():
    return build_arm_skeleton()


@pytest.fixture
def arm_session():
    session = EditSkeletonSession()
    session.load_original_armature(Armature(build_arm_skeleton(), name="Test_Armature"))
    return session


def positions_of(skeleton):
    return np.array([bone.position for bone in skeleton.bones])


def quaternions_of(skeleton):
    return np.array([bone.quaternion for bone in skeleton.bones])
