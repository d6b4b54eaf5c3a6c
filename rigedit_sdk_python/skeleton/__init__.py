"""
Skeleton data model and snapshot store.

Example usage:
    from rigedit_sdk_python.skeleton import Skeleton, capture, restore

    skeleton = Skeleton()
    hips = skeleton.add_bone("Hips")
    skeleton.add_bone("Spine", parent=hips, position=[0, 10, 0])
    skeleton.update_world_matrices()

    snapshot = capture(skeleton)
    skeleton.bones[1].position[1] = 12.0
    restore(skeleton, snapshot)   # Spine back at y=10
"""

from .skeleton import Bone, Skeleton, Armature
from .snapshot import BoneTransform, BoneTransformSnapshot, capture, restore

__all__ = [
    "Bone",
    "Skeleton",
    "Armature",
    "BoneTransform",
    "BoneTransformSnapshot",
    "capture",
    "restore",
]
