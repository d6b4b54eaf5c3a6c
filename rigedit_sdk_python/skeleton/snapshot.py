"""
Bone snapshot store.

A snapshot is an immutable copy of every bone's local transform, keyed by the
bone's stable index. Snapshots back both undo/redo and the "original rest
pose" used for rest-pose corrections.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

import numpy as np


def _frozen(values):
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class BoneTransform:
    """Read-only copy of one bone's local transform."""

    position: np.ndarray
    quaternion: np.ndarray
    scale: np.ndarray

    @classmethod
    def from_bone(cls, bone):
        return cls(_frozen(bone.position), _frozen(bone.quaternion), _frozen(bone.scale))

    def apply_to(self, bone):
        bone.position = self.position.copy()
        bone.quaternion = self.quaternion.copy()
        bone.scale = self.scale.copy()

    def allclose(self, other, atol=1e-9):
        return (np.allclose(self.position, other.position, atol=atol)
                and np.allclose(self.quaternion, other.quaternion, atol=atol)
                and np.allclose(self.scale, other.scale, atol=atol))


class BoneTransformSnapshot(Mapping):
    """Immutable mapping of bone index -> BoneTransform."""

    def __init__(self, transforms):
        self._transforms = MappingProxyType(dict(transforms))

    def __getitem__(self, index):
        return self._transforms[index]

    def __iter__(self):
        return iter(self._transforms)

    def __len__(self):
        return len(self._transforms)

    def allclose(self, other, atol=1e-9):
        """True when both snapshots hold the same bones with equal transforms."""
        if set(self) != set(other):
            return False
        return all(self[i].allclose(other[i], atol=atol) for i in self)

    def __repr__(self):
        return f"BoneTransformSnapshot({len(self)} bones)"


def capture(skeleton):
    """
    Copy every bone's local transform.

    Args:
        skeleton: Skeleton to read

    Returns:
        BoneTransformSnapshot keyed by bone index
    """
    return BoneTransformSnapshot(
        (i, BoneTransform.from_bone(bone)) for i, bone in enumerate(skeleton.bones))


def restore(skeleton, snapshot):
    """
    Write a snapshot back onto a skeleton.

    Bones missing from the snapshot keep their current transform and indices
    the skeleton does not have are ignored. World matrices are recomputed once,
    after the whole batch has been written.
    """
    bone_count = len(skeleton.bones)
    for index, transform in snapshot.items():
        if 0 <= index < bone_count:
            transform.apply_to(skeleton.bones[index])
    skeleton.update_world_matrices()
