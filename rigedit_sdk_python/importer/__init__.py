"""
BVH motion capture importer.

Example usage:
    from rigedit_sdk_python.importer import BVHImporter

    result = BVHImporter().import_from_file("walk.bvh")
    skeleton = result.skeleton      # bone 0 is the root
    armature = result.armature      # "BVH_Armature" container
    clip = result.animations[0]     # MotionClip, one track per joint
"""

from .bvh_importer import (
    BVHImporter,
    BVHImportResult,
    MotionClip,
    KeyframeTrack,
    find_root_index,
    parse,
)

__all__ = [
    "BVHImporter",
    "BVHImportResult",
    "MotionClip",
    "KeyframeTrack",
    "find_root_index",
    "parse",
]
