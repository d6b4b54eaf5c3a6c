"""
rigedit_sdk_python - BVH skeleton editing and rest-pose retargeting SDK.

This package imports BVH skeletons and motion, lets a caller re-pose the
rest skeleton with mirror symmetry and snap-to-volume, and computes the
per-bone rotation corrections needed to play the original motion on the
edited skeleton.

Main classes:
    - BVHImporter: Parses BVH text into a Skeleton, Armature and MotionClips
    - EditSkeletonSession: Editing session with undo/redo and mirroring
    - SnapToVolumeHandler: Pointer-driven snapping of bones to mesh volumes
    - RestPoseCorrectionSolver: Rotation deltas between two rest poses
    - SkeletonStorage: Persists imported BVH text

Example usage:
    from rigedit_sdk_python import BVHImporter, EditSkeletonSession, apply_rest_pose_corrections

    result = BVHImporter().import_from_file("walk.bvh")

    session = EditSkeletonSession()
    session.load_original_armature(result.armature)
    session.begin()

    arm = session.skeleton().find_bone("LeftArm")
    session.set_bone_position(arm, [15.0, 0.0, 0.0])   # RightArm mirrored

    corrections = session.get_rest_pose_rotation_corrections()
    clip = apply_rest_pose_corrections(result.animations[0], corrections)
    session.dispose()
"""

from .errors import (
    ImportParseError,
    HierarchyParseError,
    MotionDataError,
    ImportReadError,
    StorageWriteError,
)
from .skeleton import Bone, Skeleton, Armature, BoneTransformSnapshot, capture, restore
from .importer import BVHImporter, BVHImportResult, MotionClip, KeyframeTrack, parse
from .editor import (
    EditSkeletonSession,
    UndoRedoSystem,
    SnapToVolumeHandler,
    PointerEvent,
    Mesh,
    Intersection,
    apply_mirror,
    calculate_bone_base_name,
)
from .retargeter import RestPoseCorrectionSolver, apply_rest_pose_corrections
from .storage import SkeletonStorage

__version__ = "0.1.0"
__all__ = [
    "ImportParseError",
    "HierarchyParseError",
    "MotionDataError",
    "ImportReadError",
    "StorageWriteError",
    "Bone",
    "Skeleton",
    "Armature",
    "BoneTransformSnapshot",
    "capture",
    "restore",
    "BVHImporter",
    "BVHImportResult",
    "MotionClip",
    "KeyframeTrack",
    "parse",
    "EditSkeletonSession",
    "UndoRedoSystem",
    "SnapToVolumeHandler",
    "PointerEvent",
    "Mesh",
    "Intersection",
    "apply_mirror",
    "calculate_bone_base_name",
    "RestPoseCorrectionSolver",
    "apply_rest_pose_corrections",
    "SkeletonStorage",
]
