"""
Interactive rest-pose editing: undo/redo, mirroring and snap-to-volume.

Example usage:
    from rigedit_sdk_python.editor import EditSkeletonSession, SnapToVolumeHandler, PointerEvent

    session = EditSkeletonSession()
    session.load_original_armature(armature)

    handler = SnapToVolumeHandler(camera, session, meshes, raycaster)
    handler.handle_mouse_down(PointerEvent(0.1, 0.4))
    handler.handle_dragging(PointerEvent(0.12, 0.41))
    handler.handle_mouse_up()

    session.undo_bone_transformation()
"""

from .edit_session import EditSkeletonSession
from .mirror import MIRROR_KINDS, apply_mirror, calculate_bone_base_name, find_mirror_bone
from .scene_types import Intersection, Mesh, PointerEvent, closest_bone_to_ray, ray_distance_to_point
from .snap_to_volume import SnapToVolumeHandler, calculate_local_volume_center
from .undo_redo import UndoRedoSystem

__all__ = [
    "EditSkeletonSession",
    "UndoRedoSystem",
    "MIRROR_KINDS",
    "apply_mirror",
    "calculate_bone_base_name",
    "find_mirror_bone",
    "SnapToVolumeHandler",
    "calculate_local_volume_center",
    "PointerEvent",
    "Mesh",
    "Intersection",
    "closest_bone_to_ray",
    "ray_distance_to_point",
]
