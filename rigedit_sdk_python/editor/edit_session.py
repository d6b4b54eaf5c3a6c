"""
EditSkeletonSession - owns the working armature while the rest pose is edited.

The session exposes plain accessors and mutators for a workflow layer:
selection, mirror mode, undo/redo, bone edits, and the rest-pose corrections
computed once editing is finished. It holds no UI state.
"""

import numpy as np

from ..retargeter.rest_pose_correction import RestPoseCorrectionSolver
from ..skeleton.snapshot import capture
from ..utils.quat_utils import quat_normalize
from .mirror import apply_mirror
from .scene_types import closest_bone_to_ray
from .undo_redo import UndoRedoSystem


class EditSkeletonSession:
    """
    Editing session for one skeleton.

    Workflow:
        1. load_original_armature() clones the imported armature and records
           its rest pose
        2. the caller edits bones (set_bone_position, snap-to-volume, ...),
           calling store_bone_state_for_undo() before each mutation
        3. get_rest_pose_rotation_corrections() returns the per-bone deltas
           for the retargeting/export stage

    Example:
        session = EditSkeletonSession()
        session.load_original_armature(result.armature)
        session.begin()

        arm = session.skeleton().find_bone("LeftArm")
        session.set_bone_position(arm, [0.2, 1.4, 0.0])  # RightArm follows
        session.undo_bone_transformation()

        corrections = session.get_rest_pose_rotation_corrections()
        session.dispose()
    """

    def __init__(
        self,
        max_history: int = 50,
        on_state_changed=None,
        on_skeleton_transformed=None,
        correction_solver=None,
        naming=None,
        verbose: bool = False,
    ):
        """
        Args:
            max_history: undo/redo capacity
            on_state_changed: callback(can_undo, can_redo)
            on_skeleton_transformed: callback() after undo/redo or a bone edit
            correction_solver: RestPoseCorrectionSolver to use (default one
                built from the packaged alias config)
            naming: naming conventions for mirror pairing
            verbose: print progress messages
        """
        self.undo_redo_system = UndoRedoSystem(max_history, on_state_changed)
        self.on_skeleton_transformed = on_skeleton_transformed
        self.correction_solver = correction_solver or RestPoseCorrectionSolver()
        self.naming = naming
        self.verbose = verbose

        self.edited_armature = None
        self.original_bone_transforms = None
        self.mirror_mode_enabled = True
        self.currently_selected_bone = None
        self.active = False

    # Lifecycle

    def begin(self):
        """Enter the editing phase and publish the current undo/redo state."""
        self.active = True
        self.undo_redo_system.notify_state_changed()
        if self.verbose:
            print("[EditSkeleton] Begin editing")

    def dispose(self):
        """Leave the editing phase; the armature and history are kept."""
        self.active = False
        self.currently_selected_bone = None
        if self.verbose:
            print("[EditSkeleton] Disposed")

    def load_original_armature(self, armature):
        """
        Start editing a copy of `armature`.

        History from a previously loaded skeleton is discarded and the copy's
        current transforms become the original rest pose.
        """
        self.edited_armature = armature.clone()
        skeleton = self.edited_armature.skeleton
        skeleton.update_world_matrices()

        self.undo_redo_system.set_skeleton(skeleton)
        self.undo_redo_system.clear_history()
        self.original_bone_transforms = capture(skeleton)
        self.currently_selected_bone = None

        if self.verbose:
            print(f"[EditSkeleton] Loaded armature {armature.name} with {len(skeleton)} bones")

    # Accessors

    def armature(self):
        return self.edited_armature

    def skeleton(self):
        if self.edited_armature is None:
            return None
        return self.edited_armature.skeleton

    def _require_skeleton(self):
        skeleton = self.skeleton()
        if skeleton is None:
            raise RuntimeError("No armature loaded; call load_original_armature() first")
        return skeleton

    def _check_index(self, index):
        skeleton = self._require_skeleton()
        if not 0 <= index < len(skeleton):
            raise IndexError(f"Bone index {index} out of range (0..{len(skeleton) - 1})")
        return skeleton

    def set_currently_selected_bone(self, index):
        if index is not None:
            self._check_index(index)
        self.currently_selected_bone = index

    def get_currently_selected_bone(self):
        return self.currently_selected_bone

    def set_mirror_mode_enabled(self, value):
        self.mirror_mode_enabled = bool(value)

    def is_mirror_mode_enabled(self):
        return self.mirror_mode_enabled

    # Undo / redo

    def store_bone_state_for_undo(self):
        """Call once before any bone transformation."""
        self.undo_redo_system.store_current_state()

    def undo_bone_transformation(self):
        result = self.undo_redo_system.undo()
        if result:
            self._skeleton_transformed()
            if self.verbose:
                print("[EditSkeleton] Undo successful")
        return result

    def redo_bone_transformation(self):
        result = self.undo_redo_system.redo()
        if result:
            self._skeleton_transformed()
            if self.verbose:
                print("[EditSkeleton] Redo successful")
        elif self.verbose:
            print("[EditSkeleton] No redo states available")
        return result

    def clear_undo_history(self):
        self.undo_redo_system.clear_history()

    def can_undo(self):
        return self.undo_redo_system.can_undo()

    def can_redo(self):
        return self.undo_redo_system.can_redo()

    # Mutators

    def apply_mirror_mode(self, index, kind):
        """Mirror bone `index`'s edit onto its partner; returns the partner index or None."""
        skeleton = self._check_index(index)
        return apply_mirror(skeleton, index, kind, self.naming)

    def _finish_edit(self, index, kind):
        skeleton = self._require_skeleton()
        skeleton.update_world_matrices()
        if self.mirror_mode_enabled:
            apply_mirror(skeleton, index, kind, self.naming)
        self._skeleton_transformed()

    def set_bone_position(self, index, position):
        """Store undo state, move a bone in its parent's space, then mirror."""
        skeleton = self._check_index(index)
        position = np.array(position, dtype=np.float64)
        if position.shape != (3,):
            raise ValueError(f"Position must have 3 components, got shape {position.shape}")
        self.store_bone_state_for_undo()
        skeleton.bones[index].position = position
        self._finish_edit(index, "translate")

    def set_bone_rotation(self, index, quaternion):
        """Store undo state, set a bone's local rotation (w, x, y, z), then mirror."""
        skeleton = self._check_index(index)
        quaternion = np.array(quaternion, dtype=np.float64)
        if quaternion.shape != (4,):
            raise ValueError(f"Quaternion must have 4 components, got shape {quaternion.shape}")
        self.store_bone_state_for_undo()
        skeleton.bones[index].quaternion = quat_normalize(quaternion)
        self._finish_edit(index, "rotate")

    def move_root_to_origin(self):
        """Place the root bone at the armature origin."""
        skeleton = self._require_skeleton()
        self.store_bone_state_for_undo()
        skeleton.bones[0].position = np.zeros(3)
        skeleton.update_world_matrices()
        self._skeleton_transformed()

    def closest_bone(self, camera, event):
        """(index, distance) of the non-root bone nearest the pointer ray."""
        skeleton = self._require_skeleton()
        origin, direction = camera.ray_from_pointer(event.ndc)
        return closest_bone_to_ray(skeleton, origin, direction)

    # Corrections

    def get_rest_pose_rotation_corrections(self):
        """
        Rotation corrections from the original rest pose to the edited one.

        Returns:
            dict bone name -> quaternion (w, x, y, z); empty before an
            armature is loaded
        """
        skeleton = self.skeleton()
        if skeleton is None or self.original_bone_transforms is None:
            return {}
        return self.correction_solver.compute_corrections(skeleton, self.original_bone_transforms)

    def _skeleton_transformed(self):
        if self.on_skeleton_transformed is not None:
            self.on_skeleton_transformed()
