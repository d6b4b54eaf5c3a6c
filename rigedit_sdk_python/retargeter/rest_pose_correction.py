"""
Rest-pose correction solver.

When the rest skeleton is re-posed, animation rotations authored against the
imported rest pose no longer line up. For every bone with a child bone this
solver builds an anatomical basis (bone axis = Y, character forward projected
out of it = Z) in both the original and the edited rest pose and returns the
rotation between the two:

    correction = edited_rest_rotation^-1 * original_rest_rotation
"""

import numpy as np

from ..config import ALIAS_KEYS, load_bone_aliases
from ..skeleton.snapshot import capture, restore
from ..utils.quat_utils import is_near_identity, quat_from_basis, quat_inverse, quat_mul, quat_normalize


WORLD_UP = np.array([0.0, 1.0, 0.0])
WORLD_RIGHT = np.array([1.0, 0.0, 0.0])
WORLD_FORWARD = np.array([0.0, 0.0, 1.0])

_ZERO_LENGTH_SQ = 1e-12


def _normalized_or_none(v):
    length_sq = float(np.dot(v, v))
    if length_sq <= _ZERO_LENGTH_SQ:
        return None
    return v / np.sqrt(length_sq)


class RestPoseCorrectionSolver:
    """
    Computes per-bone rotation corrections between two rest poses.

    Example:
        original = capture(skeleton)          # right after import
        ...                                   # user edits the rest pose
        solver = RestPoseCorrectionSolver()
        corrections = solver.compute_corrections(skeleton, original)
        # {"LeftArm": array([w, x, y, z]), ...}
    """

    def __init__(self, aliases=None, epsilon: float = 1e-5, alias_config_path=None):
        """
        Args:
            aliases: dict role -> name fragments (hips, spine, left_leg,
                right_leg, left_arm, right_arm); loaded from the packaged
                config when omitted
            epsilon: corrections with 1 - |w| <= epsilon are dropped
            alias_config_path: optional JSON file overriding packaged aliases
        """
        if aliases is None:
            aliases = load_bone_aliases(alias_config_path)
        missing = [key for key in ALIAS_KEYS if key not in aliases]
        if missing:
            raise ValueError(f"Missing alias roles: {missing}")
        self.aliases = {role: [name.lower() for name in names] for role, names in aliases.items()}
        self.epsilon = epsilon

    def find_bone(self, skeleton, role):
        """First bone whose lower-cased name equals or contains an alias of `role`."""
        names = self.aliases[role]
        for i, bone in enumerate(skeleton.bones):
            bone_name = bone.name.lower()
            if any(bone_name == name or name in bone_name for name in names):
                return i
        return None

    def _direction_between(self, skeleton, from_role, to_role):
        start = self.find_bone(skeleton, from_role)
        end = self.find_bone(skeleton, to_role)
        if start is None or end is None:
            return None
        return _normalized_or_none(skeleton.world_position(end) - skeleton.world_position(start))

    def compute_forward_vector(self, skeleton):
        """
        Character forward direction from the current world pose.

        up = hips -> spine (default world Y), left-right = left -> right hip,
        or left -> right arm (default world X), forward = left-right x up
        (default world Z).
        """
        up = self._direction_between(skeleton, "hips", "spine")
        if up is None:
            up = WORLD_UP

        left_right = None
        has_legs = (self.find_bone(skeleton, "left_leg") is not None
                    and self.find_bone(skeleton, "right_leg") is not None)
        if has_legs:
            left_right = self._direction_between(skeleton, "left_leg", "right_leg")
        else:
            left_right = self._direction_between(skeleton, "left_arm", "right_arm")
        if left_right is None:
            left_right = WORLD_RIGHT

        forward = _normalized_or_none(np.cross(left_right, up))
        if forward is None:
            return WORLD_FORWARD.copy()
        return forward

    def compute_rest_rotation(self, skeleton, index, forward):
        """
        Orientation of the bone's anatomical basis in world space.

        Returns:
            Quaternion (w, x, y, z), or None for bones without a child bone
        """
        bone = skeleton.bones[index]
        if not bone.children:
            return None

        bone_position = skeleton.world_position(index)
        child_position = skeleton.world_position(bone.children[0])
        y_axis = _normalized_or_none(child_position - bone_position)
        if y_axis is None:
            return None

        z_axis = forward - y_axis * float(np.dot(forward, y_axis))
        if float(np.dot(z_axis, z_axis)) <= _ZERO_LENGTH_SQ and bone.parent >= 0:
            parent_direction = bone_position - skeleton.world_position(bone.parent)
            z_axis = np.cross(parent_direction, y_axis)

        if float(np.dot(z_axis, z_axis)) <= _ZERO_LENGTH_SQ:
            fallback_axis = WORLD_UP if abs(y_axis[1]) < 0.99 else WORLD_RIGHT
            z_axis = np.cross(fallback_axis, y_axis)

        z_axis = z_axis / np.linalg.norm(z_axis)
        x_axis = np.cross(y_axis, z_axis)
        x_axis = x_axis / np.linalg.norm(x_axis)
        z_axis = np.cross(x_axis, y_axis)
        z_axis = z_axis / np.linalg.norm(z_axis)

        return quat_from_basis(x_axis, y_axis, z_axis)

    def compute_rest_rotations(self, skeleton, forward):
        """Rest rotation per bone name for every bone that has one."""
        rotations = {}
        for i, bone in enumerate(skeleton.bones):
            rotation = self.compute_rest_rotation(skeleton, i, forward)
            if rotation is not None:
                rotations[bone.name] = rotation
        return rotations

    def compute_corrections(self, skeleton, original_snapshot):
        """
        Per-bone corrections from the original rest pose to the current one.

        The skeleton is temporarily switched to the original pose and is
        always returned to its edited transforms, even on failure.

        Args:
            skeleton: Skeleton in its edited rest pose
            original_snapshot: BoneTransformSnapshot of the original rest pose

        Returns:
            dict bone name -> correction quaternion (w, x, y, z); bones that
            need no correction are omitted
        """
        edited_snapshot = capture(skeleton)
        try:
            restore(skeleton, original_snapshot)
            forward = self.compute_forward_vector(skeleton)
            original_rotations = self.compute_rest_rotations(skeleton, forward)
        finally:
            restore(skeleton, edited_snapshot)

        edited_rotations = self.compute_rest_rotations(skeleton, forward)

        corrections = {}
        for name, original_rotation in original_rotations.items():
            edited_rotation = edited_rotations.get(name)
            if edited_rotation is None:
                continue
            correction = quat_normalize(quat_mul(quat_inverse(edited_rotation), original_rotation))
            if not is_near_identity(correction, self.epsilon):
                corrections[name] = correction
        return corrections


def compute_rest_pose_corrections(skeleton, original_snapshot, aliases=None):
    """Shortcut for RestPoseCorrectionSolver(aliases).compute_corrections(...)."""
    return RestPoseCorrectionSolver(aliases=aliases).compute_corrections(skeleton, original_snapshot)
