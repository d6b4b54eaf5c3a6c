"""
Arena-indexed bone hierarchy.

Bones live in a flat list owned by the Skeleton and refer to their parent and
children by index. Index 0 is always the root and every parent precedes its
children, so the list order doubles as a stable traversal order.
"""

import numpy as np

from ..utils.quat_utils import IDENTITY_QUAT, quat_normalize, quat_to_euler_xyz, euler_xyz_to_quat
from ..utils.transform_utils import compose_matrix, compute_world_matrices, transform_point


class Bone:
    """A node in the skeleton carrying a local transform."""

    def __init__(self, name, position=None, quaternion=None, scale=None, parent=-1):
        """
        Args:
            name: bone name (unique within its skeleton)
            position: local position (3,)
            quaternion: local rotation (w, x, y, z)
            scale: local scale (3,)
            parent: parent bone index, -1 for the root
        """
        self.name = name
        self.position = np.zeros(3) if position is None else np.array(position, dtype=np.float64)
        self.quaternion = IDENTITY_QUAT.copy() if quaternion is None else quat_normalize(quaternion)
        self.scale = np.ones(3) if scale is None else np.array(scale, dtype=np.float64)
        self.parent = parent
        self.children = []
        # End Site offset; an attachment point, not a bone
        self.end_site = None

    @property
    def rotation(self):
        """Local rotation as intrinsic XYZ euler angles (radians)."""
        return quat_to_euler_xyz(self.quaternion)

    @rotation.setter
    def rotation(self, euler):
        self.quaternion = euler_xyz_to_quat(euler)

    def is_root(self):
        return self.parent < 0

    def copy(self):
        bone = Bone(self.name, self.position, self.quaternion, self.scale, self.parent)
        bone.children = list(self.children)
        bone.end_site = None if self.end_site is None else self.end_site.copy()
        return bone

    def __repr__(self):
        return f"Bone({self.name!r}, parent={self.parent})"


class Skeleton:
    """
    Ordered collection of bones with cached world matrices.

    Example:
        skeleton = Skeleton()
        hips = skeleton.add_bone("Hips")
        spine = skeleton.add_bone("Spine", parent=hips, position=[0, 0.1, 0])
        skeleton.update_world_matrices()
        skeleton.world_position(spine)  # -> array([0. , 0.1, 0. ])
    """

    def __init__(self):
        self.bones = []
        self.world_matrices = np.zeros((0, 4, 4))
        # Matrix of the container the root is attached under (the armature)
        self.root_parent_matrix = np.eye(4)

    def __len__(self):
        return len(self.bones)

    def __iter__(self):
        return iter(self.bones)

    def __getitem__(self, index):
        return self.bones[index]

    def add_bone(self, name, parent=-1, position=None, quaternion=None, scale=None):
        """
        Append a bone and link it under `parent`.

        Returns:
            Index of the new bone.

        Raises:
            ValueError: on a second root, an unknown parent, or a duplicate name
        """
        if parent < 0 and self.bones:
            raise ValueError(f"Skeleton already has a root bone: {self.bones[0].name}")
        if parent >= 0 and parent >= len(self.bones):
            raise ValueError(f"Parent index {parent} is not in the skeleton")
        if parent < 0 and not self.bones:
            parent = -1
        if self.find_bone(name) is not None:
            raise ValueError(f"Duplicate bone name: {name}")

        index = len(self.bones)
        self.bones.append(Bone(name, position, quaternion, scale, parent))
        if parent >= 0:
            self.bones[parent].children.append(index)
        self.world_matrices = np.concatenate([self.world_matrices, np.eye(4)[np.newaxis]], axis=0)
        return index

    def find_bone(self, name):
        """Index of the bone called `name`, or None."""
        for i, bone in enumerate(self.bones):
            if bone.name == name:
                return i
        return None

    def bone_names(self):
        return [bone.name for bone in self.bones]

    def parent_indices(self):
        return np.array([bone.parent for bone in self.bones], dtype=int)

    def local_matrix(self, index):
        bone = self.bones[index]
        return compose_matrix(bone.position, bone.quaternion, bone.scale)

    def update_world_matrices(self):
        """Recompute every bone's world matrix from the local transforms."""
        if not self.bones:
            self.world_matrices = np.zeros((0, 4, 4))
            return self.world_matrices
        local = np.stack([self.local_matrix(i) for i in range(len(self.bones))])
        self.world_matrices = compute_world_matrices(
            local, self.parent_indices(), self.root_parent_matrix)
        return self.world_matrices

    def world_matrix(self, index):
        return self.world_matrices[index]

    def world_position(self, index):
        return self.world_matrices[index][:3, 3].copy()

    def world_positions(self):
        return self.world_matrices[:, :3, 3].copy()

    def parent_world_matrix(self, index):
        """World matrix of the bone's parent space (the armature for the root)."""
        parent = self.bones[index].parent
        if parent < 0:
            return self.root_parent_matrix
        return self.world_matrices[parent]

    def end_site_world_position(self, index):
        """World position of a bone's End Site, or None."""
        end_site = self.bones[index].end_site
        if end_site is None:
            return None
        return transform_point(self.world_matrices[index], end_site)

    def depth(self):
        """Number of hierarchy levels (0 for an empty skeleton)."""
        levels = []
        for bone in self.bones:
            levels.append(1 if bone.parent < 0 else levels[bone.parent] + 1)
        return max(levels, default=0)

    def clone(self):
        copy = Skeleton()
        copy.bones = [bone.copy() for bone in self.bones]
        copy.world_matrices = self.world_matrices.copy()
        copy.root_parent_matrix = self.root_parent_matrix.copy()
        return copy


class Armature:
    """
    Container that roots a skeleton for attachment into a scene.

    The armature's own world matrix is the parent space of the root bone.
    """

    def __init__(self, skeleton, name="Armature", matrix_world=None):
        self.name = name
        self.skeleton = skeleton
        if matrix_world is not None:
            self.matrix_world = matrix_world

    @property
    def matrix_world(self):
        return self.skeleton.root_parent_matrix

    @matrix_world.setter
    def matrix_world(self, matrix):
        self.skeleton.root_parent_matrix = np.array(matrix, dtype=np.float64)

    @property
    def root_bone(self):
        return self.skeleton.bones[0] if self.skeleton.bones else None

    def update_world_matrices(self):
        return self.skeleton.update_world_matrices()

    def clone(self, name=None):
        return Armature(self.skeleton.clone(), name=name or self.name)

    def __repr__(self):
        return f"Armature({self.name!r}, bones={len(self.skeleton)})"
