"""
Affine transform utilities for bone hierarchies.

Local bone transforms (position, quaternion, scale) are composed into 4x4
matrices and chained down the hierarchy to produce world matrices. Bones
must be ordered so that every parent precedes its children.
"""

import numpy as np

from .quat_utils import quat_to_matrix


def compose_matrix(position, quaternion, scale):
    """
    Build a 4x4 matrix from translation, rotation and scale (T * R * S).

    Args:
        position: (3,) translation
        quaternion: (4,) rotation in (w, x, y, z) order
        scale: (3,) per-axis scale

    Returns:
        (4, 4) matrix
    """
    m = np.eye(4)
    m[:3, :3] = quat_to_matrix(quaternion) * np.asarray(scale, dtype=np.float64)[np.newaxis, :]
    m[:3, 3] = position
    return m


def compute_world_matrices(local_matrices, parents, base_matrix=None):
    """
    Forward kinematics over 4x4 matrices.

    Args:
        local_matrices: (J, 4, 4) local matrices, parents before children
        parents: parent index per bone (-1 for the root)
        base_matrix: optional (4, 4) matrix the root is attached under

    Returns:
        (J, 4, 4) world matrices
    """
    base = np.eye(4) if base_matrix is None else np.asarray(base_matrix, dtype=np.float64)
    world = np.empty_like(local_matrices)
    for i, parent in enumerate(parents):
        if parent < 0:
            world[i] = base @ local_matrices[i]
        else:
            world[i] = world[parent] @ local_matrices[i]
    return world


def transform_point(matrix, point):
    """Apply a 4x4 affine matrix to a 3D point."""
    p = np.asarray(point, dtype=np.float64)
    return matrix[:3, :3] @ p + matrix[:3, 3]


def invert_matrix(matrix):
    """Inverse of a 4x4 affine matrix."""
    return np.linalg.inv(np.asarray(matrix, dtype=np.float64))
