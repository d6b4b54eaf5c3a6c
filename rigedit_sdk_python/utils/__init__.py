"""
Math utilities shared by the importer, editor and retargeter.

This module provides:
    - quat_utils: Quaternion and euler math
    - transform_utils: 4x4 matrix composition and forward kinematics
"""

from .quat_utils import (
    quat_mul,
    quat_conj,
    quat_inverse,
    quat_normalize,
    quat_to_euler_xyz,
    euler_xyz_to_quat,
    quat_from_basis,
)
from .transform_utils import compose_matrix, compute_world_matrices, transform_point

__all__ = [
    "quat_mul",
    "quat_conj",
    "quat_inverse",
    "quat_normalize",
    "quat_to_euler_xyz",
    "euler_xyz_to_quat",
    "quat_from_basis",
    "compose_matrix",
    "compute_world_matrices",
    "transform_point",
]
