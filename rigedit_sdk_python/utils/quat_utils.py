"""
Quaternion helpers used by the importer, the mirror solver and the
rest-pose correction solver.

Quaternions are stored as (w, x, y, z) arrays. Euler angles follow the
intrinsic XYZ convention of the skeleton editor (matrix = Rx * Ry * Rz).
"""

import numpy as np
from scipy.spatial.transform import Rotation as R


IDENTITY_QUAT = np.array([1.0, 0.0, 0.0, 0.0])


def quat_mul(q1, q2):
    """
    Hamilton product q1 * q2.

    Args:
        q1: Left quaternion (w, x, y, z)
        q2: Right quaternion (w, x, y, z)

    Returns:
        Product quaternion (w, x, y, z)
    """
    w1, x1, y1, z1 = q1[0], q1[1], q1[2], q1[3]
    w2, x2, y2, z2 = q2[0], q2[1], q2[2], q2[3]
    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2
    ])


def quat_conj(q):
    """Conjugate (w, -x, -y, -z)."""
    return np.array([q[0], -q[1], -q[2], -q[3]])


def quat_inverse(q):
    """Inverse of a (not necessarily unit) quaternion."""
    q = np.asarray(q, dtype=np.float64)
    norm_sq = float(np.dot(q, q))
    if norm_sq < 1e-16:
        return IDENTITY_QUAT.copy()
    return quat_conj(q) / norm_sq


def quat_normalize(q):
    """
    Scale a quaternion to unit length.

    A zero-length input collapses to the identity rotation.
    """
    q = np.asarray(q, dtype=np.float64)
    norm = np.sqrt(q[0]*q[0] + q[1]*q[1] + q[2]*q[2] + q[3]*q[3])
    if norm < 1e-8:
        return IDENTITY_QUAT.copy()
    return q / norm


def is_near_identity(q, epsilon=1e-5):
    """True when 1 - |w| <= epsilon, i.e. the rotation angle is negligible."""
    return 1.0 - abs(float(q[0])) <= epsilon


# Euler conversions for single bones (editor convention)

def quat_to_euler_xyz(q):
    """Intrinsic XYZ euler angles (radians) of a (w, x, y, z) quaternion."""
    return R.from_quat(quat_normalize(q), scalar_first=True).as_euler("XYZ")


def euler_xyz_to_quat(euler):
    """(w, x, y, z) quaternion from intrinsic XYZ euler angles (radians)."""
    return R.from_euler("XYZ", np.asarray(euler, dtype=np.float64)).as_quat(scalar_first=True)


def quat_from_basis(x_axis, y_axis, z_axis):
    """
    Rotation whose matrix columns are the given orthonormal axes.

    Args:
        x_axis, y_axis, z_axis: Orthonormal basis vectors (3,)

    Returns:
        Quaternion (w, x, y, z)
    """
    basis = np.column_stack([x_axis, y_axis, z_axis]).astype(np.float64)
    return R.from_matrix(basis).as_quat(scalar_first=True)


def quat_to_matrix(q):
    """3x3 rotation matrix of a (w, x, y, z) quaternion."""
    return R.from_quat(quat_normalize(q), scalar_first=True).as_matrix()


# Batched operations for motion data

def quat_mul_batch(x, y):
    """
    Element-wise Hamilton product of two quaternion arrays.

    Args:
        x: array of shape (..., 4) in (w, x, y, z) order
        y: array of shape (..., 4) in (w, x, y, z) order

    Returns:
        array of shape (..., 4) holding x * y
    """
    x0, x1, x2, x3 = x[..., 0:1], x[..., 1:2], x[..., 2:3], x[..., 3:4]
    y0, y1, y2, y3 = y[..., 0:1], y[..., 1:2], y[..., 2:3], y[..., 3:4]

    return np.concatenate([
        y0 * x0 - y1 * x1 - y2 * x2 - y3 * x3,
        y0 * x1 + y1 * x0 - y2 * x3 + y3 * x2,
        y0 * x2 + y1 * x3 + y2 * x0 - y3 * x1,
        y0 * x3 - y1 * x2 + y2 * x1 + y3 * x0], axis=-1)


def angle_axis_to_quat(angle, axis):
    """
    Quaternions for rotations of `angle` radians around a fixed `axis`.

    Args:
        angle: array of angles (...)
        axis: unit axis (3,)

    Returns:
        array of shape (..., 4) in (w, x, y, z) order
    """
    c = np.cos(angle / 2.0)[..., np.newaxis]
    s = np.sin(angle / 2.0)[..., np.newaxis]
    return np.concatenate([c, s * axis], axis=-1)


def remove_quat_discontinuities(rotations):
    """
    Flip quaternions so consecutive frames stay on the same hemisphere.

    Args:
        rotations: array of shape (T, ..., 4)

    Returns:
        The same array, modified in place, without sign flips over time.
    """
    for i in range(1, rotations.shape[0]):
        dots = np.sum(rotations[i - 1] * rotations[i], axis=-1)
        flip = (dots < 0.0)[..., np.newaxis]
        rotations[i] = np.where(flip, -rotations[i], rotations[i])

    return rotations
