"""
Helpers for handing rest-pose corrections to a retargeting/export stage.
"""

import numpy as np

from ..utils.quat_utils import quat_mul_batch, remove_quat_discontinuities


def create_track_name(bone_name, prop):
    """Track name in "BoneName.property" form, e.g. "Hips.quaternion"."""
    return f"{bone_name}.{prop}"


def apply_rest_pose_corrections(clip, corrections, premultiply=False):
    """
    Compose correction quaternions into a clip's rotation keys.

    Args:
        clip: MotionClip with (T, 4) quaternion tracks
        corrections: dict bone name -> correction quaternion (w, x, y, z)
        premultiply: True for q' = c * q, False for q' = q * c

    Returns:
        A new MotionClip; the input clip is not modified. Bones without a
        correction keep their keys unchanged.
    """
    corrected = clip.clone()
    for bone_name, correction in corrections.items():
        track = corrected.tracks.get(bone_name)
        if track is None:
            continue
        c = np.broadcast_to(np.asarray(correction, dtype=np.float64), track.quaternions.shape)
        if premultiply:
            quats = quat_mul_batch(c, track.quaternions)
        else:
            quats = quat_mul_batch(track.quaternions, c)
        quats = quats / np.linalg.norm(quats, axis=-1, keepdims=True)
        track.quaternions = remove_quat_discontinuities(quats)
    return corrected
