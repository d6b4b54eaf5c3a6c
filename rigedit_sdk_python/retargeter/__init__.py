"""
Rest-pose correction for retargeting animation onto an edited skeleton.

Example usage:
    from rigedit_sdk_python.retargeter import (
        RestPoseCorrectionSolver,
        apply_rest_pose_corrections,
    )

    corrections = RestPoseCorrectionSolver().compute_corrections(skeleton, original)
    corrected_clip = apply_rest_pose_corrections(clip, corrections)
"""

from .rest_pose_correction import RestPoseCorrectionSolver, compute_rest_pose_corrections
from .retarget_utils import apply_rest_pose_corrections, create_track_name

__all__ = [
    "RestPoseCorrectionSolver",
    "compute_rest_pose_corrections",
    "apply_rest_pose_corrections",
    "create_track_name",
]
