#!/usr/bin/env python3
"""
Example: edit a BVH rest pose and compute retargeting corrections.

This script imports a BVH file, moves one bone (mirrored onto its left/right
partner), prints the resulting rest-pose corrections and optionally saves the
corrected clip as a pickle.

Usage:
    python edit_bvh_skeleton.py --bvh_file path/to/motion.bvh --bone LeftArm --offset 0 5 0

Output:
    - Prints the skeleton summary and per-bone corrections
    - Optionally saves the corrected clip to a pickle file
"""

import argparse
import os
import pickle

import numpy as np

from rigedit_sdk_python import (
    BVHImporter,
    EditSkeletonSession,
    ImportParseError,
    ImportReadError,
    SkeletonStorage,
    apply_rest_pose_corrections,
)


def main():
    parser = argparse.ArgumentParser(description="Edit a BVH rest pose and compute corrections")

    parser.add_argument(
        "--bvh_file",
        type=str,
        required=True,
        help="Path to BVH motion file",
    )

    parser.add_argument(
        "--bone",
        type=str,
        default="LeftArm",
        help="Bone to move (default: LeftArm)",
    )

    parser.add_argument(
        "--offset",
        type=float,
        nargs=3,
        default=[0.0, 5.0, 0.0],
        help="Offset added to the bone's local position (default: 0 5 0)",
    )

    parser.add_argument(
        "--no_mirror",
        action="store_true",
        default=False,
        help="Disable mirror mode",
    )

    parser.add_argument(
        "--storage_path",
        type=str,
        default=None,
        help="JSON file to store the imported BVH in (optional)",
    )

    parser.add_argument(
        "--save_path",
        type=str,
        default=None,
        help="Path to save the corrected clip (pickle format)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print verbose output",
    )

    args = parser.parse_args()

    importer = BVHImporter(verbose=args.verbose)
    print(f"Loading BVH file: {args.bvh_file}")
    try:
        result = importer.import_from_file(args.bvh_file)
    except ImportReadError as e:
        print(f"Could not read file: {e}")
        return None
    except ImportParseError as e:
        print(f"Not a valid BVH file: {e}")
        return None

    clip = result.animations[0]
    print(f"Loaded {len(result.skeleton)} bones, {clip.frame_count} frames")

    if args.storage_path:
        storage = SkeletonStorage(args.storage_path, importer=importer, verbose=args.verbose)
        name = os.path.splitext(os.path.basename(args.bvh_file))[0]
        with open(args.bvh_file) as f:
            storage.store_skeleton_from_bvh(name, f.read())

    session = EditSkeletonSession(verbose=args.verbose)
    session.load_original_armature(result.armature)
    session.set_mirror_mode_enabled(not args.no_mirror)
    session.begin()

    skeleton = session.skeleton()
    index = skeleton.find_bone(args.bone)
    if index is None:
        print(f"Bone not found: {args.bone}")
        print(f"Available bones: {skeleton.bone_names()}")
        session.dispose()
        return None

    new_position = skeleton.bones[index].position + np.array(args.offset)
    session.set_bone_position(index, new_position)

    corrections = session.get_rest_pose_rotation_corrections()
    print(f"\n{len(corrections)} bones need correction:")
    for name, quat in corrections.items():
        print(f"  {name}: {np.round(quat, 4)}")

    corrected_clip = apply_rest_pose_corrections(clip, corrections)
    session.dispose()

    if args.save_path:
        save_dir = os.path.dirname(args.save_path)
        if save_dir:
            os.makedirs(save_dir, exist_ok=True)

        motion_data = {
            "name": corrected_clip.name,
            "frame_time": corrected_clip.frame_time,
            "bones": list(corrected_clip.tracks.keys()),
            "quaternions": {name: track.quaternions for name, track in corrected_clip.tracks.items()},  # wxyz
            "positions": {name: track.positions for name, track in corrected_clip.tracks.items()
                          if track.positions is not None},
        }

        with open(args.save_path, "wb") as f:
            pickle.dump(motion_data, f)
        print(f"\nSaved to {args.save_path}")

    return corrections


if __name__ == "__main__":
    main()
