"""
Left/right mirroring of bone edits.

Bones are paired by a base name: the lower-cased name with vendor prefixes
(mixamorig:, Bip01, ...) and side markers (Left/Right, _L/_R, ...) removed.
Bones on the mirror axis (spine, neck, head) have no partner and are left
alone.
"""

import re

import numpy as np

from ..config import load_naming_conventions
from ..utils.quat_utils import euler_xyz_to_quat


MIRROR_KINDS = ("translate", "rotate")

_default_naming = None


def _naming(naming):
    global _default_naming
    if naming is not None:
        return naming
    if _default_naming is None:
        _default_naming = load_naming_conventions()
    return _default_naming


def calculate_bone_base_name(name, naming=None):
    """
    Strip vendor prefixes and side markers from a bone name.

    Example:
        calculate_bone_base_name("mixamorig:LeftUpLeg")  # -> "upleg"
        calculate_bone_base_name("Thigh_R")              # -> "thigh"
        calculate_bone_base_name("Spine")                # -> "spine"
    """
    naming = _naming(naming)
    base = name.lower()

    for prefix in naming["vendor_prefixes"]:
        if base.startswith(prefix):
            base = base[len(prefix):]
            break

    for word in naming["side_words"]:
        base = base.replace(word, "")

    base = re.sub(naming["side_prefix_pattern"], "", base)
    base = re.sub(naming["side_suffix_pattern"], "", base)
    return base.strip(" _.-:")


def find_mirror_bone(skeleton, index, naming=None):
    """
    Index of the single other bone sharing `index`'s base name.

    Returns None when there is no partner, or when several bones share the
    base name and the pairing would be ambiguous.
    """
    selected = skeleton.bones[index]
    base_name = calculate_bone_base_name(selected.name, naming)

    matches = [
        i for i, bone in enumerate(skeleton.bones)
        if i != index and bone.name != selected.name
        and calculate_bone_base_name(bone.name, naming) == base_name
    ]
    if len(matches) > 1:
        names = [skeleton.bones[i].name for i in matches]
        print(f"[Mirror] Ambiguous mirror for {selected.name}: {names}")
        return None
    return matches[0] if matches else None


def apply_mirror(skeleton, index, kind, naming=None):
    """
    Copy a bone's edit onto its mirror partner.

    Args:
        skeleton: Skeleton being edited
        index: index of the edited bone
        kind: "translate" mirrors the local position to (-x, y, z);
              "rotate" rebuilds the partner's rotation from the euler
              angles (x, -y, -z)
        naming: optional naming conventions, see config.load_naming_conventions

    Returns:
        Index of the mirrored bone, or None when the bone has no partner
    """
    if kind not in MIRROR_KINDS:
        raise ValueError(f"Unknown mirror kind: {kind}. Supported: {list(MIRROR_KINDS)}")

    mirror_index = find_mirror_bone(skeleton, index, naming)
    if mirror_index is None:
        return None

    source = skeleton.bones[index]
    mirror = skeleton.bones[mirror_index]

    if kind == "translate":
        x, y, z = source.position
        mirror.position = np.array([-x, y, z])
    else:
        ex, ey, ez = source.rotation
        mirror.quaternion = euler_xyz_to_quat([ex, -ey, -ez])

    skeleton.update_world_matrices()
    return mirror_index
