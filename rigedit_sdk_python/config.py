"""
Packaged configuration for name-based bone classification.

The anatomical alias lists used by the rest-pose correction solver and the
naming conventions used to pair left/right bones live in
`configs/bone_aliases.json`. A user file can extend or replace any entry.
"""

import copy
import json
import pathlib


HERE = pathlib.Path(__file__).parent
CONFIG_ROOT = HERE / "configs"
BONE_ALIASES_PATH = CONFIG_ROOT / "bone_aliases.json"

ALIAS_KEYS = ("hips", "spine", "left_leg", "right_leg", "left_arm", "right_arm")

_default_config = None


def _load_default_config():
    global _default_config
    if _default_config is None:
        with open(BONE_ALIASES_PATH) as f:
            _default_config = json.load(f)
    return copy.deepcopy(_default_config)


def _load_with_overrides(section, path):
    config = _load_default_config()[section]
    if path is None:
        return config
    with open(path) as f:
        user_config = json.load(f)
    config.update(user_config.get(section, {}))
    return config


def load_bone_aliases(path=None):
    """
    Alias lists per anatomical role, lower-cased.

    Args:
        path: optional JSON file with an "aliases" object overriding roles

    Returns:
        dict role -> list of lower-case name fragments
    """
    aliases = _load_with_overrides("aliases", path)
    missing = [key for key in ALIAS_KEYS if key not in aliases]
    if missing:
        raise ValueError(f"Bone alias config is missing roles: {missing}")
    return {role: [name.lower() for name in names] for role, names in aliases.items()}


def load_naming_conventions(path=None):
    """Vendor prefixes and side markers used to derive bone base names."""
    return _load_with_overrides("naming", path)
