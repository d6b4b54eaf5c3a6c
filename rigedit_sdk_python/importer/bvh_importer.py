"""
BVH importer.

Parses BVH text into a Skeleton wrapped in an Armature plus a MotionClip with
one keyframe track per joint. Parsing is all-or-nothing: any failure raises
before a skeleton is returned.
"""

import re

import numpy as np

from ..errors import HierarchyParseError, ImportReadError, MotionDataError
from ..skeleton import Armature, Skeleton
from ..utils.quat_utils import angle_axis_to_quat, quat_mul_batch, remove_quat_discontinuities


DEFAULT_CLIP_NAME = "Imported Animation"
ARMATURE_NAME = "BVH_Armature"

# channel name -> (kind, axis index)
CHANNEL_MAP = {
    "Xposition": ("position", 0),
    "Yposition": ("position", 1),
    "Zposition": ("position", 2),
    "Xrotation": ("rotation", 0),
    "Yrotation": ("rotation", 1),
    "Zrotation": ("rotation", 2),
}

AXES = np.eye(3)

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_FRAMES_RE = re.compile(r"^Frames:\s*(\d+)$")
_FRAME_TIME_RE = re.compile(r"^Frame\s+Time:\s*(" + _NUMBER + r")$")


class KeyframeTrack:
    """Per-bone keyframes sampled at the clip's frame times."""

    def __init__(self, bone_name, times, quaternions, positions=None):
        """
        Args:
            bone_name: name of the animated bone
            times: (T,) key times in seconds
            quaternions: (T, 4) local rotations (w, x, y, z)
            positions: (T, 3) local positions, or None for rotation-only joints
        """
        self.bone_name = bone_name
        self.times = times
        self.quaternions = quaternions
        self.positions = positions

    def copy(self):
        return KeyframeTrack(
            self.bone_name,
            self.times.copy(),
            self.quaternions.copy(),
            None if self.positions is None else self.positions.copy(),
        )


class MotionClip:
    """A named set of keyframe tracks at a fixed frame time."""

    def __init__(self, name, frame_time, tracks):
        self.name = name
        self.frame_time = frame_time
        self.tracks = tracks

    @property
    def frame_count(self):
        for track in self.tracks.values():
            return len(track.times)
        return 0

    @property
    def duration(self):
        return max(self.frame_count - 1, 0) * self.frame_time

    def clone(self):
        return MotionClip(self.name, self.frame_time,
                          {name: track.copy() for name, track in self.tracks.items()})

    def __repr__(self):
        return f"MotionClip({self.name!r}, frames={self.frame_count}, tracks={len(self.tracks)})"


class BVHImportResult:
    """Skeleton, armature and clips produced by one import."""

    def __init__(self, skeleton, armature, animations):
        self.skeleton = skeleton
        self.armature = armature
        self.animations = animations


class _JointSpec:
    def __init__(self, name, parent):
        self.name = name
        self.parent = parent
        self.offset = np.zeros(3)
        self.channels = []
        self.end_site = None


def find_root_index(parents):
    """
    Index of the root bone.

    The root is the bone whose parent is missing or not part of the bone
    list. Falls back to the first bone when no bone qualifies.
    """
    count = len(parents)
    for i, parent in enumerate(parents):
        if parent < 0 or parent >= count:
            return i
    return 0


class BVHImporter:
    """
    Reads BVH motion capture text.

    Example usage:
        importer = BVHImporter()
        result = importer.import_from_file("walk.bvh")
        result.skeleton.bone_names()
        result.animations[0].frame_count
    """

    def __init__(self, default_clip_name=DEFAULT_CLIP_NAME, verbose=False):
        self.default_clip_name = default_clip_name
        self.verbose = verbose

    def import_from_file(self, path, encoding="utf-8-sig"):
        """
        Read a BVH file and parse it.

        Raises:
            ImportReadError: the file could not be read or is empty
            ImportParseError: the content is not valid BVH
        """
        try:
            with open(path, "r", encoding=encoding) as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            print(f"[BVHImporter] Failed to read {path}: {e}")
            raise ImportReadError(f"Failed to read BVH file {path}: {e}") from e

        if not text.strip():
            print(f"[BVHImporter] {path} is empty")
            raise ImportReadError(f"Failed to read file content: {path} is empty")

        return self.parse_bvh_text(text)

    def parse_bvh_text(self, text, name=None):
        """
        Parse BVH text.

        Args:
            text: full BVH document
            name: clip name; defaults to `default_clip_name`

        Returns:
            BVHImportResult with the skeleton, its armature and one clip
        """
        if text.startswith("\ufeff"):
            text = text[1:]
        lines = [(n + 1, line.strip()) for n, line in enumerate(text.splitlines())]
        lines = [(n, line) for n, line in lines if line]

        joints, motion_start = self._parse_hierarchy(lines)
        channel_total = sum(len(joint.channels) for joint in joints)
        frame_time, data = self._parse_motion(lines, motion_start, channel_total)

        parents = [joint.parent for joint in joints]
        root_index = find_root_index(parents)
        if root_index != 0:
            raise HierarchyParseError(f"Root joint {joints[root_index].name} is not the first joint")

        skeleton = Skeleton()
        for joint in joints:
            index = skeleton.add_bone(joint.name, parent=joint.parent, position=joint.offset)
            skeleton.bones[index].end_site = joint.end_site

        armature = Armature(skeleton, name=ARMATURE_NAME)
        armature.update_world_matrices()

        clip = self._build_clip(joints, frame_time, data, name or self.default_clip_name)

        if self.verbose:
            print(f"[BVHImporter] Parsed {len(skeleton)} bones, "
                  f"{clip.frame_count} frames at {frame_time:.4f}s")

        return BVHImportResult(skeleton, armature, [clip])

    def _parse_hierarchy(self, lines):
        if not lines or lines[0][1] != "HIERARCHY":
            line_number = lines[0][0] if lines else None
            raise HierarchyParseError("Missing HIERARCHY block", line_number)

        joints = []
        # open blocks: ("joint", index) or ("end", owner index)
        stack = []
        pending = None

        for pos in range(1, len(lines)):
            line_number, line = lines[pos]
            tokens = line.split()
            keyword = tokens[0]

            if keyword == "MOTION":
                if pending is not None or stack:
                    raise HierarchyParseError("Unbalanced braces in HIERARCHY block", line_number)
                if not joints:
                    raise HierarchyParseError("HIERARCHY block has no ROOT joint", line_number)
                return joints, pos + 1

            if pending is not None and keyword != "{":
                raise HierarchyParseError(f"Expected '{{' after {pending[0]} declaration", line_number)

            if keyword in ("ROOT", "JOINT"):
                if len(tokens) < 2:
                    raise HierarchyParseError(f"{keyword} without a name", line_number)
                if keyword == "ROOT" and joints:
                    raise HierarchyParseError("Multiple ROOT joints", line_number)
                if keyword == "JOINT" and not stack:
                    raise HierarchyParseError("JOINT outside of ROOT block", line_number)
                if stack and stack[-1][0] == "end":
                    raise HierarchyParseError("JOINT inside End Site", line_number)
                parent = stack[-1][1] if stack else -1
                joint_name = " ".join(tokens[1:])
                if any(joint.name == joint_name for joint in joints):
                    raise HierarchyParseError(f"Duplicate joint name: {joint_name}", line_number)
                joints.append(_JointSpec(joint_name, parent))
                pending = ("joint", len(joints) - 1)
            elif keyword == "End":
                if tokens[1:] != ["Site"]:
                    raise HierarchyParseError(f"Unknown keyword: {line}", line_number)
                if not stack or stack[-1][0] == "end":
                    raise HierarchyParseError("End Site outside of a joint", line_number)
                pending = ("end", stack[-1][1])
            elif keyword == "{":
                if pending is None:
                    raise HierarchyParseError("Unexpected '{'", line_number)
                stack.append(pending)
                pending = None
            elif keyword == "}":
                if not stack:
                    raise HierarchyParseError("Unbalanced '}'", line_number)
                stack.pop()
            elif keyword == "OFFSET":
                if not stack:
                    raise HierarchyParseError("OFFSET outside of a joint", line_number)
                offset = self._parse_offset(tokens, line_number)
                kind, index = stack[-1]
                if kind == "end":
                    joints[index].end_site = offset
                else:
                    joints[index].offset = offset
            elif keyword == "CHANNELS":
                if not stack or stack[-1][0] == "end":
                    raise HierarchyParseError("CHANNELS outside of a joint", line_number)
                joints[stack[-1][1]].channels = self._parse_channels(tokens, line_number)
            else:
                raise HierarchyParseError(f"Unknown keyword: {keyword}", line_number)

        raise HierarchyParseError("Missing MOTION block")

    @staticmethod
    def _parse_offset(tokens, line_number):
        if len(tokens) != 4:
            raise HierarchyParseError("OFFSET needs exactly 3 values", line_number)
        try:
            return np.array([float(v) for v in tokens[1:]])
        except ValueError:
            raise HierarchyParseError(f"Invalid OFFSET values: {' '.join(tokens[1:])}", line_number)

    @staticmethod
    def _parse_channels(tokens, line_number):
        if len(tokens) < 2:
            raise HierarchyParseError("CHANNELS without a count", line_number)
        try:
            count = int(tokens[1])
        except ValueError:
            raise HierarchyParseError(f"Invalid channel count: {tokens[1]}", line_number)
        names = tokens[2:]
        if count != len(names):
            raise HierarchyParseError(
                f"CHANNELS declares {count} channels but lists {len(names)}", line_number)
        for channel in names:
            if channel not in CHANNEL_MAP:
                raise HierarchyParseError(f"Unknown channel: {channel}", line_number)
        return names

    @staticmethod
    def _parse_motion(lines, start, channel_total):
        if start >= len(lines):
            raise MotionDataError("MOTION block has no frame header")

        line_number, line = lines[start]
        match = _FRAMES_RE.match(line)
        if not match:
            raise MotionDataError(f"Expected 'Frames:' line, got {line!r}", line_number)
        frame_count = int(match.group(1))

        if start + 1 >= len(lines):
            raise MotionDataError("Missing 'Frame Time:' line")
        line_number, line = lines[start + 1]
        match = _FRAME_TIME_RE.match(line)
        if not match:
            raise MotionDataError(f"Expected 'Frame Time:' line, got {line!r}", line_number)
        frame_time = float(match.group(1))
        if frame_time <= 0.0:
            raise MotionDataError(f"Frame time must be positive, got {frame_time}", line_number)

        rows = lines[start + 2:start + 2 + frame_count]
        if len(rows) < frame_count:
            raise MotionDataError(
                f"Truncated motion data: expected {frame_count} frames, found {len(rows)}")

        data = np.zeros((frame_count, channel_total))
        for i, (line_number, line) in enumerate(rows):
            values = line.split()
            if len(values) != channel_total:
                raise MotionDataError(
                    f"Frame {i} has {len(values)} values, hierarchy declares {channel_total} channels",
                    line_number)
            try:
                data[i] = [float(v) for v in values]
            except ValueError:
                raise MotionDataError(f"Non-numeric value in frame {i}", line_number)

        return frame_time, data

    @staticmethod
    def _build_clip(joints, frame_time, data, name):
        frame_count = data.shape[0]
        times = np.arange(frame_count) * frame_time
        quats = np.zeros((frame_count, len(joints), 4))
        quats[..., 0] = 1.0
        positions = {}

        column = 0
        for j, joint in enumerate(joints):
            for channel in joint.channels:
                kind, axis = CHANNEL_MAP[channel]
                values = data[:, column]
                if kind == "position":
                    if j not in positions:
                        positions[j] = np.repeat(joint.offset[np.newaxis], frame_count, axis=0)
                    # channel values are relative to the joint OFFSET
                    positions[j][:, axis] = joint.offset[axis] + values
                else:
                    # channels apply in listed order: q = q_c1 * q_c2 * q_c3
                    rot = angle_axis_to_quat(np.radians(values), AXES[axis])
                    quats[:, j] = quat_mul_batch(quats[:, j], rot)
                column += 1

        quats = remove_quat_discontinuities(quats)

        tracks = {}
        for j, joint in enumerate(joints):
            tracks[joint.name] = KeyframeTrack(
                joint.name, times.copy(), quats[:, j].copy(), positions.get(j))
        return MotionClip(name, frame_time, tracks)


def parse(text, name=None):
    """Parse BVH text with a default BVHImporter."""
    return BVHImporter().parse_bvh_text(text, name=name)
