"""
SkeletonStorage - keeps imported BVH skeletons across sessions.

Only the raw BVH text and some metadata are persisted (as a JSON list).
Retrieval re-runs the importer on the stored text; parsed skeletons are
cached for the lifetime of the storage object.
"""

import json
import os
import pathlib
import time
import uuid
from dataclasses import asdict, dataclass

from ..errors import StorageWriteError
from ..importer import BVHImporter


@dataclass
class StoredSkeletonInfo:
    """Persisted record for one imported skeleton."""
    id: str
    name: str
    bvh_content: str
    bone_count: int
    animation_count: int
    created_at: int


@dataclass
class StoredSkeleton:
    """A stored skeleton with its parsed objects."""
    id: str
    name: str
    armature: object
    animations: list
    skeleton: object
    created_at: int


def _generate_id(now_ms):
    return f"custom-{now_ms}-{uuid.uuid4().hex[:9]}"


class SkeletonStorage:
    """
    Persistent store of imported skeletons keyed by generated id.

    Example usage:
        storage = SkeletonStorage("~/.rigedit/skeletons.json")
        skeleton_id = storage.store_skeleton_from_bvh("walk", bvh_text)
        stored = storage.get_skeleton(skeleton_id)
        stored.skeleton.bone_names()

    With `storage_path=None` records live in memory only.
    """

    def __init__(self, storage_path=None, importer=None, verbose: bool = False):
        """
        Args:
            storage_path: JSON file holding the records, or None for in-memory
            importer: BVHImporter used to parse stored text
            verbose: print progress messages
        """
        self.storage_path = None if storage_path is None else pathlib.Path(storage_path).expanduser()
        self.importer = importer or BVHImporter()
        self.verbose = verbose
        self.skeleton_cache = {}
        self._memory_records = []

    def store_skeleton_from_bvh(self, name, bvh_content):
        """
        Parse and persist BVH text.

        Returns:
            The generated skeleton id

        Raises:
            ImportParseError: the text is not valid BVH (nothing is stored)
            StorageWriteError: the record could not be written
        """
        result = self.importer.parse_bvh_text(bvh_content)

        created_at = int(time.time() * 1000)
        skeleton_id = _generate_id(created_at)
        info = StoredSkeletonInfo(
            id=skeleton_id,
            name=name,
            bvh_content=bvh_content,
            bone_count=len(result.skeleton),
            animation_count=len(result.animations),
            created_at=created_at,
        )
        self._save_to_storage(info)

        self.skeleton_cache[skeleton_id] = StoredSkeleton(
            id=skeleton_id,
            name=name,
            armature=result.armature,
            animations=result.animations,
            skeleton=result.skeleton,
            created_at=created_at,
        )

        if self.verbose:
            print(f"[SkeletonStorage] Stored skeleton \"{name}\" with id: {skeleton_id} "
                  f"({info.bone_count} bones, {info.animation_count} animations)")
        return skeleton_id

    def get_skeleton(self, skeleton_id):
        """
        Stored skeleton by id, re-parsed from its BVH text when not cached.

        Returns:
            StoredSkeleton, or None for an unknown id
        """
        if skeleton_id in self.skeleton_cache:
            return self.skeleton_cache[skeleton_id]

        info = self.get_skeleton_info(skeleton_id)
        if info is None:
            return None

        result = self.importer.parse_bvh_text(info.bvh_content)
        stored = StoredSkeleton(
            id=info.id,
            name=info.name,
            armature=result.armature,
            animations=result.animations,
            skeleton=result.skeleton,
            created_at=info.created_at,
        )
        self.skeleton_cache[skeleton_id] = stored
        return stored

    def get_skeleton_info(self, skeleton_id):
        for info in self._load_all_from_storage():
            if info.id == skeleton_id:
                return info
        return None

    def get_all_skeletons_info(self):
        return self._load_all_from_storage()

    def get_all_skeletons(self):
        skeletons = []
        for info in self._load_all_from_storage():
            stored = self.get_skeleton(info.id)
            if stored is not None:
                skeletons.append(stored)
        return skeletons

    def remove_skeleton(self, skeleton_id):
        """Delete a record; returns False when the id is unknown."""
        self.skeleton_cache.pop(skeleton_id, None)
        records = self._load_all_from_storage(strict=True)
        remaining = [info for info in records if info.id != skeleton_id]
        if len(remaining) == len(records):
            return False
        self._write_all(remaining)
        return True

    def has_skeletons(self):
        return self.get_skeleton_count() > 0

    def get_skeleton_count(self):
        return len(self._load_all_from_storage())

    def clear_all(self):
        self.skeleton_cache.clear()
        self._memory_records = []
        if self.storage_path is not None and self.storage_path.exists():
            try:
                self.storage_path.unlink()
            except OSError as e:
                raise StorageWriteError(f"Failed to clear skeleton storage: {e}") from e

    def _load_all_from_storage(self, strict=False):
        if self.storage_path is None:
            return list(self._memory_records)
        if not self.storage_path.exists():
            return []
        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                records = json.load(f)
            return [StoredSkeletonInfo(**record) for record in records]
        except (OSError, ValueError, TypeError) as e:
            print(f"[SkeletonStorage] Error loading skeletons from storage: {e}")
            if strict:
                raise StorageWriteError(
                    f"Refusing to overwrite unreadable skeleton storage {self.storage_path}: {e}") from e
            return []

    def _save_to_storage(self, info):
        records = self._load_all_from_storage(strict=True)
        records.append(info)
        self._write_all(records)

    def _write_all(self, records):
        if self.storage_path is None:
            self._memory_records = list(records)
            return

        tmp_path = self.storage_path.with_name(self.storage_path.name + ".tmp")
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([asdict(info) for info in records], f)
            os.replace(tmp_path, self.storage_path)
        except OSError as e:
            print(f"[SkeletonStorage] Error saving skeleton to storage: {e}")
            raise StorageWriteError(f"Failed to save skeleton. Storage may be full: {e}") from e
