import json

import pytest

from rigedit_sdk_python import ImportParseError, SkeletonStorage, StorageWriteError
from rigedit_sdk_python.storage import skeleton_storage

from conftest import HUMANOID_BONE_COUNT


def test_store_and_get_in_memory(humanoid_bvh):
    storage = SkeletonStorage()
    skeleton_id = storage.store_skeleton_from_bvh("walk", humanoid_bvh)

    assert skeleton_id.startswith("custom-")
    assert storage.has_skeletons()
    assert storage.get_skeleton_count() == 1

    info = storage.get_skeleton_info(skeleton_id)
    assert info.name == "walk"
    assert info.bone_count == HUMANOID_BONE_COUNT
    assert info.animation_count == 1
    assert info.bvh_content == humanoid_bvh

    stored = storage.get_skeleton(skeleton_id)
    assert stored is storage.get_skeleton(skeleton_id)
    assert stored.skeleton.bones[0].name == "Hips"
    assert len(stored.animations) == 1


def test_ids_are_unique(minimal_bvh):
    storage = SkeletonStorage()
    ids = {storage.store_skeleton_from_bvh("a", minimal_bvh) for _ in range(5)}
    assert len(ids) == 5


def test_invalid_bvh_is_not_stored():
    storage = SkeletonStorage()
    with pytest.raises(ImportParseError):
        storage.store_skeleton_from_bvh("broken", "HIERARCHY\nROOT Hips\n")
    assert storage.get_skeleton_count() == 0
    assert not storage.has_skeletons()


def test_unknown_id(minimal_bvh):
    storage = SkeletonStorage()
    storage.store_skeleton_from_bvh("a", minimal_bvh)
    assert storage.get_skeleton("custom-0-missing") is None
    assert storage.get_skeleton_info("custom-0-missing") is None
    assert storage.remove_skeleton("custom-0-missing") is False


def test_file_storage_survives_new_instance(tmp_path, humanoid_bvh, minimal_bvh):
    path = tmp_path / "store" / "skeletons.json"
    first = SkeletonStorage(str(path))
    walk_id = first.store_skeleton_from_bvh("walk", humanoid_bvh)
    first.store_skeleton_from_bvh("two joints", minimal_bvh)

    records = json.loads(path.read_text())
    assert [record["name"] for record in records] == ["walk", "two joints"]

    second = SkeletonStorage(str(path))
    assert second.get_skeleton_count() == 2
    stored = second.get_skeleton(walk_id)
    assert stored.name == "walk"
    assert len(stored.skeleton) == HUMANOID_BONE_COUNT
    assert [s.name for s in second.get_all_skeletons()] == ["walk", "two joints"]


def test_remove_and_clear(tmp_path, minimal_bvh):
    path = tmp_path / "skeletons.json"
    storage = SkeletonStorage(str(path))
    first = storage.store_skeleton_from_bvh("a", minimal_bvh)
    storage.store_skeleton_from_bvh("b", minimal_bvh)

    assert storage.remove_skeleton(first) is True
    assert storage.get_skeleton(first) is None
    assert [info.name for info in storage.get_all_skeletons_info()] == ["b"]

    storage.clear_all()
    assert not path.exists()
    assert storage.get_skeleton_count() == 0


def test_corrupt_file_reads_as_empty(tmp_path, capsys):
    path = tmp_path / "skeletons.json"
    path.write_text("{not json")
    storage = SkeletonStorage(str(path))
    assert storage.get_all_skeletons_info() == []
    assert "Error loading skeletons" in capsys.readouterr().out


def test_stored_text_that_no_longer_parses(tmp_path):
    path = tmp_path / "skeletons.json"
    path.write_text(json.dumps([{
        "id": "custom-1-abc",
        "name": "bad",
        "bvh_content": "garbage",
        "bone_count": 0,
        "animation_count": 0,
        "created_at": 1,
    }]))
    storage = SkeletonStorage(str(path))
    with pytest.raises(ImportParseError):
        storage.get_skeleton("custom-1-abc")


def test_write_failure_raises_storage_error(tmp_path, minimal_bvh, monkeypatch):
    def fail(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(skeleton_storage.os, "replace", fail)
    path = tmp_path / "skeletons.json"
    storage = SkeletonStorage(str(path))

    with pytest.raises(StorageWriteError) as excinfo:
        storage.store_skeleton_from_bvh("a", minimal_bvh)
    assert isinstance(excinfo.value, OSError)
    assert storage.get_skeleton_count() == 0
    assert storage.skeleton_cache == {}


def test_unreadable_file_is_not_overwritten(tmp_path, minimal_bvh):
    path = tmp_path / "skeletons.json"
    path.write_text("{not json")
    storage = SkeletonStorage(str(path))

    with pytest.raises(StorageWriteError):
        storage.store_skeleton_from_bvh("a", minimal_bvh)
    with pytest.raises(StorageWriteError):
        storage.remove_skeleton("custom-1-abc")
    assert path.read_text() == "{not json"
    assert storage.skeleton_cache == {}
