import numpy as np
import pytest

from rigedit_sdk_python import BoneTransformSnapshot, capture, restore
from rigedit_sdk_python.skeleton import BoneTransform, Skeleton

from conftest import positions_of, quaternions_of


def test_restore_of_capture_is_a_no_op(humanoid_skeleton):
    before_positions = positions_of(humanoid_skeleton)
    before_world = humanoid_skeleton.world_matrices.copy()

    restore(humanoid_skeleton, capture(humanoid_skeleton))

    assert np.allclose(positions_of(humanoid_skeleton), before_positions)
    assert np.allclose(humanoid_skeleton.world_matrices, before_world)


def test_restore_undoes_edits_and_updates_world(arm_skeleton):
    snapshot = capture(arm_skeleton)
    left = arm_skeleton.find_bone("LeftArm")
    arm_skeleton.bones[left].position = np.array([0.5, 0.5, 0.5])
    arm_skeleton.bones[left].quaternion = np.array([0.0, 0.0, 1.0, 0.0])
    arm_skeleton.update_world_matrices()

    restore(arm_skeleton, snapshot)

    assert np.allclose(arm_skeleton.bones[left].position, [0.2, 0.4, 0.0])
    assert np.allclose(arm_skeleton.bones[left].quaternion, [1.0, 0.0, 0.0, 0.0])
    assert np.allclose(arm_skeleton.world_position(left), [0.2, 1.4, 0.0])


def test_partial_snapshot_leaves_other_bones(arm_skeleton):
    left = arm_skeleton.find_bone("LeftArm")
    right = arm_skeleton.find_bone("RightArm")
    partial = BoneTransformSnapshot({left: capture(arm_skeleton)[left]})

    arm_skeleton.bones[left].position = np.array([1.0, 1.0, 1.0])
    arm_skeleton.bones[right].position = np.array([-1.0, 1.0, 1.0])
    restore(arm_skeleton, partial)

    assert np.allclose(arm_skeleton.bones[left].position, [0.2, 0.4, 0.0])
    assert np.allclose(arm_skeleton.bones[right].position, [-1.0, 1.0, 1.0])


def test_unknown_indices_are_ignored(arm_skeleton):
    snapshot = capture(arm_skeleton)
    small = Skeleton()
    small.add_bone("Hips", position=[0.0, 3.0, 0.0])
    restore(small, snapshot)
    assert np.allclose(small.bones[0].position, [0.0, 1.0, 0.0])
    assert len(small) == 1


def test_snapshot_is_immutable(arm_skeleton):
    snapshot = capture(arm_skeleton)
    with pytest.raises(TypeError):
        snapshot[0] = snapshot[1]
    with pytest.raises(ValueError):
        snapshot[0].position[0] = 9.0


def test_snapshot_does_not_alias_bone_arrays(arm_skeleton):
    snapshot = capture(arm_skeleton)
    arm_skeleton.bones[1].position[1] = 7.0
    assert snapshot[1].position[1] == pytest.approx(0.2)

    restore(arm_skeleton, snapshot)
    arm_skeleton.bones[1].position[1] = 8.0
    assert snapshot[1].position[1] == pytest.approx(0.2)


def test_allclose(arm_skeleton):
    first = capture(arm_skeleton)
    assert first.allclose(capture(arm_skeleton))
    arm_skeleton.bones[2].position[0] += 0.01
    assert not first.allclose(capture(arm_skeleton))


def test_bone_transform_from_bone(arm_skeleton):
    transform = BoneTransform.from_bone(arm_skeleton.bones[0])
    assert np.allclose(transform.position, [0.0, 1.0, 0.0])
    assert np.allclose(transform.scale, np.ones(3))
    assert np.allclose(quaternions_of(arm_skeleton)[0], transform.quaternion)
