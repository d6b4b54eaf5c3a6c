import itertools

import numpy as np

from rigedit_sdk_python import Armature, EditSkeletonSession, Intersection, Mesh, PointerEvent, SnapToVolumeHandler
from rigedit_sdk_python.editor import calculate_local_volume_center

from conftest import build_arm_skeleton, positions_of


class FakeCamera:
    """Orthographic camera looking down -Z; NDC maps straight to world x/y."""

    def ray_from_pointer(self, ndc):
        x, y = ndc
        return np.array([x, y, 5.0]), np.array([0.0, 0.0, -1.0])


class FakeRaycaster:
    def __init__(self, hits=None):
        self.hits = hits or []
        self.calls = 0

    def intersect_objects(self, origin, direction, meshes):
        self.calls += 1
        return list(self.hits)


def cube_mesh(center, half=0.05, matrix_world=None, extra=()):
    corners = [np.asarray(center) + np.array(offset)
               for offset in itertools.product((-half, half), repeat=3)]
    vertices = np.array(corners + [np.asarray(v, dtype=float) for v in extra])
    if matrix_world is None:
        return Mesh(vertices)
    return Mesh(vertices, matrix_world=matrix_world)


def front_hit(mesh, world_center, half=0.05):
    point = np.asarray(world_center, dtype=float) + np.array([0.0, 0.0, half])
    return Intersection(point=point, distance=5.0 - point[2], object=mesh)


def make_handler(session, hits, **kwargs):
    mesh_list = [hit.object for hit in hits]
    raycaster = FakeRaycaster(hits)
    return SnapToVolumeHandler(FakeCamera(), session, mesh_list, raycaster, **kwargs), raycaster


def test_volume_center_is_bounding_box_center():
    mesh = cube_mesh([0.3, 1.5, 0.0], extra=[[2.0, 2.0, 2.0]])
    center = calculate_local_volume_center(mesh, [0.3, 1.5, 0.05], search_radius=0.15)
    assert np.allclose(center, [0.3, 1.5, 0.0])


def test_volume_center_in_mesh_local_space():
    matrix = np.eye(4)
    matrix[:3, 3] = [1.0, 0.0, 0.0]
    mesh = cube_mesh([0.3, 1.5, 0.0], matrix_world=matrix)
    center = calculate_local_volume_center(mesh, [1.3, 1.5, 0.05])
    assert np.allclose(center, [1.3, 1.5, 0.0])


def test_volume_center_falls_back_to_hit_point():
    mesh = cube_mesh([0.3, 1.5, 0.0])
    point = np.array([5.0, 5.0, 5.0])
    assert np.allclose(calculate_local_volume_center(mesh, point), point)


def test_drag_protocol_stores_a_single_undo_state(arm_session):
    mesh = cube_mesh([0.3, 1.5, 0.0])
    handler, raycaster = make_handler(arm_session, [front_hit(mesh, [0.3, 1.5, 0.0])])
    skeleton = arm_session.skeleton()
    left = skeleton.find_bone("LeftArm")
    right = skeleton.find_bone("RightArm")
    initial = positions_of(skeleton)

    handler.handle_mouse_down(PointerEvent(0.2, 1.4))

    assert handler.is_snap_to_volume_dragging()
    assert arm_session.get_currently_selected_bone() == left
    assert arm_session.undo_redo_system.undo_count == 1
    assert np.allclose(skeleton.world_position(left), [0.3, 1.5, 0.0])
    assert np.allclose(skeleton.bones[left].position, [0.3, 0.5, 0.0])
    assert np.allclose(skeleton.bones[right].position, [-0.3, 0.5, 0.0])

    second = cube_mesh([0.4, 1.6, 0.0])
    raycaster.hits = [front_hit(second, [0.4, 1.6, 0.0])]
    handler.handle_dragging(PointerEvent(0.4, 1.6))
    handler.handle_dragging(PointerEvent(0.4, 1.6))

    assert arm_session.undo_redo_system.undo_count == 1
    assert np.allclose(skeleton.world_position(left), [0.4, 1.6, 0.0])

    handler.handle_mouse_up()
    assert not handler.is_snap_to_volume_dragging()

    assert arm_session.undo_bone_transformation()
    assert np.allclose(positions_of(skeleton), initial)


def test_dragging_without_mouse_down_does_nothing(arm_session):
    mesh = cube_mesh([0.3, 1.5, 0.0])
    handler, raycaster = make_handler(arm_session, [front_hit(mesh, [0.3, 1.5, 0.0])])
    arm_session.set_currently_selected_bone(2)

    handler.handle_dragging(PointerEvent(0.3, 1.5))
    assert raycaster.calls == 0
    assert np.allclose(arm_session.skeleton().bones[2].position, [0.2, 0.4, 0.0])


def test_root_is_never_selected(arm_session):
    mesh = cube_mesh([0.0, 1.0, 0.0])
    handler, _ = make_handler(arm_session, [front_hit(mesh, [0.0, 1.0, 0.0])])

    handler.handle_mouse_down(PointerEvent(0.0, 1.0))

    assert not handler.is_snap_to_volume_dragging()
    assert arm_session.get_currently_selected_bone() is None
    assert arm_session.undo_redo_system.undo_count == 0
    assert np.allclose(arm_session.skeleton().bones[0].position, [0.0, 1.0, 0.0])


def test_miss_leaves_bone_in_place(arm_session):
    handler, _ = make_handler(arm_session, [])
    handler.meshes = [cube_mesh([3.0, 3.0, 3.0])]
    before = positions_of(arm_session.skeleton())

    handler.handle_mouse_down(PointerEvent(0.2, 1.4))
    assert not handler.snap_bone_to_volume_at_pointer(PointerEvent(0.2, 1.4), 2)
    assert np.allclose(positions_of(arm_session.skeleton()), before)


def test_no_meshes(arm_session):
    handler = SnapToVolumeHandler(FakeCamera(), arm_session, lambda: [], FakeRaycaster())
    assert not handler.snap_bone_to_volume_at_pointer(PointerEvent(0.2, 1.4), 2)


def test_mirror_mode_disabled(arm_session):
    arm_session.set_mirror_mode_enabled(False)
    mesh = cube_mesh([0.3, 1.5, 0.0])
    handler, _ = make_handler(arm_session, [front_hit(mesh, [0.3, 1.5, 0.0])])

    handler.handle_mouse_down(PointerEvent(0.2, 1.4))
    right = arm_session.skeleton().find_bone("RightArm")
    assert np.allclose(arm_session.skeleton().bones[right].position, [-0.2, 0.4, 0.0])


def test_snap_converts_into_parent_space():
    matrix = np.eye(4)
    matrix[:3, 3] = [0.0, 0.0, 1.0]
    session = EditSkeletonSession()
    session.load_original_armature(Armature(build_arm_skeleton(), matrix_world=matrix))
    snapped = []

    mesh = cube_mesh([0.3, 1.5, 1.0])
    handler, _ = make_handler(session, [front_hit(mesh, [0.3, 1.5, 1.0])],
                              on_bone_snapped=snapped.append)
    handler.handle_mouse_down(PointerEvent(0.2, 1.4))

    left = session.skeleton().find_bone("LeftArm")
    assert snapped == [left]
    assert np.allclose(session.skeleton().bones[left].position, [0.3, 0.5, 0.0])
    assert np.allclose(session.skeleton().world_position(left), [0.3, 1.5, 1.0])


def test_mouse_down_without_skeleton(capsys):
    handler = SnapToVolumeHandler(FakeCamera(), EditSkeletonSession(), [], FakeRaycaster())
    handler.handle_mouse_down(PointerEvent(0.0, 0.0))
    assert "No skeleton" in capsys.readouterr().out
    assert not handler.is_snap_to_volume_dragging()
