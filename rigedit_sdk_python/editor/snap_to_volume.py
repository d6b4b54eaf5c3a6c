"""
Snap-to-volume: drag a bone onto the centre of the mesh volume under the
pointer instead of onto the raw surface hit.
"""

import numpy as np

from ..utils.transform_utils import invert_matrix, transform_point
from .scene_types import closest_bone_to_ray


DEFAULT_SEARCH_RADIUS = 0.15
DEFAULT_HOVER_DISTANCE = 0.02


def calculate_local_volume_center(mesh, intersection_point, search_radius=DEFAULT_SEARCH_RADIUS):
    """
    Centre of the bounding box of mesh vertices near a surface point.

    The hit point is moved into the mesh's local space, every vertex closer
    than `search_radius` is collected, and the centre of their axis-aligned
    bounding box is moved back to world space. Without nearby vertices the
    hit point itself is returned.

    Args:
        mesh: Mesh with local `vertices` and `matrix_world`
        intersection_point: world-space hit point (3,)
        search_radius: vertex search radius

    Returns:
        World-space point (3,)
    """
    point = np.asarray(intersection_point, dtype=np.float64)
    vertices = getattr(mesh, "vertices", None)
    if vertices is None or len(vertices) == 0:
        return point.copy()

    local_point = transform_point(invert_matrix(mesh.matrix_world), point)
    distances = np.linalg.norm(vertices - local_point, axis=1)
    nearby = vertices[distances < search_radius]
    if len(nearby) == 0:
        return point.copy()

    center = (nearby.min(axis=0) + nearby.max(axis=0)) / 2.0
    return transform_point(mesh.matrix_world, center)


class SnapToVolumeHandler:
    """
    Pointer-driven snapping of skeleton bones to mesh volume centres.

    Drag protocol:
        handle_mouse_down  pick the bone nearest the pointer ray (never the
                           root), store one undo state, snap it
        handle_dragging    re-snap the selected bone, no new undo state
        handle_mouse_up    end the drag

    Example:
        handler = SnapToVolumeHandler(camera, session, meshes, raycaster)
        handler.handle_mouse_down(PointerEvent(0.1, 0.3))
        handler.handle_dragging(PointerEvent(0.12, 0.31))
        handler.handle_mouse_up()
    """

    def __init__(
        self,
        camera,
        session,
        meshes,
        raycaster,
        search_radius: float = DEFAULT_SEARCH_RADIUS,
        hover_distance: float = DEFAULT_HOVER_DISTANCE,
        on_bone_snapped=None,
    ):
        """
        Args:
            camera: object with ray_from_pointer((x, y)) -> (origin, direction)
            session: EditSkeletonSession owning the skeleton
            meshes: list of Mesh, or a callable returning one
            raycaster: object with intersect_objects(origin, direction, meshes)
            search_radius: vertex search radius around the hit point
            hover_distance: maximum ray distance for picking a bone
            on_bone_snapped: optional callback(bone_index) after each snap
        """
        self.camera = camera
        self.session = session
        self.meshes = meshes
        self.raycaster = raycaster
        self.search_radius = search_radius
        self.hover_distance = hover_distance
        self.on_bone_snapped = on_bone_snapped
        self.is_dragging = False

    def is_snap_to_volume_dragging(self):
        return self.is_dragging

    def handle_mouse_down(self, event):
        """Select the bone under the pointer and start dragging it."""
        skeleton = self.session.skeleton()
        if skeleton is None or len(skeleton) == 0:
            print("[SnapToVolume] No skeleton to test for snap to volume")
            return

        origin, direction = self.camera.ray_from_pointer(event.ndc)
        index, distance = closest_bone_to_ray(skeleton, origin, direction)
        if index is None or distance > self.hover_distance:
            return

        self.session.set_currently_selected_bone(index)
        self.session.store_bone_state_for_undo()
        self.is_dragging = True

        self.snap_bone_to_volume_at_pointer(event, index)

    def handle_dragging(self, event):
        """Keep the selected bone on the volume under the moving pointer."""
        if not self.is_dragging:
            return
        index = self.session.get_currently_selected_bone()
        if index is None:
            return
        self.snap_bone_to_volume_at_pointer(event, index)

    def handle_mouse_up(self):
        self.is_dragging = False

    def _mesh_list(self):
        meshes = self.meshes() if callable(self.meshes) else self.meshes
        return list(meshes or [])

    def snap_bone_to_volume_at_pointer(self, event, index):
        """
        Move bone `index` to the volume centre under the pointer.

        Returns:
            True when the bone moved, False when the ray hit nothing
        """
        meshes = self._mesh_list()
        if not meshes:
            return False

        origin, direction = self.camera.ray_from_pointer(event.ndc)
        intersections = self.raycaster.intersect_objects(origin, direction, meshes)
        if not intersections:
            return False

        hit = intersections[0]
        volume_center = calculate_local_volume_center(hit.object, hit.point, self.search_radius)

        skeleton = self.session.skeleton()
        parent_inverse = invert_matrix(skeleton.parent_world_matrix(index))
        skeleton.bones[index].position = transform_point(parent_inverse, volume_center)
        skeleton.update_world_matrices()

        if self.session.is_mirror_mode_enabled():
            self.session.apply_mirror_mode(index, "translate")

        if self.on_bone_snapped is not None:
            self.on_bone_snapped(index)
        return True
