"""
Value types exchanged with the scene collaborator.

The editor never intersects rays with triangles itself. It asks two duck-typed
collaborators for that:

    camera.ray_from_pointer((x, y)) -> (origin, direction)
        x, y are normalized device coordinates in [-1, 1]

    raycaster.intersect_objects(origin, direction, meshes) -> [Intersection]
        hits sorted nearest first, empty list on a miss
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np


@dataclass
class PointerEvent:
    """Pointer position in normalized device coordinates."""
    x: float
    y: float

    @property
    def ndc(self):
        return (self.x, self.y)


@dataclass
class Mesh:
    """Mesh geometry in local space plus its world matrix."""
    vertices: np.ndarray
    matrix_world: np.ndarray = field(default_factory=lambda: np.eye(4))
    name: str = "Mesh"

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.matrix_world = np.asarray(self.matrix_world, dtype=np.float64)


@dataclass
class Intersection:
    """One ray hit returned by the raycaster."""
    point: np.ndarray
    distance: float
    object: Any
    face_index: Optional[int] = None


def ray_distance_to_point(origin, direction, point):
    """
    Distance from a point to a ray.

    Points behind the ray origin measure to the origin itself.
    """
    origin = np.asarray(origin, dtype=np.float64)
    direction = np.asarray(direction, dtype=np.float64)
    direction = direction / np.linalg.norm(direction)
    to_point = np.asarray(point, dtype=np.float64) - origin
    t = float(np.dot(to_point, direction))
    if t < 0.0:
        return float(np.linalg.norm(to_point))
    return float(np.linalg.norm(to_point - t * direction))


def closest_bone_to_ray(skeleton, origin, direction, include_root=False):
    """
    Bone whose world position lies closest to a ray.

    Args:
        skeleton: Skeleton with up-to-date world matrices
        origin, direction: the pick ray
        include_root: whether bone 0 may be picked

    Returns:
        (bone index, distance), or (None, None) when no bone qualifies
    """
    closest_index = None
    closest_distance = None
    for i in range(len(skeleton.bones)):
        if i == 0 and not include_root:
            continue
        distance = ray_distance_to_point(origin, direction, skeleton.world_position(i))
        if closest_distance is None or distance < closest_distance:
            closest_index = i
            closest_distance = distance
    return closest_index, closest_distance
