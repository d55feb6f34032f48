"""
Geometric utilities: shape extents, pose offsets, and rotations.
"""

from typing import Tuple
import numpy as np

from mtc_pour.core.messages import Mesh, Pose, Quaternion, SolidPrimitive


def mesh_extents(mesh: Mesh) -> Tuple[float, float, float]:
    """
    Axis-aligned bounding box extents of a mesh.

    Parameters
    ----------
    mesh : Mesh
        Triangle mesh.

    Returns
    -------
    Tuple[float, float, float]
        Extents along x, y and z. All zero for a mesh without vertices.
    """
    if len(mesh.vertices) == 0:
        return 0.0, 0.0, 0.0
    span = mesh.vertices.max(axis=0) - mesh.vertices.min(axis=0)
    return float(span[0]), float(span[1]), float(span[2])


def primitive_extents(primitive: SolidPrimitive) -> Tuple[float, float, float]:
    """
    Bounding box extents of a solid primitive.

    Parameters
    ----------
    primitive : SolidPrimitive
        Primitive shape.

    Returns
    -------
    Tuple[float, float, float]
        Extents along x, y and z.
    """
    d = primitive.dimensions
    if primitive.type == SolidPrimitive.BOX:
        if len(d) < 3:
            raise ValueError("Box primitive needs 3 dimensions")
        return float(d[0]), float(d[1]), float(d[2])
    if primitive.type == SolidPrimitive.SPHERE:
        if len(d) < 1:
            raise ValueError("Sphere primitive needs 1 dimension")
        return 2 * d[0], 2 * d[0], 2 * d[0]
    if primitive.type in (SolidPrimitive.CYLINDER, SolidPrimitive.CONE):
        if len(d) < 2:
            raise ValueError("Cylinder/cone primitive needs 2 dimensions")
        height = d[SolidPrimitive.CYLINDER_HEIGHT]
        radius = d[SolidPrimitive.CYLINDER_RADIUS]
        return 2 * radius, 2 * radius, float(height)
    raise ValueError(f"Unknown primitive type: {primitive.type}")


def compute_mesh_height(mesh: Mesh) -> float:
    """Height (z extent) of a mesh's bounding box."""
    return mesh_extents(mesh)[2]


def offset_pose_z(pose: Pose, dz: float) -> Pose:
    """
    Copy of a pose shifted along the vertical axis.

    Parameters
    ----------
    pose : Pose
        Input pose (not modified).
    dz : float
        Vertical offset (m).

    Returns
    -------
    Pose
        Shifted copy.
    """
    shifted = pose.copy()
    shifted.position.z += dz
    return shifted


def quaternion_to_matrix(q: Quaternion) -> np.ndarray:
    """
    Rotation matrix of a (not necessarily normalized) quaternion.

    Parameters
    ----------
    q : Quaternion
        Orientation.

    Returns
    -------
    np.ndarray
        3x3 rotation matrix. Identity for a zero quaternion.
    """
    v = np.array([q.w, q.x, q.y, q.z], dtype=float)
    norm = np.linalg.norm(v)
    if norm < 1e-12:
        return np.eye(3)
    w, x, y, z = v / norm
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ]
    )


def box_corners(extents: Tuple[float, float, float], pose: Pose) -> np.ndarray:
    """
    World coordinates of the 8 corners of a box centered on a pose.

    Parameters
    ----------
    extents : Tuple[float, float, float]
        Box size along x, y, z.
    pose : Pose
        Box center pose.

    Returns
    -------
    np.ndarray
        (8, 3) corner coordinates.
    """
    half = np.asarray(extents, dtype=float) / 2.0
    signs = np.array(
        [[sx, sy, sz] for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)],
        dtype=float,
    )
    local = signs * half
    rot = quaternion_to_matrix(pose.orientation)
    center = np.array([pose.position.x, pose.position.y, pose.position.z])
    return local @ rot.T + center
