"""
Planning scene rendering using Matplotlib.
"""

from typing import Optional, Tuple
import numpy as np
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
import trimesh

from mtc_pour.core.geometry import box_corners, primitive_extents, quaternion_to_matrix
from mtc_pour.core.messages import CollisionObject, Pose

VIEWS = {
    "top": (0, 1, "X (m)", "Y (m)"),
    "side": (0, 2, "X (m)", "Z (m)"),
    "front": (1, 2, "Y (m)", "Z (m)"),
}

COLORS = {
    "table": "saddlebrown",
    "bottle": "seagreen",
    "glass": "steelblue",
}


def pose_to_matrix(pose: Pose) -> np.ndarray:
    """4x4 homogeneous transform of a pose."""
    matrix = np.eye(4)
    matrix[:3, :3] = quaternion_to_matrix(pose.orientation)
    matrix[:3, 3] = [pose.position.x, pose.position.y, pose.position.z]
    return matrix


def object_points(obj: CollisionObject) -> np.ndarray:
    """
    World-frame points outlining every shape of an object.

    Parameters
    ----------
    obj : CollisionObject
        Object with primitives and/or meshes.

    Returns
    -------
    np.ndarray
        (N, 3) points: box corners for primitives, transformed vertices
        for meshes.
    """
    chunks = []
    for primitive, pose in zip(obj.primitives, obj.primitive_poses):
        chunks.append(box_corners(primitive_extents(primitive), pose))
    for mesh, pose in zip(obj.meshes, obj.mesh_poses):
        if len(mesh.vertices):
            chunks.append(trimesh.transform_points(mesh.vertices, pose_to_matrix(pose)))
    if not chunks:
        return np.zeros((0, 3))
    return np.vstack(chunks)


class ScenePlotter:
    """2D projections of a planning scene."""

    def __init__(self, store):
        """
        Initialize plotter.

        Parameters
        ----------
        store : PlanningSceneStore
            Scene to draw.
        """
        self.store = store

    def render(
        self,
        path: str,
        view: str = "side",
        title: Optional[str] = None,
        figsize: Tuple[float, float] = (8, 6),
    ) -> int:
        """
        Draw each world object's projected bounding rectangle and save to file.

        Objects attached to the robot are not drawn.

        Parameters
        ----------
        path : str
            Output image path.
        view : str
            "top", "side" or "front".
        title : Optional[str]
            Plot title.
        figsize : Tuple[float, float]
            Figure size in inches.

        Returns
        -------
        int
            Number of objects drawn.
        """
        if view not in VIEWS:
            raise ValueError(f"Unknown view '{view}', use one of {sorted(VIEWS)}")
        a, b, xlabel, ylabel = VIEWS[view]

        fig, ax = plt.subplots(figsize=figsize)
        ax.set_aspect("equal")
        ax.grid(True, alpha=0.3)
        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
        ax.set_title(title or f"Planning scene ({view} view)")

        drawn = 0
        all_points = []
        # attached object poses are relative to their link, which is not modelled
        objects = self.store.get_objects()

        for oid, obj in sorted(objects.items()):
            points = object_points(obj)
            if len(points) == 0:
                continue
            lo = points.min(axis=0)
            hi = points.max(axis=0)
            rect = Rectangle(
                (lo[a], lo[b]),
                hi[a] - lo[a],
                hi[b] - lo[b],
                facecolor=COLORS.get(oid, "gray"),
                edgecolor="black",
                alpha=0.6,
                label=oid,
            )
            ax.add_patch(rect)
            ax.annotate(oid, ((lo[a] + hi[a]) / 2, hi[b]), ha="center", va="bottom", fontsize=8)
            all_points.append(points)
            drawn += 1

        if all_points:
            stacked = np.vstack(all_points)
            margin = 0.1
            ax.set_xlim(stacked[:, a].min() - margin, stacked[:, a].max() + margin)
            ax.set_ylim(stacked[:, b].min() - margin, stacked[:, b].max() + margin)
            ax.legend(loc="upper right", fontsize=8)

        fig.savefig(path, dpi=100)
        plt.close(fig)
        return drawn
