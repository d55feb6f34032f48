"""
Message records exchanged with the planning middleware.

Each record converts to and from a plain dictionary so it can be carried
as JSON (solution files, the TCP bridge, result metadata).
"""

from dataclasses import dataclass, field
from typing import Optional
import numpy as np


@dataclass
class Header:
    """Reference frame and timestamp of a stamped message."""

    frame_id: str = "world"
    stamp: float = 0.0

    def to_dict(self) -> dict:
        return {"frame_id": self.frame_id, "stamp": self.stamp}

    @staticmethod
    def from_dict(data: dict) -> "Header":
        return Header(
            frame_id=data.get("frame_id", "world"),
            stamp=float(data.get("stamp", 0.0)),
        )


@dataclass
class Point:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}

    @staticmethod
    def from_dict(data: dict) -> "Point":
        return Point(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            z=float(data.get("z", 0.0)),
        )


@dataclass
class Quaternion:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z, "w": self.w}

    @staticmethod
    def from_dict(data: dict) -> "Quaternion":
        return Quaternion(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            z=float(data.get("z", 0.0)),
            w=float(data.get("w", 1.0)),
        )


@dataclass
class Pose:
    """Position and orientation in 3D."""

    position: Point = field(default_factory=Point)
    orientation: Quaternion = field(default_factory=Quaternion)

    def copy(self) -> "Pose":
        return Pose.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        return {
            "position": self.position.to_dict(),
            "orientation": self.orientation.to_dict(),
        }

    @staticmethod
    def from_dict(data: dict) -> "Pose":
        return Pose(
            position=Point.from_dict(data.get("position", {})),
            orientation=Quaternion.from_dict(data.get("orientation", {})),
        )


@dataclass
class PoseStamped:
    """A pose qualified by the frame it is expressed in."""

    header: Header = field(default_factory=Header)
    pose: Pose = field(default_factory=Pose)

    def to_dict(self) -> dict:
        return {"header": self.header.to_dict(), "pose": self.pose.to_dict()}

    @staticmethod
    def from_dict(data: dict) -> "PoseStamped":
        return PoseStamped(
            header=Header.from_dict(data.get("header", {})),
            pose=Pose.from_dict(data.get("pose", {})),
        )


@dataclass
class SolidPrimitive:
    """Primitive shape with type-dependent dimensions."""

    BOX = 1
    SPHERE = 2
    CYLINDER = 3
    CONE = 4

    # Dimension indices for BOX
    BOX_X = 0
    BOX_Y = 1
    BOX_Z = 2

    # Dimension indices for CYLINDER and CONE
    CYLINDER_HEIGHT = 0
    CYLINDER_RADIUS = 1

    type: int = BOX
    dimensions: list[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"type": self.type, "dimensions": list(self.dimensions)}

    @staticmethod
    def from_dict(data: dict) -> "SolidPrimitive":
        return SolidPrimitive(
            type=int(data.get("type", SolidPrimitive.BOX)),
            dimensions=[float(d) for d in data.get("dimensions", [])],
        )


@dataclass
class Mesh:
    """
    Triangle mesh.

    Attributes
    ----------
    vertices : np.ndarray
        (N, 3) float array of vertex coordinates.
    triangles : np.ndarray
        (M, 3) int array of vertex indices.
    """

    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    triangles: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 3), dtype=np.int64)
    )

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=float).reshape(-1, 3)
        self.triangles = np.asarray(self.triangles, dtype=np.int64).reshape(-1, 3)

    def to_dict(self) -> dict:
        return {
            "vertices": self.vertices.tolist(),
            "triangles": self.triangles.tolist(),
        }

    @staticmethod
    def from_dict(data: dict) -> "Mesh":
        return Mesh(
            vertices=data.get("vertices", []),
            triangles=data.get("triangles", []),
        )


@dataclass
class CollisionObject:
    """
    Named geometric object tracked by the planning scene.

    Geometry is given as primitives and/or meshes, each paired with a pose
    of the same index.
    """

    ADD = 0
    REMOVE = 1
    APPEND = 2
    MOVE = 3

    id: str = ""
    header: Header = field(default_factory=Header)
    primitives: list[SolidPrimitive] = field(default_factory=list)
    primitive_poses: list[Pose] = field(default_factory=list)
    meshes: list[Mesh] = field(default_factory=list)
    mesh_poses: list[Pose] = field(default_factory=list)
    operation: int = ADD

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "header": self.header.to_dict(),
            "primitives": [p.to_dict() for p in self.primitives],
            "primitive_poses": [p.to_dict() for p in self.primitive_poses],
            "meshes": [m.to_dict() for m in self.meshes],
            "mesh_poses": [p.to_dict() for p in self.mesh_poses],
            "operation": self.operation,
        }

    @staticmethod
    def from_dict(data: dict) -> "CollisionObject":
        return CollisionObject(
            id=data.get("id", ""),
            header=Header.from_dict(data.get("header", {})),
            primitives=[SolidPrimitive.from_dict(p) for p in data.get("primitives", [])],
            primitive_poses=[Pose.from_dict(p) for p in data.get("primitive_poses", [])],
            meshes=[Mesh.from_dict(m) for m in data.get("meshes", [])],
            mesh_poses=[Pose.from_dict(p) for p in data.get("mesh_poses", [])],
            operation=int(data.get("operation", CollisionObject.ADD)),
        )

    def has_geometry(self) -> bool:
        return bool(self.primitives or self.meshes)


@dataclass
class AttachedCollisionObject:
    """A collision object rigidly attached to a robot link."""

    link_name: str = ""
    object: CollisionObject = field(default_factory=CollisionObject)
    touch_links: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "link_name": self.link_name,
            "object": self.object.to_dict(),
            "touch_links": list(self.touch_links),
        }

    @staticmethod
    def from_dict(data: dict) -> "AttachedCollisionObject":
        return AttachedCollisionObject(
            link_name=data.get("link_name", ""),
            object=CollisionObject.from_dict(data.get("object", {})),
            touch_links=list(data.get("touch_links", [])),
        )


@dataclass
class JointState:
    name: list[str] = field(default_factory=list)
    position: list[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"name": list(self.name), "position": list(self.position)}

    @staticmethod
    def from_dict(data: dict) -> "JointState":
        return JointState(
            name=list(data.get("name", [])),
            position=[float(p) for p in data.get("position", [])],
        )


@dataclass
class JointTrajectoryPoint:
    positions: list[float] = field(default_factory=list)
    velocities: list[float] = field(default_factory=list)
    time_from_start: float = 0.0

    def to_dict(self) -> dict:
        return {
            "positions": list(self.positions),
            "velocities": list(self.velocities),
            "time_from_start": self.time_from_start,
        }

    @staticmethod
    def from_dict(data: dict) -> "JointTrajectoryPoint":
        return JointTrajectoryPoint(
            positions=[float(p) for p in data.get("positions", [])],
            velocities=[float(v) for v in data.get("velocities", [])],
            time_from_start=float(data.get("time_from_start", 0.0)),
        )


@dataclass
class JointTrajectory:
    joint_names: list[str] = field(default_factory=list)
    points: list[JointTrajectoryPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "joint_names": list(self.joint_names),
            "points": [p.to_dict() for p in self.points],
        }

    @staticmethod
    def from_dict(data: dict) -> "JointTrajectory":
        return JointTrajectory(
            joint_names=list(data.get("joint_names", [])),
            points=[JointTrajectoryPoint.from_dict(p) for p in data.get("points", [])],
        )


@dataclass
class RobotTrajectory:
    joint_trajectory: JointTrajectory = field(default_factory=JointTrajectory)

    def to_dict(self) -> dict:
        return {"joint_trajectory": self.joint_trajectory.to_dict()}

    @staticmethod
    def from_dict(data: dict) -> "RobotTrajectory":
        return RobotTrajectory(
            joint_trajectory=JointTrajectory.from_dict(data.get("joint_trajectory", {}))
        )


@dataclass
class RobotState:
    joint_state: JointState = field(default_factory=JointState)
    attached_collision_objects: list[AttachedCollisionObject] = field(default_factory=list)
    is_diff: bool = True

    def to_dict(self) -> dict:
        return {
            "joint_state": self.joint_state.to_dict(),
            "attached_collision_objects": [
                a.to_dict() for a in self.attached_collision_objects
            ],
            "is_diff": self.is_diff,
        }

    @staticmethod
    def from_dict(data: dict) -> "RobotState":
        return RobotState(
            joint_state=JointState.from_dict(data.get("joint_state", {})),
            attached_collision_objects=[
                AttachedCollisionObject.from_dict(a)
                for a in data.get("attached_collision_objects", [])
            ],
            is_diff=bool(data.get("is_diff", True)),
        )


@dataclass
class PlanningSceneWorld:
    collision_objects: list[CollisionObject] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"collision_objects": [c.to_dict() for c in self.collision_objects]}

    @staticmethod
    def from_dict(data: dict) -> "PlanningSceneWorld":
        return PlanningSceneWorld(
            collision_objects=[
                CollisionObject.from_dict(c) for c in data.get("collision_objects", [])
            ]
        )


@dataclass
class PlanningScene:
    """
    Planning scene, either complete or as an incremental diff.
    """

    name: str = ""
    robot_state: RobotState = field(default_factory=RobotState)
    world: PlanningSceneWorld = field(default_factory=PlanningSceneWorld)
    is_diff: bool = True

    def is_empty(self) -> bool:
        """True for a diff that changes nothing."""
        return (
            self.is_diff
            and not self.world.collision_objects
            and not self.robot_state.attached_collision_objects
            and not self.robot_state.joint_state.name
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "robot_state": self.robot_state.to_dict(),
            "world": self.world.to_dict(),
            "is_diff": self.is_diff,
        }

    @staticmethod
    def from_dict(data: dict) -> "PlanningScene":
        return PlanningScene(
            name=data.get("name", ""),
            robot_state=RobotState.from_dict(data.get("robot_state", {})),
            world=PlanningSceneWorld.from_dict(data.get("world", {})),
            is_diff=bool(data.get("is_diff", True)),
        )


@dataclass
class SubTrajectory:
    """One segment of a solution: a joint path plus the scene change after it."""

    id: int = 0
    trajectory: RobotTrajectory = field(default_factory=RobotTrajectory)
    scene_diff: PlanningScene = field(default_factory=PlanningScene)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "trajectory": self.trajectory.to_dict(),
            "scene_diff": self.scene_diff.to_dict(),
        }

    @staticmethod
    def from_dict(data: dict) -> "SubTrajectory":
        return SubTrajectory(
            id=int(data.get("id", 0)),
            trajectory=RobotTrajectory.from_dict(data.get("trajectory", {})),
            scene_diff=PlanningScene.from_dict(data.get("scene_diff", {})),
        )


@dataclass
class Solution:
    """Ordered sequence of sub-trajectories produced by the task planner."""

    sub_trajectory: list[SubTrajectory] = field(default_factory=list)
    task_id: str = ""
    cost: float = 0.0

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "cost": self.cost,
            "sub_trajectory": [s.to_dict() for s in self.sub_trajectory],
        }

    @staticmethod
    def from_dict(data: dict) -> "Solution":
        return Solution(
            sub_trajectory=[
                SubTrajectory.from_dict(s) for s in data.get("sub_trajectory", [])
            ],
            task_id=data.get("task_id", ""),
            cost=float(data.get("cost", 0.0)),
        )


def make_pose_stamped(
    x: float,
    y: float,
    z: float,
    frame_id: str = "world",
    orientation: Optional[Quaternion] = None,
) -> PoseStamped:
    """Convenience constructor for a stamped pose."""
    return PoseStamped(
        header=Header(frame_id=frame_id),
        pose=Pose(
            position=Point(x, y, z),
            orientation=orientation if orientation is not None else Quaternion(),
        ),
    )
