"""
Scene population for the pouring demo: table, bottle and glass.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from mtc_pour.core.geometry import compute_mesh_height, offset_pose_z
from mtc_pour.core.messages import (
    CollisionObject,
    Header,
    Pose,
    PoseStamped,
    SolidPrimitive,
)
from mtc_pour.core.planning_scene import PlanningSceneStore
from mtc_pour.io.mesh import PackagePaths, load_mesh

logger = logging.getLogger(__name__)

DEFAULT_BOTTLE_MESH = "package://mtc_pour/meshes/bottle.stl"
DEFAULT_GLASS_MESH = "package://mtc_pour/meshes/glass.stl"

TABLE_ID = "table"
BOTTLE_ID = "bottle"
GLASS_ID = "glass"

TABLE_SIZE = (0.5, 1.0, 0.1)
# Box center sits this far below the tabletop pose
TABLE_OFFSET = 0.15 + 0.05
# Gap between a mesh's bottom and the surface it stands on
MESH_CLEARANCE = 0.002


def collision_object_from_resource(
    object_id: str,
    resource: str,
    scale: Sequence[float] = (1.0, 1.0, 1.0),
    package_paths: PackagePaths = None,
) -> CollisionObject:
    """
    Build an ADD collision object holding one mesh loaded from a resource.

    The mesh pose is the identity; callers place it afterwards.

    Raises
    ------
    ResourceNotFoundError, MeshLoadError
        If the mesh cannot be loaded.
    """
    mesh = load_mesh(resource, scale=scale, package_paths=package_paths)
    return CollisionObject(
        id=object_id,
        meshes=[mesh],
        mesh_poses=[Pose()],
        operation=CollisionObject.ADD,
    )


def setup_table(
    tabletop_pose: PoseStamped,
    store: PlanningSceneStore,
    size: Tuple[float, float, float] = TABLE_SIZE,
) -> CollisionObject:
    """
    Add the table below a tabletop pose.

    Parameters
    ----------
    tabletop_pose : PoseStamped
        Pose of the tabletop surface.
    store : PlanningSceneStore
        Scene to add the table to.
    size : Tuple[float, float, float]
        Box dimensions (x, y, z).

    Returns
    -------
    CollisionObject
        The submitted table object.
    """
    pose = tabletop_pose.pose.copy()
    pose.orientation.x = 0.0
    pose.orientation.y = 0.0
    pose.orientation.z = 0.0
    pose.orientation.w = 1.0
    pose.position.z -= TABLE_OFFSET

    dims = [0.0, 0.0, 0.0]
    dims[SolidPrimitive.BOX_X] = size[0]
    dims[SolidPrimitive.BOX_Y] = size[1]
    dims[SolidPrimitive.BOX_Z] = size[2]

    table = CollisionObject(
        id=TABLE_ID,
        header=Header(tabletop_pose.header.frame_id, tabletop_pose.header.stamp),
        primitives=[SolidPrimitive(type=SolidPrimitive.BOX, dimensions=dims)],
        primitive_poses=[pose],
        operation=CollisionObject.ADD,
    )

    if not store.apply_collision_object(table):
        logger.warning("Scene store did not accept the table")
    logger.info("Table placed at z=%.3f in '%s'", pose.position.z, table.header.frame_id)
    return table


def _place_on_surface(obj: CollisionObject, pose: PoseStamped) -> None:
    """Turn a point on the table into the mesh center pose."""
    obj.header = Header(pose.header.frame_id, pose.header.stamp)
    height = compute_mesh_height(obj.meshes[0])
    obj.mesh_poses[0] = offset_pose_z(pose.pose, height / 2 + MESH_CLEARANCE)


def setup_objects(
    bottle_pose: PoseStamped,
    glass_pose: PoseStamped,
    store: PlanningSceneStore,
    bottle_mesh: str = DEFAULT_BOTTLE_MESH,
    glass_mesh: str = DEFAULT_GLASS_MESH,
    package_paths: PackagePaths = None,
) -> List[CollisionObject]:
    """
    Add bottle and glass meshes standing on the table.

    An attached bottle left over from a previous run is detached first.
    Both objects are submitted as one batch.

    Parameters
    ----------
    bottle_pose, glass_pose : PoseStamped
        Points on the table where the objects stand.
    store : PlanningSceneStore
        Scene to add the objects to.
    bottle_mesh, glass_mesh : str
        Mesh resource locators.
    package_paths : Mapping[str, str] | Iterable[str] | None
        Package lookup override for ``package://`` resources.

    Returns
    -------
    List[CollisionObject]
        The submitted objects (bottle, glass).

    Raises
    ------
    ResourceNotFoundError, MeshLoadError
        If a mesh cannot be loaded. Nothing is submitted in that case.
    """
    attached = store.get_attached_objects([BOTTLE_ID])
    if BOTTLE_ID in attached:
        leftover = attached[BOTTLE_ID]
        leftover.object.operation = CollisionObject.REMOVE
        store.apply_attached_collision_object(leftover)
        logger.info("Detached leftover '%s'", BOTTLE_ID)

    bottle = collision_object_from_resource(BOTTLE_ID, bottle_mesh, package_paths=package_paths)
    _place_on_surface(bottle, bottle_pose)

    glass = collision_object_from_resource(GLASS_ID, glass_mesh, package_paths=package_paths)
    _place_on_surface(glass, glass_pose)

    objects = [bottle, glass]
    if not store.apply_collision_objects(objects):
        logger.warning("Scene store did not accept all objects")
    return objects


def setup_demo_scene(
    tabletop_pose: PoseStamped,
    bottle_pose: PoseStamped,
    glass_pose: PoseStamped,
    store: PlanningSceneStore,
    bottle_mesh: str = DEFAULT_BOTTLE_MESH,
    glass_mesh: str = DEFAULT_GLASS_MESH,
    package_paths: PackagePaths = None,
) -> List[CollisionObject]:
    """Table followed by bottle and glass; returns all three objects."""
    table = setup_table(tabletop_pose, store)
    objects = setup_objects(
        bottle_pose,
        glass_pose,
        store,
        bottle_mesh=bottle_mesh,
        glass_mesh=glass_mesh,
        package_paths=package_paths,
    )
    return [table] + objects


def describe_scene(store: PlanningSceneStore, ids: Optional[Sequence[str]] = None) -> List[str]:
    """One line per object: id, frame and first pose position."""
    lines = []
    for oid, obj in sorted(store.get_objects(ids).items()):
        poses = obj.primitive_poses or obj.mesh_poses
        p = poses[0].position if poses else None
        where = f"({p.x:.3f}, {p.y:.3f}, {p.z:.3f})" if p else "(no pose)"
        lines.append(f"{oid:10} {obj.header.frame_id:10} {where}")
    for oid, aco in sorted(store.get_attached_objects(ids).items()):
        lines.append(f"{oid:10} attached to {aco.link_name}")
    return lines
