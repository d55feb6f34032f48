"""
In-memory planning scene: world collision objects, attached objects and
robot joint state.
"""

import copy
import logging
import threading
from typing import Dict, Iterable, List, Optional

from mtc_pour.core.messages import (
    AttachedCollisionObject,
    CollisionObject,
    JointState,
    PlanningScene,
    PlanningSceneWorld,
    RobotState,
)

logger = logging.getLogger(__name__)


def _check_geometry(obj: CollisionObject) -> None:
    """Raise ValueError if shapes and poses are not paired one to one."""
    if len(obj.primitives) != len(obj.primitive_poses):
        raise ValueError(
            f"Object '{obj.id}': {len(obj.primitives)} primitives but "
            f"{len(obj.primitive_poses)} primitive poses"
        )
    if len(obj.meshes) != len(obj.mesh_poses):
        raise ValueError(
            f"Object '{obj.id}': {len(obj.meshes)} meshes but "
            f"{len(obj.mesh_poses)} mesh poses"
        )


class PlanningSceneStore:
    """
    Holds named collision objects and attached-object state.

    Every object id is unique across the world and the attached set: adding
    a world object replaces any object with the same id, attaching moves the
    object out of the world, and detaching moves it back.

    All public methods are thread-safe. Semantic failures (unknown ids,
    missing geometry) return False and are logged; malformed messages raise
    ValueError.
    """

    def __init__(self, name: str = "scene"):
        self.name = name
        self._objects: Dict[str, CollisionObject] = {}
        self._attached: Dict[str, AttachedCollisionObject] = {}
        self._joint_positions: Dict[str, float] = {}
        self._lock = threading.RLock()
        self.diff_count = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def apply_collision_object(self, obj: CollisionObject) -> bool:
        """
        Apply a single world collision object.

        Parameters
        ----------
        obj : CollisionObject
            Object with its operation (ADD, REMOVE, APPEND, MOVE).

        Returns
        -------
        bool
            True if applied.
        """
        with self._lock:
            return self._apply_world_object(obj)

    def apply_collision_objects(self, objects: Iterable[CollisionObject]) -> bool:
        """
        Apply several world collision objects in order.

        Not transactional: objects applied before a failure stay applied.

        Returns
        -------
        bool
            True if every object was applied.
        """
        ok = True
        with self._lock:
            for obj in objects:
                ok = self._apply_world_object(obj) and ok
        return ok

    def apply_attached_collision_object(self, aco: AttachedCollisionObject) -> bool:
        """
        Attach (ADD) or detach (REMOVE) an object.

        Returns
        -------
        bool
            True if applied.
        """
        with self._lock:
            return self._apply_attached_object(aco)

    def apply_planning_scene(self, scene: PlanningScene) -> bool:
        """
        Apply a planning scene.

        A diff is applied incrementally: world objects, then attached
        objects, then joint positions. A full scene (``is_diff=False``)
        replaces the current contents.

        Parameters
        ----------
        scene : PlanningScene
            Scene or scene diff.

        Returns
        -------
        bool
            True if every contained change was applied.
        """
        with self._lock:
            self.diff_count += 1
            if not scene.is_diff:
                self._objects.clear()
                self._attached.clear()
                self._joint_positions.clear()

            ok = True
            for obj in scene.world.collision_objects:
                ok = self._apply_world_object(obj) and ok
            for aco in scene.robot_state.attached_collision_objects:
                ok = self._apply_attached_object(aco) and ok
            ok = self._apply_joint_state(scene.robot_state.joint_state) and ok

        if not ok:
            logger.warning("Planning scene '%s' applied with errors", scene.name)
        return ok

    def get_objects(self, ids: Optional[Iterable[str]] = None) -> Dict[str, CollisionObject]:
        """Copies of world objects, all of them if ``ids`` is None or empty."""
        with self._lock:
            return self._select(self._objects, ids)

    def get_attached_objects(
        self, ids: Optional[Iterable[str]] = None
    ) -> Dict[str, AttachedCollisionObject]:
        """Copies of attached objects, all of them if ``ids`` is None or empty."""
        with self._lock:
            return self._select(self._attached, ids)

    def get_known_object_names(self) -> List[str]:
        """Ids of world and attached objects, sorted."""
        with self._lock:
            return sorted(set(self._objects) | set(self._attached))

    def get_joint_positions(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._joint_positions)

    def set_joint_positions(self, positions: Dict[str, float]) -> None:
        with self._lock:
            self._joint_positions.update(positions)

    def clear(self) -> None:
        """Remove all objects and forget the joint state."""
        with self._lock:
            self._objects.clear()
            self._attached.clear()
            self._joint_positions.clear()

    def snapshot(self) -> PlanningScene:
        """
        Full (non-diff) planning scene describing the current contents.
        """
        with self._lock:
            names = sorted(self._joint_positions)
            return PlanningScene(
                name=self.name,
                robot_state=RobotState(
                    joint_state=JointState(
                        name=names,
                        position=[self._joint_positions[n] for n in names],
                    ),
                    attached_collision_objects=[
                        copy.deepcopy(a) for a in self._attached.values()
                    ],
                    is_diff=False,
                ),
                world=PlanningSceneWorld(
                    collision_objects=[copy.deepcopy(o) for o in self._objects.values()]
                ),
                is_diff=False,
            )

    # ------------------------------------------------------------------
    # Internals (lock held by caller)
    # ------------------------------------------------------------------

    @staticmethod
    def _select(source: dict, ids: Optional[Iterable[str]]) -> dict:
        if ids is None:
            return {k: copy.deepcopy(v) for k, v in source.items()}
        ids = list(ids)
        if not ids:
            return {k: copy.deepcopy(v) for k, v in source.items()}
        return {k: copy.deepcopy(source[k]) for k in ids if k in source}

    def _apply_world_object(self, obj: CollisionObject) -> bool:
        op = obj.operation

        if op == CollisionObject.ADD:
            if not obj.id:
                raise ValueError("Collision object without id")
            _check_geometry(obj)
            if not obj.has_geometry():
                logger.warning("Object '%s' added without geometry; ignored", obj.id)
                return False
            if obj.id in self._attached:
                logger.info("Object '%s' was attached; replacing with world object", obj.id)
                del self._attached[obj.id]
            stored = copy.deepcopy(obj)
            self._objects[obj.id] = stored
            logger.debug("Added object '%s'", obj.id)
            return True

        if op == CollisionObject.REMOVE:
            if not obj.id:
                self._objects.clear()
                logger.debug("Removed all world objects")
                return True
            if obj.id not in self._objects:
                logger.warning("Cannot remove unknown object '%s'", obj.id)
                return False
            del self._objects[obj.id]
            logger.debug("Removed object '%s'", obj.id)
            return True

        if op == CollisionObject.APPEND:
            _check_geometry(obj)
            existing = self._objects.get(obj.id)
            if existing is None:
                added = copy.deepcopy(obj)
                added.operation = CollisionObject.ADD
                return self._apply_world_object(added)
            existing.primitives.extend(copy.deepcopy(obj.primitives))
            existing.primitive_poses.extend(copy.deepcopy(obj.primitive_poses))
            existing.meshes.extend(copy.deepcopy(obj.meshes))
            existing.mesh_poses.extend(copy.deepcopy(obj.mesh_poses))
            return True

        if op == CollisionObject.MOVE:
            existing = self._objects.get(obj.id)
            if existing is None:
                logger.warning("Cannot move unknown object '%s'", obj.id)
                return False
            if obj.primitive_poses:
                if len(obj.primitive_poses) != len(existing.primitives):
                    raise ValueError(f"Object '{obj.id}': primitive pose count mismatch")
                existing.primitive_poses = copy.deepcopy(obj.primitive_poses)
            if obj.mesh_poses:
                if len(obj.mesh_poses) != len(existing.meshes):
                    raise ValueError(f"Object '{obj.id}': mesh pose count mismatch")
                existing.mesh_poses = copy.deepcopy(obj.mesh_poses)
            return True

        raise ValueError(f"Unknown collision object operation: {op}")

    def _apply_attached_object(self, aco: AttachedCollisionObject) -> bool:
        obj = aco.object

        if obj.operation == CollisionObject.ADD:
            if not obj.id:
                raise ValueError("Attached object without id")
            if not aco.link_name:
                raise ValueError(f"Attached object '{obj.id}' without link name")
            _check_geometry(obj)

            attached = copy.deepcopy(aco)
            if not obj.has_geometry():
                world_obj = self._objects.get(obj.id)
                if world_obj is None:
                    logger.warning(
                        "Cannot attach '%s': no geometry and no world object", obj.id
                    )
                    return False
                attached.object = copy.deepcopy(world_obj)
            attached.object.operation = CollisionObject.ADD
            self._objects.pop(obj.id, None)
            self._attached[obj.id] = attached
            logger.debug("Attached '%s' to '%s'", obj.id, aco.link_name)
            return True

        if obj.operation == CollisionObject.REMOVE:
            if not obj.id:
                ids = list(self._attached)
            elif obj.id in self._attached:
                ids = [obj.id]
            else:
                logger.warning("Cannot detach unknown object '%s'", obj.id)
                return False
            for oid in ids:
                detached = self._attached.pop(oid).object
                detached.operation = CollisionObject.ADD
                self._objects[oid] = detached
                logger.debug("Detached '%s'", oid)
            return True

        raise ValueError(
            f"Unsupported operation {obj.operation} for attached object '{obj.id}'"
        )

    def _apply_joint_state(self, joint_state: JointState) -> bool:
        if len(joint_state.name) != len(joint_state.position):
            raise ValueError("Joint state names and positions differ in length")
        for name, value in zip(joint_state.name, joint_state.position):
            self._joint_positions[name] = float(value)
        return True
