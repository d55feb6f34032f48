import pytest

from mtc_pour.core.messages import (
    AttachedCollisionObject,
    CollisionObject,
    JointState,
    Point,
    Pose,
    PlanningScene,
    PlanningSceneWorld,
    RobotState,
    SolidPrimitive,
)


def box(oid, z=0.0, operation=CollisionObject.ADD):
    return CollisionObject(
        id=oid,
        primitives=[SolidPrimitive(type=SolidPrimitive.BOX, dimensions=[0.1, 0.1, 0.1])],
        primitive_poses=[Pose(position=Point(0.0, 0.0, z))],
        operation=operation,
    )


def test_add_replaces_object_with_same_id(store):
    assert store.apply_collision_object(box("a", z=1.0))
    assert store.apply_collision_object(box("a", z=2.0))
    objects = store.get_objects()
    assert list(objects) == ["a"]
    assert objects["a"].primitive_poses[0].position.z == 2.0


def test_stored_objects_are_copies(store):
    obj = box("a")
    store.apply_collision_object(obj)
    obj.primitive_poses[0].position.z = 5.0
    store.get_objects()["a"].primitive_poses[0].position.z = 7.0
    assert store.get_objects()["a"].primitive_poses[0].position.z == 0.0


def test_remove_known_and_unknown(store):
    store.apply_collision_object(box("a"))
    assert store.apply_collision_object(CollisionObject(id="a", operation=CollisionObject.REMOVE))
    assert not store.apply_collision_object(CollisionObject(id="a", operation=CollisionObject.REMOVE))
    assert store.get_known_object_names() == []


def test_remove_without_id_clears_world(store):
    store.apply_collision_objects([box("a"), box("b")])
    assert store.apply_collision_object(CollisionObject(operation=CollisionObject.REMOVE))
    assert store.get_objects() == {}


def test_add_without_geometry_is_rejected(store):
    assert not store.apply_collision_object(CollisionObject(id="empty"))


def test_mismatched_poses_raise(store):
    obj = box("a")
    obj.primitive_poses = []
    with pytest.raises(ValueError):
        store.apply_collision_object(obj)


def test_batch_is_not_transactional(store):
    ok = store.apply_collision_objects(
        [box("a"), CollisionObject(id="ghost", operation=CollisionObject.REMOVE), box("b")]
    )
    assert not ok
    assert store.get_known_object_names() == ["a", "b"]


def test_append_and_move(store):
    store.apply_collision_object(box("a"))
    assert store.apply_collision_object(box("a", z=0.5, operation=CollisionObject.APPEND))
    assert len(store.get_objects()["a"].primitives) == 2

    move = CollisionObject(
        id="a",
        primitive_poses=[Pose(position=Point(1.0, 0, 0)), Pose(position=Point(2.0, 0, 0))],
        operation=CollisionObject.MOVE,
    )
    assert store.apply_collision_object(move)
    xs = [p.position.x for p in store.get_objects()["a"].primitive_poses]
    assert xs == [1.0, 2.0]

    assert not store.apply_collision_object(CollisionObject(id="nope", operation=CollisionObject.MOVE))


def test_attach_takes_world_geometry_and_detach_returns_it(store):
    store.apply_collision_object(box("bottle", z=0.3))
    attach = AttachedCollisionObject(
        link_name="gripper_link", object=CollisionObject(id="bottle")
    )
    assert store.apply_attached_collision_object(attach)

    assert "bottle" not in store.get_objects()
    attached = store.get_attached_objects(["bottle"])
    assert attached["bottle"].link_name == "gripper_link"
    assert attached["bottle"].object.primitive_poses[0].position.z == 0.3

    detach = AttachedCollisionObject(
        object=CollisionObject(id="bottle", operation=CollisionObject.REMOVE)
    )
    assert store.apply_attached_collision_object(detach)
    assert store.get_attached_objects() == {}
    assert "bottle" in store.get_objects()


def test_attach_unknown_object_without_geometry_fails(store):
    attach = AttachedCollisionObject(link_name="gripper_link", object=CollisionObject(id="x"))
    assert not store.apply_attached_collision_object(attach)


def test_detach_unknown_object_fails(store):
    detach = AttachedCollisionObject(
        object=CollisionObject(id="x", operation=CollisionObject.REMOVE)
    )
    assert not store.apply_attached_collision_object(detach)


def test_get_attached_objects_filters_by_name(store):
    store.apply_collision_objects([box("a"), box("b")])
    for oid in ("a", "b"):
        store.apply_attached_collision_object(
            AttachedCollisionObject(link_name="l", object=CollisionObject(id=oid))
        )
    assert list(store.get_attached_objects(["b", "missing"])) == ["b"]
    assert sorted(store.get_attached_objects()) == ["a", "b"]


def test_apply_scene_diff(store):
    store.apply_collision_object(box("table"))
    diff = PlanningScene(
        world=PlanningSceneWorld(collision_objects=[box("cup", z=0.1)]),
        robot_state=RobotState(
            joint_state=JointState(name=["j1"], position=[0.5]),
            attached_collision_objects=[
                AttachedCollisionObject(link_name="hand", object=CollisionObject(id="cup"))
            ],
        ),
    )
    assert store.apply_planning_scene(diff)
    assert store.get_known_object_names() == ["cup", "table"]
    assert "cup" in store.get_attached_objects()
    assert store.get_joint_positions() == {"j1": 0.5}
    assert store.diff_count == 1


def test_full_scene_replaces_contents(store):
    store.apply_collision_objects([box("a"), box("b")])
    store.set_joint_positions({"j1": 1.0})
    full = PlanningScene(
        world=PlanningSceneWorld(collision_objects=[box("c")]), is_diff=False
    )
    assert store.apply_planning_scene(full)
    assert store.get_known_object_names() == ["c"]
    assert store.get_joint_positions() == {}


def test_snapshot_restores_scene(store):
    store.apply_collision_objects([box("a"), box("b")])
    store.apply_attached_collision_object(
        AttachedCollisionObject(link_name="l", object=CollisionObject(id="b"))
    )
    snapshot = store.snapshot()

    store.clear()
    assert store.get_known_object_names() == []
    store.apply_planning_scene(snapshot)
    assert store.get_known_object_names() == ["a", "b"]
    assert list(store.get_attached_objects()) == ["b"]
