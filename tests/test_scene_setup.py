import pytest

from mtc_pour.core.messages import (
    AttachedCollisionObject,
    CollisionObject,
    SolidPrimitive,
    make_pose_stamped,
)
from mtc_pour.io.mesh import ResourceNotFoundError
from mtc_pour.scene_setup import (
    collision_object_from_resource,
    describe_scene,
    setup_demo_scene,
    setup_objects,
    setup_table,
)


def test_setup_table_below_tabletop(store):
    table = setup_table(make_pose_stamped(0.4, 0.1, 1.0, frame_id="base"), store)

    stored = store.get_objects(["table"])["table"]
    pose = stored.primitive_poses[0]
    assert pose.position.z == pytest.approx(0.8)
    assert (pose.position.x, pose.position.y) == (0.4, 0.1)
    assert pose.orientation.w == 1.0
    assert stored.header.frame_id == "base"
    assert stored.primitives[0].type == SolidPrimitive.BOX
    assert stored.primitives[0].dimensions == [0.5, 1.0, 0.1]
    assert table.operation == CollisionObject.ADD


def test_setup_table_replaces_previous_table(store):
    setup_table(make_pose_stamped(0.0, 0.0, 1.0), store)
    setup_table(make_pose_stamped(0.0, 0.0, 2.0), store)

    assert store.get_known_object_names() == ["table"]
    assert store.get_objects()["table"].primitive_poses[0].position.z == pytest.approx(1.8)


def test_setup_objects_places_mesh_center_above_surface(store, make_box_mesh):
    bottle_mesh = make_box_mesh("bottle", [0.05, 0.05, 0.2])
    glass_mesh = make_box_mesh("glass", [0.06, 0.06, 0.08])

    objects = setup_objects(
        make_pose_stamped(0.5, -0.2, 0.0),
        make_pose_stamped(0.5, 0.2, 1.0),
        store,
        bottle_mesh=bottle_mesh,
        glass_mesh=glass_mesh,
    )

    assert [o.id for o in objects] == ["bottle", "glass"]
    stored = store.get_objects()
    assert stored["bottle"].mesh_poses[0].position.z == pytest.approx(0.102)
    assert stored["bottle"].mesh_poses[0].position.y == pytest.approx(-0.2)
    assert stored["glass"].mesh_poses[0].position.z == pytest.approx(1.042)


def test_setup_objects_does_not_modify_input_pose(store, make_box_mesh):
    pose = make_pose_stamped(0.5, 0.0, 0.0)
    mesh = make_box_mesh("thing", [0.1, 0.1, 0.1])
    setup_objects(pose, make_pose_stamped(0.0, 0.0, 0.0), store, bottle_mesh=mesh, glass_mesh=mesh)
    assert pose.pose.position.z == 0.0


def test_returned_objects_do_not_share_input_headers(store, make_box_mesh):
    tabletop = make_pose_stamped(0.5, 0.0, 0.0, frame_id="base")
    bottle_pose = make_pose_stamped(0.5, 0.0, 0.0, frame_id="base")
    mesh = make_box_mesh("thing", [0.1, 0.1, 0.1])

    table = setup_table(tabletop, store)
    bottle, _ = setup_objects(
        bottle_pose, make_pose_stamped(0.0, 0.0, 0.0), store, bottle_mesh=mesh, glass_mesh=mesh
    )
    table.header.frame_id = "changed"
    bottle.header.frame_id = "changed"

    assert tabletop.header.frame_id == "base"
    assert bottle_pose.header.frame_id == "base"


def test_setup_objects_detaches_leftover_bottle(store, make_box_mesh):
    mesh = make_box_mesh("bottle", [0.05, 0.05, 0.2])
    old = collision_object_from_resource("bottle", mesh)
    store.apply_attached_collision_object(
        AttachedCollisionObject(link_name="gripper_link", object=old)
    )
    assert "bottle" in store.get_attached_objects()

    setup_objects(
        make_pose_stamped(0.5, 0.0, 0.0),
        make_pose_stamped(0.5, 0.3, 0.0),
        store,
        bottle_mesh=mesh,
        glass_mesh=mesh,
    )

    assert store.get_attached_objects() == {}
    assert store.get_objects()["bottle"].mesh_poses[0].position.z == pytest.approx(0.102)


def test_setup_objects_missing_mesh_submits_nothing(store, make_box_mesh):
    glass_mesh = make_box_mesh("glass", [0.06, 0.06, 0.08])
    with pytest.raises(ResourceNotFoundError):
        setup_objects(
            make_pose_stamped(0.0, 0.0, 0.0),
            make_pose_stamped(0.0, 0.0, 0.0),
            store,
            bottle_mesh="package://mtc_pour/meshes/does_not_exist.stl",
            glass_mesh=glass_mesh,
        )
    assert store.get_known_object_names() == []


def test_setup_objects_with_default_meshes(store):
    objects = setup_objects(make_pose_stamped(0.5, -0.25, 0.0), make_pose_stamped(0.5, 0.1, 0.0), store)
    bottle, glass = objects
    assert bottle.mesh_poses[0].position.z == pytest.approx(0.23 / 2 + 0.002, abs=1e-6)
    assert glass.mesh_poses[0].position.z == pytest.approx(0.1 / 2 + 0.002, abs=1e-6)


def test_setup_demo_scene_and_description(store):
    objects = setup_demo_scene(
        make_pose_stamped(0.5, 0.0, 0.0),
        make_pose_stamped(0.5, -0.25, 0.0),
        make_pose_stamped(0.5, 0.1, 0.0),
        store,
    )
    assert [o.id for o in objects] == ["table", "bottle", "glass"]
    lines = describe_scene(store)
    assert len(lines) == 3
    assert lines[0].startswith("bottle")
