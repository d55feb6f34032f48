import json

import numpy as np

from mtc_pour.core.messages import (
    CollisionObject,
    Mesh,
    PlanningScene,
    Solution,
    SolidPrimitive,
)
from mtc_pour.io.solution import dump_solution, load_solution
from conftest import SAMPLE_SOLUTION


def test_from_dict_defaults():
    obj = CollisionObject.from_dict({"id": "cup"})
    assert obj.operation == CollisionObject.ADD
    assert obj.header.frame_id == "world"
    assert not obj.has_geometry()
    assert PlanningScene.from_dict({}).is_empty()


def test_mesh_arrays_are_normalized():
    mesh = Mesh(vertices=[0, 0, 0, 1, 0, 0, 0, 1, 0], triangles=[0, 1, 2])
    assert mesh.vertices.shape == (3, 3)
    assert mesh.triangles.dtype == np.int64
    assert json.loads(json.dumps(mesh.to_dict()))["triangles"] == [[0, 1, 2]]


def test_primitive_constants():
    box = SolidPrimitive()
    assert box.type == SolidPrimitive.BOX
    assert (SolidPrimitive.BOX_X, SolidPrimitive.BOX_Y, SolidPrimitive.BOX_Z) == (0, 1, 2)


def test_sample_solution_file(tmp_path):
    solution = load_solution(str(SAMPLE_SOLUTION))
    assert solution.task_id == "pour"
    assert [s.id for s in solution.sub_trajectory] == [0, 1, 2, 3, 4, 5]
    grasp = solution.sub_trajectory[1].scene_diff
    assert grasp.robot_state.attached_collision_objects[0].object.id == "bottle"

    path = tmp_path / "copy.json"
    dump_solution(solution, str(path))
    assert load_solution(str(path)) == solution


def test_load_solution_from_examples_by_name():
    assert isinstance(load_solution("pour_solution.json"), Solution)
