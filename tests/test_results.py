import csv
import json

from mtc_pour.io.results import ResultWriter
from mtc_pour.listener import ExecutionResult
from conftest import make_solution, make_trajectory


def test_save_execution(tmp_path, store):
    solution = make_solution(
        [(make_trajectory([0, 0], [1, 2]), "d0"), (None, "d1"), (make_trajectory([1, 2], [0, 0]), "d2")]
    )
    solution.task_id = "pour"
    result = ExecutionResult(success=False, executed=[0], skipped=[1], applied=2, failed_id=2,
                             message="Execution of subtrajectory 2 failed", confirmed=True)

    writer = ResultWriter(str(tmp_path / "out"))
    writer.save_execution(result, solution, {"planning_group": "arm"}, scene=store.snapshot())

    meta = json.loads((tmp_path / "out" / "metadata.json").read_text())
    assert meta["task_id"] == "pour"
    assert meta["segments"] == 3
    assert meta["planning_group"] == "arm"
    assert meta["failed_id"] == 2
    assert (tmp_path / "out" / "scene.json").exists()

    with open(tmp_path / "out" / "trajectory_0.csv") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["time", "j1", "j2"]
    assert len(rows) == 3
    assert not (tmp_path / "out" / "trajectory_2.csv").exists()
