import pytest

from mtc_pour.core.messages import JointTrajectoryPoint, RobotTrajectory
from mtc_pour.core.trajectory import (
    final_positions,
    is_empty,
    max_start_deviation,
    trajectory_duration,
    validate_trajectory,
)
from conftest import make_trajectory


def test_empty_trajectory():
    traj = RobotTrajectory()
    assert is_empty(traj)
    assert trajectory_duration(traj) == 0.0
    assert validate_trajectory(traj) == []
    assert final_positions(traj) == {}


def test_duration_and_final_positions():
    traj = make_trajectory([0, 0], [1, 2], [3, 4], dt=0.5)
    assert not is_empty(traj)
    assert trajectory_duration(traj) == pytest.approx(1.0)
    assert final_positions(traj) == {"j1": 3, "j2": 4}


def test_validate_reports_problems():
    traj = make_trajectory([0, 0], [1, 2])
    assert validate_trajectory(traj) == []

    traj.joint_trajectory.points.append(
        JointTrajectoryPoint(positions=[1.0], time_from_start=0.5)
    )
    problems = validate_trajectory(traj)
    assert any("1 positions for 2 joints" in p for p in problems)
    assert any("time_from_start decreases" in p for p in problems)


def test_validate_non_finite_and_duplicates():
    traj = make_trajectory([0, float("nan")], joint_names=("a", "a"))
    problems = validate_trajectory(traj)
    assert "duplicated joint names" in problems
    assert any("non-finite" in p for p in problems)


def test_max_start_deviation_ignores_unknown_joints():
    traj = make_trajectory([0.1, 0.5], [1, 1])
    assert max_start_deviation(traj, {"j1": 0.0}) == pytest.approx(0.1)
    assert max_start_deviation(traj, {"j1": 0.0, "j2": 0.0}) == pytest.approx(0.5)
    assert max_start_deviation(traj, {}) == 0.0
