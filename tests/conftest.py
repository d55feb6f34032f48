"""Shared fixtures."""

from pathlib import Path

import pytest
import trimesh

from mtc_pour.core.messages import (
    JointTrajectory,
    JointTrajectoryPoint,
    PlanningScene,
    RobotTrajectory,
    Solution,
    SubTrajectory,
)
from mtc_pour.core.planning_scene import PlanningSceneStore

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "examples"
SAMPLE_SOLUTION = EXAMPLES_DIR / "solutions" / "pour_solution.json"
SAMPLE_CONFIG = EXAMPLES_DIR / "config.json"


@pytest.fixture
def store():
    return PlanningSceneStore()


@pytest.fixture
def make_box_mesh(tmp_path):
    """Write a box mesh with the given extents to an STL file and return its path."""

    def _make(name, extents):
        path = tmp_path / f"{name}.stl"
        trimesh.creation.box(extents=extents).export(str(path))
        return str(path)

    return _make


def make_trajectory(*positions, joint_names=("j1", "j2"), dt=1.0):
    """Trajectory through the given joint positions, one point per ``dt``."""
    return RobotTrajectory(
        joint_trajectory=JointTrajectory(
            joint_names=list(joint_names),
            points=[
                JointTrajectoryPoint(positions=list(p), time_from_start=i * dt)
                for i, p in enumerate(positions)
            ],
        )
    )


def make_solution(segments):
    """
    Build a solution from (trajectory_or_None, diff_name) pairs.

    None gives an empty trajectory.
    """
    subs = []
    for i, (traj, name) in enumerate(segments):
        subs.append(
            SubTrajectory(
                id=i,
                trajectory=traj if traj is not None else RobotTrajectory(),
                scene_diff=PlanningScene(name=name),
            )
        )
    return Solution(sub_trajectory=subs)
