"""
Trajectory inspection and validation.
"""

from typing import Dict, List
import numpy as np

from mtc_pour.core.messages import RobotTrajectory


def is_empty(trajectory: RobotTrajectory) -> bool:
    """True if the joint trajectory has no points."""
    return len(trajectory.joint_trajectory.points) == 0


def trajectory_duration(trajectory: RobotTrajectory) -> float:
    """
    Duration of a trajectory.

    Parameters
    ----------
    trajectory : RobotTrajectory
        Trajectory to inspect.

    Returns
    -------
    float
        ``time_from_start`` of the last point, 0.0 for an empty trajectory.
    """
    points = trajectory.joint_trajectory.points
    if not points:
        return 0.0
    return float(points[-1].time_from_start)


def validate_trajectory(trajectory: RobotTrajectory) -> List[str]:
    """
    Check a joint trajectory for structural problems.

    Parameters
    ----------
    trajectory : RobotTrajectory
        Trajectory to validate.

    Returns
    -------
    List[str]
        Human-readable problems; empty if the trajectory is executable.
    """
    problems = []
    jt = trajectory.joint_trajectory
    n_joints = len(jt.joint_names)

    if jt.points and n_joints == 0:
        problems.append("trajectory has points but no joint names")

    if len(set(jt.joint_names)) != n_joints:
        problems.append("duplicated joint names")

    prev_time = None
    for i, point in enumerate(jt.points):
        if len(point.positions) != n_joints:
            problems.append(
                f"point {i}: {len(point.positions)} positions for {n_joints} joints"
            )
        if point.velocities and len(point.velocities) != n_joints:
            problems.append(
                f"point {i}: {len(point.velocities)} velocities for {n_joints} joints"
            )
        values = list(point.positions) + list(point.velocities) + [point.time_from_start]
        if not np.all(np.isfinite(values)):
            problems.append(f"point {i}: non-finite value")
        if prev_time is not None and point.time_from_start < prev_time:
            problems.append(f"point {i}: time_from_start decreases")
        prev_time = point.time_from_start

    return problems


def max_start_deviation(
    trajectory: RobotTrajectory, joint_positions: Dict[str, float]
) -> float:
    """
    Largest difference between the first trajectory point and a joint state.

    Joints missing from ``joint_positions`` are ignored.

    Parameters
    ----------
    trajectory : RobotTrajectory
        Trajectory to check.
    joint_positions : Dict[str, float]
        Current joint positions by name.

    Returns
    -------
    float
        Maximum absolute deviation (rad or m), 0.0 if nothing to compare.
    """
    jt = trajectory.joint_trajectory
    if not jt.points:
        return 0.0

    first = jt.points[0].positions
    deviation = 0.0
    for name, value in zip(jt.joint_names, first):
        if name in joint_positions:
            deviation = max(deviation, abs(value - joint_positions[name]))
    return deviation


def final_positions(trajectory: RobotTrajectory) -> Dict[str, float]:
    """Joint positions at the end of a trajectory, by name."""
    jt = trajectory.joint_trajectory
    if not jt.points:
        return {}
    return dict(zip(jt.joint_names, jt.points[-1].positions))
