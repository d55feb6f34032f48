"""
Trajectory execution.
"""

import logging
import threading
import time
from typing import Dict, List, Optional, Protocol

from mtc_pour.core.messages import RobotTrajectory
from mtc_pour.core.planning_scene import PlanningSceneStore
from mtc_pour.core.trajectory import (
    final_positions,
    is_empty,
    max_start_deviation,
    trajectory_duration,
    validate_trajectory,
)

logger = logging.getLogger(__name__)


class MotionExecutor(Protocol):
    """Anything that can execute a trajectory and report success."""

    def execute(self, trajectory: RobotTrajectory) -> bool:
        ...


class SimulatedExecutor:
    """
    Executes trajectories on a simulated planning group.

    The executor keeps the group's joint positions. A trajectory is rejected
    if it is malformed, uses joints outside the group, or starts further
    than ``start_tolerance`` from the current state. On success the joint
    state jumps to the last trajectory point (after an optional sleep of
    ``duration * time_scale``).
    """

    def __init__(
        self,
        planning_group: str,
        joint_names: Optional[List[str]] = None,
        start_tolerance: float = 0.01,
        time_scale: float = 0.0,
        scene_store: Optional[PlanningSceneStore] = None,
        initial_positions: Optional[Dict[str, float]] = None,
    ):
        """
        Initialize simulated executor.

        Parameters
        ----------
        planning_group : str
            Name of the planning group being driven.
        joint_names : Optional[List[str]]
            Joints of the group. None accepts any joint.
        start_tolerance : float
            Allowed deviation between current state and first point.
            A value <= 0 disables the check.
        time_scale : float
            Fraction of the trajectory duration to sleep (0 = instant).
        scene_store : Optional[PlanningSceneStore]
            Scene whose robot state mirrors the executed motion.
        initial_positions : Optional[Dict[str, float]]
            Starting joint positions.
        """
        self.planning_group = planning_group
        self.joint_names = list(joint_names) if joint_names is not None else None
        self.start_tolerance = start_tolerance
        self.time_scale = time_scale
        self.scene_store = scene_store
        self.joint_positions: Dict[str, float] = dict(initial_positions or {})
        self.execution_count = 0
        self.history: List[RobotTrajectory] = []
        self._lock = threading.Lock()
        if scene_store is not None and initial_positions:
            scene_store.set_joint_positions(initial_positions)

    def execute(self, trajectory: RobotTrajectory) -> bool:
        """
        Execute a trajectory, blocking until it finishes.

        Parameters
        ----------
        trajectory : RobotTrajectory
            Trajectory to execute.

        Returns
        -------
        bool
            True on success.
        """
        with self._lock:
            self.execution_count += 1

            if is_empty(trajectory):
                logger.warning("[%s] Refusing to execute empty trajectory", self.planning_group)
                return False

            problems = validate_trajectory(trajectory)
            if problems:
                logger.error(
                    "[%s] Invalid trajectory: %s", self.planning_group, "; ".join(problems)
                )
                return False

            jt = trajectory.joint_trajectory
            if self.joint_names is not None:
                unknown = [n for n in jt.joint_names if n not in self.joint_names]
                if unknown:
                    logger.error(
                        "[%s] Joints not in group: %s", self.planning_group, ", ".join(unknown)
                    )
                    return False

            current = self._current_positions()
            if self.start_tolerance > 0:
                deviation = max_start_deviation(trajectory, current)
                if deviation > self.start_tolerance:
                    logger.error(
                        "[%s] Trajectory start deviates %.4f from current state (tolerance %.4f)",
                        self.planning_group,
                        deviation,
                        self.start_tolerance,
                    )
                    return False

            duration = trajectory_duration(trajectory)
            if self.time_scale > 0 and duration > 0:
                time.sleep(duration * self.time_scale)

            reached = final_positions(trajectory)
            self.joint_positions.update(reached)
            if self.scene_store is not None:
                self.scene_store.set_joint_positions(reached)
            self.history.append(trajectory)

            logger.debug(
                "[%s] Executed %d points over %.3fs",
                self.planning_group,
                len(jt.points),
                duration,
            )
            return True

    def _current_positions(self) -> Dict[str, float]:
        """Our joint positions, updated by any the scene store knows about."""
        positions = dict(self.joint_positions)
        if self.scene_store is not None:
            positions.update(self.scene_store.get_joint_positions())
        return positions
