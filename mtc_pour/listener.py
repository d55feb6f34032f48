"""
Execution of the first solution received on a topic.
"""

import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from mtc_pour.core.executor import MotionExecutor
from mtc_pour.core.messages import Solution
from mtc_pour.core.planning_scene import PlanningSceneStore
from mtc_pour.core.trajectory import is_empty
from mtc_pour.transport import MessageBus, OneShotListener, resolve_topic

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[Solution], bool]


@dataclass
class ExecutionResult:
    """
    Outcome of executing a solution.

    ``executed`` and ``skipped`` hold sub-trajectory ids in order;
    ``applied`` counts scene diffs applied.
    """

    success: bool = False
    executed: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    applied: int = 0
    failed_id: Optional[int] = None
    message: str = ""
    confirmed: bool = False

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "executed": list(self.executed),
            "skipped": list(self.skipped),
            "applied": self.applied,
            "failed_id": self.failed_id,
            "message": self.message,
            "confirmed": self.confirmed,
        }


def console_confirm(solution: Solution, stream=None) -> bool:
    """
    Block until the operator presses Enter.

    Returns False if the input stream is closed or interrupted.
    """
    prompt = (
        f"Solution with {len(solution.sub_trajectory)} segments received. "
        "Press Enter to execute..."
    )
    try:
        if stream is None:
            input(prompt)
        else:
            print(prompt)
            if not stream.readline():
                return False
        return True
    except (EOFError, KeyboardInterrupt):
        print()
        return False


def auto_confirm(solution: Solution) -> bool:
    return True


class ExecuteFirstSolution:
    """
    Waits for one solution on a topic and plays it back.

    On the first message the subscription is cancelled, the confirmation
    callback is consulted, and every sub-trajectory is executed in order.
    Empty trajectories are not executed. Each segment's scene diff is
    applied after its execution (or skip). The first execution failure
    aborts the run; later segments are neither executed nor applied.

    The outcome is available from ``wait()`` / ``result`` once ``done`` is
    set; the caller decides what happens to the process.
    """

    def __init__(
        self,
        bus: MessageBus,
        topic: str,
        planning_group: str,
        executor: MotionExecutor,
        scene_store: PlanningSceneStore,
        confirm: ConfirmCallback = console_confirm,
        node_name: str = "execute_first_solution",
    ):
        """
        Initialize and subscribe.

        Parameters
        ----------
        bus : MessageBus
            Transport to subscribe on.
        topic : str
            Topic name; ``~name`` is resolved in the node's namespace.
        planning_group : str
            Planning group the trajectories belong to.
        executor : MotionExecutor
            Executes individual trajectories.
        scene_store : PlanningSceneStore
            Receives the scene diffs.
        confirm : Callable[[Solution], bool]
            Gate consulted before the first execution.
        node_name : str
            Name used to resolve private topics.
        """
        self.planning_group = planning_group
        self.executor = executor
        self.scene_store = scene_store
        self.confirm = confirm
        self.topic = resolve_topic(topic, node_name)
        self._done = threading.Event()
        self._result: Optional[ExecutionResult] = None
        self.solution: Optional[Solution] = None
        self.listener = OneShotListener(bus, self.topic, self._on_solution)
        logger.info("Waiting for a solution on %s", self.topic)

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def result(self) -> Optional[ExecutionResult]:
        return self._result

    def wait(self, timeout: Optional[float] = None) -> Optional[ExecutionResult]:
        """
        Block until the solution has been handled.

        Returns
        -------
        Optional[ExecutionResult]
            The result, or None on timeout.
        """
        if not self._done.wait(timeout):
            return None
        return self._result

    def cancel(self) -> None:
        """Stop waiting for a solution."""
        self.listener.cancel()

    def _on_solution(self, solution: Solution) -> None:
        self.solution = solution
        progress = ExecutionResult()
        try:
            self._result = self.monitor_solution(solution, progress)
        except Exception as e:
            logger.exception("Solution handling raised")
            progress.success = False
            progress.message = f"{type(e).__name__}: {e}"
            self._result = progress
            raise
        finally:
            self._done.set()

    def monitor_solution(
        self, solution: Solution, result: Optional[ExecutionResult] = None
    ) -> ExecutionResult:
        """
        Execute a solution.

        Parameters
        ----------
        solution : Solution
            Solution to play back.
        result : Optional[ExecutionResult]
            Result to fill in as segments complete; a new one by default.

        Returns
        -------
        ExecutionResult
            Outcome.
        """
        logger.info("Received first solution. Executing.")
        if result is None:
            result = ExecutionResult()

        logger.info("Waiting for confirmation")
        if not self.confirm(solution):
            result.message = "Execution not confirmed"
            logger.warning(result.message)
            return result
        result.confirmed = True

        for sub in solution.sub_trajectory:
            if is_empty(sub.trajectory):
                logger.info("Skipping empty trajectory")
                result.skipped.append(sub.id)
            else:
                logger.info("Executing subtrajectory %s", sub.id)
                if not self.executor.execute(sub.trajectory):
                    logger.error("Execution failed! Aborting!")
                    result.failed_id = sub.id
                    result.message = f"Execution of subtrajectory {sub.id} failed"
                    return result
                result.executed.append(sub.id)

            try:
                if not self.scene_store.apply_planning_scene(sub.scene_diff):
                    logger.warning("Scene diff of subtrajectory %s applied with errors", sub.id)
            except ValueError as e:
                logger.warning("Scene diff of subtrajectory %s rejected: %s", sub.id, e)
            result.applied += 1

        logger.info("Executed successfully.")
        result.success = True
        result.message = "Executed successfully"
        return result


def exit_code(result: Optional[ExecutionResult]) -> int:
    """Process exit code for a result (0 only on success)."""
    return 0 if result is not None and result.success else 1


def run_until_done(runner: ExecuteFirstSolution, timeout: Optional[float] = None) -> int:
    """Wait for the runner and return a process exit code."""
    try:
        result = runner.wait(timeout)
    except KeyboardInterrupt:
        runner.cancel()
        print("Interrupted", file=sys.stderr)
        return 1
    if result is None:
        runner.cancel()
        logger.error("No solution received within %.1fs", timeout or 0.0)
    return exit_code(result)
