"""
Result persistence for solution executions.
"""

import json
import csv
from pathlib import Path
from typing import Optional

from mtc_pour.core.messages import Solution


class ResultWriter:
    """Writes execution results to disk."""

    def __init__(self, outdir: str):
        """
        Initialize result writer.

        Parameters
        ----------
        outdir : str
            Output directory path.
        """
        self.outdir = Path(outdir)
        self.outdir.mkdir(parents=True, exist_ok=True)

    def save_execution(
        self,
        result,
        solution: Solution,
        meta: Optional[dict] = None,
        scene=None,
    ) -> None:
        """
        Save complete execution results.

        Parameters
        ----------
        result : ExecutionResult
            Outcome of the execution.
        solution : Solution
            Solution that was executed.
        meta : Optional[dict]
            Extra metadata (planning group, topic, ...).
        scene : Optional[PlanningScene]
            Final planning scene snapshot.
        """
        meta = meta or {}
        meta_data = {
            "task_id": solution.task_id,
            "cost": solution.cost,
            "segments": len(solution.sub_trajectory),
            "planning_group": meta.get("planning_group", "unknown"),
            "topic": meta.get("topic"),
        }
        meta_data.update(result.to_dict())

        meta_path = self.outdir / "metadata.json"
        with open(meta_path, "w") as f:
            json.dump(meta_data, f, indent=2)

        if scene is not None:
            scene_path = self.outdir / "scene.json"
            with open(scene_path, "w") as f:
                json.dump(scene.to_dict(), f, indent=2)

        executed = set(result.executed)
        for sub in solution.sub_trajectory:
            if sub.id in executed:
                self._save_trajectory_csv(sub)

    def _save_trajectory_csv(self, sub) -> None:
        """
        Save one sub-trajectory to CSV file.

        Parameters
        ----------
        sub : SubTrajectory
            Executed segment.
        """
        csv_path = self.outdir / f"trajectory_{sub.id}.csv"
        jt = sub.trajectory.joint_trajectory

        with open(csv_path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["time"] + list(jt.joint_names))

            for point in jt.points:
                writer.writerow([point.time_from_start] + list(point.positions))
