"""
MTC pouring demo helper - scene setup and first-solution execution.
"""

__version__ = "0.1.0"
__author__ = "MTC Pour Contributors"

from mtc_pour.core.planning_scene import PlanningSceneStore
from mtc_pour.core.executor import SimulatedExecutor
from mtc_pour.core.geometry import compute_mesh_height
from mtc_pour.io.solution import load_solution, dump_solution
from mtc_pour.listener import ExecuteFirstSolution, ExecutionResult
from mtc_pour.scene_setup import setup_table, setup_objects
from mtc_pour.transport import MessageBus, OneShotListener

__all__ = [
    "PlanningSceneStore",
    "SimulatedExecutor",
    "compute_mesh_height",
    "load_solution",
    "dump_solution",
    "ExecuteFirstSolution",
    "ExecutionResult",
    "setup_table",
    "setup_objects",
    "MessageBus",
    "OneShotListener",
]
