#!/usr/bin/env python
"""Set up the scene and play back the sample solution in-process."""

import logging
import os

from mtc_pour import ExecuteFirstSolution, MessageBus, PlanningSceneStore, SimulatedExecutor
from mtc_pour import load_solution, setup_objects, setup_table
from mtc_pour.core.messages import make_pose_stamped
from mtc_pour.listener import auto_confirm

HERE = os.path.abspath(os.path.dirname(__file__))


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")

    store = PlanningSceneStore()
    setup_table(make_pose_stamped(0.5, 0.0, 0.0), store)
    setup_objects(make_pose_stamped(0.5, -0.25, 0.0), make_pose_stamped(0.5, 0.1, 0.0), store)

    bus = MessageBus()
    executor = SimulatedExecutor("arm", scene_store=store)
    runner = ExecuteFirstSolution(bus, "~solution", "arm", executor, store, confirm=auto_confirm)

    solution = load_solution(os.path.join(HERE, "solutions", "pour_solution.json"))
    bus.publish(runner.topic, solution)

    result = runner.wait(timeout=1.0)
    print(result.to_dict())
    print("Bottle is", "attached" if store.get_attached_objects(["bottle"]) else "on the table")


if __name__ == "__main__":
    main()
