#!/usr/bin/env python
"""Populate the pouring scene and save a side-view plot."""

from mtc_pour import PlanningSceneStore, setup_objects, setup_table
from mtc_pour.core.messages import make_pose_stamped
from mtc_pour.scene_setup import describe_scene
from mtc_pour.viz.scene_plot import ScenePlotter


def main():
    store = PlanningSceneStore()
    setup_table(make_pose_stamped(0.5, 0.0, 0.0), store)
    setup_objects(make_pose_stamped(0.5, -0.25, 0.0), make_pose_stamped(0.5, 0.1, 0.0), store)

    for line in describe_scene(store):
        print(line)

    ScenePlotter(store).render("pour_scene.png", view="side")
    print("Plot saved to pour_scene.png")


if __name__ == "__main__":
    main()
