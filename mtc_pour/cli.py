"""
Command-line interface for the pouring demo.
"""

import argparse
import json
import logging
import sys

from mtc_pour.client import SolutionPublisherClient
from mtc_pour.config import DemoConfig, load_config
from mtc_pour.core.executor import SimulatedExecutor
from mtc_pour.core.planning_scene import PlanningSceneStore
from mtc_pour.io.results import ResultWriter
from mtc_pour.io.solution import load_solution
from mtc_pour.listener import (
    ExecuteFirstSolution,
    auto_confirm,
    console_confirm,
    exit_code,
    run_until_done,
)
from mtc_pour.scene_setup import describe_scene, setup_demo_scene
from mtc_pour.server import serve
from mtc_pour.transport import MessageBus, resolve_topic


def apply_overrides(config: DemoConfig, args) -> DemoConfig:
    """Overwrite config fields with the CLI flags that were given."""
    for name in ("topic", "planning_group", "host", "port"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(config, name, value)
    if getattr(args, "log_level", None):
        config.log_level = args.log_level
    return config


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_scene(config: DemoConfig) -> PlanningSceneStore:
    """Fresh scene holding table, bottle and glass."""
    store = PlanningSceneStore()
    setup_demo_scene(
        config.pose("tabletop"),
        config.pose("bottle"),
        config.pose("glass"),
        store,
        bottle_mesh=config.bottle_mesh,
        glass_mesh=config.glass_mesh,
        package_paths=config.package_paths or None,
    )
    return store


def run_setup_scene(args, config: DemoConfig) -> int:
    """Populate a scene and report it."""
    store = build_scene(config)

    print("Scene objects:")
    for line in describe_scene(store):
        print(f"  {line}")

    if args.dump:
        with open(args.dump, "w") as f:
            json.dump(store.snapshot().to_dict(), f, indent=2)
        print(f"Scene saved to {args.dump}")

    if args.plot:
        from mtc_pour.viz.scene_plot import ScenePlotter

        ScenePlotter(store).render(args.plot, view=args.view)
        print(f"Scene plot saved to {args.plot}")

    return 0


def run_execute(args, config: DemoConfig) -> int:
    """Set up the scene, wait for the first solution and execute it."""
    if args.no_scene:
        store = PlanningSceneStore()
    else:
        store = build_scene(config)

    executor = SimulatedExecutor(
        config.planning_group,
        joint_names=config.joint_names,
        start_tolerance=config.start_tolerance,
        time_scale=config.time_scale,
        scene_store=store,
    )
    bus = MessageBus()
    runner = ExecuteFirstSolution(
        bus,
        config.topic,
        config.planning_group,
        executor,
        store,
        confirm=auto_confirm if args.yes else console_confirm,
        node_name=config.node_name,
    )

    if args.solution:
        solution = load_solution(args.solution)
        bus.publish(runner.topic, solution)
        code = exit_code(runner.result)
    else:
        server = serve(bus, config.host, config.port)
        if server is None:
            return 1
        print(f"Listening for a solution on {runner.topic} via {config.host}:{server.port}")
        try:
            code = run_until_done(runner, args.timeout)
        finally:
            server.stop()

    result = runner.result
    if result is None:
        print("No solution received")
        return 1

    status = "OK" if result.success else "FAIL"
    print(
        f"[{status}] executed={len(result.executed)} skipped={len(result.skipped)} "
        f"diffs={result.applied} {result.message}"
    )

    if args.export:
        writer = ResultWriter(args.export)
        meta = {"planning_group": config.planning_group, "topic": runner.topic}
        writer.save_execution(result, runner.solution, meta, scene=store.snapshot())
        print(f"Results saved to {args.export}")

    if args.scene_plot:
        from mtc_pour.viz.scene_plot import ScenePlotter

        ScenePlotter(store).render(args.scene_plot)
        print(f"Scene plot saved to {args.scene_plot}")

    return code


def run_publish(args, config: DemoConfig) -> int:
    """Send a solution file to a running bridge."""
    solution = load_solution(args.solution)
    topic = resolve_topic(config.topic, config.node_name)

    client = SolutionPublisherClient(config.host, config.port)
    if not client.connect(timeout=args.connect_timeout):
        print(f"Error: cannot reach solution bridge at {config.host}:{config.port}")
        return 1
    try:
        response = client.publish_solution(topic, solution)
    finally:
        client.disconnect()

    if response is None or response.get("status") != "ok":
        message = response.get("message") if response else "no response"
        print(f"Publish failed: {message}")
        return 1
    if response.get("delivered", 0) == 0:
        print(f"Nobody is listening on {topic}")
        return 1

    print(f"Solution delivered on {topic}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MTC pouring demo helper")
    parser.add_argument("--config", help="Config JSON file")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Setup command
    setup_parser = subparsers.add_parser("setup-scene", help="Populate the demo scene")
    setup_parser.add_argument("--dump", help="Save the scene as JSON")
    setup_parser.add_argument("--plot", help="Save a scene plot (PNG)")
    setup_parser.add_argument(
        "--view", default="side", choices=["top", "side", "front"], help="Plot projection"
    )

    # Execute command
    exec_parser = subparsers.add_parser("execute", help="Execute the first solution received")
    source = exec_parser.add_mutually_exclusive_group()
    source.add_argument("--solution", help="Execute a solution JSON file")
    source.add_argument(
        "--listen", action="store_true", help="Receive the solution over TCP (default)"
    )
    exec_parser.add_argument("--topic", help="Solution topic")
    exec_parser.add_argument("--planning-group", dest="planning_group", help="Planning group")
    exec_parser.add_argument("--host", help="Bridge bind address")
    exec_parser.add_argument("--port", type=int, help="Bridge port")
    exec_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    exec_parser.add_argument("--timeout", type=float, help="Seconds to wait for a solution")
    exec_parser.add_argument("--no-scene", action="store_true", help="Start from an empty scene")
    exec_parser.add_argument("--export", help="Export results to directory")
    exec_parser.add_argument("--scene-plot", help="Save the final scene plot (PNG)")

    # Publish command
    pub_parser = subparsers.add_parser("publish", help="Send a solution to a running bridge")
    pub_parser.add_argument("--solution", required=True, help="Solution JSON file")
    pub_parser.add_argument("--topic", help="Solution topic")
    pub_parser.add_argument("--host", help="Bridge host")
    pub_parser.add_argument("--port", type=int, help="Bridge port")
    pub_parser.add_argument(
        "--connect-timeout", type=float, default=5.0, help="Connection timeout (s)"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = apply_overrides(load_config(args.config), args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    configure_logging(config.log_level)

    if args.command == "setup-scene":
        return run_setup_scene(args, config)
    elif args.command == "execute":
        return run_execute(args, config)
    elif args.command == "publish":
        return run_publish(args, config)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
