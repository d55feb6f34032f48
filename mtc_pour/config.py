"""
Demo configuration.
"""

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import List, Optional
import json

from mtc_pour.core.messages import PoseStamped, make_pose_stamped
from mtc_pour.scene_setup import DEFAULT_BOTTLE_MESH, DEFAULT_GLASS_MESH


@dataclass
class DemoConfig:
    """Settings shared by the demo commands."""

    # Transport
    topic: str = "~solution"
    node_name: str = "execute_first_solution"
    host: str = "localhost"
    port: int = 8010

    # Execution
    planning_group: str = "arm"
    joint_names: Optional[List[str]] = None
    start_tolerance: float = 0.01  # rad
    time_scale: float = 0.0  # fraction of real time to sleep

    # Scene
    frame_id: str = "world"
    package_paths: List[str] = field(default_factory=list)
    bottle_mesh: str = DEFAULT_BOTTLE_MESH
    glass_mesh: str = DEFAULT_GLASS_MESH
    tabletop: List[float] = field(default_factory=lambda: [0.5, 0.0, 0.0])
    bottle: List[float] = field(default_factory=lambda: [0.5, -0.25, 0.0])
    glass: List[float] = field(default_factory=lambda: [0.5, 0.1, 0.0])

    log_level: str = "INFO"

    def __post_init__(self):
        for name in ("tabletop", "bottle", "glass"):
            value = getattr(self, name)
            if len(value) != 3:
                raise ValueError(f"'{name}' must be [x, y, z], got {value}")
            setattr(self, name, [float(v) for v in value])

    def pose(self, name: str) -> PoseStamped:
        """Stamped pose for 'tabletop', 'bottle' or 'glass'."""
        x, y, z = getattr(self, name)
        return make_pose_stamped(x, y, z, frame_id=self.frame_id)

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "DemoConfig":
        """
        Create config from dictionary.

        Raises
        ------
        ValueError
            On unknown keys.
        """
        known = {f.name for f in fields(DemoConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return DemoConfig(**data)


def load_config(path: Optional[str] = None) -> DemoConfig:
    """
    Load config from a JSON file, or the defaults when no path is given.

    Parameters
    ----------
    path : Optional[str]
        Path to JSON file.

    Returns
    -------
    DemoConfig
        Loaded config.
    """
    if path is None:
        return DemoConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return DemoConfig.from_dict(data)


def dump_config(config: DemoConfig, path: str) -> None:
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
