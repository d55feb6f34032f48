"""
Solution loading and saving (JSON format).
"""

from pathlib import Path
import json

from mtc_pour.core.messages import Solution


def load_solution(path: str) -> Solution:
    """
    Load solution from JSON file.

    Parameters
    ----------
    path : str
        Path to JSON file. Relative paths that do not exist from the
        current directory are also looked up under the project's
        ``examples/solutions`` directory.

    Returns
    -------
    Solution
        Loaded solution.
    """
    solution_path = Path(path)
    if not solution_path.exists():
        project_root = Path(__file__).resolve().parents[2]
        candidates = [
            project_root / solution_path,
            project_root / "examples" / "solutions" / solution_path.name,
        ]
        for candidate in candidates:
            if candidate.exists():
                solution_path = candidate
                break
        else:
            raise FileNotFoundError(f"Solution file not found: {path}")

    with open(solution_path, "r") as f:
        data = json.load(f)
    return Solution.from_dict(data)


def dump_solution(solution: Solution, path: str) -> None:
    """
    Save solution to JSON file.

    Parameters
    ----------
    solution : Solution
        Solution to save.
    path : str
        Output path.
    """
    with open(path, "w") as f:
        json.dump(solution.to_dict(), f, indent=2)
