"""
Mesh resource resolution and loading.

Resources are addressed like in the planning middleware:
``package://<package>/<relative path>``, ``file:///abs/path`` or a plain
filesystem path.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence, Union
import numpy as np
import trimesh

from mtc_pour.core.messages import Mesh

logger = logging.getLogger(__name__)

PACKAGE_PATH_ENV = "MTC_POUR_PACKAGE_PATH"
BUILTIN_PACKAGE = "mtc_pour"

PackagePaths = Union[Mapping[str, str], Iterable[str], None]


class ResourceNotFoundError(FileNotFoundError):
    """A resource locator could not be resolved to an existing file."""


class MeshLoadError(ValueError):
    """A resolved resource could not be read as a triangle mesh."""


def _builtin_package_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _find_package(name: str, package_paths: PackagePaths) -> Optional[Path]:
    """
    Locate the directory of a named package.

    Search order: explicit mapping or search directories, the search
    directories in ``MTC_POUR_PACKAGE_PATH``, then this package itself.
    """
    search_dirs = []
    if isinstance(package_paths, Mapping):
        if name in package_paths:
            candidate = Path(package_paths[name])
            if candidate.is_dir():
                return candidate
    elif package_paths is not None:
        search_dirs.extend(package_paths)

    env = os.environ.get(PACKAGE_PATH_ENV, "")
    search_dirs.extend(p for p in env.split(os.pathsep) if p)

    for directory in search_dirs:
        candidate = Path(directory) / name
        if candidate.is_dir():
            return candidate

    if name == BUILTIN_PACKAGE:
        return _builtin_package_root()
    return None


def resolve_resource(uri: str, package_paths: PackagePaths = None) -> Path:
    """
    Resolve a resource locator to an existing file.

    Parameters
    ----------
    uri : str
        ``package://pkg/rel``, ``file://path`` or plain path.
    package_paths : Mapping[str, str] | Iterable[str] | None
        Either a mapping of package name to directory, or directories that
        contain packages as subdirectories.

    Returns
    -------
    Path
        Path to the file.

    Raises
    ------
    ResourceNotFoundError
        If the package or the file does not exist.
    """
    if uri.startswith("package://"):
        rest = uri[len("package://"):]
        package, _, relative = rest.partition("/")
        if not package or not relative:
            raise ResourceNotFoundError(f"Malformed package resource: {uri}")
        root = _find_package(package, package_paths)
        if root is None:
            raise ResourceNotFoundError(f"Package '{package}' not found for resource {uri}")
        path = root / relative
    elif uri.startswith("file://"):
        path = Path(uri[len("file://"):])
    else:
        path = Path(uri)

    if not path.is_file():
        raise ResourceNotFoundError(f"Resource not found: {uri} ({path})")
    return path


def load_mesh(
    uri: str,
    scale: Sequence[float] = (1.0, 1.0, 1.0),
    package_paths: PackagePaths = None,
) -> Mesh:
    """
    Load a triangle mesh from a resource.

    Parameters
    ----------
    uri : str
        Resource locator (see ``resolve_resource``).
    scale : Sequence[float]
        Per-axis scaling applied to the vertices.
    package_paths : Mapping[str, str] | Iterable[str] | None
        Package lookup override.

    Returns
    -------
    Mesh
        Loaded mesh.

    Raises
    ------
    ResourceNotFoundError
        If the resource cannot be resolved.
    MeshLoadError
        If the file is not a readable, non-empty triangle mesh.
    """
    path = resolve_resource(uri, package_paths)

    try:
        loaded = trimesh.load(str(path), force="mesh")
    except Exception as e:
        raise MeshLoadError(f"Failed to load mesh {uri}: {e}") from e

    if not isinstance(loaded, trimesh.Trimesh) or len(loaded.faces) == 0:
        raise MeshLoadError(f"Resource {uri} contains no triangles")

    vertices = np.asarray(loaded.vertices, dtype=float) * np.asarray(scale, dtype=float)
    mesh = Mesh(vertices=vertices, triangles=np.asarray(loaded.faces, dtype=np.int64))
    logger.debug(
        "Loaded mesh %s: %d vertices, %d triangles", uri, len(mesh.vertices), len(mesh.triangles)
    )
    return mesh

