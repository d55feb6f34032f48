import pytest

from mtc_pour.io.mesh import (
    PACKAGE_PATH_ENV,
    MeshLoadError,
    ResourceNotFoundError,
    load_mesh,
    resolve_resource,
)
from mtc_pour.core.geometry import compute_mesh_height


def test_resolve_builtin_package():
    path = resolve_resource("package://mtc_pour/meshes/bottle.stl")
    assert path.name == "bottle.stl"
    assert path.is_file()


def test_resolve_package_from_mapping(tmp_path):
    pkg = tmp_path / "my_pkg" / "meshes"
    pkg.mkdir(parents=True)
    (pkg / "cup.stl").write_text("")
    path = resolve_resource(
        "package://my_pkg/meshes/cup.stl", package_paths={"my_pkg": str(tmp_path / "my_pkg")}
    )
    assert path == tmp_path / "my_pkg" / "meshes" / "cup.stl"


def test_resolve_package_from_environment(tmp_path, monkeypatch):
    (tmp_path / "other_pkg").mkdir()
    (tmp_path / "other_pkg" / "a.stl").write_text("solid a\nendsolid a\n")
    monkeypatch.setenv(PACKAGE_PATH_ENV, str(tmp_path))
    assert resolve_resource("package://other_pkg/a.stl") == tmp_path / "other_pkg" / "a.stl"


def test_resolve_file_uri_and_plain_path(make_box_mesh):
    path = make_box_mesh("box", [0.1, 0.1, 0.1])
    assert str(resolve_resource("file://" + path)) == path
    assert str(resolve_resource(path)) == path


@pytest.mark.parametrize(
    "uri",
    [
        "package://unknown_pkg/meshes/x.stl",
        "package://mtc_pour",
        "package://mtc_pour/meshes/missing.stl",
        "/nonexistent/mesh.stl",
    ],
)
def test_unresolvable_resources(uri):
    with pytest.raises(ResourceNotFoundError):
        resolve_resource(uri)


def test_resource_not_found_is_file_not_found():
    with pytest.raises(FileNotFoundError):
        load_mesh("package://mtc_pour/meshes/missing.stl")


def test_load_mesh_with_scale(make_box_mesh):
    path = make_box_mesh("box", [0.1, 0.2, 0.3])
    mesh = load_mesh(path, scale=(1.0, 1.0, 2.0))
    assert len(mesh.triangles) == 12
    assert compute_mesh_height(mesh) == pytest.approx(0.6)


def test_load_mesh_rejects_garbage(tmp_path):
    path = tmp_path / "broken.stl"
    path.write_text("solid broken\nendsolid broken\n")
    with pytest.raises(MeshLoadError):
        load_mesh(str(path))
