import pytest
from PIL import Image

from murmur.assets.handle import AssetHandle
from murmur.assets.server import AssetLoadError, AssetServer, load_mesh_assets

TRIANGLE_OBJ = """
v 0 0 0
v 1 0 0
v 0 1 0
vt 0 0
vt 1 0
vt 0 1
f 1/1 2/2 3/3
"""


@pytest.fixture
def server(tmp_path):
    srv = AssetServer(asset_root=tmp_path)
    yield srv
    srv.shutdown()


def test_asset_server_async_load(tmp_path, server):
    f = tmp_path / "test_async.vert"
    f.write_text("void main() {}")

    handle = server.load("test_async.vert")

    assert isinstance(handle, AssetHandle)
    assert handle.path == "test_async.vert"

    server._executor.shutdown(wait=True)

    loaded_ids = server.update()

    assert handle.id in loaded_ids
    assert handle.id in server.registry
    assert server.registry.get(handle.id).source == "void main() {}"


def test_asset_server_caching(tmp_path, server):
    f = tmp_path / "cached_file.frag"
    f.write_text("void main() {}")

    h1 = server.load("cached_file.frag")
    h2 = server.load("cached_file.frag")

    assert h1 == h2
    assert h1.id == h2.id


def test_wait_raises_for_failed_load(server):
    handle = server.load("missing.obj")

    with pytest.raises(AssetLoadError, match="missing.obj"):
        server.wait([handle], timeout=5.0)


def test_load_mesh_assets_pairs_mesh_and_texture(tmp_path, server):
    (tmp_path / "tri.obj").write_text(TRIANGLE_OBJ)
    Image.new("RGB", (4, 2), color="blue").save(tmp_path / "blue.png")

    assets = load_mesh_assets(
        server,
        [("tri", "tri.obj", "blue.png"), ("plain", "tri.obj", None)],
        timeout=5.0,
    )

    assert [a.name for a in assets] == ["tri", "plain"]
    assert assets[0].mesh.triangle_count == 1
    assert (assets[0].texture.width, assets[0].texture.height) == (4, 2)
    # Mesh files are shared, missing textures fall back to plain white
    assert assets[0].id == assets[1].id
    assert assets[1].texture.width == 1
