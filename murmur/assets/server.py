# murmur/assets/server.py
import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from queue import Queue
from typing import Dict, Iterable, List, Optional

from murmur.assets.handle import AssetHandle, AssetId, asset_id_for
from murmur.assets.importers.base import AssetImporter
from murmur.assets.importers.mesh import ObjImporter
from murmur.assets.importers.shader import ShaderImporter
from murmur.assets.importers.texture import TextureImporter, solid_texture
from murmur.assets.registry import AssetRegistry
from murmur.assets.types import MeshAsset, MeshData, TextureData

logger = logging.getLogger(__name__)


class AssetLoadError(RuntimeError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"Failed to load {path}: {cause}")
        self.path = path
        self.cause = cause


class AssetServer:
    def __init__(self, asset_root: Path, max_workers: int = 2) -> None:
        self.root = Path(asset_root)
        self.registry = AssetRegistry()

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="AssetWorker"
        )
        self._loaded_queue: Queue = Queue()

        self._handles: Dict[str, AssetHandle] = {}  # Path -> Handle
        self._futures: Dict[AssetId, Future] = {}
        self._failed: Dict[AssetId, AssetLoadError] = {}

        texture_importer = TextureImporter()
        shader_importer = ShaderImporter()
        self._importers: Dict[str, AssetImporter] = {
            ".obj": ObjImporter(),
            ".png": texture_importer,
            ".jpg": texture_importer,
            ".jpeg": texture_importer,
            ".glsl": shader_importer,
            ".frag": shader_importer,
            ".vert": shader_importer,
        }

    def load(self, path: str) -> AssetHandle:
        """
        Non-blocking load request. Return handle instantly.
        """
        if path in self._handles:
            return self._handles[path]

        asset_id = asset_id_for(path)
        handle = AssetHandle(asset_id, path)
        self._handles[path] = handle

        full_path = self.root / path
        self._futures[asset_id] = self._executor.submit(
            self._worker_load, asset_id, full_path
        )

        return handle

    def _worker_load(self, asset_id: AssetId, full_path: Path) -> None:
        """
        Load asset on background thread.
        """
        try:
            ext = full_path.suffix.lower()
            importer = self._importers.get(ext)
            if not importer:
                raise ValueError(f"No importer for {ext}")

            data = importer.import_file(full_path)
            self._loaded_queue.put((asset_id, data))
        except (OSError, ValueError) as e:
            logger.error("Failed to load %s: %s", full_path, e)
            self._failed[asset_id] = AssetLoadError(str(full_path), e)

    def update(self) -> List[AssetId]:
        """
        Called on the main thread every frame.
        Return list of newly loaded AssetIds (so the renderer can upload them).
        """
        loaded_ids = []
        while not self._loaded_queue.empty():
            asset_id, data = self._loaded_queue.get()
            self.registry.store(asset_id, data)
            loaded_ids.append(asset_id)

        return loaded_ids

    def wait(
        self, handles: Iterable[AssetHandle], timeout: Optional[float] = None
    ) -> None:
        """
        Block until the given handles are loaded and stored in the registry.

        Raises:
            AssetLoadError: if any of them failed to import.
            TimeoutError: if loading does not finish within `timeout`.
        """
        handles = list(handles)
        futures = [self._futures[h.id] for h in handles if h.id in self._futures]
        _, pending = wait(futures, timeout=timeout)
        if pending:
            raise TimeoutError(f"{len(pending)} assets still loading")

        self.update()
        for h in handles:
            if h.id in self._failed:
                raise self._failed[h.id]

    def get(self, handle: AssetHandle):
        return self.registry.get(handle.id)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


def load_mesh_assets(
    server: AssetServer,
    entries: Iterable[tuple],
    timeout: Optional[float] = None,
) -> List[MeshAsset]:
    """
    Load (name, mesh_path, texture_path) entries and pair them up.

    `texture_path` may be None, in which case the particles of that mesh
    are tinted white.
    """
    entries = list(entries)
    requests = []
    for name, mesh_path, texture_path in entries:
        mesh_handle = server.load(mesh_path)
        tex_handle = server.load(texture_path) if texture_path else None
        requests.append((name, mesh_handle, tex_handle))

    server.wait(
        [h for _, m, t in requests for h in (m, t) if h is not None],
        timeout=timeout,
    )

    assets: List[MeshAsset] = []
    for name, mesh_handle, tex_handle in requests:
        mesh = server.get(mesh_handle)
        if not isinstance(mesh, MeshData):
            raise TypeError(f"{mesh_handle.path} is not a mesh")

        texture = server.get(tex_handle) if tex_handle else solid_texture()
        if not isinstance(texture, TextureData):
            raise TypeError(f"{tex_handle.path} is not a texture")

        assets.append(MeshAsset(mesh_handle.id, name, mesh, texture))
        logger.info(
            "Mesh asset '%s': %d triangles, texture %dx%d",
            name,
            mesh.triangle_count,
            texture.width,
            texture.height,
        )

    return assets
