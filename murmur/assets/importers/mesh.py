# murmur/assets/importers/mesh.py
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from murmur.assets.importers.base import AssetImporter
from murmur.assets.types import MeshData

logger = logging.getLogger(__name__)


class ObjImporter(AssetImporter):
    """
    Wavefront OBJ importer producing an indexed triangle mesh.

    Supported:
      - v (with optional trailing r g b vertex colors), vt
      - faces with 3 or more corners (fan triangulated)
      - v, v/vt, v//vn, v/vt/vn corner tokens; normals are ignored
    """

    def import_file(self, path: Path) -> MeshData:
        positions: List[Tuple[float, float, float]] = []
        colors: List[Tuple[float, float, float]] = []
        uvs: List[Tuple[float, float]] = []

        # (v, vt) corner -> output vertex index
        corner_map: Dict[Tuple[int, Optional[int]], int] = {}
        out_vertices: List[Tuple[int, Optional[int]]] = []
        triangles: List[Tuple[int, int, int]] = []

        with open(path, "r") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                parts = line.split()
                tag = parts[0]

                if tag == "v":
                    px, py, pz = map(float, parts[1:4])
                    positions.append((px, py, pz))
                    if len(parts) >= 7:
                        r, g, b = map(float, parts[4:7])
                        colors.append((r, g, b))

                elif tag == "vt":
                    u, v = map(float, parts[1:3])
                    uvs.append((u, v))

                elif tag == "f":
                    if len(parts) < 4:
                        raise ValueError(
                            f"Face with fewer than 3 corners in {path}:{line_no}"
                        )

                    corners = []
                    for token in parts[1:]:
                        v_idx, vt_idx = self._parse_face_vertex(token)
                        if v_idx >= len(positions) or v_idx < -len(positions):
                            raise ValueError(
                                f"Vertex index out of range in {path}:{line_no}"
                            )
                        if vt_idx is not None and (
                            vt_idx >= len(uvs) or vt_idx < -len(uvs)
                        ):
                            raise ValueError(
                                f"UV index out of range in {path}:{line_no}"
                            )
                        key = (v_idx % len(positions),
                               vt_idx % len(uvs) if vt_idx is not None else None)
                        if key not in corner_map:
                            corner_map[key] = len(out_vertices)
                            out_vertices.append(key)
                        corners.append(corner_map[key])

                    for i in range(1, len(corners) - 1):
                        triangles.append((corners[0], corners[i], corners[i + 1]))

        if not triangles:
            raise ValueError(f"No geometry found in OBJ: {path}")

        pos_arr = np.asarray(positions, dtype=np.float32)
        uv_arr = np.asarray(uvs, dtype=np.float32).reshape(-1, 2)

        v_indices = np.array([v for v, _ in out_vertices], dtype=np.int64)
        out_positions = pos_arr[v_indices]
        out_uvs = np.zeros((len(out_vertices), 2), dtype=np.float32)
        for i, (_, vt) in enumerate(out_vertices):
            if vt is not None:
                out_uvs[i] = uv_arr[vt]

        out_colors = None
        if colors and len(colors) == len(positions):
            rgb = np.asarray(colors, dtype=np.float32)[v_indices]
            out_colors = np.concatenate(
                [rgb, np.ones((len(rgb), 1), dtype=np.float32)], axis=1
            )

        mesh = MeshData(
            positions=out_positions,
            uvs=out_uvs,
            triangles=np.asarray(triangles, dtype=np.int64),
            colors=out_colors,
        )
        lo, hi = mesh.aabb
        logger.debug(
            "Loaded %s: %d vertices, %d triangles, bounds %s..%s",
            path,
            mesh.vertex_count,
            mesh.triangle_count,
            lo,
            hi,
        )
        return mesh

    def _parse_index(self, val: str) -> int | None:
        """
        If positive, convert 1-based to 0-based.
        If negative, keep as is (relative to the end of the list so far).
        """
        if not val:
            return None
        idx = int(val)
        return idx - 1 if idx > 0 else idx

    def _parse_face_vertex(self, token: str) -> Tuple[int, int | None]:
        parts = token.split("/")
        v = self._parse_index(parts[0])
        vt = (
            self._parse_index(parts[1]) if len(parts) > 1 and parts[1] else None
        )

        if v is None:
            raise ValueError(f"Invalid vertex index in token: {token}")

        return v, vt
