# murmur/assets/importers/shader.py
from pathlib import Path

from murmur.assets.importers.base import AssetImporter
from murmur.assets.types import ShaderSource


class ShaderImporter(AssetImporter):
    def import_file(self, path: Path) -> ShaderSource:
        source = Path(path).read_text(encoding="utf-8")
        if not source.strip():
            raise ValueError(f"Empty shader source: {path}")

        return ShaderSource(source=source, path=str(path))
