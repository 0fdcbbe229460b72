# murmur/assets/importers/texture.py
from pathlib import Path

from PIL import Image

from murmur.assets.importers.base import AssetImporter
from murmur.assets.types import TextureData


class TextureImporter(AssetImporter):
    def import_file(self, path: Path) -> TextureData:
        with Image.open(path) as img:
            converted = img.convert("RGBA")
            width, height = converted.size
            data = converted.tobytes()

        return TextureData(data=data, width=width, height=height, components=4)


def solid_texture(color: tuple = (255, 255, 255, 255)) -> TextureData:
    """1x1 texture used for meshes shipped without an image."""
    return TextureData(data=bytes(color), width=1, height=1, components=4)
