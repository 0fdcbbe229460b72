# murmur/assets/registry.py
import threading
from typing import Any, Dict, List, Optional

from murmur.assets.handle import AssetId


class AssetRegistry:
    """
    Stores loaded asset data (CPU side) mapped by AssetId.
    """

    def __init__(self) -> None:
        self._storage: Dict[AssetId, Any] = {}
        self._lock = threading.Lock()

    def store(self, asset_id: AssetId, data: Any) -> None:
        """Register a loaded asset."""
        with self._lock:
            self._storage[asset_id] = data

    def get(self, asset_id: AssetId) -> Optional[Any]:
        """Retrieve asset data if available."""
        with self._lock:
            return self._storage.get(asset_id)

    def ids(self) -> List[AssetId]:
        with self._lock:
            return list(self._storage)

    def __contains__(self, asset_id: AssetId) -> bool:
        with self._lock:
            return asset_id in self._storage

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)

    def clear(self) -> None:
        """Clear all loaded assets (use with caution)."""
        with self._lock:
            self._storage.clear()
