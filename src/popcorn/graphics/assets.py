"""Read-only sprite cache.

Images are loaded lazily by asset identifier (the file name inside the
skins directory) and kept as RGBA numpy arrays, one copy per requested
size. A missing or unreadable asset is cached as ``None`` and renders
as transparent.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from PIL import Image

logger = logging.getLogger(__name__)

RGBAImage = NDArray[np.uint8]


class AssetCache:
    """Lazily loaded, size-keyed image cache."""

    def __init__(self, root: Path):
        self._root = Path(root)
        self._sources: Dict[str, Optional[Image.Image]] = {}
        self._images: Dict[Tuple[str, int, int], Optional[RGBAImage]] = {}

    def _source(self, asset_id: str) -> Optional[Image.Image]:
        if asset_id not in self._sources:
            path = self._root / asset_id
            try:
                with Image.open(path) as img:
                    self._sources[asset_id] = img.convert("RGBA")
                logger.debug(f"Loaded asset {asset_id}")
            except OSError as e:
                # Covers missing files and Pillow's UnidentifiedImageError
                logger.warning(f"Asset {asset_id} unavailable, drawing nothing: {e}")
                self._sources[asset_id] = None
        return self._sources[asset_id]

    def get(self, asset_id: str, width: float, height: float) -> Optional[RGBAImage]:
        """RGBA image for ``asset_id`` at the given size, or None if missing."""
        if not asset_id:
            return None

        width, height = max(1, int(width)), max(1, int(height))
        key = (asset_id, width, height)
        if key not in self._images:
            source = self._source(asset_id)
            if source is None:
                self._images[key] = None
            else:
                scaled = source.resize((width, height), Image.Resampling.LANCZOS)
                self._images[key] = np.array(scaled, dtype=np.uint8)
        return self._images[key]
