from __future__ import annotations
from typing import Tuple
import numpy as np
from PIL import Image


class PixelBuffer:
    """Mutable RGBA pixel grid with fixed width/height.

    Storage is ``uint8`` of shape ``(height, width, 4)``. Effects read a float
    working copy of the colour channels with :meth:`rgb` and hand it back via
    :meth:`write_rgb`, which clamps to [0, 255] and rounds before storing.
    """

    def __init__(self, pixels: np.ndarray):
        arr = np.asarray(pixels)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"expected (h, w, 4) array, got {arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError("buffer must have at least one pixel")
        if arr.dtype == np.uint8:
            self._px = arr.copy()
        else:
            self._px = np.clip(np.rint(arr.astype(np.float32)), 0, 255).astype(np.uint8)

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(np.asarray(img))

    @classmethod
    def filled(cls, width: int, height: int, rgba=(0, 0, 0, 255)) -> "PixelBuffer":
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[...] = np.asarray(rgba, dtype=np.uint8)
        return cls(arr)

    def to_image(self, mode: str = "RGBA") -> Image.Image:
        img = Image.fromarray(self._px, "RGBA")
        return img if mode == "RGBA" else img.convert(mode)

    @property
    def width(self) -> int:
        return int(self._px.shape[1])

    @property
    def height(self) -> int:
        return int(self._px.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        view = self._px.view()
        view.flags.writeable = False
        return view

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    def rgb(self) -> np.ndarray:
        return self._px[..., :3].astype(np.float32)

    def write_rgb(self, rgb: np.ndarray) -> None:
        rgb = np.asarray(rgb, dtype=np.float32)
        if rgb.shape != (self.height, self.width, 3):
            raise ValueError(f"shape mismatch: {rgb.shape} vs {(self.height, self.width, 3)}")
        self._px[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)

    def coords(self) -> Tuple[np.ndarray, np.ndarray]:
        """Column (x) and row (y) grids that broadcast to (h, w)."""
        y, x = np.ogrid[:self.height, :self.width]
        return x.astype(np.float32), y.astype(np.float32)

    def flat_index(self) -> np.ndarray:
        """Byte offset of each pixel in a row-major RGBA stream, shape (h, w)."""
        idx = np.arange(self.width * self.height, dtype=np.float64).reshape(self.height, self.width)
        return idx * 4.0

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._px)

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
