import io

import numpy as np
import pytest
from PIL import Image

from pixelbuffer import PixelBuffer


def gradient_rgba(width=48, height=32, alpha=255):
    y, x = np.mgrid[:height, :width]
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[..., 0] = (x * 255 // max(1, width - 1)).astype(np.uint8)
    arr[..., 1] = (y * 255 // max(1, height - 1)).astype(np.uint8)
    arr[..., 2] = ((x + y) * 3 % 256).astype(np.uint8)
    arr[..., 3] = alpha
    return arr


def encode(arr, fmt="PNG"):
    img = Image.fromarray(arr, "RGBA")
    if fmt == "JPEG":
        img = img.convert("RGB")
    out = io.BytesIO()
    img.save(out, format=fmt)
    return out.getvalue()


class ConstantRng:
    """Stands in for a Generator where only .random() is used."""

    def __init__(self, value=0.5):
        self.value = value

    def random(self, size=None):
        if size is None:
            return self.value
        return np.full(size, self.value, dtype=np.float64)


@pytest.fixture
def gradient_buf():
    return PixelBuffer(gradient_rgba())


@pytest.fixture
def random_buf():
    rng = np.random.default_rng(7)
    arr = rng.integers(0, 256, size=(24, 30, 4), dtype=np.uint8)
    arr[..., 3] = 255
    return PixelBuffer(arr)


@pytest.fixture
def png_bytes():
    return encode(gradient_rgba(37, 23))
