from __future__ import annotations
import numpy as np

from effects_core import effect, clamp
from pixelbuffer import PixelBuffer

# Brush and swirl textures: sin/cos fields over pixel coordinates, scaled by
# factor * amplitude and added per channel. Evaluated at every pixel, borders
# included; each additive step is clamped before the next one.

_W_WATER = np.array([1.0, 0.9, 1.1], dtype=np.float32)
_WASH = np.array([240.0, 245.0, 250.0], dtype=np.float32)


@effect("oil-painting", family="texture")
def oil_painting(buf: PixelBuffer, factor: float) -> None:
    x, y = buf.coords()
    rgb = buf.rgb()
    brush = np.sin(x * 0.05) * np.cos(y * 0.05) * factor * 40
    oil = np.sin(x * 0.1 + y * 0.1) * factor * 25

    # thick paint
    rgb[..., 0] = clamp(rgb[..., 0] + brush + oil)
    rgb[..., 1] = clamp(rgb[..., 1] + brush * 0.8 + oil)
    rgb[..., 2] = clamp(rgb[..., 2] + brush * 1.2 + oil)

    # colour richness
    rgb = clamp(rgb * (1 + factor * 0.4))
    buf.write_rgb(rgb)


@effect("color-blend", family="texture")
def color_blend(buf: PixelBuffer, factor: float) -> None:
    """Smear each pixel toward its right-hand (row-major) neighbour.

    The last four pixels of the stream are left alone. A zero channel in the
    neighbour counts as "no paint" and the pixel keeps its own value there.
    """
    rgb = buf.rgb()
    flat = rgb.reshape(-1, 3)
    n = flat.shape[0]
    if n <= 4:
        return
    amount = factor * 0.3
    cur = flat[: n - 4]
    nxt = flat[1 : n - 3]
    nxt = np.where(nxt == 0, cur, nxt)
    flat[: n - 4] = cur * (1 - amount) + nxt * amount
    buf.write_rgb(clamp(rgb))


@effect("watercolor", family="texture", stochastic=True)
def watercolor(buf: PixelBuffer, factor: float, rng: np.random.Generator) -> None:
    x, y = buf.coords()
    rgb = buf.rgb()
    bleeding = np.sin(x * 0.03) * np.sin(y * 0.03) * factor * 30
    transparency = 0.7 + factor * 0.2

    wash = _WASH * (1 - transparency) + rgb * transparency
    rgb = clamp(wash + bleeding[..., None] * _W_WATER)

    paper = (rng.random((buf.height, buf.width)) - 0.5) * factor * 15
    rgb = clamp(rgb + paper[..., None])
    buf.write_rgb(rgb)


@effect("abstract", family="texture")
def abstract_waves(buf: PixelBuffer, factor: float) -> None:
    wave = np.sin(buf.flat_index() * 0.001) * factor * 60
    rgb = clamp(buf.rgb() + wave[..., None] * np.array([1.0, 1.2, 0.8]))
    buf.write_rgb(rgb)


@effect("abstract-elements", family="texture")
def abstract_elements(buf: PixelBuffer, factor: float) -> None:
    wave = np.sin(buf.flat_index() * 0.005) * factor * 40
    rgb = clamp(buf.rgb() + wave[..., None] * np.array([1.0, 1.3, 0.7]))
    buf.write_rgb(rgb)


@effect("van-gogh-swirl", family="texture")
def van_gogh_swirl(buf: PixelBuffer, factor: float) -> None:
    x, y = buf.coords()
    swirl = np.sin(x * 0.02 + y * 0.02) * np.cos(x * 0.015) * factor * 50
    impasto = np.sin(x * 0.1) * np.cos(y * 0.1) * factor * 30

    gains = np.array([1 + factor * 0.3, 1 + factor * 0.2, 1 + factor * 0.4])
    rgb = clamp(buf.rgb() * gains + swirl[..., None] * np.array([1.0, 0.8, 1.2]))
    rgb = clamp(rgb + impasto[..., None])
    buf.write_rgb(rgb)


@effect("van-gogh-colors", family="texture")
def van_gogh_colors(buf: PixelBuffer, factor: float) -> None:
    """Greens drift to yellow, blues deepen."""
    rgb = buf.rgb()
    green = (rgb[..., 1] > rgb[..., 0]) & (rgb[..., 1] > rgb[..., 2])
    rgb[green, 0] = np.minimum(255, rgb[green, 0] + factor * 40)
    rgb[green, 1] = np.minimum(255, rgb[green, 1] + factor * 20)
    # re-evaluated after the yellow shift
    blue = (rgb[..., 2] > rgb[..., 0]) & (rgb[..., 2] > rgb[..., 1])
    rgb[blue, 2] = np.minimum(255, rgb[blue, 2] + factor * 50)
    buf.write_rgb(rgb)


@effect("picasso-cubist", family="texture")
def picasso_cubist(buf: PixelBuffer, factor: float) -> None:
    x, y = buf.coords()
    rgb = buf.rgb()

    segment = np.floor(x / 20) + np.floor(y / 20)
    shift = (segment % 3) * factor * 40
    if factor > 0.5:
        # blue period
        rgb = clamp(rgb * np.array([0.7, 0.8, 1.3]) + shift[..., None])

    geometric = np.floor(x / 15) * np.floor(y / 15) * factor * 0.1
    rgb = clamp(rgb + geometric[..., None] * np.array([1.0, -0.5, 1.5]))
    buf.write_rgb(rgb)
