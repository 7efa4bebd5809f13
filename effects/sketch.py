from __future__ import annotations
import math
import numpy as np

from effects_core import effect, clamp, luma, blend
from pixelbuffer import PixelBuffer


def _write_gray(buf: PixelBuffer, gray: np.ndarray) -> None:
    buf.write_rgb(np.repeat(clamp(gray)[..., None], 3, axis=2))


@effect("grayscale", family="sketch")
def grayscale(buf: PixelBuffer, factor: float) -> None:
    rgb = buf.rgb()
    buf.write_rgb(clamp(blend(rgb, luma(rgb)[..., None], factor)))


@effect("charcoal", family="sketch", stochastic=True)
def charcoal(buf: PixelBuffer, factor: float, rng: np.random.Generator) -> None:
    """Crush the darks, lift the lights, add stick texture and paper tooth."""
    x, y = buf.coords()
    gray = luma(buf.rgb())

    texture = np.sin(x * 0.1) * np.cos(y * 0.1) * factor * 20
    paper = (rng.random(gray.shape) - 0.5) * factor * 25

    value = np.where(gray < 60, gray * 0.3,
                     np.where(gray < 120, gray * 0.6, gray * 0.9 + 20))
    _write_gray(buf, value + texture + paper)


@effect("charcoal-smudge", family="sketch", stochastic=True)
def charcoal_smudge(buf: PixelBuffer, factor: float, rng: np.random.Generator) -> None:
    """Average random pixels with a randomly displaced neighbour.

    Pixels are visited in scan order so later smudges see earlier ones. The
    red channel is taken as the gray value; both pixels of a pair end up gray.
    """
    w, h = buf.size
    radius = math.floor(factor * 3)
    n = w * h
    hits = np.flatnonzero(rng.random(n) < factor * 0.1)
    if hits.size == 0 or radius == 0:
        return

    angles = rng.random(hits.size) * 2 * math.pi
    dists = rng.random(hits.size) * radius
    xs, ys = hits % w, hits // w
    nx = np.floor(xs + np.cos(angles) * dists).astype(np.int64)
    ny = np.floor(ys + np.sin(angles) * dists).astype(np.int64)
    ok = (nx >= 0) & (nx < w) & (ny >= 0) & (ny < h)
    src = hits[ok]
    dst = (ny * w + nx)[ok]
    if src.size == 0:
        return

    rgb = buf.rgb().reshape(-1, 3)
    gray = rgb[:, 0].tolist()
    for i, j in zip(src.tolist(), dst.tolist()):
        avg = (gray[i] + gray[j]) / 2
        gray[i] = avg
        gray[j] = avg

    touched = np.zeros(n, dtype=bool)
    touched[src] = True
    touched[dst] = True
    g = np.asarray(gray, dtype=np.float32)
    rgb[touched] = g[touched][:, None]
    buf.write_rgb(rgb.reshape(h, w, 3))


@effect("line-art", family="sketch")
def line_art(buf: PixelBuffer, factor: float) -> None:
    gray = luma(buf.rgb())
    _write_gray(buf, np.where(gray > 120 - factor * 30, 255.0, 0.0))


@effect("edge-threshold", family="sketch")
def edge_threshold(buf: PixelBuffer, factor: float) -> None:
    gray = luma(buf.rgb())
    edge = np.where(gray > 128, 255.0, 0.0)
    _write_gray(buf, blend(gray, edge, factor))
