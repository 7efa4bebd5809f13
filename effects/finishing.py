from __future__ import annotations
import math
import numpy as np

from effects_core import effect, clamp
from pixelbuffer import PixelBuffer

# Finishing passes run last. For the grain passes the factor is the noise
# amplitude in channel units: noise is uniform in [-amount/2, amount/2].


@effect("film-grain", family="finishing", stochastic=True)
def film_grain(buf: PixelBuffer, amount: float, rng: np.random.Generator) -> None:
    noise = (rng.random((buf.height, buf.width, 3)) - 0.5) * amount
    buf.write_rgb(clamp(buf.rgb() + noise))


@effect("paper-grain", family="finishing", stochastic=True)
def paper_grain(buf: PixelBuffer, amount: float, rng: np.random.Generator) -> None:
    # one sample per pixel so gray stays gray
    noise = (rng.random((buf.height, buf.width, 1)) - 0.5) * amount
    buf.write_rgb(clamp(buf.rgb() + noise))


@effect("vignette", family="finishing")
def vignette(buf: PixelBuffer, factor: float) -> None:
    x, y = buf.coords()
    cx, cy = buf.width / 2, buf.height / 2
    max_dist = math.sqrt(cx * cx + cy * cy)
    dist = np.sqrt((x - cx) ** 2 + (y - cy) ** 2)
    mult = 1 - (dist / max_dist) * factor * 0.8
    buf.write_rgb(clamp(buf.rgb() * mult[..., None]))
