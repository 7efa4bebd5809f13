from __future__ import annotations
import numpy as np

from effects_core import effect, clamp, luma, blend, channel_gains
from pixelbuffer import PixelBuffer

SEPIA_MATRIX = np.array([
    [0.393, 0.769, 0.189],
    [0.349, 0.686, 0.168],
    [0.272, 0.534, 0.131],
], dtype=np.float64)


@effect("sepia", family="tone")
def sepia(buf: PixelBuffer, factor: float) -> None:
    rgb = buf.rgb().astype(np.float64)
    toned = rgb @ SEPIA_MATRIX.T
    buf.write_rgb(clamp(blend(rgb, toned, factor)))


@effect("warm-palette", family="tone")
def warm_palette(buf: PixelBuffer, factor: float) -> None:
    buf.write_rgb(channel_gains(buf.rgb(), 1 + factor * 0.3, 1 + factor * 0.2, 1 - factor * 0.1))


@effect("cool-palette", family="tone")
def cool_palette(buf: PixelBuffer, factor: float) -> None:
    buf.write_rgb(channel_gains(buf.rgb(), 1 - factor * 0.2, 1 + factor * 0.1, 1 + factor * 0.4))


@effect("seventies-warmth", family="tone")
def seventies_warmth(buf: PixelBuffer, factor: float) -> None:
    # orange and yellow up, blue down
    buf.write_rgb(channel_gains(buf.rgb(), 1 + factor * 0.4, 1 + factor * 0.3, 1 - factor * 0.2))


@effect("cinematic-grading", family="tone")
def cinematic_grading(buf: PixelBuffer, factor: float) -> None:
    # orange and teal
    buf.write_rgb(channel_gains(buf.rgb(), 1 + factor * 0.25, 1 + factor * 0.1, 1 + factor * 0.35))


@effect("exposure-lift", family="tone")
def exposure_lift(buf: PixelBuffer, factor: float) -> None:
    gain = 1 + factor
    buf.write_rgb(channel_gains(buf.rgb(), gain, gain, gain))


@effect("kodachrome", family="tone")
def kodachrome(buf: PixelBuffer, factor: float) -> None:
    """1950s slide film: warm reds, muted blues, lifted blacks."""
    rgb = buf.rgb()
    film = rgb * np.array([1.1, 0.95, 0.85]) + np.array([10.0, 5.0, -5.0])
    rgb = clamp(blend(rgb, film, factor))
    rgb = clamp(rgb + factor * 20)  # fade
    buf.write_rgb(rgb)


@effect("saturation-boost", family="tone")
def saturation_boost(buf: PixelBuffer, factor: float) -> None:
    rgb = buf.rgb()
    gray = luma(rgb)[..., None]
    buf.write_rgb(clamp(gray + (rgb - gray) * (1 + factor)))


@effect("dramatic-contrast", family="tone")
def dramatic_contrast(buf: PixelBuffer, factor: float) -> None:
    rgb = buf.rgb()
    out = np.where(rgb > 128, rgb * (1 + factor * 0.5), rgb * (1 - factor * 0.3))
    buf.write_rgb(clamp(out))


@effect("dreamy-glow", family="tone")
def dreamy_glow(buf: PixelBuffer, factor: float) -> None:
    rgb = clamp(buf.rgb() + factor * 25)
    avg = rgb.mean(axis=-1, keepdims=True)
    buf.write_rgb(clamp(blend(rgb, avg, factor * 0.3)))


@effect("impressionist-touch", family="tone")
def impressionist_touch(buf: PixelBuffer, factor: float) -> None:
    rgb = buf.rgb()
    avg = rgb.mean(axis=-1, keepdims=True)
    buf.write_rgb(clamp(blend(rgb, avg, factor * 0.6)))


@effect("woodblock", family="tone")
def woodblock(buf: PixelBuffer, factor: float) -> None:
    # 8 levels per channel, then brightened
    rgb = np.floor(buf.rgb() / 32) * 32 * (1 + factor * 0.2)
    buf.write_rgb(clamp(rgb))
