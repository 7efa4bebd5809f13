"""Public entry points: encoded image in, transformed encoded image out.

Every call decodes into its own freshly allocated :class:`PixelBuffer` and uses
its own random generator, so calls can run concurrently in separate threads or
processes. Nothing here raises for odd tool/style/prompt/intensity values; the
only error is :class:`errors.DecodeError` for undecodable input.
"""
from __future__ import annotations
import logging
from typing import Optional, Union

import numpy as np

import io_utils
from effects_core import discover_effects
from pipelines import EffectParameters, Pipeline, resolve, run_pipeline, DEFAULT_INTENSITY, DEFAULT_STYLE
from pixelbuffer import PixelBuffer

logger = logging.getLogger(__name__)

Seed = Union[int, np.random.Generator, None]

# register every pass up front; worker threads only ever read the registry
discover_effects()


def make_rng(seed: Seed = None) -> np.random.Generator:
    """Seeded generator for reproducible texture; ``None`` draws OS entropy."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def transform_buffer(buf: PixelBuffer, tool_type: Optional[str], style: Optional[str] = DEFAULT_STYLE,
                     intensity=DEFAULT_INTENSITY, prompt: Optional[str] = "", *,
                     rng: Seed = None) -> PixelBuffer:
    """Run the resolved pipeline on a copy of ``buf`` and return the copy."""
    out, _ = _run(buf.copy(), tool_type, style, intensity, prompt, rng)
    return out


def _run(buf: PixelBuffer, tool_type, style, intensity, prompt, rng):
    params = EffectParameters.from_raw(intensity)
    pipeline: Pipeline = resolve(tool_type, style, prompt)
    logger.info(
        "Processing with: %s, style: %s, intensity: %d, prompt: %r",
        pipeline.key.tool, pipeline.key.style, params.intensity, str(prompt or "")[:80],
    )
    if pipeline.prompt_groups:
        logger.debug("Prompt groups matched: %s", ", ".join(pipeline.prompt_groups))
    run_pipeline(buf, pipeline, params, make_rng(rng))
    return buf, pipeline


def transform(encoded: io_utils.ImageInput, tool_type: Optional[str], style: Optional[str] = DEFAULT_STYLE,
              intensity=DEFAULT_INTENSITY, prompt: Optional[str] = "", *,
              rng: Seed = None, quality: int = io_utils.DEFAULT_JPEG_QUALITY) -> bytes:
    """Decode, apply the (tool, style) pipeline plus prompt passes, encode.

    Output is PNG (alpha kept) for background-remove, JPEG otherwise, with the
    same pixel dimensions as the input.
    """
    buf = io_utils.decode_image(encoded)
    buf, pipeline = _run(buf, tool_type, style, intensity, prompt, rng)
    return io_utils.encode_image(buf, pipeline.output_format, quality)


def transform_data_url(data_url: str, tool_type: Optional[str], style: Optional[str] = DEFAULT_STYLE,
                       intensity=DEFAULT_INTENSITY, prompt: Optional[str] = "", *,
                       rng: Seed = None, quality: int = io_utils.DEFAULT_JPEG_QUALITY) -> str:
    buf = io_utils.decode_image(data_url)
    buf, pipeline = _run(buf, tool_type, style, intensity, prompt, rng)
    data = io_utils.encode_image(buf, pipeline.output_format, quality)
    return io_utils.to_data_url(data, pipeline.output_format)


def output_format_for(tool_type: Optional[str]) -> str:
    return resolve(tool_type, DEFAULT_STYLE).output_format
