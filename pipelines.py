from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

import prompt_modulator
from effects_core import Step
from pixelbuffer import PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "default"
DEFAULT_TOOL = "photo-to-art"
DEFAULT_INTENSITY = 7
MIN_INTENSITY, MAX_INTENSITY = 1, 10


# ---------------- parameters & keys ----------------
@dataclass(frozen=True)
class EffectParameters:
    intensity: int = DEFAULT_INTENSITY

    def __post_init__(self):
        clamped = min(MAX_INTENSITY, max(MIN_INTENSITY, int(round(self.intensity))))
        object.__setattr__(self, "intensity", clamped)

    @staticmethod
    def from_raw(value) -> "EffectParameters":
        """Clamp anything number-like into [1, 10]; non-numbers get the default."""
        try:
            v = float(value)
        except OverflowError:
            # ints too large for a float still have a sign
            return EffectParameters(MAX_INTENSITY if value > 0 else MIN_INTENSITY)
        except (TypeError, ValueError):
            logger.debug("Non-numeric intensity %r, using %d", value, DEFAULT_INTENSITY)
            return EffectParameters(DEFAULT_INTENSITY)
        if math.isnan(v):
            return EffectParameters(DEFAULT_INTENSITY)
        v = min(float(MAX_INTENSITY), max(float(MIN_INTENSITY), v))
        return EffectParameters(int(round(v)))

    @property
    def factor(self) -> float:
        return self.intensity / 10


@dataclass(frozen=True)
class ToolStyleKey:
    tool: str
    style: str


@dataclass(frozen=True)
class ToolPipeline:
    tool: str
    styles: Dict[str, Tuple[Step, ...]]
    prelude: Tuple[Step, ...] = ()
    finish: Tuple[Step, ...] = ()
    output_format: str = "JPEG"

    def style_steps(self, style: str) -> Tuple[Step, ...]:
        return self.styles.get(style, self.styles[DEFAULT_STYLE])


@dataclass(frozen=True)
class Pipeline:
    key: ToolStyleKey
    steps: Tuple[Step, ...]
    output_format: str
    prompt_groups: Tuple[str, ...] = field(default=())

    @property
    def effect_names(self) -> Tuple[str, ...]:
        return tuple(s.effect for s in self.steps)


# ---------------- lookup table ----------------
# Scales are multipliers on factor (= intensity / 10). Grain steps take a
# noise amplitude instead, so their scale is in channel units per factor.
_OIL = (Step("oil-painting"), Step("color-blend", 0.6))

TOOLS: Dict[str, ToolPipeline] = {
    "photo-to-art": ToolPipeline(
        tool="photo-to-art",
        styles={
            "oil-painting": _OIL,
            "watercolor": (Step("watercolor"),),
            "impressionist": (
                Step("watercolor", 0.8),
                Step("oil-painting", 0.6),
                Step("color-blend", 0.6 * 0.6),
            ),
            "abstract": (Step("abstract"),),
            "digital-art": (Step("saturation-boost"), Step("dramatic-contrast", 10 / 15)),
            DEFAULT_STYLE: _OIL,
        },
        finish=(Step("film-grain", 20.0),),
    ),
    "style-transfer": ToolPipeline(
        tool="style-transfer",
        styles={
            "van-gogh": (Step("van-gogh-swirl"), Step("van-gogh-colors")),
            "picasso": (Step("picasso-cubist"),),
            "monet": (Step("watercolor"),),
            "da-vinci": (
                Step("warm-palette", 10 / 15),
                Step("oil-painting", 0.7),
                Step("color-blend", 0.7 * 0.6),
            ),
            "hokusai": (Step("woodblock"),),
            DEFAULT_STYLE: (Step("van-gogh-swirl", 0.8), Step("van-gogh-colors", 0.8)),
        },
    ),
    "vintage-filter": ToolPipeline(
        tool="vintage-filter",
        styles={
            "1950s": (Step("kodachrome"), Step("film-grain", 15.0), Step("vignette")),
            "1970s": (Step("seventies-warmth"),),
            "sepia": (Step("sepia"),),
            "film-grain": (Step("film-grain", 80.0),),
            DEFAULT_STYLE: (Step("sepia"), Step("vignette", 10 / 12)),
        },
        finish=(Step("vignette", 10 / 15),),
    ),
    "sketch-maker": ToolPipeline(
        tool="sketch-maker",
        prelude=(Step("grayscale", 1.0, absolute=True),),
        styles={
            "charcoal": (Step("charcoal"), Step("charcoal-smudge")),
            "pen-ink": (Step("charcoal"), Step("charcoal-smudge"), Step("dramatic-contrast", 10 / 8)),
            "line-art": (Step("line-art"),),
            DEFAULT_STYLE: (Step("charcoal", 0.7), Step("charcoal-smudge", 0.7)),
        },
        finish=(Step("paper-grain", 30.0),),
    ),
    "color-enhance": ToolPipeline(
        tool="color-enhance",
        styles={
            "vibrant": (Step("saturation-boost", 10 / 6),),
            "natural": (Step("exposure-lift", 10 / 30),),
            "cinematic": (Step("cinematic-grading"),),
            DEFAULT_STYLE: (Step("saturation-boost", 10 / 6), Step("dramatic-contrast", 0.5)),
        },
        finish=(Step("exposure-lift", 0.5),),
    ),
    "background-remove": ToolPipeline(
        tool="background-remove",
        styles={
            "soft-edge": (Step("vignette", 10 / 8),),
            "precise": (Step("dramatic-contrast"),),
            "edge-detect": (Step("edge-threshold"),),
            DEFAULT_STYLE: (Step("vignette", 10 / 8),),
        },
        output_format="PNG",
    ),
}


def _fold(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip().casefold()


def normalize_key(tool: Optional[str], style: Optional[str]) -> ToolStyleKey:
    """Map any (tool, style) pair onto a supported entry of the table."""
    t, s = _fold(tool), _fold(style)
    if t not in TOOLS:
        if t:
            logger.info("Unknown tool %r, falling back to %s/%s", tool, DEFAULT_TOOL, DEFAULT_STYLE)
        return ToolStyleKey(DEFAULT_TOOL, DEFAULT_STYLE)
    if s not in TOOLS[t].styles:
        if s and s != DEFAULT_STYLE:
            logger.debug("Unknown style %r for %s, using default", style, t)
        s = DEFAULT_STYLE
    return ToolStyleKey(t, s)


def resolve(tool: Optional[str], style: Optional[str], prompt: Optional[str] = "") -> Pipeline:
    key = normalize_key(tool, style)
    tp = TOOLS[key.tool]
    groups = prompt_modulator.match_groups(prompt)
    steps = (
        tp.prelude
        + tp.style_steps(key.style)
        + tuple(g.step for g in groups)
        + tp.finish
    )
    return Pipeline(
        key=key,
        steps=steps,
        output_format=tp.output_format,
        prompt_groups=tuple(g.name for g in groups),
    )


def run_pipeline(buf: PixelBuffer, pipeline: Pipeline, params: EffectParameters,
                 rng: Optional[np.random.Generator] = None) -> PixelBuffer:
    """Apply every step in order to ``buf`` (in place) and return it."""
    if rng is None:
        rng = np.random.default_rng()
    for i, step in enumerate(pipeline.steps):
        f = step.factor_for(params.factor)
        logger.debug("[%s/%s] pass %d: %s (factor=%.3f)",
                     pipeline.key.tool, pipeline.key.style, i, step.effect, f)
        step.run(buf, params.factor, rng)
    return buf


def list_styles() -> Dict[str, Tuple[str, ...]]:
    return {name: tuple(sorted(tp.styles)) for name, tp in TOOLS.items()}
