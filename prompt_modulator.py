from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from effects_core import Step
from pixelbuffer import PixelBuffer

logger = logging.getLogger(__name__)

PROMPT_MAX_CHARS = 500


@dataclass(frozen=True)
class KeywordGroup:
    name: str
    keywords: Tuple[str, ...]
    step: Step

    def matches(self, folded_prompt: str) -> bool:
        return any(k in folded_prompt for k in self.keywords)


# Declaration order is application order. Groups are cumulative: every group
# whose keywords appear contributes its pass.
PROMPT_GROUPS: Tuple[KeywordGroup, ...] = (
    KeywordGroup("warm", ("warm", "orange", "sunset"), Step("warm-palette", 0.8)),
    KeywordGroup("cool", ("cool", "blue", "winter"), Step("cool-palette", 0.8)),
    KeywordGroup("vibrant", ("vibrant", "colorful", "bright"), Step("saturation-boost", 1.2)),
    KeywordGroup("dramatic", ("dark", "moody", "dramatic"), Step("dramatic-contrast")),
    KeywordGroup("dreamy", ("dreamy", "soft", "ethereal"), Step("dreamy-glow")),
    KeywordGroup("vintage", ("vintage", "retro", "old"), Step("sepia")),
    KeywordGroup("impressionist", ("impressionist", "monet"), Step("impressionist-touch")),
    KeywordGroup("abstract", ("abstract", "modern"), Step("abstract-elements")),
)


def normalize_prompt(prompt: Optional[str]) -> str:
    if not prompt:
        return ""
    if not isinstance(prompt, str):
        prompt = str(prompt)
    if len(prompt) > PROMPT_MAX_CHARS:
        logger.debug("Prompt truncated from %d to %d chars", len(prompt), PROMPT_MAX_CHARS)
    return prompt[:PROMPT_MAX_CHARS].casefold()


def match_groups(prompt: Optional[str]) -> List[KeywordGroup]:
    folded = normalize_prompt(prompt)
    if not folded:
        return []
    return [g for g in PROMPT_GROUPS if g.matches(folded)]


def modulation_steps(prompt: Optional[str]) -> List[Step]:
    return [g.step for g in match_groups(prompt)]


def apply(buf: PixelBuffer, prompt: Optional[str], factor: float,
          rng: Optional[np.random.Generator] = None) -> List[str]:
    """Run the passes of every matching keyword group; returns the group names."""
    groups = match_groups(prompt)
    for g in groups:
        logger.debug("Prompt group %s -> %s", g.name, g.step.effect)
        g.step.run(buf, factor, rng)
    return [g.name for g in groups]
