from __future__ import annotations
import importlib
import pkgutil
import logging
from typing import Dict, Callable, NamedTuple, Optional
from dataclasses import dataclass

import numpy as np

from pixelbuffer import PixelBuffer

logger = logging.getLogger(__name__)

# Filled once at import time by the @effect decorators, read-only afterwards.
_registry: Dict[str, "EffectMeta"] = {}

FAMILIES = ("texture", "tone", "sketch", "finishing")

# ---------------- shared pixel math ----------------
def clamp(a):
    return np.clip(a, 0.0, 255.0)

def luma(rgb: np.ndarray) -> np.ndarray:
    return 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]

def blend(orig: np.ndarray, new: np.ndarray, factor: float) -> np.ndarray:
    return orig * (1.0 - factor) + new * factor

def channel_gains(rgb: np.ndarray, r: float, g: float, b: float) -> np.ndarray:
    """Multiply R, G, B by per-channel gains and clamp."""
    return clamp(rgb * np.array([r, g, b], dtype=np.float32))

# ---------------- registry ----------------
@dataclass(frozen=True)
class EffectMeta:
    name: str
    func: Callable[..., None]
    family: str
    stochastic: bool

    def apply(self, buf: PixelBuffer, factor: float, rng: Optional[np.random.Generator] = None) -> None:
        if self.stochastic:
            if rng is None:
                rng = np.random.default_rng()
            self.func(buf, factor, rng)
        else:
            self.func(buf, factor)

class Step(NamedTuple):
    """One pass of a pipeline: an effect name and how to derive its factor.

    The effect receives ``base_factor * scale``, or ``scale`` itself when
    ``absolute`` is set.
    """
    effect: str
    scale: float = 1.0
    absolute: bool = False

    def factor_for(self, base_factor: float) -> float:
        return self.scale if self.absolute else base_factor * self.scale

    def run(self, buf: PixelBuffer, base_factor: float, rng: Optional[np.random.Generator] = None) -> None:
        get_effect(self.effect).apply(buf, self.factor_for(base_factor), rng)

def effect(name: str, *, family: str, stochastic: bool = False):
    if family not in FAMILIES:
        raise ValueError(f"unknown effect family: {family}")
    def deco(fn: Callable[..., None]):
        if name in _registry and _registry[name].func is not fn:
            raise ValueError(f"effect already registered: {name}")
        _registry[name] = EffectMeta(name=name, func=fn, family=family, stochastic=stochastic)
        return fn
    return deco

# ---------------- discovery ----------------
def _import_effects_package(package: str = "effects") -> None:
    pkg = importlib.import_module(package)
    if hasattr(pkg, "__path__"):
        for m in pkgutil.iter_modules(pkg.__path__):
            importlib.import_module(f"{package}.{m.name}")

def discover_effects(package: str = "effects") -> Dict[str, EffectMeta]:
    """Import every effect module in the package and return the registry."""
    _import_effects_package(package)
    logger.debug("Effects registered: %d -> %s", len(_registry), sorted(_registry.keys()))
    return dict(_registry)

def get_effect(name: str) -> EffectMeta:
    if name not in _registry:
        _import_effects_package()
    try:
        return _registry[name]
    except KeyError:
        raise KeyError(f"unknown effect: {name}") from None
