"""
Regime-conditioned tick model and generator.
"""

from .regime_model import (
    FALLBACK_TICK,
    ModelFormatError,
    RegimeModel,
    load_regime_model,
    poisson_knuth,
)
from .tick_generator import TickGenerator, bias_toward_target
from .types import (
    BREAKOUT,
    RANGING,
    BreakoutTag,
    Momentum,
    Pivot,
    Regime,
    Sign,
    Tick,
    TickSample,
    regime_key,
    transition_key,
)

__all__ = [
    "BREAKOUT",
    "FALLBACK_TICK",
    "RANGING",
    "BreakoutTag",
    "ModelFormatError",
    "Momentum",
    "Pivot",
    "Regime",
    "RegimeModel",
    "Sign",
    "Tick",
    "TickGenerator",
    "TickSample",
    "bias_toward_target",
    "load_regime_model",
    "poisson_knuth",
    "regime_key",
    "transition_key",
]
