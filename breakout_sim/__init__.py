"""
Breakout Simulator

Synthetic bid/ask price series driven by an empirical regime model, with
scheduled breakout moves (bullish, bearish, fake), centered pivot detection
and throttled breakout lifecycle notifications.
"""

__version__ = "1.0.0"

from .config import get_config
from .engine import (
    BreakoutNotifier,
    NotifierEvent,
    NotifierEventType,
    SimulatedClock,
    SimulationEngine,
    StepResult,
    run_headless,
)
from .model import RegimeModel, TickGenerator, load_regime_model
from .scenario import RegimeScheduler, ScenarioSpec, load_scenario

__all__ = [
    "__version__",
    "get_config",
    "BreakoutNotifier",
    "NotifierEvent",
    "NotifierEventType",
    "RegimeModel",
    "RegimeScheduler",
    "ScenarioSpec",
    "SimulatedClock",
    "SimulationEngine",
    "StepResult",
    "TickGenerator",
    "load_regime_model",
    "load_scenario",
    "run_headless",
]
