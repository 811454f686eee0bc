"""
Simulation engine, pivot buffer, breakout notifier and headless runner.
"""

from .buffer import BufferEntry, PriceBuffer, detect_pivot
from .notifier import BreakoutNotifier, NotifierEvent, NotifierEventType
from .recorder import HeadlessRun, SimulatedClock, run_headless
from .simulation import QuoteSplitter, SimulationEngine, StepResult

__all__ = [
    "BreakoutNotifier",
    "BufferEntry",
    "HeadlessRun",
    "NotifierEvent",
    "NotifierEventType",
    "PriceBuffer",
    "QuoteSplitter",
    "SimulatedClock",
    "SimulationEngine",
    "StepResult",
    "detect_pivot",
    "run_headless",
]
