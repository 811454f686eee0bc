"""
Headless runs: drive an engine on a simulated clock and collect the output.

    clock = SimulatedClock()
    engine = SimulationEngine(model, bullish_breakout(), clock=clock, rng=rng)
    run = run_headless(engine, steps=60)
    run.frame[["elapsed", "bid", "pivot"]]
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from .notifier import NotifierEvent, NotifierEventType
from .simulation import SimulationEngine

FRAME_COLUMNS = [
    "elapsed", "bid", "ask", "mid", "pivot", "in_breakout",
    "regime", "sign", "target_price", "n_ticks",
]


class SimulatedClock:
    """Manually advanced seconds source."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"Cannot move clock backwards. Got: {seconds}")
        self.now += seconds


@dataclass
class HeadlessRun:
    """Step-by-step frame plus every notifier event seen during the run."""
    frame: pd.DataFrame
    events: list[NotifierEvent] = field(default_factory=list)

    def events_frame(self) -> pd.DataFrame:
        return pd.DataFrame([e.to_dict() for e in self.events])

    def count(self, kind: NotifierEventType | str) -> int:
        kind = NotifierEventType(kind)
        return sum(1 for e in self.events if e.kind is kind)


def run_headless(
    engine: SimulationEngine,
    steps: int,
    step_seconds: float = 1.0,
    clock: SimulatedClock | None = None,
) -> HeadlessRun:
    """
    Run `steps` updates, advancing the simulated clock between them.

    Args:
        engine: Engine built with a SimulatedClock.
        steps: Number of update() calls.
        step_seconds: Simulated seconds between updates.
        clock: Clock to advance (defaults to the engine's own clock).

    Returns:
        HeadlessRun with one frame row per step.

    Raises:
        ValueError: If no simulated clock is available or steps < 0.
    """
    if steps < 0:
        raise ValueError(f"steps must be >= 0. Got: {steps}")

    clock = clock or engine.clock
    if not isinstance(clock, SimulatedClock):
        raise ValueError(
            "run_headless needs a SimulatedClock.\n"
            "\n"
            "Fix:\n"
            "  clock = SimulatedClock()\n"
            "  engine = SimulationEngine(model, scenario, clock=clock)"
        )

    events: list[NotifierEvent] = []
    listener = events.append
    notifier = engine.notifier
    notifier.on_any(listener)

    rows = []
    try:
        for _ in range(steps):
            result = engine.update()
            rows.append({
                "elapsed": result.elapsed,
                "bid": result.bid,
                "ask": result.ask,
                "mid": result.mid,
                "pivot": result.pivot.value if result.pivot else None,
                "in_breakout": result.in_breakout,
                "regime": result.regime.key,
                "sign": result.sign.value,
                "target_price": result.target_price,
                "n_ticks": result.n_ticks,
            })
            clock.advance(step_seconds)
    finally:
        for kind in NotifierEventType:
            notifier.off(kind, listener)

    return HeadlessRun(frame=pd.DataFrame(rows, columns=FRAME_COLUMNS), events=events)
