"""
Simulation engine: one update() call advances the market by one step.

Per step:
1. elapsed = clock() - scenario start
2. scheduler lookup -> regime, sign, optional target
3. breakout notifications (warning, start, progress, completion)
4. generator step; the last tick sets best bid/ask and the size-weighted
   mid. A step with no ticks repeats the previous entry.
5. push {bid, ask, mid} into the price buffer (capacity 2 * window + 1)
6. once the buffer is full, evaluate the centered pivot at index `window`

The pivot and its bid/ask lag the live quote by `window` steps.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Protocol

import numpy as np

from ..config.constants import (
    DEFAULT_PROGRESS_THROTTLE_S,
    DEFAULT_WARNING_THROTTLE_S,
    DEFAULT_WINDOW_SECONDS,
    TARGET_REACHED_PCT,
    TARGET_SETTLED_PCT,
)
from ..model.regime_model import RegimeModel
from ..model.tick_generator import TickGenerator
from ..model.types import Pivot, Regime, Sign, Tick
from ..scenario.scheduler import RegimeLookup, RegimeScheduler, RegimeSegment
from ..scenario.spec import ScenarioSpec, ranging_scenario
from ..utils.logger import get_logger
from .buffer import PriceBuffer, detect_pivot
from .notifier import BreakoutNotifier

logger = get_logger()


class QuoteSplitter(Protocol):
    """Turns one synthetic tick into per-venue quotes."""

    def __call__(self, tick: Tick) -> list[Any]: ...


@dataclass(frozen=True)
class StepResult:
    """Snapshot of the engine after one update()."""
    elapsed: float
    bid: float
    ask: float
    mid: float
    regime: Regime
    sign: Sign
    target_price: float | None
    in_breakout: bool
    pivot: Pivot | None
    pivot_bid: float
    pivot_ask: float
    ticks: tuple[Tick, ...] = field(default_factory=tuple)

    @property
    def n_ticks(self) -> int:
        return len(self.ticks)


class SimulationEngine:
    """
    Orchestrates scheduler, generator, notifier and pivot buffer.

    Args:
        model: Regime model for the tick generator.
        scenario: Scenario to run (defaults to the ranging preset).
        window_seconds: Pivot half-width in steps.
        clock: Seconds source for elapsed time and notifier throttles.
        rng: Generator shared by the scheduler and tick generator
            (defaults to the model's generator).
        quote_splitter: Optional collaborator fed the last tick of each step.
        warning_throttle: Minimum seconds between warnings.
        progress_throttle: Minimum seconds between progress events.
    """

    def __init__(
        self,
        model: RegimeModel,
        scenario: ScenarioSpec | None = None,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        rng: np.random.Generator | None = None,
        quote_splitter: QuoteSplitter | None = None,
        warning_throttle: float = DEFAULT_WARNING_THROTTLE_S,
        progress_throttle: float = DEFAULT_PROGRESS_THROTTLE_S,
    ) -> None:
        self.model = model
        self.rng = rng if rng is not None else model.rng
        self.window = window_seconds
        self.quote_splitter = quote_splitter
        self._clock = clock

        self._buffer = PriceBuffer(window_seconds)
        self._scheduler = RegimeScheduler(rng=self.rng)
        self._notifier = BreakoutNotifier(
            clock=clock,
            warning_throttle=warning_throttle,
            progress_throttle=progress_throttle,
        )

        self._install(scenario or ranging_scenario())

    def _install(self, scenario: ScenarioSpec) -> None:
        """Replace every piece of per-scenario state in one go."""
        bid = scenario.start_price
        ask = scenario.start_ask

        self._scenario = scenario
        self._generator = TickGenerator(self.model, bid, ask, rng=self.rng)
        self._scheduler.schedule(scenario)
        self._buffer.clear()

        self.best_bid = bid
        self.best_ask = ask
        self.pivot: Pivot | None = None
        self.pivot_bid = bid
        self.pivot_ask = ask
        self.last_exchange_quotes: list[Any] = []

        self._start_time = self._clock()
        self._elapsed = 0.0
        self._start_signaled = False

    def reset_with_scenario(self, scenario: ScenarioSpec) -> None:
        """Swap in a new scenario: reschedule, reset notifier, prices and buffer."""
        self._notifier.reset()
        self._install(scenario)
        logger.scenario("RESET", name=scenario.name, start_price=scenario.start_price)

    # ==========================================================================
    # Step
    # ==========================================================================

    def update(self) -> StepResult:
        """Advance one step and return its snapshot."""
        self._elapsed = self._clock() - self._start_time
        lookup = self._scheduler.get_current_regime(self._elapsed)

        self._handle_notifications()

        ticks = self._generator.step(
            datetime.now(),
            regime=lookup.regime,
            sign=lookup.sign,
            target_price=lookup.target_price,
        )

        if ticks:
            last = ticks[-1]
            if self.quote_splitter is not None:
                self.last_exchange_quotes = list(self.quote_splitter(last))
            bid, ask = last.bid, last.ask
            mid = self._generator.volume_weighted_mid(last.bid_size, last.ask_size)
            self.best_bid, self.best_ask = bid, ask
        else:
            previous = self._buffer.latest()
            if previous is not None:
                bid, ask, mid = previous.bid, previous.ask, previous.mid
            else:
                bid, ask = self.best_bid, self.best_ask
                mid = (bid + ask) / 2

        self._buffer.push(bid, ask, mid)

        pivot, center = detect_pivot(self._buffer, self.window)
        if center is not None:
            self.pivot = pivot
            self.pivot_bid = center.bid
            self.pivot_ask = center.ask

        return self._snapshot(lookup, bid, ask, mid, ticks)

    def _snapshot(
        self, lookup: RegimeLookup, bid: float, ask: float, mid: float, ticks: list[Tick]
    ) -> StepResult:
        return StepResult(
            elapsed=self._elapsed,
            bid=bid,
            ask=ask,
            mid=mid,
            regime=lookup.regime,
            sign=lookup.sign,
            target_price=lookup.target_price,
            in_breakout=lookup.regime.is_breakout,
            pivot=self.pivot,
            pivot_bid=self.pivot_bid,
            pivot_ask=self.pivot_ask,
            ticks=tuple(ticks),
        )

    def _handle_notifications(self) -> None:
        event = self._scheduler.get_breakout_event()
        breakout = self._scenario.breakout
        if event is None or not breakout.is_active:
            return

        current_price = self.best_bid

        if breakout.notification and breakout.pre_warning:
            self._notifier.schedule_warning(
                event.start_time,
                self._elapsed,
                breakout.pre_warning,
                event.type,
                breakout.magnitude,
            )

        in_breakout = self._scheduler.is_in_breakout(self._elapsed)

        if in_breakout and not self._start_signaled:
            self._notifier.notify_breakout_start(
                event.type,
                current_price,
                event.target_price,
                breakout.magnitude,
                event.duration,
            )
            self._start_signaled = True

        distance = abs(event.target_price - current_price)

        if in_breakout and self._start_signaled:
            self._notifier.notify_progress(event.type, current_price, event.target_price)
            if distance < abs(event.target_price) * TARGET_REACHED_PCT:
                self._notifier.notify_breakout_completion(
                    event.type, current_price, event.target_price, breakout.magnitude
                )

        if not in_breakout and self._start_signaled:
            if distance < abs(event.target_price) * TARGET_SETTLED_PCT:
                self._notifier.notify_breakout_completion(
                    event.type, current_price, event.target_price, breakout.magnitude
                )
            # Re-arm for the next breakout episode
            self._start_signaled = False

    # ==========================================================================
    # Queries
    # ==========================================================================

    @property
    def elapsed_time(self) -> float:
        return self._elapsed

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    @property
    def notifier(self) -> BreakoutNotifier:
        return self._notifier

    @property
    def scenario(self) -> ScenarioSpec:
        return self._scenario

    @property
    def scheduler(self) -> RegimeScheduler:
        return self._scheduler

    @property
    def buffer(self) -> PriceBuffer:
        return self._buffer

    @property
    def timeline(self) -> list[RegimeSegment]:
        return self._scheduler.get_timeline()

    def is_in_breakout(self) -> bool:
        return self._scheduler.is_in_breakout(self._elapsed)

    def get_time_until_breakout(self) -> float | None:
        return self._scheduler.get_time_until_breakout(self._elapsed)
