"""
Regime scheduler: turns a ScenarioSpec into a timeline of regime segments.

schedule() runs once per scenario. It draws the breakout timing, derives
each breakout's duration from its speed, and lays out ranging and breakout
segments so that the timeline covers [0, duration) with no gaps and no
overlaps. Every call redraws the random timing.

get_current_regime() is a lookup over the built timeline. Past the last
segment it keeps returning the last segment (the final state is frozen).

Two breakout queries exist on purpose:
- is_in_breakout(): the active segment is any breakout segment (fake
  excursions and their reversals included).
- is_in_primary_breakout(): elapsed time lies inside the recorded primary
  BreakoutEvent.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass

import numpy as np

from ..config.constants import (
    ACCELERATING_BASE_S,
    ACCELERATING_MAX_S,
    ACCELERATING_MIN_S,
    ACCELERATING_PER_PCT_S,
    DEFAULT_BREAKOUT_DURATION_S,
    GRADUAL_BASE_S,
    GRADUAL_MAX_S,
    GRADUAL_MIN_S,
    GRADUAL_PER_PCT_S,
    INSTANT_DURATION_S,
)
from ..model.types import BREAKOUT, RANGING, Regime, Sign
from ..utils.helpers import clamp
from ..utils.logger import get_logger
from .spec import BreakoutSpeed, BreakoutType, ScenarioSpec

logger = get_logger()


@dataclass(frozen=True)
class RegimeSegment:
    """Half-open [start_time, end_time) slice of the timeline, in seconds."""
    start_time: float
    end_time: float
    regime: Regime
    sign: Sign
    target_price: float | None = None
    description: str = ""

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class BreakoutEvent:
    """The scenario's primary breakout as scheduled."""
    start_time: float
    end_time: float
    type: BreakoutType
    target_price: float
    speed: BreakoutSpeed

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class RegimeLookup:
    """What the generator should run right now."""
    regime: Regime
    sign: Sign
    target_price: float | None = None


_IDLE = RegimeLookup(regime=RANGING, sign=Sign.FLAT)


@dataclass(frozen=True)
class _PendingEvent:
    start_time: float
    end_time: float
    target_price: float
    is_primary: bool
    description: str


def breakout_duration(speed: BreakoutSpeed, magnitude_pct: float) -> float:
    """
    Seconds a breakout takes to play out.

    instant:      2s
    gradual:      clamp(10 + 5 * |mag|, 8, 30)
    accelerating: clamp(15 + 8 * |mag|, 10, 40)
    """
    magnitude_pct = abs(magnitude_pct)
    if speed is BreakoutSpeed.INSTANT:
        return INSTANT_DURATION_S
    if speed is BreakoutSpeed.GRADUAL:
        return clamp(GRADUAL_BASE_S + magnitude_pct * GRADUAL_PER_PCT_S, GRADUAL_MIN_S, GRADUAL_MAX_S)
    if speed is BreakoutSpeed.ACCELERATING:
        return clamp(
            ACCELERATING_BASE_S + magnitude_pct * ACCELERATING_PER_PCT_S,
            ACCELERATING_MIN_S,
            ACCELERATING_MAX_S,
        )
    return DEFAULT_BREAKOUT_DURATION_S


class RegimeScheduler:
    """
    Builds and queries the regime timeline of one scenario.

    Attributes:
        rng: Generator used to draw breakout start times.
    """

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self._timeline: list[RegimeSegment] = []
        self._starts: list[float] = []
        self._scenario: ScenarioSpec | None = None
        self._breakout_event: BreakoutEvent | None = None

    def _draw_start(self, time_window: tuple[float, float]) -> float:
        lo, hi = time_window
        return lo + self.rng.random() * (hi - lo)

    def schedule(self, scenario: ScenarioSpec) -> list[RegimeSegment]:
        """
        Build the timeline for a scenario (replaces any previous one).

        Returns:
            A copy of the new timeline.
        """
        self.reset()
        self._scenario = scenario
        start_price = scenario.start_price
        duration = scenario.duration
        breakout = scenario.breakout

        if breakout.is_active:
            start = self._draw_start(breakout.time_window)
            end = min(start + breakout_duration(breakout.speed, breakout.magnitude), duration)
            self._breakout_event = BreakoutEvent(
                start_time=start,
                end_time=end,
                type=breakout.type,
                target_price=start_price * (1 + breakout.magnitude / 100),
                speed=breakout.speed,
            )

        events: list[_PendingEvent] = []
        for fake in scenario.fake_breakouts:
            fake_start = self._draw_start(fake.time_window)
            fake_end = fake_start + breakout_duration(BreakoutSpeed.GRADUAL, fake.magnitude)
            events.append(_PendingEvent(
                start_time=fake_start,
                end_time=fake_end,
                target_price=start_price * (1 + fake.magnitude / 100),
                is_primary=False,
                description="Fake breakout",
            ))
            events.append(_PendingEvent(
                start_time=fake_end,
                end_time=fake_end + fake.reversal_speed,
                target_price=start_price,
                is_primary=False,
                description="Fake breakout reversal",
            ))

        if self._breakout_event is not None:
            bullish = self._breakout_event.target_price > start_price
            events.append(_PendingEvent(
                start_time=self._breakout_event.start_time,
                end_time=self._breakout_event.end_time,
                target_price=self._breakout_event.target_price,
                is_primary=True,
                description=f"Main {'bullish' if bullish else 'bearish'} breakout",
            ))

        # Stable: on equal starts fakes stay ahead of the primary
        events.sort(key=lambda e: e.start_time)

        current = 0.0
        for event in events:
            # Clip to the free part of [current, duration) so segments never overlap
            seg_start = max(event.start_time, current)
            seg_end = min(event.end_time, duration)
            if seg_start >= seg_end:
                continue

            if current < seg_start:
                self._append(RegimeSegment(
                    start_time=current,
                    end_time=seg_start,
                    regime=RANGING,
                    sign=Sign.FLAT,
                    description="Ranging period",
                ))

            self._append(RegimeSegment(
                start_time=seg_start,
                end_time=seg_end,
                regime=BREAKOUT,
                sign=Sign.UP if event.target_price > start_price else Sign.DOWN,
                target_price=event.target_price,
                description=event.description,
            ))
            current = seg_end

        if current < duration:
            self._append(RegimeSegment(
                start_time=current,
                end_time=duration,
                regime=RANGING,
                sign=Sign.FLAT,
                description="Post-breakout ranging" if events else "Ranging period",
            ))

        breakout_window = (
            f"{self._breakout_event.start_time:.1f}-{self._breakout_event.end_time:.1f}s"
            if self._breakout_event else "none"
        )
        logger.scenario(
            "SCHEDULED",
            name=scenario.name,
            segments=len(self._timeline),
            breakout=breakout.type.value,
            window=breakout_window,
        )
        return self.get_timeline()

    def _append(self, segment: RegimeSegment) -> None:
        self._timeline.append(segment)
        self._starts.append(segment.start_time)

    def get_current_regime(self, elapsed: float) -> RegimeLookup:
        """Regime, sign and optional target at the given elapsed time."""
        if not self._timeline:
            return _IDLE

        idx = bisect.bisect_right(self._starts, elapsed) - 1
        segment = self._timeline[clamp(idx, 0, len(self._timeline) - 1)]
        return RegimeLookup(
            regime=segment.regime,
            sign=segment.sign,
            target_price=segment.target_price,
        )

    def is_in_breakout(self, elapsed: float) -> bool:
        """True inside any breakout segment (fake or primary)."""
        return self.get_current_regime(elapsed).regime.is_breakout

    def is_in_primary_breakout(self, elapsed: float) -> bool:
        """True inside the primary breakout's own [start, end) window."""
        event = self._breakout_event
        return event is not None and event.start_time <= elapsed < event.end_time

    def get_time_until_breakout(self, elapsed: float) -> float | None:
        """Seconds until the primary breakout starts, or None if none is ahead."""
        if self._breakout_event is None:
            return None
        remaining = self._breakout_event.start_time - elapsed
        return remaining if remaining > 0 else None

    def get_breakout_event(self) -> BreakoutEvent | None:
        return self._breakout_event

    def get_scenario(self) -> ScenarioSpec | None:
        return self._scenario

    def get_timeline(self) -> list[RegimeSegment]:
        return list(self._timeline)

    def reset(self) -> None:
        self._timeline = []
        self._starts = []
        self._scenario = None
        self._breakout_event = None
