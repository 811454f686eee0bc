"""
Breakout lifecycle notifications.

BreakoutNotifier is a two-state machine (idle / in progress) that emits
warning, start, progress and completion events to registered listeners.

- notify_breakout_start: idle -> in progress (ignored when already in progress)
- notify_breakout_completion: in progress -> idle (no-op when idle)
- schedule_warning: throttled, only when 0 < time_to_breakout <= lead
- notify_progress: throttled, only while in progress

Dispatch is synchronous and in registration order. A listener that raises
is logged and skipped; the rest still run.
"""

from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ..config.constants import DEFAULT_PROGRESS_THROTTLE_S, DEFAULT_WARNING_THROTTLE_S
from ..utils.helpers import clamp
from ..utils.logger import get_logger

logger = get_logger()


class NotifierEventType(str, Enum):
    WARNING = "warning"
    START = "start"
    PROGRESS = "progress"
    COMPLETION = "completion"


@dataclass(frozen=True)
class NotifierEvent:
    """
    Payload handed to listeners.

    Optional fields are filled per event kind:
        warning:    time_to_breakout, magnitude
        start:      current_price, target_price, magnitude, expected_duration
        progress:   current_price, target_price, progress
        completion: current_price, target_price, magnitude, progress (1.0)
    """
    kind: NotifierEventType
    breakout_type: str
    timestamp: float
    time_to_breakout: float | None = None
    current_price: float | None = None
    target_price: float | None = None
    magnitude: float | None = None
    expected_duration: float | None = None
    progress: float | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "breakout_type": self.breakout_type,
            "timestamp": self.timestamp,
        }
        for key in ("time_to_breakout", "current_price", "target_price",
                    "magnitude", "expected_duration", "progress"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


Listener = Callable[[NotifierEvent], None]


def _type_value(breakout_type: Any) -> str:
    return getattr(breakout_type, "value", breakout_type)


class BreakoutNotifier:
    """
    Emits breakout lifecycle events with duplicate suppression and throttling.

    Args:
        clock: Seconds source used for throttles and event timestamps.
        warning_throttle: Minimum seconds between warnings.
        progress_throttle: Default minimum seconds between progress events.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        warning_throttle: float = DEFAULT_WARNING_THROTTLE_S,
        progress_throttle: float = DEFAULT_PROGRESS_THROTTLE_S,
    ) -> None:
        self._clock = clock
        self.warning_throttle = warning_throttle
        self.progress_throttle = progress_throttle
        self._listeners: dict[NotifierEventType, list[Listener]] = defaultdict(list)

        self._last_warning_time: float | None = None
        self._last_progress_time: float | None = None
        self._in_progress = False
        self._start_price = 0.0

    # ==========================================================================
    # Listener registry
    # ==========================================================================

    def on(self, kind: NotifierEventType | str, callback: Listener) -> None:
        """Register a listener for one event kind."""
        self._listeners[NotifierEventType(kind)].append(callback)

    def on_any(self, callback: Listener) -> None:
        """Register a listener for every event kind."""
        for kind in NotifierEventType:
            self.on(kind, callback)

    def off(self, kind: NotifierEventType | str, callback: Listener) -> None:
        """Remove the first registration of callback for kind (no-op if absent)."""
        callbacks = self._listeners.get(NotifierEventType(kind))
        if callbacks and callback in callbacks:
            callbacks.remove(callback)

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def listener_count(self, kind: NotifierEventType | str) -> int:
        return len(self._listeners.get(NotifierEventType(kind), ()))

    def _emit(self, event: NotifierEvent) -> None:
        # Snapshot so a listener may unsubscribe during dispatch
        for callback in list(self._listeners.get(event.kind, ())):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Breakout listener error ({event.kind.value}): {e}")

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def _throttled(self, last: float | None, now: float, interval: float) -> bool:
        return last is not None and now - last < interval

    def schedule_warning(
        self,
        breakout_time: float,
        current_time: float,
        warning_lead: float,
        breakout_type: Any,
        magnitude: float,
    ) -> None:
        """
        Emit a warning when the breakout is at most warning_lead seconds away.

        Args:
            breakout_time: Breakout start, seconds from scenario start.
            current_time: Current elapsed seconds.
            warning_lead: How far ahead to warn.
            breakout_type: bullish, bearish or fake.
            magnitude: Breakout magnitude in percent.
        """
        time_to_breakout = breakout_time - current_time
        if not 0 < time_to_breakout <= warning_lead:
            return

        now = self._clock()
        if self._throttled(self._last_warning_time, now, self.warning_throttle):
            return
        self._last_warning_time = now

        breakout_type = _type_value(breakout_type)
        logger.breakout("WARNING", breakout_type, time_to_breakout=time_to_breakout)
        self._emit(NotifierEvent(
            kind=NotifierEventType.WARNING,
            breakout_type=breakout_type,
            timestamp=now,
            time_to_breakout=time_to_breakout,
            magnitude=magnitude,
        ))

    def notify_breakout_start(
        self,
        breakout_type: Any,
        current_price: float,
        target_price: float,
        magnitude: float,
        expected_duration: float,
    ) -> None:
        if self._in_progress:
            return

        self._in_progress = True
        self._start_price = current_price

        breakout_type = _type_value(breakout_type)
        logger.breakout("START", breakout_type, price=current_price, target=target_price)
        self._emit(NotifierEvent(
            kind=NotifierEventType.START,
            breakout_type=breakout_type,
            timestamp=self._clock(),
            current_price=current_price,
            target_price=target_price,
            magnitude=magnitude,
            expected_duration=expected_duration,
        ))

    def notify_progress(
        self,
        breakout_type: Any,
        current_price: float,
        target_price: float,
        throttle_seconds: float | None = None,
    ) -> None:
        """
        Emit progress toward the target, measured from the start price.

        progress = clamp((current - start) / (target - start), 0, 1),
        or 0 when target equals start.
        """
        if not self._in_progress:
            return

        interval = self.progress_throttle if throttle_seconds is None else throttle_seconds
        now = self._clock()
        if self._throttled(self._last_progress_time, now, interval):
            return
        self._last_progress_time = now

        total_move = target_price - self._start_price
        progress = (
            clamp((current_price - self._start_price) / total_move, 0.0, 1.0)
            if total_move != 0 else 0.0
        )

        breakout_type = _type_value(breakout_type)
        logger.breakout("PROGRESS", breakout_type, price=current_price, progress=progress)
        self._emit(NotifierEvent(
            kind=NotifierEventType.PROGRESS,
            breakout_type=breakout_type,
            timestamp=now,
            current_price=current_price,
            target_price=target_price,
            progress=progress,
        ))

    def notify_breakout_completion(
        self,
        breakout_type: Any,
        current_price: float,
        target_price: float,
        magnitude: float,
    ) -> None:
        if not self._in_progress:
            return

        self._in_progress = False

        breakout_type = _type_value(breakout_type)
        logger.breakout("COMPLETE", breakout_type, price=current_price, target=target_price)
        self._emit(NotifierEvent(
            kind=NotifierEventType.COMPLETION,
            breakout_type=breakout_type,
            timestamp=self._clock(),
            current_price=current_price,
            target_price=target_price,
            magnitude=magnitude,
            progress=1.0,
        ))

    def is_breakout_in_progress(self) -> bool:
        return self._in_progress

    def reset(self) -> None:
        """Clear throttles and return to idle. Listeners are kept."""
        self._last_warning_time = None
        self._last_progress_time = None
        self._in_progress = False
        self._start_price = 0.0
