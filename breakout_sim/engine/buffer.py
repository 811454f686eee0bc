"""
Fixed-capacity quote buffer and centered pivot detection.

PriceBuffer keeps the last 2 * window + 1 {bid, ask, mid} entries in
parallel numpy rings. Index 0 is the oldest entry, len - 1 the newest.

Pivot rule (centered, look-ahead by `window` steps):
    center = buffer[window]
    PivotHigh if center.mid is strictly greater than every other mid
    PivotLow  if center.mid is strictly less than every other mid
    otherwise no pivot

Ties disqualify the center, so a flat series never produces a pivot.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..model.types import Pivot


@dataclass(frozen=True)
class BufferEntry:
    bid: float
    ask: float
    mid: float


class PriceBuffer:
    """
    Circular buffer of BufferEntry with O(1) push and index access.

    Example:
        >>> buf = PriceBuffer(window=1)       # capacity 3
        >>> for m in (1.0, 3.0, 2.0):
        ...     buf.push(m, m, m)
        >>> detect_pivot(buf, 1)[0]
        <Pivot.HIGH: 'PH'>

    Attributes:
        window: Pivot half-width in steps.
        size: Capacity (2 * window + 1).
    """

    __slots__ = ("window", "size", "_bid", "_ask", "_mid", "_head", "_count")

    def __init__(self, window: int) -> None:
        if window < 1:
            raise ValueError(
                f"window must be >= 1, got {window}\n"
                f"\n"
                f"Fix: PriceBuffer(window=30)"
            )
        self.window = window
        self.size = 2 * window + 1
        self._bid = np.full(self.size, np.nan, dtype=np.float64)
        self._ask = np.full(self.size, np.nan, dtype=np.float64)
        self._mid = np.full(self.size, np.nan, dtype=np.float64)
        self._head = 0  # Next write position
        self._count = 0

    def push(self, bid: float, ask: float, mid: float) -> None:
        """Add an entry, overwriting the oldest once full."""
        self._bid[self._head] = bid
        self._ask[self._head] = ask
        self._mid[self._head] = mid
        self._head = (self._head + 1) % self.size
        if self._count < self.size:
            self._count += 1

    def _physical(self, idx: int) -> int:
        if idx < 0 or idx >= self._count:
            raise IndexError(
                f"Index {idx} out of range [0, {self._count})\n"
                f"\n"
                f"Buffer has {self._count} entries."
            )
        return (self._head - self._count + idx) % self.size

    def __getitem__(self, idx: int) -> BufferEntry:
        p = self._physical(idx)
        return BufferEntry(
            bid=float(self._bid[p]),
            ask=float(self._ask[p]),
            mid=float(self._mid[p]),
        )

    def __len__(self) -> int:
        return self._count

    def is_full(self) -> bool:
        return self._count == self.size

    def clear(self) -> None:
        self._bid.fill(np.nan)
        self._ask.fill(np.nan)
        self._mid.fill(np.nan)
        self._head = 0
        self._count = 0

    def mids(self) -> np.ndarray:
        """Copy of the mid prices in logical order (oldest first)."""
        if self._count == 0:
            return np.array([], dtype=np.float64)
        order = (self._head - self._count + np.arange(self._count)) % self.size
        return self._mid[order].copy()

    def latest(self) -> BufferEntry | None:
        return self[self._count - 1] if self._count else None


def detect_pivot(buffer: PriceBuffer, window: int) -> tuple[Pivot | None, BufferEntry | None]:
    """
    Evaluate the centered pivot on a full buffer.

    Args:
        buffer: Buffer holding 2 * window + 1 entries.
        window: Pivot half-width; the center is buffer[window].

    Returns:
        (pivot, center) where pivot is None when the center is not a strict
        extremum. Both are None while the buffer is still filling.
    """
    if not buffer.is_full():
        return None, None

    center = buffer[window]
    mids = buffer.mids()
    others = np.delete(mids, window)

    if center.mid > others.max():
        return Pivot.HIGH, center
    if center.mid < others.min():
        return Pivot.LOW, center
    return None, center
