"""
Shared regime and tick type definitions.

This module is the CANONICAL location for regime tags, signs and the
composite keys the regime model is indexed by. Key construction lives here
only; nothing else should join tags by hand.

Key formats (model file contract):
- regime key:      "<momentum>,<breakout>"         e.g. "N,O"
- transition key:  "<momentum>,<breakout>,<sign>"  e.g. "N,B,U"
- bucket key:      "<delta>,<spread>,<size>"       e.g. "-2,1,3"
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

KEY_SEPARATOR = ","


class Momentum(str, Enum):
    """Momentum category of a regime."""

    NORMAL = "N"


class BreakoutTag(str, Enum):
    """Breakout category of a regime."""

    OUTSIDE = "O"   # ranging, no breakout in progress
    BREAKOUT = "B"  # target-seeking excursion


class Sign(str, Enum):
    """Direction of the last realized price change."""

    UP = "U"
    DOWN = "D"
    FLAT = "F"

    @classmethod
    def from_delta(cls, delta: float) -> "Sign":
        """Sign of a realized price delta."""
        if delta > 0:
            return cls.UP
        if delta < 0:
            return cls.DOWN
        return cls.FLAT


class Pivot(str, Enum):
    """Local extremum tag at the center of the price buffer."""

    HIGH = "PH"
    LOW = "PL"


@dataclass(frozen=True)
class Regime:
    """(momentum, breakout) pair conditioning the tick model."""

    momentum: Momentum
    breakout: BreakoutTag

    @property
    def key(self) -> str:
        """Composite regime key, e.g. "N,O"."""
        return regime_key(self)

    @property
    def is_breakout(self) -> bool:
        return self.breakout is BreakoutTag.BREAKOUT

    def __str__(self) -> str:
        return self.key


RANGING = Regime(Momentum.NORMAL, BreakoutTag.OUTSIDE)
BREAKOUT = Regime(Momentum.NORMAL, BreakoutTag.BREAKOUT)


def regime_key(regime: Regime) -> str:
    """Build the "<momentum>,<breakout>" key used by the rate counters."""
    return KEY_SEPARATOR.join((regime.momentum.value, regime.breakout.value))


def transition_key(regime: Regime, sign: Sign) -> str:
    """Build the "<momentum>,<breakout>,<sign>" key used by the transition table."""
    return KEY_SEPARATOR.join((regime.momentum.value, regime.breakout.value, sign.value))


def split_key(key: str, arity: int) -> list[str]:
    """
    Split a composite key into exactly `arity` non-empty parts.

    Raises:
        ValueError: If the key has the wrong number of parts or an empty part.
    """
    parts = [p.strip() for p in key.split(KEY_SEPARATOR)]
    if len(parts) != arity or any(not p for p in parts):
        raise ValueError(
            f"Expected {arity} comma-separated parts, got '{key}'"
        )
    return parts


def parse_bucket_key(key: str) -> tuple[int, int, int]:
    """
    Parse a "<delta>,<spread>,<size>" bucket key into integer bins.

    Raises:
        ValueError: If the key is not three comma-separated integers.
    """
    delta, spread, size = split_key(key, 3)
    try:
        return int(delta), int(spread), int(size)
    except ValueError:
        raise ValueError(f"Bucket key must hold integers, got '{key}'") from None


@dataclass(frozen=True)
class TickSample:
    """Decoded draw from the transition table."""

    price_delta: float
    spread: float
    size: int


@dataclass(frozen=True)
class Tick:
    """One synthetic top-of-book snapshot."""

    timestamp: datetime
    bid: float
    ask: float
    bid_size: int
    ask_size: int

    @property
    def mid(self) -> float:
        return (self.bid + self.ask) / 2

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "bid": self.bid,
            "ask": self.ask,
            "bid_size": self.bid_size,
            "ask_size": self.ask_size,
        }
