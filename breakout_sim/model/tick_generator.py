"""
Synthetic bid/ask generator driven by the regime model.

Each call to step() simulates one second: the model decides how many quote
updates arrive, and each update moves the running bid by a sampled price
delta. The sign used to condition a draw is the realized direction of the
previous update within the same second.

When a target price is supplied, each delta is blended toward the target
by bias_toward_target() so breakouts land near their target without
losing the model's texture.
"""

from __future__ import annotations

import math
from datetime import datetime

import numpy as np

from ..config.constants import (
    BIAS_MAX_FACTOR,
    BIAS_MAX_STEP,
    BIAS_PROXIMITY_PCT,
    BIAS_STEP_FRACTION,
    BIAS_URGENCY_SCALE,
    MIN_SPREAD,
)
from ..utils.helpers import clamp, round_cents
from .regime_model import RegimeModel
from .types import RANGING, Regime, Sign, Tick


def bias_toward_target(model_delta: float, current_price: float, target_price: float) -> float:
    """
    Blend a model price delta with a pull toward the target.

    final = b * (direction * step) + (1 - b) * model_delta
    where
        b    = 0.7 * clamp(|distance| / price * 20, 0, 1)
        step = min(0.05, |distance| * 0.1)

    Within 0.1% of the target the model delta is returned unchanged.

    Args:
        model_delta: Unbiased delta drawn from the model.
        current_price: Generator's current (unrounded) bid.
        target_price: Price the breakout is heading to.

    Returns:
        Adjusted delta.
    """
    distance = target_price - current_price
    if abs(distance) < abs(current_price) * BIAS_PROXIMITY_PCT:
        return model_delta

    direction = math.copysign(1.0, distance)
    urgency = clamp(abs(distance) / current_price * BIAS_URGENCY_SCALE, 0.0, 1.0)
    bias_factor = BIAS_MAX_FACTOR * urgency
    step = min(BIAS_MAX_STEP, abs(distance) * BIAS_STEP_FRACTION)

    return bias_factor * (direction * step) + (1.0 - bias_factor) * model_delta


class TickGenerator:
    """
    Owns the running bid/ask and turns model draws into ticks.

    Attributes:
        model: Regime model supplying update counts and tick shapes.
        rng: Generator used for every draw made through this instance.
    """

    def __init__(
        self,
        model: RegimeModel,
        bid: float,
        ask: float,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.model = model
        self.rng = rng if rng is not None else model.rng
        self._bid = bid
        self._ask = ask

    @property
    def bid(self) -> float:
        return self._bid

    @property
    def ask(self) -> float:
        return self._ask

    @property
    def mid(self) -> float:
        return (self._bid + self._ask) / 2

    def reset(self, bid: float, ask: float) -> None:
        """Overwrite the running quote in one go."""
        self._bid, self._ask = bid, ask

    def volume_weighted_mid(self, bid_size: int, ask_size: int) -> float:
        """
        Size-weighted mid: (bid * ask_size + ask * bid_size) / total size.

        Falls back to the arithmetic mid when both sizes are zero.
        """
        total = bid_size + ask_size
        if total == 0:
            return self.mid
        return (self._bid * ask_size + self._ask * bid_size) / total

    def step(
        self,
        timestamp: datetime,
        regime: Regime = RANGING,
        sign: Sign = Sign.FLAT,
        target_price: float | None = None,
    ) -> list[Tick]:
        """
        Simulate one second of quote updates.

        Args:
            timestamp: Stamp applied to every tick of this second.
            regime: Active regime.
            sign: Direction conditioning the first draw.
            target_price: Optional breakout target to bias toward.

        Returns:
            Ticks in arrival order (possibly empty).
        """
        n_updates = self.model.sample_update_count(regime, rng=self.rng)
        ticks: list[Tick] = []

        current_sign = sign
        for _ in range(n_updates):
            sample = self.model.sample_tick(regime, current_sign, rng=self.rng)

            delta = sample.price_delta
            if target_price is not None:
                delta = bias_toward_target(delta, self._bid, target_price)

            self._bid += delta
            self._ask = max(self._bid + sample.spread, self._bid + MIN_SPREAD)

            bid = round_cents(self._bid)
            ask = round_cents(max(round_cents(self._ask), bid + MIN_SPREAD))
            half = sample.size // 2
            ticks.append(Tick(
                timestamp=timestamp,
                bid=bid,
                ask=ask,
                bid_size=half,
                ask_size=half,
            ))

            current_sign = Sign.from_delta(delta)

        return ticks
