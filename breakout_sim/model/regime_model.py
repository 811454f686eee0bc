"""
Empirical regime-conditioned tick model.

Holds two frequency tables fitted offline from real quote data:

- Rate counters: ticks observed and seconds observed per regime. The
  update rate of a regime is lambda = ticks / max(1, seconds).
- Transition table: regime+sign key -> {bucket key: weight}. A bucket is a
  (price delta, spread, size) triple of integer bins decoded with the fixed
  scale factors in config.constants.

Sampling:
- sample_update_count(): Poisson(lambda) via Knuth's multiplication method
  (exact, not an approximation).
- sample_tick(): weighted draw over the decoded buckets of one key. Unknown
  keys and empty/zero-weight distributions return the fallback tick.

The model is read-only after construction. Randomness comes from a numpy
Generator so runs can be reproduced from a seed.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

import numpy as np

from ..config.constants import (
    FALLBACK_PRICE_DELTA,
    FALLBACK_SIZE,
    FALLBACK_SPREAD,
    POISSON_CHUNK,
    PRICE_DELTA_SCALE,
    SIZE_SCALE,
    SPREAD_SCALE,
)
from ..utils.logger import get_logger
from .types import Regime, Sign, TickSample, parse_bucket_key, regime_key, split_key, transition_key

logger = get_logger()

FALLBACK_TICK = TickSample(
    price_delta=FALLBACK_PRICE_DELTA,
    spread=FALLBACK_SPREAD,
    size=FALLBACK_SIZE,
)

_SIGN_VALUES = {s.value for s in Sign}


class ModelFormatError(ValueError):
    """Model document is present but structurally invalid."""


def decode_bucket(delta_bin: int, spread_bin: int, size_bin: int) -> TickSample:
    """Map integer bins to a tick sample (affine, part of the file contract)."""
    return TickSample(
        price_delta=delta_bin * PRICE_DELTA_SCALE,
        spread=spread_bin * SPREAD_SCALE,
        size=size_bin * SIZE_SCALE,
    )


class RegimeModel:
    """
    Regime-conditioned sampler for update counts and tick shapes.

    Example:
        >>> from breakout_sim.model.types import RANGING
        >>> model = RegimeModel.from_dict({
        ...     "transition": {"N,O,F": {"1,2,3": 5}},
        ...     "ticks_per_regime": {"N,O": 30},
        ...     "seconds_per_regime": {"N,O": 10},
        ... })
        >>> model.lambda_for(RANGING)
        3.0
    """

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self._transition: dict[str, dict[str, int]] = {}
        self._buckets: dict[str, tuple[list[TickSample], list[float], float]] = {}
        self._ticks_per_regime: dict[str, float] = {}
        self._seconds_per_regime: dict[str, float] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], rng: np.random.Generator | None = None
    ) -> "RegimeModel":
        """
        Build a model from a parsed model document.

        Missing sections are treated as empty. Anything present must be
        well-formed.

        Raises:
            ModelFormatError: On malformed sections, keys or values.
        """
        if not isinstance(data, dict):
            raise ModelFormatError(
                f"Model document must be a mapping, got {type(data).__name__}"
            )

        def section(name: str) -> Any:
            value = data.get(name)
            return {} if value is None else value

        model = cls(rng=rng)
        model._load_transition(section("transition"))
        model._ticks_per_regime = _load_counter(section("ticks_per_regime"), "ticks_per_regime")
        model._seconds_per_regime = _load_counter(section("seconds_per_regime"), "seconds_per_regime")
        return model

    def _load_transition(self, section: Any) -> None:
        if not isinstance(section, dict):
            raise ModelFormatError("'transition' must map keys to bucket mappings")

        for key, buckets in section.items():
            try:
                _, _, sign = split_key(key, 3)
            except ValueError as e:
                raise ModelFormatError(f"transition key: {e}") from None
            if sign not in _SIGN_VALUES:
                raise ModelFormatError(
                    f"transition key '{key}' has unknown sign '{sign}' "
                    f"(expected one of {sorted(_SIGN_VALUES)})"
                )
            if not isinstance(buckets, dict):
                raise ModelFormatError(f"transition['{key}'] must be a mapping")

            samples: list[TickSample] = []
            weights: list[float] = []
            raw: dict[str, int] = {}
            for bucket_key, weight in buckets.items():
                try:
                    bins = parse_bucket_key(bucket_key)
                except ValueError as e:
                    raise ModelFormatError(f"transition['{key}']: {e}") from None
                if isinstance(weight, bool) or not isinstance(weight, (int, float)) or weight < 0:
                    raise ModelFormatError(
                        f"transition['{key}']['{bucket_key}'] weight must be a "
                        f"non-negative number, got {weight!r}"
                    )
                raw[bucket_key] = weight
                samples.append(decode_bucket(*bins))
                weights.append(float(weight))

            self._transition[key] = raw
            self._buckets[key] = (samples, weights, math.fsum(weights))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def has_data(self) -> bool:
        """True when any transition distribution was loaded."""
        return bool(self._transition)

    def transition_keys(self) -> list[str]:
        return sorted(self._transition)

    def lambda_for(self, regime: Regime) -> float:
        """Poisson update rate of a regime (ticks per second)."""
        key = regime_key(regime)
        seconds = max(1.0, self._seconds_per_regime.get(key) or 1.0)
        ticks = self._ticks_per_regime.get(key, 0.0)
        return ticks / seconds

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the model file format."""
        return {
            "transition": {k: dict(v) for k, v in self._transition.items()},
            "ticks_per_regime": dict(self._ticks_per_regime),
            "seconds_per_regime": dict(self._seconds_per_regime),
        }

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def sample_update_count(
        self, regime: Regime, rng: np.random.Generator | None = None
    ) -> int:
        """Number of quote updates in one second of the given regime."""
        return poisson_knuth(self.lambda_for(regime), rng or self.rng)

    def sample_tick(
        self, regime: Regime, sign: Sign, rng: np.random.Generator | None = None
    ) -> TickSample:
        """Draw a (price delta, spread, size) sample for regime+sign."""
        entry = self._buckets.get(transition_key(regime, sign))
        if entry is None:
            return FALLBACK_TICK

        samples, weights, total = entry
        if not samples or total <= 0:
            return FALLBACK_TICK

        remaining = (rng or self.rng).random() * total
        for sample, weight in zip(samples, weights):
            remaining -= weight
            if remaining <= 0:
                return sample
        # Float residue after the last bucket
        return samples[-1]


def poisson_knuth(lam: float, rng: np.random.Generator) -> int:
    """
    Poisson draw by repeated uniform multiplication.

    Multiplies uniforms until the running product drops to e^-lambda or
    below; the number of factors minus one is Poisson(lambda) distributed.
    lambda <= 0 always yields 0.

    e^-lambda underflows for large lambda, so the rate is split into chunks
    of at most POISSON_CHUNK and the independent chunk draws are summed
    (a sum of Poisson variables is Poisson with the summed rate).
    """
    if lam <= 0:
        return 0
    total = 0
    remaining = lam
    while remaining > 0:
        chunk = min(remaining, POISSON_CHUNK)
        remaining -= chunk
        total += _poisson_small(chunk, rng)
    return total


def _poisson_small(lam: float, rng: np.random.Generator) -> int:
    limit = math.exp(-lam)
    k = 0
    p = 1.0
    while True:
        k += 1
        p *= rng.random()
        if p <= limit:
            return k - 1


def _load_counter(section: Any, name: str) -> dict[str, float]:
    if not isinstance(section, dict):
        raise ModelFormatError(f"'{name}' must map regime keys to numbers")
    counter: dict[str, float] = {}
    for key, value in section.items():
        try:
            split_key(key, 2)
        except ValueError as e:
            raise ModelFormatError(f"{name} key: {e}") from None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ModelFormatError(f"{name}['{key}'] must be a number, got {value!r}")
        counter[key] = float(value)
    return counter


def load_regime_model(
    path: str | Path, rng: np.random.Generator | None = None
) -> RegimeModel:
    """
    Load a model file.

    A missing file is an expected "no model yet" state: the returned model is
    empty and every draw falls back. A present but unreadable file is a
    corrupt asset and fails fast.

    Raises:
        ModelFormatError: If the file is not valid JSON or not a valid model.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Model file not found at {path}, using empty model")
        return RegimeModel(rng=rng)

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ModelFormatError(f"Model file {path} is not valid JSON: {e}") from e

    model = RegimeModel.from_dict(data, rng=rng)
    logger.info(
        f"Loaded regime model from {path} "
        f"({len(model.transition_keys())} transition keys)"
    )
    return model
