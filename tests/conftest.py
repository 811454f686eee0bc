"""
Pytest configuration for simulator tests.
"""

import numpy as np
import pytest

from breakout_sim.model.regime_model import RegimeModel


class FakeClock:
    """Manually advanced seconds source for throttle and elapsed-time tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator so stochastic tests are repeatable."""
    return np.random.default_rng(12345)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def model_document() -> dict:
    """Small model covering ranging and breakout regimes."""
    return {
        "transition": {
            "N,O,F": {"0,2,4": 50, "1,2,4": 25, "-1,2,4": 25},
            "N,O,U": {"1,2,4": 60, "0,2,4": 40},
            "N,O,D": {"-1,2,4": 60, "0,2,4": 40},
            "N,B,U": {"2,3,6": 70, "1,3,6": 30},
            "N,B,D": {"-2,3,6": 70, "-1,3,6": 30},
            "N,B,F": {"0,3,4": 100},
        },
        "ticks_per_regime": {"N,O": 300, "N,B": 600},
        "seconds_per_regime": {"N,O": 100, "N,B": 100},
    }


@pytest.fixture
def model(model_document, rng) -> RegimeModel:
    return RegimeModel.from_dict(model_document, rng=rng)


@pytest.fixture
def flat_model(rng) -> RegimeModel:
    """Every regime ticks often, but all bucket weights are zero (fallback tick)."""
    return RegimeModel.from_dict(
        {
            "transition": {
                f"N,{b},{s}": {"3,1,1": 0}
                for b in ("O", "B")
                for s in ("U", "D", "F")
            },
            "ticks_per_regime": {"N,O": 5000, "N,B": 5000},
            "seconds_per_regime": {"N,O": 100, "N,B": 100},
        },
        rng=rng,
    )
