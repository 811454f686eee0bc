"""
Tests for TickGenerator and the target-bias function.
"""

from datetime import datetime

import numpy as np
import pytest

from breakout_sim.model.regime_model import RegimeModel
from breakout_sim.model.tick_generator import TickGenerator, bias_toward_target
from breakout_sim.model.types import BREAKOUT, RANGING, Sign

NOW = datetime(2026, 1, 5, 9, 30)


class TestBiasTowardTarget:
    """Blend of model delta and a capped pull toward the target."""

    def test_within_proximity_returns_model_delta(self):
        # 0.05 away on 100.0 is inside 0.1%
        assert bias_toward_target(0.013, 100.0, 100.05) == 0.013
        assert bias_toward_target(-0.007, 100.0, 99.95) == -0.007

    def test_far_target_saturates_bias_and_step(self):
        # distance 10 on 100 -> urgency 1, factor 0.7, step capped at 0.05
        result = bias_toward_target(0.02, 100.0, 110.0)
        assert result == pytest.approx(0.7 * 0.05 + 0.3 * 0.02)

    def test_downward_target(self):
        result = bias_toward_target(0.0, 100.0, 90.0)
        assert result == pytest.approx(-0.7 * 0.05)

    def test_small_distance_scales_urgency_and_step(self):
        # distance 0.2 on 100 -> urgency 0.04, factor 0.028, step 0.02
        result = bias_toward_target(0.01, 100.0, 100.2)
        factor = 0.7 * (0.2 / 100.0 * 20)
        assert result == pytest.approx(factor * 0.02 + (1 - factor) * 0.01)

    def test_directed_part_never_exceeds_caps(self):
        for target in (100.5, 101.0, 105.0, 150.0, 50.0):
            pull = bias_toward_target(0.0, 100.0, target)
            assert abs(pull) <= 0.7 * 0.05 + 1e-12


class TestTickGeneratorStep:
    """One-second steps."""

    def test_zero_rate_produces_no_ticks(self, rng):
        gen = TickGenerator(RegimeModel(rng=rng), 100.0, 100.02)
        assert gen.step(NOW) == []
        assert gen.bid == 100.0
        assert gen.ask == 100.02

    def test_ticks_share_timestamp_and_round_to_cents(self, model):
        gen = TickGenerator(model, 100.0, 100.02)
        ticks = []
        for _ in range(20):
            ticks.extend(gen.step(NOW, RANGING, Sign.FLAT))
        assert ticks
        for tick in ticks:
            assert tick.timestamp == NOW
            assert tick.bid == round(tick.bid, 2)
            assert tick.ask == round(tick.ask, 2)

    def test_sizes_split_evenly(self, model):
        gen = TickGenerator(model, 100.0, 100.02)
        ticks = []
        for _ in range(10):
            ticks.extend(gen.step(NOW, BREAKOUT, Sign.UP))
        for tick in ticks:
            # size buckets 6 -> 600 shares, 4 -> 400 shares
            assert tick.bid_size == tick.ask_size
            assert tick.bid_size in (300, 200)

    def test_spread_floor_with_zero_and_negative_spreads(self, rng):
        model = RegimeModel.from_dict(
            {
                "transition": {
                    f"N,O,{s}": {"1,0,1": 1, "-1,-3,1": 1, "0,-1,1": 1}
                    for s in ("U", "D", "F")
                },
                "ticks_per_regime": {"N,O": 1000},
                "seconds_per_regime": {"N,O": 100},
            },
            rng=rng,
        )
        gen = TickGenerator(model, 100.0, 100.02)
        count = 0
        for _ in range(50):
            for tick in gen.step(NOW, RANGING, Sign.FLAT):
                assert tick.ask >= tick.bid + 0.01 - 1e-9
                count += 1
        assert count > 0

    def test_fallback_ticks_keep_price_flat(self, flat_model):
        gen = TickGenerator(flat_model, 100.0, 100.02)
        ticks = gen.step(NOW, RANGING, Sign.FLAT)
        assert ticks
        for tick in ticks:
            assert tick.bid == 100.0
            assert tick.ask == 100.01
            assert tick.bid_size == 50
            assert tick.ask_size == 50

    def test_target_pulls_price(self, rng):
        # Symmetric model: without bias the walk has no drift
        model = RegimeModel.from_dict(
            {
                "transition": {
                    f"N,B,{s}": {"1,1,1": 1, "-1,1,1": 1} for s in ("U", "D", "F")
                },
                "ticks_per_regime": {"N,B": 1000},
                "seconds_per_regime": {"N,B": 100},
            },
            rng=rng,
        )
        gen = TickGenerator(model, 100.0, 100.01)
        for _ in range(60):
            gen.step(NOW, BREAKOUT, Sign.UP, target_price=101.0)
        assert gen.bid > 100.5

    def test_same_seed_same_path(self, model_document):
        def path(seed):
            m = RegimeModel.from_dict(model_document, rng=np.random.default_rng(seed))
            gen = TickGenerator(m, 100.0, 100.02)
            out = []
            for _ in range(15):
                out.extend((t.bid, t.ask) for t in gen.step(NOW, RANGING, Sign.FLAT))
            return out

        assert path(99) == path(99)


class TestTickGeneratorState:
    """Running quote and mids."""

    def test_reset_overwrites_both_sides(self, model):
        gen = TickGenerator(model, 100.0, 100.02)
        for _ in range(5):
            gen.step(NOW, RANGING)
        gen.reset(50.0, 50.05)
        assert (gen.bid, gen.ask) == (50.0, 50.05)
        assert gen.mid == pytest.approx(50.025)

    def test_volume_weighted_mid(self, model):
        gen = TickGenerator(model, 100.0, 100.10)
        # Heavier ask size pulls the mid toward the bid
        assert gen.volume_weighted_mid(100, 300) == pytest.approx((100.0 * 300 + 100.10 * 100) / 400)
        assert gen.volume_weighted_mid(200, 200) == pytest.approx(100.05)

    def test_volume_weighted_mid_zero_sizes(self, model):
        gen = TickGenerator(model, 100.0, 100.10)
        assert gen.volume_weighted_mid(0, 0) == pytest.approx(100.05)
