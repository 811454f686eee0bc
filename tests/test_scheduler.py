"""
Tests for RegimeScheduler timeline construction and lookups.
"""

import numpy as np
import pytest

from breakout_sim.model.types import BREAKOUT, RANGING, Sign
from breakout_sim.scenario.scheduler import RegimeScheduler, breakout_duration
from breakout_sim.scenario.spec import (
    AdvancedFeatures,
    BreakoutConfig,
    BreakoutSpeed,
    FakeBreakoutConfig,
    ScenarioSpec,
    bearish_breakout,
    bullish_breakout,
    fake_breakout_scenario,
    ranging_scenario,
)


def assert_contiguous(timeline, duration):
    assert timeline[0].start_time == 0.0
    assert timeline[-1].end_time == pytest.approx(duration)
    for prev, nxt in zip(timeline, timeline[1:]):
        assert prev.end_time == nxt.start_time
    for seg in timeline:
        assert seg.start_time < seg.end_time


class TestBreakoutDuration:
    """Speed-to-duration policy."""

    def test_instant(self):
        assert breakout_duration(BreakoutSpeed.INSTANT, 5.0) == 2.0

    @pytest.mark.parametrize("magnitude,expected", [
        (0.0, 10.0), (1.0, 15.0), (-1.0, 15.0), (4.0, 30.0), (10.0, 30.0),
    ])
    def test_gradual(self, magnitude, expected):
        assert breakout_duration(BreakoutSpeed.GRADUAL, magnitude) == pytest.approx(expected)

    @pytest.mark.parametrize("magnitude,expected", [
        (0.0, 15.0), (1.0, 23.0), (5.0, 40.0),
    ])
    def test_accelerating(self, magnitude, expected):
        assert breakout_duration(BreakoutSpeed.ACCELERATING, magnitude) == pytest.approx(expected)


class TestSchedule:
    """Timeline construction."""

    def test_ranging_is_single_segment(self, rng):
        scheduler = RegimeScheduler(rng=rng)
        timeline = scheduler.schedule(ranging_scenario())
        assert len(timeline) == 1
        seg = timeline[0]
        assert (seg.start_time, seg.end_time) == (0.0, 60)
        assert seg.regime == RANGING
        assert seg.sign is Sign.FLAT
        assert seg.target_price is None
        assert scheduler.get_breakout_event() is None

    def test_bullish_event(self, rng):
        scheduler = RegimeScheduler(rng=rng)
        scheduler.schedule(bullish_breakout())
        event = scheduler.get_breakout_event()
        assert event.target_price == pytest.approx(101.0)
        assert 20.0 <= event.start_time < 40.0
        assert event.duration == pytest.approx(15.0)

    def test_bullish_timeline_shape(self, rng):
        scheduler = RegimeScheduler(rng=rng)
        timeline = scheduler.schedule(bullish_breakout())
        assert [s.regime for s in timeline] == [RANGING, BREAKOUT, RANGING]
        assert timeline[1].sign is Sign.UP
        assert timeline[1].target_price == pytest.approx(101.0)
        assert timeline[1].description == "Main bullish breakout"
        assert timeline[2].description == "Post-breakout ranging"
        assert_contiguous(timeline, 60)

    def test_bearish_sign_down(self, rng):
        scheduler = RegimeScheduler(rng=rng)
        timeline = scheduler.schedule(bearish_breakout())
        (breakout,) = [s for s in timeline if s.regime == BREAKOUT]
        assert breakout.sign is Sign.DOWN
        assert breakout.target_price == pytest.approx(99.0)
        assert breakout.description == "Main bearish breakout"

    def test_end_clipped_to_duration(self, rng):
        spec = bullish_breakout(
            duration=30,
            breakout=BreakoutConfig(type="bullish", time_window=(25, 28), magnitude=1.0, speed="gradual"),
        )
        scheduler = RegimeScheduler(rng=rng)
        timeline = scheduler.schedule(spec)
        assert scheduler.get_breakout_event().end_time == 30
        assert timeline[-1].regime == BREAKOUT
        assert_contiguous(timeline, 30)

    def test_fake_then_real(self, rng):
        scheduler = RegimeScheduler(rng=rng)
        timeline = scheduler.schedule(fake_breakout_scenario())
        assert [s.description for s in timeline] == [
            "Ranging period",
            "Fake breakout",
            "Fake breakout reversal",
            "Ranging period",
            "Main bullish breakout",
            "Post-breakout ranging",
        ]
        fake, reversal = timeline[1], timeline[2]
        assert fake.target_price == pytest.approx(100.5)
        assert fake.sign is Sign.UP
        # gradual policy at 0.5% -> 12.5s, reversal 5s
        assert fake.duration == pytest.approx(12.5)
        assert reversal.duration == pytest.approx(5.0)
        assert reversal.target_price == pytest.approx(100.0)
        assert reversal.sign is Sign.DOWN
        assert_contiguous(timeline, 90)

    def test_fake_uses_gradual_policy_regardless_of_speed(self, rng):
        spec = fake_breakout_scenario(
            breakout=BreakoutConfig(type="bullish", time_window=(60, 70), magnitude=1.0, speed="instant"),
        )
        timeline = RegimeScheduler(rng=rng).schedule(spec)
        fake = next(s for s in timeline if s.description == "Fake breakout")
        assert fake.duration == pytest.approx(12.5)

    def test_overlapping_events_never_overlap_in_timeline(self):
        spec = ScenarioSpec(
            start_price=100.0,
            duration=60,
            breakout=BreakoutConfig(type="bullish", time_window=(12, 14), magnitude=1.0, speed="gradual"),
            advanced=AdvancedFeatures(fake_breakouts=(
                FakeBreakoutConfig(time_window=(5, 8), magnitude=0.5, reversal_speed=5),
            )),
        )
        for seed in range(20):
            scheduler = RegimeScheduler(rng=np.random.default_rng(seed))
            assert_contiguous(scheduler.schedule(spec), 60)

    def test_timeline_contiguous_for_many_draws(self):
        for seed in range(25):
            scheduler = RegimeScheduler(rng=np.random.default_rng(seed))
            for factory in (bullish_breakout, bearish_breakout, fake_breakout_scenario):
                spec = factory()
                assert_contiguous(scheduler.schedule(spec), spec.duration)

    def test_reschedule_redraws(self):
        scheduler = RegimeScheduler(rng=np.random.default_rng(3))
        starts = set()
        for _ in range(5):
            scheduler.schedule(bullish_breakout())
            starts.add(scheduler.get_breakout_event().start_time)
        assert len(starts) > 1

    def test_same_seed_same_timeline(self):
        a = RegimeScheduler(rng=np.random.default_rng(11)).schedule(fake_breakout_scenario())
        b = RegimeScheduler(rng=np.random.default_rng(11)).schedule(fake_breakout_scenario())
        assert a == b

    def test_get_timeline_is_copy(self, rng):
        scheduler = RegimeScheduler(rng=rng)
        scheduler.schedule(bullish_breakout())
        scheduler.get_timeline().clear()
        assert len(scheduler.get_timeline()) == 3


class TestLookup:
    """get_current_regime and breakout queries."""

    @pytest.fixture
    def scheduler(self, rng):
        s = RegimeScheduler(rng=rng)
        s.schedule(fake_breakout_scenario())
        return s

    def test_unscheduled_returns_ranging(self, rng):
        lookup = RegimeScheduler(rng=rng).get_current_regime(10.0)
        assert lookup.regime == RANGING
        assert lookup.sign is Sign.FLAT
        assert lookup.target_price is None

    def test_lookup_matches_segments(self, scheduler):
        for seg in scheduler.get_timeline():
            mid = (seg.start_time + seg.end_time) / 2
            lookup = scheduler.get_current_regime(mid)
            assert lookup.regime == seg.regime
            assert lookup.sign is seg.sign
            assert lookup.target_price == seg.target_price
            # half-open: the start belongs to the segment
            assert scheduler.get_current_regime(seg.start_time).regime == seg.regime

    def test_tail_saturates(self, scheduler):
        duration = scheduler.get_scenario().duration
        before = scheduler.get_current_regime(duration - 1e-6)
        assert scheduler.get_current_regime(duration) == before
        assert scheduler.get_current_regime(duration + 500) == before

    def test_negative_elapsed_uses_first_segment(self, scheduler):
        assert scheduler.get_current_regime(-5.0) == scheduler.get_current_regime(0.0)

    def test_breakout_queries_distinguish_primary(self, scheduler):
        fake = next(s for s in scheduler.get_timeline() if s.description == "Fake breakout")
        t = (fake.start_time + fake.end_time) / 2
        assert scheduler.is_in_breakout(t)
        assert not scheduler.is_in_primary_breakout(t)

        event = scheduler.get_breakout_event()
        t = (event.start_time + event.end_time) / 2
        assert scheduler.is_in_breakout(t)
        assert scheduler.is_in_primary_breakout(t)

    def test_time_until_breakout(self, scheduler):
        event = scheduler.get_breakout_event()
        assert scheduler.get_time_until_breakout(0.0) == pytest.approx(event.start_time)
        assert scheduler.get_time_until_breakout(event.start_time - 2) == pytest.approx(2.0)
        assert scheduler.get_time_until_breakout(event.start_time) is None
        assert scheduler.get_time_until_breakout(event.start_time + 1) is None

    def test_reset_clears(self, scheduler):
        scheduler.reset()
        assert scheduler.get_timeline() == []
        assert scheduler.get_breakout_event() is None
        assert scheduler.get_scenario() is None
        assert scheduler.get_time_until_breakout(0.0) is None
