"""
Scenario configuration models.

A ScenarioSpec describes one simulation run: where the price starts, how
long the run lasts, the primary breakout to schedule, how the spread
behaves, and optional advanced modifiers.

Contains:
- BreakoutType, BreakoutSpeed, VolumeProfile, UserAction: enums
- BreakoutConfig, SpreadConfig: required blocks
- FakeBreakoutConfig and the other advanced blocks
- ScenarioSpec: the root object (frozen; handed to RegimeScheduler.schedule)
- Presets: ranging_scenario, bullish_breakout, bearish_breakout,
  fake_breakout_scenario

Only fake breakouts feed the scheduler. The remaining advanced blocks are
validated and carried through to_dict/from_dict but do not alter the
price process.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class BreakoutType(str, Enum):
    """Kind of primary breakout."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    FAKE = "fake"
    NONE = "none"


class BreakoutSpeed(str, Enum):
    """How fast the breakout reaches its target."""
    INSTANT = "instant"
    GRADUAL = "gradual"
    ACCELERATING = "accelerating"


class VolumeProfile(str, Enum):
    UNIFORM = "uniform"
    U_SHAPED = "u-shaped"
    SPIKE_HEAVY = "spike-heavy"


class UserAction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    NONE = "none"


def _window(raw: Any, name: str) -> tuple[float, float]:
    """Coerce a [min, max] pair and check ordering."""
    try:
        lo, hi = raw
        lo, hi = float(lo), float(hi)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a [min, max] pair. Got: {raw!r}") from None
    if lo < 0:
        raise ValueError(f"{name} cannot start before 0. Got: [{lo}, {hi}]")
    if lo > hi:
        raise ValueError(f"{name} min must be <= max. Got: [{lo}, {hi}]")
    return lo, hi


def _enum(enum_cls: type[Enum], value: Any, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        valid = [e.value for e in enum_cls]
        raise ValueError(f"{name} must be one of {valid}. Got: '{value}'") from None


# =============================================================================
# Required blocks
# =============================================================================

@dataclass(frozen=True)
class BreakoutConfig:
    """
    Primary breakout descriptor.

    Attributes:
        type: bullish, bearish, fake or none
        time_window: [min, max] seconds from scenario start for the breakout start
        magnitude: Price change in percent (1.0 = +1%, -1.0 = -1%)
        speed: instant, gradual or accelerating
        pre_warning: Seconds before the start to emit a warning (None = no warning)
        notification: Whether lifecycle notifications are emitted
    """
    type: BreakoutType = BreakoutType.NONE
    time_window: tuple[float, float] = (0.0, 0.0)
    magnitude: float = 0.0
    speed: BreakoutSpeed = BreakoutSpeed.GRADUAL
    pre_warning: float | None = None
    notification: bool = False

    def __post_init__(self):
        """Validate and normalize breakout config."""
        object.__setattr__(self, "type", _enum(BreakoutType, self.type, "breakout.type"))
        object.__setattr__(self, "speed", _enum(BreakoutSpeed, self.speed, "breakout.speed"))
        object.__setattr__(self, "time_window", _window(self.time_window, "breakout.time_window"))
        if self.pre_warning is not None and self.pre_warning < 0:
            raise ValueError(f"breakout.pre_warning cannot be negative. Got: {self.pre_warning}")

    @property
    def is_active(self) -> bool:
        return self.type is not BreakoutType.NONE

    def to_dict(self) -> dict[str, Any]:
        result = {
            "type": self.type.value,
            "time_window": list(self.time_window),
            "magnitude": self.magnitude,
            "speed": self.speed.value,
            "notification": self.notification,
        }
        if self.pre_warning is not None:
            result["pre_warning"] = self.pre_warning
        return result

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "BreakoutConfig":
        pre_warning = d.get("pre_warning")
        return cls(
            type=d.get("type", "none"),
            time_window=d.get("time_window", (0.0, 0.0)),
            magnitude=float(d.get("magnitude", 0.0)),
            speed=d.get("speed", "gradual"),
            pre_warning=float(pre_warning) if pre_warning is not None else None,
            notification=bool(d.get("notification", False)),
        )


@dataclass(frozen=True)
class SpreadConfig:
    """Spread dynamics (currency units)."""
    base: float = 0.02
    volatility_multiplier: float = 1.0
    min_spread: float = 0.01
    max_spread: float = 0.05

    def __post_init__(self):
        if self.base < 0:
            raise ValueError(f"spread.base cannot be negative. Got: {self.base}")
        if self.min_spread > self.max_spread:
            raise ValueError(
                f"spread.min_spread must be <= max_spread. "
                f"Got: {self.min_spread} > {self.max_spread}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "base": self.base,
            "volatility_multiplier": self.volatility_multiplier,
            "min_spread": self.min_spread,
            "max_spread": self.max_spread,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SpreadConfig":
        return cls(
            base=float(d.get("base", 0.02)),
            volatility_multiplier=float(d.get("volatility_multiplier", 1.0)),
            min_spread=float(d.get("min_spread", 0.01)),
            max_spread=float(d.get("max_spread", 0.05)),
        )


# =============================================================================
# Advanced blocks
# =============================================================================

@dataclass(frozen=True)
class FakeBreakoutConfig:
    """Excursion that reverses back to the start price."""
    time_window: tuple[float, float]
    magnitude: float
    reversal_speed: float  # seconds to travel back to the start price

    def __post_init__(self):
        object.__setattr__(self, "time_window", _window(self.time_window, "fake_breakout.time_window"))
        if self.reversal_speed < 0:
            raise ValueError(
                f"fake_breakout.reversal_speed cannot be negative. Got: {self.reversal_speed}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "time_window": list(self.time_window),
            "magnitude": self.magnitude,
            "reversal_speed": self.reversal_speed,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "FakeBreakoutConfig":
        return cls(
            time_window=d.get("time_window"),
            magnitude=float(d["magnitude"]),
            reversal_speed=float(d.get("reversal_speed", 5.0)),
        )


@dataclass(frozen=True)
class HiddenLiquidityConfig:
    enabled: bool = False
    iceberg_ratio: float = 0.1   # visible fraction of real size
    refresh_rate: float = 1.0    # seconds between reveals


@dataclass(frozen=True)
class SpoofingConfig:
    time_window: tuple[float, float] = (0.0, 0.0)
    side: str = "bid"
    size: float = 0.0
    layers: int = 1
    cancel_before_execution: bool = True

    def __post_init__(self):
        object.__setattr__(self, "time_window", _window(self.time_window, "spoofing.time_window"))
        if self.side not in ("bid", "ask"):
            raise ValueError(f"spoofing.side must be 'bid' or 'ask'. Got: '{self.side}'")


@dataclass(frozen=True)
class MomentumPersistenceConfig:
    enabled: bool = False
    half_life: float = 10.0
    mean_reversion: float = 0.0


@dataclass(frozen=True)
class VolatilityClusteringConfig:
    """GARCH(1,1) parameters."""
    enabled: bool = False
    omega: float = 0.0
    alpha: float = 0.0
    beta: float = 0.0


@dataclass(frozen=True)
class OrderFlowConfig:
    toxicity: float = 0.0        # 0-1
    aggressiveness: float = 0.0  # 0-1

    def __post_init__(self):
        for name in ("toxicity", "aggressiveness"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"order_flow.{name} must be in [0, 1]. Got: {value}")


@dataclass(frozen=True)
class AdvancedFeatures:
    """Optional modifiers. Only fake_breakouts affect scheduling."""
    fake_breakouts: tuple[FakeBreakoutConfig, ...] = ()
    hidden_liquidity: HiddenLiquidityConfig | None = None
    spoofing: tuple[SpoofingConfig, ...] = ()
    momentum_persistence: MomentumPersistenceConfig | None = None
    volatility_clustering: VolatilityClusteringConfig | None = None
    volume_profile: VolumeProfile | None = None
    order_flow: OrderFlowConfig | None = None

    def __post_init__(self):
        object.__setattr__(self, "fake_breakouts", tuple(self.fake_breakouts))
        object.__setattr__(self, "spoofing", tuple(self.spoofing))
        if self.volume_profile is not None:
            object.__setattr__(
                self, "volume_profile",
                _enum(VolumeProfile, self.volume_profile, "advanced.volume_profile"),
            )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.fake_breakouts:
            result["fake_breakouts"] = [f.to_dict() for f in self.fake_breakouts]
        if self.hidden_liquidity is not None:
            result["hidden_liquidity"] = vars(self.hidden_liquidity).copy()
        if self.spoofing:
            result["spoofing"] = [
                {**vars(s), "time_window": list(s.time_window)} for s in self.spoofing
            ]
        if self.momentum_persistence is not None:
            result["momentum_persistence"] = vars(self.momentum_persistence).copy()
        if self.volatility_clustering is not None:
            result["volatility_clustering"] = vars(self.volatility_clustering).copy()
        if self.volume_profile is not None:
            result["volume_profile"] = self.volume_profile.value
        if self.order_flow is not None:
            result["order_flow"] = vars(self.order_flow).copy()
        return result

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "AdvancedFeatures":
        def block(key: str, block_cls):
            raw = d.get(key)
            return block_cls(**raw) if raw is not None else None

        return cls(
            fake_breakouts=tuple(FakeBreakoutConfig.from_dict(f) for f in d.get("fake_breakouts", [])),
            hidden_liquidity=block("hidden_liquidity", HiddenLiquidityConfig),
            spoofing=tuple(
                SpoofingConfig(**s)
                for s in d.get("spoofing", [])
            ),
            momentum_persistence=block("momentum_persistence", MomentumPersistenceConfig),
            volatility_clustering=block("volatility_clustering", VolatilityClusteringConfig),
            volume_profile=d.get("volume_profile"),
            order_flow=block("order_flow", OrderFlowConfig),
        )


# =============================================================================
# Root scenario
# =============================================================================

@dataclass(frozen=True)
class ScenarioSpec:
    """
    One simulation run.

    Required fields:
        start_price: Initial bid (> 0)
        duration: Scenario length in seconds (> 0)
    """
    start_price: float
    duration: float
    breakout: BreakoutConfig = field(default_factory=BreakoutConfig)
    spread: SpreadConfig = field(default_factory=SpreadConfig)
    advanced: AdvancedFeatures | None = None
    expected_user_action: UserAction | None = None
    record_reaction_time: bool = False
    name: str = "custom"

    def __post_init__(self):
        """Validate scenario."""
        if self.start_price <= 0:
            raise ValueError(f"start_price must be positive. Got: {self.start_price}")
        if self.duration <= 0:
            raise ValueError(f"duration must be positive. Got: {self.duration}")
        if self.expected_user_action is not None:
            object.__setattr__(
                self, "expected_user_action",
                _enum(UserAction, self.expected_user_action, "expected_user_action"),
            )

    @property
    def fake_breakouts(self) -> tuple[FakeBreakoutConfig, ...]:
        return self.advanced.fake_breakouts if self.advanced else ()

    @property
    def start_ask(self) -> float:
        return self.start_price + self.spread.base

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for serialization."""
        result: dict[str, Any] = {
            "name": self.name,
            "start_price": self.start_price,
            "duration": self.duration,
            "breakout": self.breakout.to_dict(),
            "spread": self.spread.to_dict(),
            "record_reaction_time": self.record_reaction_time,
        }
        if self.advanced is not None:
            result["advanced"] = self.advanced.to_dict()
        if self.expected_user_action is not None:
            result["expected_user_action"] = self.expected_user_action.value
        return result

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ScenarioSpec":
        """
        Create from dict (e.g. parsed scenario YAML).

        Raises:
            ValueError: On missing core fields or any malformed block.
        """
        if not isinstance(d, dict):
            raise ValueError(f"Scenario must be a mapping. Got: {type(d).__name__}")
        if "start_price" not in d or "duration" not in d:
            raise ValueError(
                "Scenario requires 'start_price' and 'duration'.\n"
                "\n"
                "Fix:\n"
                "  start_price: 100.0\n"
                "  duration: 60"
            )
        advanced = d.get("advanced")
        try:
            return cls(
                name=str(d.get("name", "custom")),
                start_price=float(d["start_price"]),
                duration=float(d["duration"]),
                breakout=BreakoutConfig.from_dict(d.get("breakout") or {}),
                spread=SpreadConfig.from_dict(d.get("spread") or {}),
                advanced=AdvancedFeatures.from_dict(advanced) if advanced else None,
                expected_user_action=d.get("expected_user_action"),
                record_reaction_time=bool(d.get("record_reaction_time", False)),
            )
        except (AttributeError, KeyError, TypeError) as e:
            # Wrong shapes inside nested blocks (null numbers, lists for mappings, unknown keys)
            raise ValueError(f"Malformed scenario block: {e!r}") from e


# =============================================================================
# Presets
# =============================================================================

_BREAKOUT_SPREAD = SpreadConfig(base=0.02, volatility_multiplier=1.5, min_spread=0.01, max_spread=0.10)


def ranging_scenario(**overrides: Any) -> ScenarioSpec:
    """Flat, no-breakout scenario."""
    spec = ScenarioSpec(
        name="ranging",
        start_price=100.0,
        duration=60,
        breakout=BreakoutConfig(
            type=BreakoutType.NONE,
            time_window=(0.0, 0.0),
            magnitude=0.0,
            speed=BreakoutSpeed.GRADUAL,
            notification=False,
        ),
        spread=SpreadConfig(base=0.02, volatility_multiplier=1.0, min_spread=0.01, max_spread=0.05),
        record_reaction_time=False,
    )
    return replace(spec, **overrides)


def bullish_breakout(**overrides: Any) -> ScenarioSpec:
    """+1% gradual breakout starting between 20s and 40s."""
    spec = ScenarioSpec(
        name="bullish",
        start_price=100.0,
        duration=60,
        breakout=BreakoutConfig(
            type=BreakoutType.BULLISH,
            time_window=(20.0, 40.0),
            magnitude=1.0,
            speed=BreakoutSpeed.GRADUAL,
            pre_warning=5.0,
            notification=True,
        ),
        spread=_BREAKOUT_SPREAD,
        expected_user_action=UserAction.BUY,
        record_reaction_time=True,
    )
    return replace(spec, **overrides)


def bearish_breakout(**overrides: Any) -> ScenarioSpec:
    """-1% gradual breakout starting between 20s and 40s."""
    spec = ScenarioSpec(
        name="bearish",
        start_price=100.0,
        duration=60,
        breakout=BreakoutConfig(
            type=BreakoutType.BEARISH,
            time_window=(20.0, 40.0),
            magnitude=-1.0,
            speed=BreakoutSpeed.GRADUAL,
            pre_warning=5.0,
            notification=True,
        ),
        spread=_BREAKOUT_SPREAD,
        expected_user_action=UserAction.SELL,
        record_reaction_time=True,
    )
    return replace(spec, **overrides)


def fake_breakout_scenario(**overrides: Any) -> ScenarioSpec:
    """0.5% fake move around 15-25s, then a real +1% breakout at 50-70s."""
    spec = ScenarioSpec(
        name="fake_then_real",
        start_price=100.0,
        duration=90,
        breakout=BreakoutConfig(
            type=BreakoutType.BULLISH,
            time_window=(50.0, 70.0),
            magnitude=1.0,
            speed=BreakoutSpeed.GRADUAL,
            pre_warning=5.0,
            notification=True,
        ),
        spread=_BREAKOUT_SPREAD,
        advanced=AdvancedFeatures(
            fake_breakouts=(
                FakeBreakoutConfig(time_window=(15.0, 25.0), magnitude=0.5, reversal_speed=5.0),
            ),
        ),
        expected_user_action=UserAction.BUY,
        record_reaction_time=True,
    )
    return replace(spec, **overrides)


PRESETS = {
    "ranging": ranging_scenario,
    "bullish": bullish_breakout,
    "bearish": bearish_breakout,
    "fake_then_real": fake_breakout_scenario,
}
