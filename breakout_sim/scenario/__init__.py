"""
Scenario configuration, YAML loading and regime scheduling.
"""

from .loader import list_scenarios, load_scenario, save_scenario
from .scheduler import (
    BreakoutEvent,
    RegimeLookup,
    RegimeScheduler,
    RegimeSegment,
    breakout_duration,
)
from .spec import (
    PRESETS,
    AdvancedFeatures,
    BreakoutConfig,
    BreakoutSpeed,
    BreakoutType,
    FakeBreakoutConfig,
    HiddenLiquidityConfig,
    MomentumPersistenceConfig,
    OrderFlowConfig,
    ScenarioSpec,
    SpoofingConfig,
    SpreadConfig,
    UserAction,
    VolatilityClusteringConfig,
    VolumeProfile,
    bearish_breakout,
    bullish_breakout,
    fake_breakout_scenario,
    ranging_scenario,
)

__all__ = [
    "PRESETS",
    "AdvancedFeatures",
    "BreakoutConfig",
    "BreakoutEvent",
    "BreakoutSpeed",
    "BreakoutType",
    "FakeBreakoutConfig",
    "HiddenLiquidityConfig",
    "MomentumPersistenceConfig",
    "OrderFlowConfig",
    "RegimeLookup",
    "RegimeScheduler",
    "RegimeSegment",
    "ScenarioSpec",
    "SpoofingConfig",
    "SpreadConfig",
    "UserAction",
    "VolatilityClusteringConfig",
    "VolumeProfile",
    "bearish_breakout",
    "breakout_duration",
    "bullish_breakout",
    "fake_breakout_scenario",
    "list_scenarios",
    "load_scenario",
    "ranging_scenario",
    "save_scenario",
]
