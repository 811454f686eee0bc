"""
Configuration module for the breakout simulator.
"""

from .config import (
    Config,
    EngineConfig,
    LogConfig,
    ModelConfig,
    ScenarioConfig,
    get_config,
)

__all__ = [
    "Config",
    "EngineConfig",
    "LogConfig",
    "ModelConfig",
    "ScenarioConfig",
    "get_config",
]
