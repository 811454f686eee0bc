"""
Configuration management for the breakout simulator.
Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_PROGRESS_THROTTLE_S,
    DEFAULT_WARNING_THROTTLE_S,
    DEFAULT_WINDOW_SECONDS,
)


@dataclass
class ModelConfig:
    """
    Regime model source.

    model_path may point at a file that does not exist yet; the simulator
    then runs on an empty model (fallback ticks only).
    """
    model_path: str = "models/model.json"
    seed: Optional[int] = None  # None = fresh entropy on every run


@dataclass
class EngineConfig:
    """Simulation engine settings."""
    window_seconds: int = DEFAULT_WINDOW_SECONDS   # pivot half-window (buffer = 2*window+1)
    refresh_rate: float = 1.0                      # steps per second driven by the caller
    progress_throttle: float = DEFAULT_PROGRESS_THROTTLE_S
    warning_throttle: float = DEFAULT_WARNING_THROTTLE_S

    def __post_init__(self):
        """Validate engine settings."""
        if self.window_seconds < 1:
            raise ValueError(
                f"SIM_WINDOW_SECONDS must be >= 1, got {self.window_seconds}\n"
                f"\n"
                f"Fix: SIM_WINDOW_SECONDS=30"
            )
        if self.refresh_rate <= 0:
            raise ValueError(
                f"SIM_REFRESH_RATE must be positive, got {self.refresh_rate}\n"
                f"\n"
                f"Fix: SIM_REFRESH_RATE=1.0"
            )
        if self.progress_throttle < 0 or self.warning_throttle < 0:
            raise ValueError(
                f"Notification throttles cannot be negative "
                f"(progress={self.progress_throttle}, warning={self.warning_throttle})"
            )


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_dir: str = "logs"  # empty string disables file output


@dataclass
class ScenarioConfig:
    """Where named scenario YAML files live."""
    scenario_dir: str = "scenarios"


class Config:
    """
    Central configuration manager.

    Loads configuration from environment variables and provides
    typed access to all settings.
    """

    _instance: Optional['Config'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, env_file: str = ".env"):
        if self._initialized:
            return

        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path, override=True)

        self.model = self._load_model_config()
        self.engine = self._load_engine_config()
        self.log = self._load_log_config()
        self.scenario = self._load_scenario_config()

        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next get_config() re-reads the environment."""
        cls._instance = None

    def _load_model_config(self) -> ModelConfig:
        """Load model configuration from environment."""
        seed_str = os.getenv("SIM_SEED", "").strip()
        return ModelConfig(
            model_path=os.getenv("SIM_MODEL_PATH", "models/model.json"),
            seed=int(seed_str) if seed_str else None,
        )

    def _load_engine_config(self) -> EngineConfig:
        """Load engine configuration from environment."""
        return EngineConfig(
            window_seconds=int(os.getenv("SIM_WINDOW_SECONDS", str(DEFAULT_WINDOW_SECONDS))),
            refresh_rate=float(os.getenv("SIM_REFRESH_RATE", "1.0")),
            progress_throttle=float(os.getenv("SIM_PROGRESS_THROTTLE", str(DEFAULT_PROGRESS_THROTTLE_S))),
            warning_throttle=float(os.getenv("SIM_WARNING_THROTTLE", str(DEFAULT_WARNING_THROTTLE_S))),
        )

    def _load_log_config(self) -> LogConfig:
        """Load logging configuration from environment."""
        return LogConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR", "logs"),
        )

    def _load_scenario_config(self) -> ScenarioConfig:
        """Load scenario directory from environment."""
        return ScenarioConfig(
            scenario_dir=os.getenv("SIM_SCENARIO_DIR", "scenarios"),
        )

    def summary(self) -> str:
        """Generate a human-readable configuration summary."""
        model_exists = Path(self.model.model_path).exists()
        lines = [
            "=" * 55,
            "Breakout Simulator Configuration",
            "=" * 55,
            "",
            "Model:",
            f"  Path:  {self.model.model_path} ({'found' if model_exists else 'missing - empty model'})",
            f"  Seed:  {self.model.seed if self.model.seed is not None else '(random)'}",
            "",
            "Engine:",
            f"  Pivot window:      {self.engine.window_seconds}s (buffer {2 * self.engine.window_seconds + 1})",
            f"  Refresh rate:      {self.engine.refresh_rate:g} steps/s",
            f"  Progress throttle: {self.engine.progress_throttle:g}s",
            f"  Warning throttle:  {self.engine.warning_throttle:g}s",
            "",
            f"Scenarios: {self.scenario.scenario_dir}",
            f"Logging:   {self.log.level} -> {self.log.log_dir or '(console only)'}",
            "=" * 55,
        ]
        return "\n".join(lines)


def get_config(env_file: str = ".env") -> Config:
    """Get or create the global config instance."""
    return Config(env_file)
