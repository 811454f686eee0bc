"""
Utility modules.
"""

from .logger import get_logger, setup_logger, SimLogger
from .helpers import clamp, round_cents

__all__ = [
    # Logger
    "get_logger",
    "setup_logger",
    "SimLogger",
    # Numeric helpers
    "clamp",
    "round_cents",
]
