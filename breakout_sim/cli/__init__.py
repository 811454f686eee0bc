"""
Command-line interface for the breakout simulator.
"""

from .argparser import setup_argparse
from .commands import console, handle_run, handle_scenarios, handle_timeline

__all__ = [
    "console",
    "handle_run",
    "handle_scenarios",
    "handle_timeline",
    "setup_argparse",
]
