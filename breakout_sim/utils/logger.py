"""
Logging system for the breakout simulator.
Provides structured, human-readable logs with console and optional file output.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

# ANSI color codes for terminal output
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record):
        # Format a copy so file handlers and other sinks see the plain record
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{Colors.RESET}"
        colored.msg = f"{color}{record.getMessage()}{Colors.RESET}"
        colored.args = None
        return super().format(colored)


class SimLogger:
    """
    Central logging system for the simulator.

    Features:
    - Console output with colors
    - Optional dated file output (disabled when log_dir is empty)
    - Structured helpers for breakout and scenario lifecycle lines
    """

    _instance: Optional['SimLogger'] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: str = "logs", log_level: str = "INFO"):
        if SimLogger._initialized:
            return

        self.log_dir = Path(log_dir) if log_dir else None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = self._create_logger("sim", log_level)

        SimLogger._initialized = True

    def _create_logger(self, name: str, level: str) -> logging.Logger:
        """Create a configured logger instance."""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        logger.addHandler(console_handler)

        # File handler (plain text, no colors)
        if self.log_dir is not None:
            log_file = self.log_dir / f"sim_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
            logger.addHandler(file_handler)

        return logger

    def info(self, msg: str, *args, **kwargs):
        """Log info message."""
        self.main_logger.info(msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        """Log debug message."""
        self.main_logger.debug(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        """Log warning message."""
        self.main_logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        """Log error message."""
        self.main_logger.error(msg, *args, **kwargs)

    def breakout(self, action: str, breakout_type: str, **kwargs):
        """
        Log a breakout lifecycle line with structured format.

        Args:
            action: WARNING, START, PROGRESS, COMPLETE
            breakout_type: bullish, bearish, fake
            **kwargs: Additional fields (prices are rendered with 2 decimals)
        """
        parts = [f"[BREAKOUT:{action}]", f"type={breakout_type}"]
        for key, value in kwargs.items():
            if isinstance(value, float):
                parts.append(f"{key}={value:.2f}")
            else:
                parts.append(f"{key}={value}")

        msg = " | ".join(parts)
        if action == "PROGRESS":
            self.main_logger.debug(msg)
        else:
            self.main_logger.info(msg)

    def scenario(self, action: str, **kwargs):
        """
        Log scenario lifecycle actions.

        Args:
            action: SCHEDULED, RESET
            **kwargs: Additional context
        """
        parts = [f"[SCENARIO:{action}]"]
        for key, value in kwargs.items():
            parts.append(f"{key}={value}")
        self.main_logger.info(" | ".join(parts))


# Global logger instance
_logger: Optional[SimLogger] = None


def get_logger(log_dir: str = "logs", log_level: str = "INFO") -> SimLogger:
    """Get or create the global logger instance."""
    global _logger
    if _logger is None:
        _logger = SimLogger(log_dir, log_level)
    return _logger


def setup_logger(log_dir: str = "logs", log_level: str = "INFO") -> SimLogger:
    """Initialize the logger with custom settings."""
    global _logger
    SimLogger._initialized = False
    SimLogger._instance = None
    _logger = SimLogger(log_dir, log_level)
    return _logger
