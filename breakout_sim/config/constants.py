"""
Centralized constants for the breakout simulator.

Scale factors in the "Model file format" block are part of the model data
contract: bucket indices in model.json are decoded with them, so they only
change together with a re-fitted model file.
"""

# ==================== Model file format ====================

PRICE_DELTA_SCALE = 0.005   # price-delta bucket -> currency
SPREAD_SCALE = 0.01         # spread bucket -> currency
SIZE_SCALE = 100            # size bucket -> shares

# Fallback tick for regime+sign keys the model has never observed
FALLBACK_PRICE_DELTA = 0.0
FALLBACK_SPREAD = 0.01
FALLBACK_SIZE = 100

# Update-count sampler: e^-lambda underflows near lambda = 745
POISSON_CHUNK = 500.0


# ==================== Quote generation ====================

MIN_SPREAD = 0.01           # ask is never below bid + MIN_SPREAD
PRICE_DECIMALS = 2


# ==================== Target bias ====================

BIAS_PROXIMITY_PCT = 0.001  # within 0.1% of price -> model delta passes through
BIAS_URGENCY_SCALE = 20.0   # urgency saturates at ~5% distance
BIAS_MAX_FACTOR = 0.7       # at most 70% of a step is target-directed
BIAS_MAX_STEP = 0.05        # per-tick cap on the target-directed step
BIAS_STEP_FRACTION = 0.1    # fraction of remaining distance per step


# ==================== Breakout scheduling ====================

INSTANT_DURATION_S = 2.0
GRADUAL_BASE_S = 10.0
GRADUAL_PER_PCT_S = 5.0
GRADUAL_MIN_S = 8.0
GRADUAL_MAX_S = 30.0
ACCELERATING_BASE_S = 15.0
ACCELERATING_PER_PCT_S = 8.0
ACCELERATING_MIN_S = 10.0
ACCELERATING_MAX_S = 40.0
DEFAULT_BREAKOUT_DURATION_S = 15.0


# ==================== Breakout notifications ====================

TARGET_REACHED_PCT = 0.002   # inside the breakout window
TARGET_SETTLED_PCT = 0.005   # checked once the window has closed
DEFAULT_WARNING_THROTTLE_S = 1.0
DEFAULT_PROGRESS_THROTTLE_S = 1.0


# ==================== Engine ====================

DEFAULT_WINDOW_SECONDS = 30
