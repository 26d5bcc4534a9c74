"""
Application settings for the model memory calculator.

Constants used by the estimator and the charts live here so the arithmetic in
calc.py and the drawing code in ui.py agree on the same limits. Logging
settings can be overridden with environment variables:

    MEMCALC_LOG_LEVEL  (DEBUG, INFO, WARNING, ...; default INFO)
    MEMCALC_LOG_FILE   (optional path, logs are also written there)
"""
import logging
import os

# Prefill chunking processes prompts in chunks of this many tokens
PREFILL_CHUNK_SIZE = 512

# Frontier sweep limits
MAX_SEQ_LENGTH = 4096
MAX_BATCH_SIZE = 128

# Bytes per GB (decimal, matches how device memory is advertised)
BYTES_PER_GB = 1_000_000_000

PRECISION_COLORS = {
    "32-bit": "#e45f5b",
    "16-bit": "#ffc068",
    "8-bit": "#71cce9",
    "4-bit": "#383d95",
}
ACTIVATION_COLOR = "#a4b8e0"

THEME_TEXT_COLORS = {
    "dark": "#f9fafb",
    "light": "#181f26",
}
DEFAULT_THEME = "light"


def get_log_level() -> int:
    """Read the log level from the environment, falling back to INFO."""
    name = os.environ.get("MEMCALC_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        return logging.INFO
    return level


LOG_LEVEL = get_log_level()
LOG_FILE = os.environ.get("MEMCALC_LOG_FILE") or None
