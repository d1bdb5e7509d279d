"""Configuration constants for the EMI calculator.

Domain limits used by the engine live here together with the logging setup,
so the CLI and the web app share a single source for both.
"""

from __future__ import annotations

import logging
import logging.config
from decimal import Decimal

# --- Engine limits ---
MAX_TENURE_MONTHS = 480

RATE_SEARCH_LOW = Decimal("0.1")
RATE_SEARCH_HIGH = Decimal("30")
RATE_SEARCH_ITERATIONS = 100

# --- Defaults for the what-if calculators ---
DEFAULT_INFLATION_RATE = Decimal("6")
DEFAULT_SIP_RATE = Decimal("12")
DEFAULT_PENALTY_RATE = Decimal("2")

# Rows shown before a schedule is truncated in the terminal and the web page
SCHEDULE_PREVIEW_ROWS = 120

# --- Logging Configuration ---
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "emi_calc": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
        "emi_calc_web": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}


def configure_logging(level: str | int | None = None) -> None:
    """Apply ``LOGGING_CONFIG``, optionally overriding the package log level."""
    logging.config.dictConfig(LOGGING_CONFIG)
    if level is not None:
        logging.getLogger("emi_calc").setLevel(level)
