"""Utility modules for cross-cutting concerns."""

from utils.timezone import Clock, now_utc, to_utc, minutes_since
from utils.logging_config import setup_logging
