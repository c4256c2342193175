"""
Observability module.

Provides structured logging helpers and Langfuse usage tracking.
"""

from studyloop.observability.logger import configure_logging, get_logger
from studyloop.observability.usage_tracker import UsageTracker, get_usage_tracker

__all__ = ["configure_logging", "get_logger", "UsageTracker", "get_usage_tracker"]
