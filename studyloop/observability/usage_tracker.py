"""
Usage tracking for generated content.

Records one Langfuse event per successful generation run so usage can be
reported per course, week and content type.

Dependencies: langfuse, studyloop.configs
System role: Best-effort product analytics sink
"""

import logging
from functools import lru_cache
from typing import Any

from langfuse import Langfuse

from studyloop.configs import get_settings
from studyloop.configs.observability import ObservabilitySettings

logger = logging.getLogger(__name__)

CONTENT_GENERATED_EVENT = "ai_content_generated"


class UsageTracker:
    """
    Langfuse-backed usage event recorder.

    Inactive when tracing is disabled or keys are missing; in that case
    every call is a no-op.
    """

    def __init__(
        self,
        settings: ObservabilitySettings | None = None,
        client: Langfuse | None = None,
    ) -> None:
        self._settings = settings or get_settings().observability
        self._client = client
        self._enabled = client is not None

        if self._client is None and self._settings.enable_tracing:
            if self._settings.langfuse_public_key and self._settings.langfuse_secret_key:
                self._client = Langfuse(
                    public_key=self._settings.langfuse_public_key,
                    secret_key=self._settings.langfuse_secret_key,
                    host=self._settings.langfuse_host,
                )
                self._enabled = True
            else:
                logger.warning(f"{__name__}:__init__ - Langfuse keys not configured, usage tracking inactive")

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def track_content_generated(self, content_type: str, properties: dict[str, Any]) -> None:
        """
        Record a content generation event.

        Args:
            content_type: Analytics content type (mcq, summary, notes, ...)
            properties: Event properties (course_id, week_id, counts, model)
        """
        if not self._enabled or self._client is None:
            logger.debug(
                f"{__name__}:track_content_generated - Tracking inactive, skipping event",
                extra={"content_type": content_type},
            )
            return

        self._client.event(
            name=CONTENT_GENERATED_EVENT,
            metadata={"content_type": content_type, "event_category": "product_usage", **properties},
        )


@lru_cache
def get_usage_tracker() -> UsageTracker:
    """Get the process-wide usage tracker."""
    return UsageTracker()
