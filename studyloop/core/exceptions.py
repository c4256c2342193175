"""
Exception hierarchy for the StudyLoop generation service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

import asyncio
import re
from typing import Any


class StudyLoopException(Exception):
    """Base exception for all StudyLoop application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(StudyLoopException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NoContentFoundError(StudyLoopException):
    """Raised when no chunks exist for the requested materials."""

    def __init__(
        self,
        content_type: str,
        material_ids: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize no content error.

        Args:
            content_type: Content type being generated
            material_ids: Materials that yielded no chunks
            details: Additional context
        """
        details = details or {}
        details["content_type"] = content_type
        if material_ids is not None:
            details["material_ids"] = material_ids
        super().__init__(f"No content chunks found for {content_type}", details)


class StrategyNotFoundError(StudyLoopException):
    """Raised when no strategy is registered for a content type."""

    def __init__(self, content_type: str) -> None:
        super().__init__(
            f"No strategy registered for content type: {content_type}",
            {"content_type": content_type},
        )


class GenerationError(StudyLoopException):
    """Base exception for generation backend and output failures."""

    def __init__(
        self,
        message: str,
        content_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize generation error.

        Args:
            message: Error message
            content_type: Content type being generated
            details: Additional context
        """
        details = details or {}
        if content_type:
            details["content_type"] = content_type
        super().__init__(message, details)


class EmptyGenerationError(GenerationError):
    """Raised when the backend returns structurally empty content."""

    pass


class TransientBackendError(GenerationError):
    """Raised for rate limits, timeouts and network failures (retryable)."""

    pass


class GenerationBackendError(GenerationError):
    """Raised when the backend fails permanently or retries are exhausted."""

    pass


class PersistenceError(StudyLoopException):
    """Raised when writing generated content or status records fails."""

    def __init__(
        self,
        message: str,
        table: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if table:
            details["table"] = table
        super().__init__(message, details)


class DocumentProcessingError(StudyLoopException):
    """Base exception for material ingestion errors."""

    def __init__(
        self,
        message: str,
        material_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            material_id: ID of the material that failed
            details: Additional context
        """
        details = details or {}
        if material_id:
            details["material_id"] = material_id
        super().__init__(message, details)


class ParsingError(DocumentProcessingError):
    """Raised when document parsing fails."""

    pass


class StorageDownloadError(DocumentProcessingError):
    """Raised when downloading a material from object storage fails."""

    pass


class EmbeddingError(DocumentProcessingError):
    """Raised when embedding generation fails for every configured model."""

    pass


class ConfigurationNotFoundError(StudyLoopException):
    """Raised when a generation configuration is missing or inactive."""

    def __init__(self, config_id: str) -> None:
        super().__init__(
            "Configuration not found or inactive",
            {"config_id": config_id},
        )


class OrchestrationError(StudyLoopException):
    """Raised when fanning out generation work fails."""

    pass


class IdempotencyError(StudyLoopException):
    """Raised when an idempotency record cannot be created or transitioned."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if key:
            details["key"] = key
        super().__init__(message, details)


_TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# Whole numbers only: "HTTP 503" matches, "max_output_tokens=3500" does not.
_STATUS_CODE_PATTERN = re.compile(r"\b(?:429|500|502|503|504)\b")

_TRANSIENT_MARKERS = (
    "rate limit",
    "rate_limit",
    "too many requests",
    "resource exhausted",
    "resource_exhausted",
    "unavailable",
    "overloaded",
    "timed out",
    "timeout",
    "deadline exceeded",
    "connection reset",
)


def _status_code(exc: BaseException) -> int | None:
    """HTTP status carried by provider exceptions (status_code or code), if any."""
    for attribute in ("status_code", "code"):
        value = getattr(exc, attribute, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def is_transient_error(exc: BaseException) -> bool:
    """
    Classify a provider exception as transient (worth retrying).

    Args:
        exc: Exception raised by a model or embedding backend

    Returns:
        bool: True for rate limits, timeouts and network failures
    """
    if isinstance(exc, TransientBackendError):
        return True
    if isinstance(exc, StudyLoopException):
        return False
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True

    status = _status_code(exc)
    if status is not None:
        return status in _TRANSIENT_STATUS_CODES

    text = f"{type(exc).__name__} {exc}".lower()
    if _STATUS_CODE_PATTERN.search(text):
        return True
    return any(marker in text for marker in _TRANSIENT_MARKERS)
