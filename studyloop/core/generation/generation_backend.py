"""
Structured-output generation backend.

Renders a strategy's prompt pair, asks the chat model for output matching
the strategy's JSON schema and enforces a hard timeout per call. Transient
provider failures are retried with exponential backoff; anything else, or
exhausted retries, surfaces as GenerationBackendError.

Dependencies: langchain_core, langchain_google_genai, tenacity, studyloop.configs
System role: Model invocation step of the generation pipeline
"""

import asyncio
import logging
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from studyloop.configs import get_settings
from studyloop.configs.generation import GenerationSettings
from studyloop.core.exceptions import (
    GenerationBackendError,
    TransientBackendError,
    is_transient_error,
)
from studyloop.core.generation.strategies.base import PromptPair

logger = logging.getLogger(__name__)


class GenerationBackend:
    """
    Chat model wrapper returning schema-shaped output.

    Usage:
        backend = GenerationBackend()
        raw = await backend.generate(strategy.get_prompt(), context, strategy.get_schema())
    """

    def __init__(
        self,
        settings: GenerationSettings | None = None,
        model: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize generation backend.

        Args:
            settings: Generation settings (uses global settings if None)
            model: Chat model to call (Gemini built from settings if None)
        """
        self._settings = settings or get_settings().generation
        self._model = model or ChatGoogleGenerativeAI(
            model=self._settings.model_name,
            temperature=self._settings.temperature,
            max_output_tokens=self._settings.max_output_tokens,
        )
        logger.info(
            f"{__name__}:__init__ - Initialized generation backend",
            extra={"model": self._settings.model_name, "timeout_s": self._settings.timeout_seconds},
        )

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    async def generate(
        self,
        prompt: PromptPair,
        context: dict[str, Any],
        schema: dict[str, Any],
        content_type: str | None = None,
    ) -> Any:
        """
        Generate structured output for one prompt.

        Args:
            prompt: System prompt and user prompt template
            context: Values for the user prompt template
            schema: JSON schema the output must follow
            content_type: Content type for logs and errors

        Returns:
            Structured output (usually a dict keyed by the wrapper key)

        Raises:
            GenerationBackendError: Non-transient failure or retries exhausted
        """
        messages = prompt.render(context)
        structured_model = self._model.with_structured_output(schema)

        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient_error),
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.retry_initial_wait,
                max=self._settings.retry_max_wait,
                jitter=self._settings.retry_jitter,
            ),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:generate - Retry {retry_state.attempt_number}/"
                f"{self._settings.max_attempts} after transient failure",
                extra={"content_type": content_type},
            ),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await self._invoke_once(structured_model, messages, content_type)
        except Exception as e:
            transient = is_transient_error(e)
            logger.error(
                f"{__name__}:generate - Generation failed",
                extra={
                    "content_type": content_type,
                    "error_type": type(e).__name__,
                    "error_msg": str(e),
                    "transient": transient,
                },
            )
            reason = "retries exhausted" if transient else "non-retryable error"
            raise GenerationBackendError(
                f"Generation backend failed ({reason}): {e}",
                content_type=content_type,
                details={"error_type": type(e).__name__},
            ) from e

        raise GenerationBackendError("Generation retries exhausted", content_type=content_type)

    async def _invoke_once(self, structured_model: Any, messages: list, content_type: str | None) -> Any:
        """Single model call under the hard timeout."""
        try:
            return await asyncio.wait_for(
                structured_model.ainvoke(messages),
                timeout=self._settings.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise TransientBackendError(
                f"Generation timed out after {self._settings.timeout_seconds}s",
                content_type=content_type,
            ) from e
