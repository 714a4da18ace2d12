"""Structured completion client backed by OpenRouter.

Security: Reads API key from settings only, never hardcoded.
Requests strict JSON-schema output and validates the reply again on our side;
the provider's constraint enforcement is not trusted on its own. No retries
happen here: whether to call a nondeterministic model again is the caller's
decision.
"""

import logging
import time
from typing import Any, Protocol, TypeVar

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    OpenAIError,
)
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from backend.app.config import Settings, get_settings
from backend.app.errors import ExternalServiceError, SchemaViolationError
from backend.app.utils.metrics import PrometheusGenerationMetrics

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

STATUS_MESSAGES = {
    400: "Invalid request parameters were sent to the AI service.",
    401: "Invalid AI service API key. Please check the provider configuration.",
    429: "AI service rate limit exceeded. Please try again later.",
}
UNAVAILABLE_MESSAGE = "The AI service is temporarily unavailable. Please try again later."


class StructuredCompletionClient(Protocol):
    """Protocol for structured completion client implementations."""

    async def complete_structured(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        response_model: type[ModelT],
        model: str | None = None,
    ) -> ModelT:
        """Request a completion constrained to `response_model`'s schema.

        Args:
            system_prompt: System instruction
            user_prompt: User instruction
            response_model: Closed pydantic model describing the expected output
            model: Provider model identifier (client default when omitted)

        Returns:
            Validated instance of response_model

        Raises:
            ExternalServiceError: Network, timeout or provider failure
            SchemaViolationError: Reply is not valid JSON for the schema
        """
        ...


class OpenRouterClient:
    """OpenRouter-backed structured completion client (OpenAI-compatible API)."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://openrouter.ai/api/v1",
        default_model: str = "openai/gpt-4o-mini",
        timeout_seconds: float = 60.0,
        max_tokens: int = 4096,
        metrics: PrometheusGenerationMetrics | None = None,
    ):
        """Initialize OpenRouter client.

        Args:
            api_key: OpenRouter API key (read from settings)
            base_url: API base URL
            default_model: Model used when the caller does not pick one
            timeout_seconds: Hard bound on a single call
            max_tokens: Output token budget, generous to avoid truncated JSON
            metrics: Metrics sink (Prometheus by default)
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.default_model = default_model
        self.max_tokens = max_tokens
        self.metrics = metrics or PrometheusGenerationMetrics()

    async def complete_structured(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        response_model: type[ModelT],
        model: str | None = None,
    ) -> ModelT:
        """Request a completion and validate it against response_model."""
        model_name = model or self.default_model
        request = self._build_request(system_prompt, user_prompt, response_model, model_name)

        logger.debug(
            f"Requesting structured response from {model_name} "
            f"(system_prompt={len(system_prompt)} chars, user_prompt={len(user_prompt)} chars)"
        )

        start = time.perf_counter()
        outcome = "error"
        try:
            response = await self._send(request)
            content = self._extract_content(response)
            result = self._validate(content, response_model)
            outcome = "success"
        except SchemaViolationError:
            outcome = "schema_violation"
            raise
        finally:
            self.metrics.record_llm_latency(
                model_name, outcome, (time.perf_counter() - start) * 1000
            )

        logger.info(f"Structured response generated successfully by {model_name}")
        return result

    def _build_request(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: type[BaseModel],
        model_name: str,
    ) -> dict[str, Any]:
        """Build chat completion kwargs with a strict JSON-schema response format."""
        return {
            "model": model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": response_model.__name__,
                    "strict": True,
                    "schema": response_model.model_json_schema(),
                },
            },
            "max_tokens": self.max_tokens,
        }

    def _extract_content(self, response: Any) -> str:
        """Pull the message text out of a completion, rejecting malformed envelopes."""
        choices = getattr(response, "choices", None)
        if not choices:
            logger.error("AI service response has no choices")
            raise ExternalServiceError("Invalid response structure from the AI service.")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            logger.error(
                f"AI service returned empty content "
                f"(finish_reason={getattr(choices[0], 'finish_reason', None)})"
            )
            raise ExternalServiceError("Invalid response structure from the AI service.")

        return content

    def _validate(self, content: str, response_model: type[ModelT]) -> ModelT:
        """Parse JSON content and validate it against the response model."""
        try:
            return response_model.model_validate_json(content)
        except PydanticValidationError as e:
            logger.error(
                f"AI response failed validation against {response_model.__name__}: "
                f"{e.error_count()} error(s)"
            )
            logger.debug(f"Rejected AI content: {content[:2000]}")
            raise SchemaViolationError(
                "The AI service returned a response that does not match the expected format.",
                e,
            ) from e

    async def _send(self, request: dict[str, Any]) -> Any:
        """Send the request, mapping SDK failures onto ExternalServiceError."""
        try:
            return await self.client.chat.completions.create(**request)
        except APITimeoutError as e:
            logger.error(f"AI service call timed out: {e}")
            raise ExternalServiceError(
                "The AI service did not respond in time. Please try again later.", e
            ) from e
        except APIConnectionError as e:
            logger.error(f"Network error while calling AI service: {e}")
            raise ExternalServiceError(
                "Failed to connect to the AI service. Please check the network connection.", e
            ) from e
        except APIStatusError as e:
            logger.error(f"AI service request failed with HTTP {e.status_code}: {e.message}")
            message = STATUS_MESSAGES.get(e.status_code)
            if message is None:
                message = (
                    UNAVAILABLE_MESSAGE
                    if e.status_code >= 500
                    else f"AI service error (HTTP {e.status_code})."
                )
            raise ExternalServiceError(message, e) from e
        except OpenAIError as e:
            logger.error(f"Unexpected AI client error: {e}")
            raise ExternalServiceError(
                "An unexpected error occurred while generating the response.", e
            ) from e


def get_llm_client(settings: Settings | None = None) -> StructuredCompletionClient:
    """Factory function to get the structured completion client from config.

    Raises:
        ExternalServiceError: If no provider API key is configured
    """
    settings = settings or get_settings()
    api_key = settings.openrouter_api_key

    if api_key is None or not api_key.get_secret_value():
        logger.error("No OpenRouter API key configured, plan generation is unavailable")
        raise ExternalServiceError("AI provider API key is not configured.")

    return OpenRouterClient(
        api_key=api_key.get_secret_value(),
        base_url=settings.openrouter_base_url,
        default_model=settings.openrouter_model,
        timeout_seconds=settings.llm_timeout_seconds,
        max_tokens=settings.llm_max_tokens,
    )
