"""LLM client wrapper for Anthropic structured outputs."""

from typing import TypeVar

from anthropic import APIError, AsyncAnthropic
from pydantic import BaseModel

from attendance_recon.config import settings

T = TypeVar("T", bound=BaseModel)


class LLMClientError(Exception):
    """Raised when an LLM call fails or returns unparseable output."""

    pass


class LLMClient:
    """Anthropic client wrapper with structured output support.

    Uses client.beta.messages.parse with Pydantic models so responses
    are deserialized and schema-checked before they reach callers.
    """

    def __init__(
        self,
        client: AsyncAnthropic | None = None,
        model: str | None = None,
    ):
        """Initialize LLM client.

        Args:
            client: Optional Anthropic client for dependency injection.
                   If not provided, creates one from settings.
            model: Model name override (defaults to settings.anthropic_model)
        """
        if client is not None:
            self._client = client
        elif settings.anthropic_api_key:
            self._client = AsyncAnthropic(api_key=settings.anthropic_api_key)
        else:
            # Allow initialization without API key; callers check is_configured
            self._client = None
        self._model = model or settings.anthropic_model

    @property
    def is_configured(self) -> bool:
        """True when an API credential was available at construction."""
        return self._client is not None

    async def extract(
        self,
        prompt: str,
        response_model: type[T],
        temperature: float | None = None,
    ) -> T:
        """Get a structured response from the LLM.

        Args:
            prompt: The user prompt
            response_model: Pydantic model defining the output schema
            temperature: Optional sampling temperature

        Returns:
            Parsed response matching the response_model type

        Raises:
            LLMClientError: If the call fails or output does not parse
        """
        if self._client is None:
            raise LLMClientError(
                "Anthropic client not initialized. "
                "Set ANTHROPIC_API_KEY environment variable."
            )

        kwargs = {}
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            response = await self._client.beta.messages.parse(
                model=self._model,
                max_tokens=1024,
                betas=["structured-outputs-2025-11-13"],
                messages=[{"role": "user", "content": prompt}],
                output_format=response_model,
                **kwargs,
            )
        except APIError as e:
            raise LLMClientError(f"Anthropic API error: {e}") from e
        except Exception as e:
            raise LLMClientError(f"Structured output failed: {e}") from e

        if response.parsed_output is None:
            raise LLMClientError("Model returned no parseable JSON object")
        return response.parsed_output
