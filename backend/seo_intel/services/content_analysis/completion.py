"""
Anthropic-backed ``TextCompletionService``.

The ``AsyncAnthropic`` client is created and owned by the caller and passed
in; this adapter only shapes the request and normalizes failures into
``CompletionServiceError``.
"""

import logging
from typing import Optional

import anthropic
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from seo_intel.config import get_settings
from seo_intel.errors import CompletionServiceError
from seo_intel.services.content_analysis.constants import (
    AI_MAX_OUTPUT_TOKENS,
    AI_TEMPERATURE,
)

logger = logging.getLogger(__name__)


class AnthropicCompletionService:
    """Implements ``TextCompletionService`` over ``messages.create``."""

    def __init__(
        self,
        client: anthropic.AsyncAnthropic,
        model: Optional[str] = None,
        *,
        max_tokens: int = AI_MAX_OUTPUT_TOKENS,
        temperature: float = AI_TEMPERATURE,
    ) -> None:
        self.client = client
        self.model = model or get_settings().claude_model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(
        self, system_prompt: str, user_prompt: str, response_schema_hint: str
    ) -> str:
        """Return the raw response text for one prompt.

        Raises:
            CompletionServiceError: On API errors (after retries) or an
                empty response.
        """
        system = (
            f"{system_prompt}\n\nRespond with valid JSON only, matching this "
            f"shape:\n{response_schema_hint}"
        )
        try:
            response = await self._create(system, user_prompt)
        except anthropic.APIError as e:
            raise CompletionServiceError(f"Completion request failed: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if not text.strip():
            raise CompletionServiceError("Completion response was empty")

        logger.info(
            f"Completion ok: stop_reason={response.stop_reason}, "
            f"output_tokens={response.usage.output_tokens}"
        )
        return text

    @retry(
        retry=retry_if_exception_type(
            (
                anthropic.RateLimitError,
                anthropic.APITimeoutError,
                anthropic.APIConnectionError,
            )
        ),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    async def _create(self, system: str, user_prompt: str) -> anthropic.types.Message:
        return await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system,
            messages=[{"role": "user", "content": user_prompt}],
        )
