"""
Completion client for the generative text provider.

Talks to Groq through its OpenAI-compatible endpoint with the ``openai``
SDK. Any OpenAI-compatible provider works by changing ``base_url``.
"""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from constants import GROQ_API_BASE, PROVIDER_GROQ
from errors import GenerationFailure
from metrics import metrics
from text_utils import clean_completion

logger = logging.getLogger(__name__)


class CompletionClient:
    """
    Single-turn chat completions.

    SDK retries are disabled; a failed or timed-out call surfaces as
    GenerationFailure immediately.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = GROQ_API_BASE,
        timeout: float = 20.0,
        client: Optional[OpenAI] = None,
    ):
        """
        Initialize completion client.

        Args:
            api_key: Provider API key
            base_url: OpenAI-compatible API base URL
            timeout: Per-request timeout in seconds
            client: Pre-built SDK client (tests inject a mock here)
        """
        self.provider = PROVIDER_GROQ
        self._client = client or OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    def complete(
        self,
        prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Generate a completion for a single user prompt.

        Args:
            prompt: User message content
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Completion token ceiling

        Returns:
            The cleaned completion text (never empty)

        Raises:
            GenerationFailure: If the call fails, times out, or returns no content
        """
        try:
            with metrics.timer("completion_duration_ms", labels={"model": model}):
                completion = self._client.chat.completions.create(
                    model=model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
        except OpenAIError as e:
            status = getattr(e, "status_code", None)
            metrics.inc("provider_errors", labels={"provider": self.provider, "status": status or "transport"})
            logger.warning(
                f"{self.provider} completion failed ({model}): {type(e).__name__}",
                extra={'provider': self.provider, 'status_code': status},
            )
            raise GenerationFailure(f"{self.provider} completion failed: {type(e).__name__}") from e

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        text = clean_completion(content)
        if not text:
            raise GenerationFailure(f"{self.provider} returned no content")
        return text
