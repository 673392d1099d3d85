"""Upstream text generation for the enrichment endpoint (Claude via the Anthropic SDK)."""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import List, Optional

import anthropic
from anthropic import AsyncAnthropic

from mindspace.core.config import settings
from mindspace.core.logging_utils import log_generation_usage
from mindspace.shared.errors import EmptyGenerationError, UpstreamServiceError

logger = logging.getLogger("MindSpace.Generation")


class ClaudeGenerator:
    """Generate reflective text, trying the primary model and then each fallback."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncAnthropic] = None,
    ) -> None:
        self.client = client or AsyncAnthropic(api_key=api_key or settings.ANTHROPIC_API_KEY)

        primary_model = model or settings.CLAUDE_MODEL_PRIMARY
        fallback_models: List[str] = []
        for candidate in settings.CLAUDE_MODEL_OPTIONS:
            if candidate and candidate not in fallback_models and candidate != primary_model:
                fallback_models.append(candidate)

        self.model_candidates = [primary_model] + fallback_models

        logger.info("Claude generator initialized with models: %s", ", ".join(self.model_candidates))

    async def generate(self, prompt: str, temperature: float, max_tokens: int) -> str:
        """
        Generate text for ``prompt``. Parameters must already be clamped.

        Raises:
            UpstreamServiceError: every candidate model failed
            EmptyGenerationError: a model answered without any text
        """
        last_error: Optional[Exception] = None

        for model_name in self.model_candidates:
            started = time.monotonic()
            try:
                response = await self.client.messages.create(
                    model=model_name,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[{"role": "user", "content": prompt}],
                )
            except anthropic.APIError as exc:
                logger.warning("Model %s failed: %s", model_name, exc)
                last_error = exc
                continue

            usage = getattr(response, "usage", None)
            log_generation_usage(
                model=model_name,
                input_tokens=getattr(usage, "input_tokens", 0) or 0,
                output_tokens=getattr(usage, "output_tokens", 0) or 0,
                temperature=temperature,
                max_tokens=max_tokens,
                duration_ms=int((time.monotonic() - started) * 1000),
            )

            text = "".join(
                block.text for block in response.content if getattr(block, "type", None) == "text"
            )
            if not text.strip():
                logger.error("Model %s returned no text (stop_reason=%s)", model_name, response.stop_reason)
                raise EmptyGenerationError()
            return text

        logger.error("All Claude models failed: %s", last_error)
        raise UpstreamServiceError()


@lru_cache(maxsize=1)
def get_generator() -> ClaudeGenerator:
    """Process-wide generator for request handlers."""
    return ClaudeGenerator()
