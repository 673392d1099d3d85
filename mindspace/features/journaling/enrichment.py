"""
Enrichment client: the one boundary between the journal core and text generation.

Two request shapes go through it, both ending in ``POST /enrichment``:

- ``generate_entry_insight``: mood plus the three free-text fields of one entry
- ``generate_weekly_digest``: an ordered sequence of at most seven entries

Generation parameters are clamped here and again by the endpoint, so no caller
can push temperature or output length outside the allowed ranges. Upstream
failures surface as ``UpstreamServiceError``, empty output as
``EmptyGenerationError``, and a missing or rejected token as
``AuthenticationError``. Transport errors and 5xx answers are retried up to
``max_retries`` times with exponential backoff; 4xx answers never are.

Cancellation is plain asyncio: cancelling the task that awaits a call aborts
the in-flight request.
"""

import asyncio
import logging
import math
import re
import time
from numbers import Real
from typing import Any, Dict, Optional, Sequence, Tuple

import httpx

from mindspace.core.config import settings
from mindspace.core.logging_utils import sanitize_for_logging
from mindspace.core.tracing import get_tracer
from mindspace.features.journaling.models import JournalEntry, Mood
from mindspace.features.journaling.prompts import (
    MAX_DIGEST_ENTRIES,
    build_digest_prompt,
    build_entry_prompt,
)
from mindspace.services.http_client import http_client_manager
from mindspace.shared.correlation import propagate_correlation_headers
from mindspace.shared.errors import (
    AuthenticationError,
    EmptyGenerationError,
    ErrorCode,
    UpstreamServiceError,
)

logger = logging.getLogger("MindSpace.Journal.Enrichment")
tracer = get_tracer(__name__)

DEFAULT_TEMPERATURE = 0.7
REGENERATE_TEMPERATURE = 0.9
MIN_TEMPERATURE, MAX_TEMPERATURE = 0.0, 1.0

DEFAULT_MAX_TOKENS = 512
MIN_MAX_TOKENS, MAX_MAX_TOKENS = 1, 2048

ENTRY_MAX_TOKENS = 1024
DIGEST_MAX_TOKENS = 1024

# header.payload.signature, base64url segments
_TOKEN_SHAPE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*$")


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def clamp_generation_params(temperature: Any = None, max_tokens: Any = None) -> Tuple[float, int]:
    """
    Clamp caller-supplied generation parameters.

    temperature: [0, 1], default 0.7 when absent or non-numeric
    max_tokens: [1, 2048], default 512 when absent or non-numeric

    >>> clamp_generation_params(-5, 9999)
    (0.0, 2048)
    """
    number = _as_number(temperature)
    clamped_temperature = DEFAULT_TEMPERATURE if number is None else min(max(number, MIN_TEMPERATURE), MAX_TEMPERATURE)

    number = _as_number(max_tokens)
    if number is None:
        clamped_tokens = DEFAULT_MAX_TOKENS
    else:
        clamped_tokens = int(min(max(math.floor(number), MIN_MAX_TOKENS), MAX_MAX_TOKENS))

    return float(clamped_temperature), clamped_tokens


class EnrichmentClient:
    """Sanitized client for the enrichment endpoint."""

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: float = 0.5,
    ) -> None:
        self.endpoint_url = endpoint_url or settings.ENRICHMENT_URL
        self._http_client = http_client
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.ENRICHMENT_TIMEOUT_SECONDS
        self.max_retries = max(0, max_retries if max_retries is not None else settings.ENRICHMENT_MAX_RETRIES)
        self.backoff_seconds = backoff_seconds

    async def generate_entry_insight(
        self,
        *,
        mood: Mood,
        gratitude: str,
        intentions: str,
        thoughts: str,
        token: Optional[str],
        regenerate: bool = False,
    ) -> str:
        """Reflective insight for one entry."""
        prompt = build_entry_prompt(Mood.parse(mood), gratitude or "", intentions or "", thoughts or "")
        temperature = REGENERATE_TEMPERATURE if regenerate else DEFAULT_TEMPERATURE

        with tracer.start_as_current_span("enrichment.entry") as span:
            span.set_attribute("journal.regenerate", regenerate)
            return await self._dispatch(prompt, token, temperature=temperature, max_tokens=ENTRY_MAX_TOKENS)

    async def generate_weekly_digest(
        self,
        entries: Sequence[JournalEntry],
        *,
        token: Optional[str],
    ) -> str:
        """Weekly reflection over up to seven entries, in the order given."""
        selected = list(entries)[:MAX_DIGEST_ENTRIES]
        if len(entries) > MAX_DIGEST_ENTRIES:
            logger.debug("Digest truncated from %d to %d entries", len(entries), MAX_DIGEST_ENTRIES)

        with tracer.start_as_current_span("enrichment.digest") as span:
            span.set_attribute("journal.entry_count", len(selected))
            return await self._dispatch(
                build_digest_prompt(selected), token, temperature=DEFAULT_TEMPERATURE, max_tokens=DIGEST_MAX_TOKENS
            )

    async def _dispatch(
        self,
        prompt: str,
        token: Optional[str],
        temperature: Any = None,
        max_tokens: Any = None,
    ) -> str:
        if not token or not _TOKEN_SHAPE.match(token):
            raise AuthenticationError("A valid bearer token is required for enrichment")

        temperature, max_tokens = clamp_generation_params(temperature, max_tokens)
        body = {"prompt": prompt, "temperature": temperature, "maxTokens": max_tokens}
        headers = propagate_correlation_headers({"Authorization": f"Bearer {token}"})

        client = self._http_client or await http_client_manager.get_client()
        logger.info("Requesting enrichment", extra={"request": sanitize_for_logging(body)})

        attempt = 0
        while True:
            started = time.monotonic()
            try:
                response = await client.post(
                    self.endpoint_url,
                    json=body,
                    headers=headers,
                    timeout=self.timeout_seconds,
                )
            except httpx.HTTPError as exc:
                if attempt < self.max_retries:
                    attempt += 1
                    await self._backoff(attempt, reason=type(exc).__name__)
                    continue
                logger.error("Enrichment request failed: %s", type(exc).__name__)
                raise UpstreamServiceError("Enrichment service unreachable") from exc

            if response.status_code >= 500 and attempt < self.max_retries:
                attempt += 1
                await self._backoff(attempt, reason=f"HTTP {response.status_code}")
                continue
            break

        logger.info(
            "Enrichment responded",
            extra={
                "status_code": response.status_code,
                "duration_ms": int((time.monotonic() - started) * 1000),
                "attempts": attempt + 1,
            },
        )
        return self._extract_text(response)

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.backoff_seconds * (2 ** (attempt - 1))
        logger.warning("Retrying enrichment (attempt %d/%d) after %s in %.2fs", attempt, self.max_retries, reason, delay)
        await asyncio.sleep(delay)

    @staticmethod
    def _error_code(response: httpx.Response) -> Optional[str]:
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        if isinstance(error, dict):
            return error.get("code")
        return None

    def _extract_text(self, response: httpx.Response) -> str:
        status = response.status_code

        if status in (401, 403):
            raise AuthenticationError("Enrichment request was not authorized")
        if status >= 400:
            if self._error_code(response) == ErrorCode.EMPTY_GENERATION.value:
                raise EmptyGenerationError()
            raise UpstreamServiceError(status=status)

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as exc:
            raise UpstreamServiceError("Enrichment response was not JSON", status=status) from exc

        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise EmptyGenerationError()
        return text
