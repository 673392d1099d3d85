"""
Pooled HTTP client for outgoing enrichment calls.

The application lifespan opens and closes the pool; code running outside the
app (scripts, tests without lifespan) gets a lazily created client instead.
"""

import logging
from typing import Optional

import httpx

from mindspace.core.config import settings

logger = logging.getLogger("MindSpace.HTTP.Client")


class HTTPClientManager:
    """Owns the process-wide ``httpx.AsyncClient``."""

    def __init__(
        self,
        max_connections: int = 50,
        max_keepalive_connections: int = 10,
        timeout_seconds: Optional[float] = None,
    ):
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )
        self._timeout = httpx.Timeout(
            timeout_seconds if timeout_seconds is not None else settings.ENRICHMENT_TIMEOUT_SECONDS
        )
        self._client: Optional[httpx.AsyncClient] = None

    async def startup(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(limits=self._limits, timeout=self._timeout)
        logger.info(
            "HTTP client pool opened (max_connections=%d, timeout=%.0fs)",
            self._limits.max_connections,
            self._timeout.read,
        )

    async def shutdown(self) -> None:
        if self._client is None:
            return
        await self._client.aclose()
        self._client = None
        logger.info("HTTP client pool closed")

    async def get_client(self) -> httpx.AsyncClient:
        """The pooled client; opened on first use when the lifespan has not run."""
        if self._client is None:
            logger.warning("HTTP client requested before startup, opening pool lazily")
            await self.startup()
        return self._client


http_client_manager = HTTPClientManager()
