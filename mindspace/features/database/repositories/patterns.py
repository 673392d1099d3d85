"""
Patterns Repository - read access to ``journal_patterns``.

Rows are written by the external pattern detector; this service only reads
them, most relevant first (confidence, then most recently detected).
"""

import asyncio
import logging
from typing import Any, Dict, List

from mindspace.shared.errors import PersistenceError

logger = logging.getLogger("MindSpace.Database.Patterns")

TABLE = "journal_patterns"


class PatternsRepository:
    """Repository for detected journal patterns."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def _select(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        result = self.client.table(TABLE).select(
            "id, pattern, first_detected, occurrences, confidence"
        ).eq("user_id", user_id).order(
            "confidence", desc=True
        ).order("first_detected", desc=True).limit(limit).execute()
        return result.data or []

    async def list_patterns(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._select, user_id, limit)
        except Exception as e:
            logger.error(f"Error loading patterns: {e}")
            raise PersistenceError("Could not load patterns", operation="select") from e
