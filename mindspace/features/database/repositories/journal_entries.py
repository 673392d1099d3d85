"""
Journal Entries Repository - ``journal_entries`` table access.

Columns: id, user_id, mood, gratitude, intentions, thoughts, insights,
created_at. ``id`` and ``created_at`` are assigned by the database. Every
query is filtered by ``user_id``.

The supabase client is synchronous; each call runs in a worker thread so the
event loop is never blocked.
"""

import asyncio
import logging
from typing import Any, Dict, List

from mindspace.shared.errors import PersistenceError

logger = logging.getLogger("MindSpace.Database.JournalEntries")

TABLE = "journal_entries"


class JournalEntriesRepository:
    """Supabase-backed journal storage."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def _insert(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(payload, user_id=user_id)
        result = self.client.table(TABLE).insert(row).execute()
        if not result.data:
            raise PersistenceError("Insert returned no row", operation="insert")
        return result.data[0]

    def _select(self, user_id: str) -> List[Dict[str, Any]]:
        result = self.client.table(TABLE).select("*").eq(
            "user_id", user_id
        ).order("created_at", desc=True).execute()
        return result.data or []

    def _update_insights(self, user_id: str, entry_id: str, insights: str) -> None:
        result = self.client.table(TABLE).update({"insights": insights}).eq(
            "id", entry_id
        ).eq("user_id", user_id).execute()
        if not result.data:
            raise PersistenceError("Entry to update was not found", operation="update")

    async def insert_entry(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            row = await asyncio.to_thread(self._insert, user_id, payload)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Error creating journal entry: {e}")
            raise PersistenceError("Could not save journal entry", operation="insert") from e
        logger.info(f"Journal entry created: {row.get('id')}")
        return row

    async def list_entries(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._select, user_id)
        except Exception as e:
            logger.error(f"Error loading journal entries: {e}")
            raise PersistenceError("Could not load journal entries", operation="select") from e

    async def update_insights(self, user_id: str, entry_id: str, insights: str) -> None:
        try:
            await asyncio.to_thread(self._update_insights, user_id, entry_id, insights)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Error updating insights for {entry_id}: {e}")
            raise PersistenceError("Could not save insights", operation="update") from e
        logger.info(f"Updated insights for journal entry {entry_id}")
