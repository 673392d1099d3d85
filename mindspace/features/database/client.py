"""
Database Client - access to the journal tables.

Thin wrapper over the Supabase client that exposes one repository per table.
"""

import logging
from functools import lru_cache
from typing import Optional

from supabase import Client, create_client

from mindspace.core.config import settings
from mindspace.features.database.repositories.journal_entries import JournalEntriesRepository
from mindspace.features.database.repositories.patterns import PatternsRepository

logger = logging.getLogger("MindSpace.Database")


class DatabaseClient:
    """
    Database client providing access to all repositories.

    Usage:
        db = get_database_client()
        rows = await db.journal_entries.list_entries(user_id)
    """

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
            client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        self._client = client

        self.journal_entries = JournalEntriesRepository(self._client)
        self.patterns = PatternsRepository(self._client)

        logger.info("Database client initialized with all repositories")

    @property
    def client(self) -> Client:
        """Direct access to Supabase client for advanced queries."""
        return self._client


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    """Get the process-wide database client."""
    return DatabaseClient()
