"""
Database Feature Module - Supabase access for the journal tables.

Usage:
    from mindspace.features.database import get_database_client

    db = get_database_client()
    rows = await db.journal_entries.list_entries(user_id)
"""

from mindspace.features.database.client import DatabaseClient, get_database_client

__all__ = [
    "DatabaseClient",
    "get_database_client",
]
