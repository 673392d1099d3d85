"""Database Repositories - one per journal table."""

from mindspace.features.database.repositories.journal_entries import JournalEntriesRepository
from mindspace.features.database.repositories.patterns import PatternsRepository

__all__ = [
    "JournalEntriesRepository",
    "PatternsRepository",
]
