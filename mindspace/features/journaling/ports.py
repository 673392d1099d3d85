"""Collaborators the journal core depends on but does not implement."""

from typing import Any, Dict, List, Optional, Protocol

from mindspace.features.journaling.models import Identity


class JournalStorage(Protocol):
    """Durable store for journal rows. Every call is scoped to one user.

    Implementations raise ``PersistenceError`` on any storage failure.
    """

    async def insert_entry(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it with the storage-assigned ``id`` and ``created_at``."""
        ...

    async def list_entries(self, user_id: str) -> List[Dict[str, Any]]:
        """All rows of ``user_id``, newest ``created_at`` first."""
        ...

    async def update_insights(self, user_id: str, entry_id: str, insights: str) -> None:
        ...


class IdentityProvider(Protocol):
    async def current_identity(self) -> Optional[Identity]:
        """The authenticated caller, or None when there is none."""
        ...


class PatternSource(Protocol):
    """Read access to the external pattern detector's output."""

    async def list_patterns(self, user_id: str) -> List[Dict[str, Any]]:
        ...
