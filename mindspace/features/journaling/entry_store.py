"""
EntryStore - the session's journal entries and their enrichment.

One store is built per session with its collaborators injected, and owns the
in-memory entry cache for that session. Writes go to storage first and only
then to the cache, so the cache never claims something storage refused.

Ordering note: ``create_entry`` prepends the new entry without re-reading
storage. If storage stamps it earlier than an entry already cached, the cache
order differs from a fresh ``load_entries`` until the next load.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from mindspace.features.journaling.enrichment import EnrichmentClient
from mindspace.features.journaling.models import EntryDraft, Identity, JournalEntry
from mindspace.features.journaling.ports import IdentityProvider, JournalStorage
from mindspace.shared.correlation import CorrelationContext, get_correlation_id
from mindspace.shared.errors import (
    AuthenticationError,
    JournalError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger("MindSpace.Journal.EntryStore")

WEEKLY_WINDOW = timedelta(days=7)
WEEKLY_MAX_ENTRIES = 7


class LoadStatus(str, Enum):
    """Why the cache holds what it holds after the last load."""

    NOT_LOADED = "not_loaded"
    LOADED = "loaded"
    UNAUTHENTICATED = "unauthenticated"
    FAILED = "failed"


class EntryStore:
    """Entry lifecycle for one session: create, load, enrich."""

    def __init__(
        self,
        storage: JournalStorage,
        identity_provider: IdentityProvider,
        enrichment: EnrichmentClient,
    ) -> None:
        self._storage = storage
        self._identity_provider = identity_provider
        self._enrichment = enrichment

        self._entries: List[JournalEntry] = []
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._background: set = set()

        self.load_status = LoadStatus.NOT_LOADED
        self.weekly_reflection: Optional[str] = None
        self.weekly_reflection_entries: Tuple[JournalEntry, ...] = ()
        self.last_insight: Optional[str] = None
        self.enrichment_failures: Dict[str, JournalError] = {}
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, load: bool = True) -> "EntryStore":
        """Prepare the session; by default loads the caller's entries."""
        self._closed = False
        if load:
            await self.load_entries()
        return self

    async def close(self) -> None:
        """Wait for background enrichment to settle, then drop the cache."""
        self._closed = True
        pending = list(self._background) + list(self._in_flight.values())
        if pending:
            logger.info("Draining %d enrichment task(s) before close", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
        self._entries = []
        self.load_status = LoadStatus.NOT_LOADED

    def release(self) -> List[asyncio.Task]:
        """
        End the session without waiting for background enrichment.

        Returns the enrichment tasks still running. The cache stays intact
        for them to write their results into.
        """
        self._closed = True
        return [task for task in (*self._background, *self._in_flight.values()) if not task.done()]

    async def __aenter__(self) -> "EntryStore":
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def entries(self) -> Tuple[JournalEntry, ...]:
        """Read-only snapshot of the cache, in cache order."""
        return tuple(self._entries)

    def get(self, entry_id: str) -> Optional[JournalEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    async def _require_identity(self) -> Identity:
        identity = await self._identity_provider.current_identity()
        if identity is None:
            raise AuthenticationError("User not authenticated")
        return identity

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    async def create_entry(self, draft: EntryDraft, enrich: bool = True) -> JournalEntry:
        """
        Persist a new entry and prepend it to the cache.

        Enrichment is scheduled in the background and does not affect the
        result: if it fails the entry stays saved without insights, the error
        is kept in ``enrichment_failures`` and ``generate_insights`` retries it.

        Raises:
            AuthenticationError: no identity (nothing is persisted)
            ValidationError: no mood (nothing is persisted)
            PersistenceError: storage rejected the insert
        """
        identity = await self._require_identity()
        if draft.mood is None:
            raise ValidationError("Mood is required", {"field": "mood"})

        row = await self._storage.insert_entry(identity.user_id, draft.to_row(identity.user_id))
        try:
            entry = JournalEntry.from_row(row)
        except (KeyError, ValueError, ValidationError) as exc:
            raise PersistenceError("Storage returned an incomplete entry", operation="insert") from exc

        self._entries.insert(0, entry)
        logger.info("Entry created", extra={"entry_id": entry.id, "mood": entry.mood.value})

        if enrich and not self._closed:
            self._schedule_enrichment(entry.id)
        return entry

    def _schedule_enrichment(self, entry_id: str) -> None:
        correlation_id = get_correlation_id()

        async def _run() -> None:
            with CorrelationContext(correlation_id):
                try:
                    await self.generate_insights(entry_id)
                except JournalError as exc:
                    self.enrichment_failures[entry_id] = exc
                    logger.warning(
                        "Background enrichment failed; entry kept without insights",
                        extra={"entry_id": entry_id, "error_code": exc.code.value},
                    )

        task = asyncio.create_task(_run(), name=f"enrich-{entry_id}")
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def load_entries(self) -> List[JournalEntry]:
        """
        Replace the cache with the caller's entries, newest first.

        Without an identity this returns an empty list instead of raising;
        ``load_status`` is then UNAUTHENTICATED so callers can tell it apart
        from an empty journal.

        Raises:
            PersistenceError: storage failed (the cache is left empty)
        """
        identity = await self._identity_provider.current_identity()
        if identity is None:
            self._entries = []
            self.load_status = LoadStatus.UNAUTHENTICATED
            return []

        try:
            rows = await self._storage.list_entries(identity.user_id)
            entries = [JournalEntry.from_row(row) for row in rows]
        except PersistenceError:
            self._entries = []
            self.load_status = LoadStatus.FAILED
            raise
        except (KeyError, ValueError, ValidationError) as exc:
            self._entries = []
            self.load_status = LoadStatus.FAILED
            raise PersistenceError("Stored entry could not be read", operation="select") from exc

        entries.sort(key=lambda entry: entry.date, reverse=True)
        self._entries = entries
        self.load_status = LoadStatus.LOADED
        logger.info("Entries loaded", extra={"entry_count": len(entries)})
        return list(entries)

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------

    async def generate_insights(self, entry_id: str, regenerate: bool = False) -> JournalEntry:
        """
        Generate and persist insights for a cached entry.

        Concurrent calls for the same entry share one upstream request. On any
        failure the cached entry is left exactly as it was.

        Raises:
            NotFoundError: the entry is not in this session's cache
            AuthenticationError, UpstreamServiceError, EmptyGenerationError,
            PersistenceError: propagated from enrichment or storage
        """
        if self.get(entry_id) is None:
            raise NotFoundError("Entry not found", resource_id=entry_id)

        task = self._in_flight.get(entry_id)
        if task is None:
            task = asyncio.create_task(self._enrich(entry_id, regenerate), name=f"insights-{entry_id}")
            self._in_flight[entry_id] = task
            task.add_done_callback(lambda _t, key=entry_id: self._in_flight.pop(key, None))
        else:
            logger.debug("Joining in-flight enrichment", extra={"entry_id": entry_id})

        # shield: one waiter being cancelled must not cancel the shared request
        return await asyncio.shield(task)

    async def _enrich(self, entry_id: str, regenerate: bool) -> JournalEntry:
        entry = self.get(entry_id)
        if entry is None:
            raise NotFoundError("Entry not found", resource_id=entry_id)

        identity = await self._require_identity()
        insights = await self._enrichment.generate_entry_insight(
            mood=entry.mood,
            gratitude=entry.gratitude,
            intentions=entry.intentions,
            thoughts=entry.thoughts,
            token=identity.access_token,
            regenerate=regenerate,
        )

        await self._storage.update_insights(identity.user_id, entry_id, insights)

        updated = entry.model_copy(update={"ai_insights": insights})
        self._entries = [updated if cached.id == entry_id else cached for cached in self._entries]
        self.last_insight = insights
        self.enrichment_failures.pop(entry_id, None)
        logger.info("Insights stored", extra={"entry_id": entry_id, "regenerate": regenerate})
        return updated

    def weekly_entries(self, now: Optional[datetime] = None) -> List[JournalEntry]:
        """Entries dated within the trailing seven days up to ``now``, newest first, at most seven."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - WEEKLY_WINDOW
        recent = [entry for entry in self._entries if cutoff <= _comparable(entry.date, now) <= now]
        recent.sort(key=lambda entry: _comparable(entry.date, now), reverse=True)
        return recent[:WEEKLY_MAX_ENTRIES]

    async def generate_weekly_reflection(self, now: Optional[datetime] = None) -> str:
        """
        Regenerate the weekly reflection and overwrite the previous one.

        Runs even when the week has no entries. The entries sent upstream are
        kept in ``weekly_reflection_entries``. On failure the previous
        reflection and its entries are kept and the error propagates.
        """
        selected = self.weekly_entries(now)
        identity = await self._identity_provider.current_identity()

        reflection = await self._enrichment.generate_weekly_digest(
            selected,
            token=identity.access_token if identity else None,
        )
        self.weekly_reflection = reflection
        self.weekly_reflection_entries = tuple(selected)
        logger.info("Weekly reflection generated", extra={"entry_count": len(selected)})
        return reflection


def _comparable(value: datetime, reference: datetime) -> datetime:
    """Align naive/aware datetimes so they can be compared."""
    if (value.tzinfo is None) == (reference.tzinfo is None):
        return value
    if value.tzinfo is None:
        return value.astimezone().astimezone(reference.tzinfo)
    return value.astimezone().replace(tzinfo=None)
