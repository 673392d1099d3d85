"""
Journaling feature module.

- EntryStore: per-session entry cache, creation and enrichment
- EnrichmentClient: sanitized calls to the enrichment endpoint
- analytics: streak, mood trend, distribution and report statistics
- PatternRegistry: detected patterns for display
"""

from mindspace.features.journaling.entry_store import EntryStore, LoadStatus
from mindspace.features.journaling.enrichment import EnrichmentClient, clamp_generation_params
from mindspace.features.journaling.models import (
    EntryDraft,
    Identity,
    JournalEntry,
    Mood,
    Pattern,
)
from mindspace.features.journaling.patterns import PatternRegistry

__all__ = [
    "EntryStore",
    "LoadStatus",
    "EnrichmentClient",
    "clamp_generation_params",
    "EntryDraft",
    "Identity",
    "JournalEntry",
    "Mood",
    "Pattern",
    "PatternRegistry",
]
