"""
Journal API Routes

Each request gets its own EntryStore (see ``get_entry_store``), loaded with
the caller's entries, and runs one operation against it:

- entries: list and create check-ins, (re)generate insights
- weekly reflection: digest of the trailing seven days
- analytics and report: streak, trend, distribution, 30-day statistics
- patterns: recurring themes from the external detector
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from mindspace.api.dependencies import get_entry_store, get_pattern_source, require_identity
from mindspace.features.journaling import analytics
from mindspace.features.journaling.entry_store import EntryStore
from mindspace.features.journaling.models import (
    AnalyticsSummary,
    EntryDraft,
    Identity,
    JournalEntry,
    Pattern,
    WeeklyReport,
)
from mindspace.features.journaling.patterns import PatternRegistry
from mindspace.features.journaling.ports import PatternSource

router = APIRouter(prefix="/journal", tags=["Journal"])
logger = logging.getLogger("MindSpace.API.Journal")


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class CreateEntryRequest(BaseModel):
    """A mood check-in. ``mood`` accepts a label or a 1-5 score."""
    mood: Optional[Any] = None
    gratitude: Optional[str] = None
    intentions: Optional[str] = Field(default=None, description="Also accepted as 'goals'")
    thoughts: Optional[str] = Field(default=None, description="Also accepted as 'content'")
    goals: Optional[str] = None
    content: Optional[str] = None

    def to_draft(self) -> EntryDraft:
        return EntryDraft(
            mood=self.mood,
            gratitude=self.gratitude,
            intentions=self.intentions if self.intentions is not None else self.goals,
            thoughts=self.thoughts if self.thoughts is not None else self.content,
        )


class EntriesResponse(BaseModel):
    status: str
    entries: List[JournalEntry]


class WeeklyReflectionResponse(BaseModel):
    reflection: str
    entry_count: int


class ReportResponse(BaseModel):
    report: WeeklyReport
    patterns: List[Pattern]


async def _load_patterns(source: PatternSource, identity: Identity) -> PatternRegistry:
    registry = PatternRegistry()
    await registry.refresh(source, identity.user_id)
    return registry


# ============================================================================
# ENTRIES
# ============================================================================

@router.get("/entries", response_model=EntriesResponse)
async def list_entries(store: EntryStore = Depends(get_entry_store)) -> EntriesResponse:
    """Entries of the caller, newest first. Empty with status 'unauthenticated' without a token."""
    return EntriesResponse(status=store.load_status.value, entries=list(store.entries))


@router.post("/entries", response_model=JournalEntry, status_code=201)
async def create_entry(
    request: CreateEntryRequest,
    enrich: bool = Query(default=True, description="Generate insights in the background"),
    store: EntryStore = Depends(get_entry_store),
) -> JournalEntry:
    return await store.create_entry(request.to_draft(), enrich=enrich)


@router.post("/entries/{entry_id}/insights", response_model=JournalEntry)
async def generate_insights(
    entry_id: str,
    regenerate: bool = Query(default=False),
    store: EntryStore = Depends(get_entry_store),
) -> JournalEntry:
    return await store.generate_insights(entry_id, regenerate=regenerate)


@router.post("/weekly-reflection", response_model=WeeklyReflectionResponse)
async def generate_weekly_reflection(
    store: EntryStore = Depends(get_entry_store),
    identity: Identity = Depends(require_identity),
) -> WeeklyReflectionResponse:
    reflection = await store.generate_weekly_reflection()
    return WeeklyReflectionResponse(reflection=reflection, entry_count=len(store.weekly_reflection_entries))


# ============================================================================
# ANALYTICS
# ============================================================================

@router.get("/analytics", response_model=AnalyticsSummary)
async def get_analytics(
    store: EntryStore = Depends(get_entry_store),
    identity: Identity = Depends(require_identity),
) -> AnalyticsSummary:
    return analytics.summarize(store.entries)


@router.get("/report", response_model=ReportResponse)
async def get_report(
    store: EntryStore = Depends(get_entry_store),
    identity: Identity = Depends(require_identity),
    source: PatternSource = Depends(get_pattern_source),
) -> ReportResponse:
    registry = await _load_patterns(source, identity)
    return ReportResponse(report=analytics.weekly_report(store.entries), patterns=registry.list())


@router.get("/report.txt", response_class=PlainTextResponse)
async def download_report(
    store: EntryStore = Depends(get_entry_store),
    identity: Identity = Depends(require_identity),
    source: PatternSource = Depends(get_pattern_source),
) -> PlainTextResponse:
    registry = await _load_patterns(source, identity)
    report = analytics.weekly_report(store.entries)
    filename = f"mindspace-report-{report.generated_at.date().isoformat()}.txt"
    return PlainTextResponse(
        analytics.render_report_text(report, registry.list()),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/patterns", response_model=List[Pattern])
async def list_patterns(
    identity: Identity = Depends(require_identity),
    source: PatternSource = Depends(get_pattern_source),
    limit: Optional[int] = Query(default=None, ge=1),
) -> List[Pattern]:
    registry = await _load_patterns(source, identity)
    return registry.top(limit) if limit else registry.list()
