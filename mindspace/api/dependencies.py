from typing import AsyncIterator, Optional

from fastapi import Depends, Header

from mindspace.core.config import settings
from mindspace.features.database import get_database_client
from mindspace.features.journaling.enrichment import EnrichmentClient
from mindspace.features.journaling.entry_store import EntryStore
from mindspace.features.journaling.models import Identity
from mindspace.features.journaling.ports import JournalStorage, PatternSource
from mindspace.services.auth import StaticIdentityProvider, TokenVerifier, get_token_verifier, parse_bearer
from mindspace.services.background import background_task_manager
from mindspace.services.generation import ClaudeGenerator, get_generator
from mindspace.shared.errors import AuthenticationError


def get_verifier() -> TokenVerifier:
    """Provide the process-wide bearer token verifier."""
    return get_token_verifier()


def get_generation_service() -> Optional[ClaudeGenerator]:
    """Provide the upstream generator, or None when no API key is configured."""
    if not settings.ANTHROPIC_API_KEY:
        return None
    return get_generator()


def get_journal_storage() -> JournalStorage:
    return get_database_client().journal_entries


def get_pattern_source() -> PatternSource:
    return get_database_client().patterns


def get_enrichment_client() -> EnrichmentClient:
    return EnrichmentClient()


async def get_optional_identity(
    authorization: Optional[str] = Header(default=None),
    verifier: TokenVerifier = Depends(get_verifier),
) -> Optional[Identity]:
    """Identity of the caller; None without a token, 401 for a bad one."""
    token = parse_bearer(authorization)
    if token is None:
        if authorization:
            raise AuthenticationError("Malformed Authorization header")
        return None
    return verifier.verify(token)


async def require_identity(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise AuthenticationError("User not authenticated")
    return identity


async def get_entry_store(
    identity: Optional[Identity] = Depends(get_optional_identity),
    storage: JournalStorage = Depends(get_journal_storage),
    enrichment: EnrichmentClient = Depends(get_enrichment_client),
) -> AsyncIterator[EntryStore]:
    """One EntryStore per request; pending enrichment outlives the response."""
    store = EntryStore(storage, StaticIdentityProvider(identity), enrichment)
    await store.start()
    try:
        yield store
    finally:
        background_task_manager.adopt(store.release())
