import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

_SUPABASE_URL = os.getenv('SUPABASE_URL')
_SUPABASE_KEY = os.getenv('SUPABASE_KEY')

_ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY') or os.getenv('CLAUDE_API_KEY')

_CLAUDE_MODEL_PRIMARY = os.getenv('CLAUDE_MODEL_PRIMARY') or os.getenv('CLAUDE_MODEL', 'claude-sonnet-4-5-20250929')
_CLAUDE_MODEL_FALLBACKS = [
    model.strip()
    for model in os.getenv('CLAUDE_MODEL_FALLBACKS', 'claude-3-5-haiku-20241022').split(',')
    if model.strip()
]
_CLAUDE_MODEL_OPTIONS = [_CLAUDE_MODEL_PRIMARY] + [m for m in _CLAUDE_MODEL_FALLBACKS if m and m != _CLAUDE_MODEL_PRIMARY]

# Bearer tokens are issued by the identity service (Supabase Auth by default)
_IDENTITY_BASE_URL = (os.getenv('IDENTITY_BASE_URL') or _SUPABASE_URL or '').rstrip('/')
_IDENTITY_PUBLIC_KEY = os.getenv('IDENTITY_PUBLIC_KEY')
_IDENTITY_JWT_SECRET = os.getenv('IDENTITY_JWT_SECRET')
_IDENTITY_JWT_AUDIENCE = os.getenv('IDENTITY_JWT_AUDIENCE', 'authenticated')

_ENRICHMENT_URL = os.getenv('ENRICHMENT_URL', 'http://localhost:8000/enrichment')


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    """Central configuration for the journal service."""

    SUPABASE_URL = _SUPABASE_URL
    SUPABASE_KEY = _SUPABASE_KEY

    ANTHROPIC_API_KEY = _ANTHROPIC_API_KEY

    CLAUDE_MODEL_PRIMARY = _CLAUDE_MODEL_PRIMARY
    CLAUDE_MODEL_FALLBACKS = _CLAUDE_MODEL_FALLBACKS
    CLAUDE_MODEL_OPTIONS = _CLAUDE_MODEL_OPTIONS

    IDENTITY_BASE_URL = _IDENTITY_BASE_URL
    IDENTITY_PUBLIC_KEY = _IDENTITY_PUBLIC_KEY
    IDENTITY_JWT_SECRET = _IDENTITY_JWT_SECRET
    IDENTITY_JWT_AUDIENCE = _IDENTITY_JWT_AUDIENCE

    ENRICHMENT_URL = _ENRICHMENT_URL
    ENRICHMENT_TIMEOUT_SECONDS = _float_env('ENRICHMENT_TIMEOUT_SECONDS', 30.0)
    ENRICHMENT_MAX_RETRIES = _int_env('ENRICHMENT_MAX_RETRIES', 0)

    SERVICE_NAME = os.getenv('SERVICE_NAME', 'mindspace-journal-service')


settings = Config()
