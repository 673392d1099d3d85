"""
Bearer token verification.

Tokens are JWTs issued by the identity service (Supabase Auth). They are
verified locally with the service's public key (RS256/ES256) or, for projects
that sign with a shared secret, with that secret (HS256). The issuer must be
``<IDENTITY_BASE_URL>/auth/v1`` and the audience ``authenticated``.
"""

import logging
from functools import lru_cache
from typing import Optional

import jwt

from mindspace.core.config import settings
from mindspace.features.journaling.models import Identity
from mindspace.shared.errors import AuthenticationError

logger = logging.getLogger("MindSpace.Auth")


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token of an ``Authorization: Bearer <token>`` header, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class TokenVerifier:
    """Verify identity-service JWTs and turn their claims into an Identity."""

    def __init__(
        self,
        identity_base_url: Optional[str] = None,
        public_key: Optional[str] = None,
        secret: Optional[str] = None,
        audience: Optional[str] = "authenticated",
        leeway_seconds: int = 0,
    ) -> None:
        self.public_key = public_key
        self.secret = secret
        self.audience = audience
        self.issuer = f"{identity_base_url.rstrip('/')}/auth/v1" if identity_base_url else None
        self.leeway_seconds = leeway_seconds

    @property
    def configured(self) -> bool:
        return bool(self.public_key or self.secret)

    def _key_and_algorithms(self) -> tuple:
        if self.public_key:
            return self.public_key, ["RS256", "ES256"]
        return self.secret, ["HS256"]

    def verify(self, token: Optional[str]) -> Identity:
        """
        Verify a bearer token.

        Raises:
            AuthenticationError: token missing, malformed, expired, or rejected
        """
        if not token:
            raise AuthenticationError("Missing bearer token")
        if not self.configured:
            # Never accept unverifiable tokens
            logger.error("Token verification requested but no identity key is configured")
            raise AuthenticationError("Token could not be verified")

        key, algorithms = self._key_and_algorithms()
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=algorithms,
                audience=self.audience,
                issuer=self.issuer,
                leeway=self.leeway_seconds,
                options={"require": ["exp", "sub"], "verify_aud": self.audience is not None},
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected bearer token: %s", type(exc).__name__)
            raise AuthenticationError("Invalid token") from exc

        return Identity(user_id=str(claims["sub"]), email=claims.get("email"), access_token=token)


@lru_cache(maxsize=1)
def get_token_verifier() -> TokenVerifier:
    """Process-wide verifier built from settings."""
    return TokenVerifier(
        identity_base_url=settings.IDENTITY_BASE_URL,
        public_key=settings.IDENTITY_PUBLIC_KEY,
        secret=settings.IDENTITY_JWT_SECRET,
        audience=settings.IDENTITY_JWT_AUDIENCE or None,
    )


class StaticIdentityProvider:
    """Identity established once (by a verified token) for a whole session."""

    def __init__(self, identity: Optional[Identity]) -> None:
        self._identity = identity

    async def current_identity(self) -> Optional[Identity]:
        return self._identity
