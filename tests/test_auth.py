"""Tests for bearer parsing and token verification."""

import time

import jwt
import pytest

from mindspace.services.auth import TokenVerifier, parse_bearer
from mindspace.shared.errors import AuthenticationError

SECRET = "test-secret-with-enough-length-for-hs256"
BASE_URL = "https://project.supabase.co"
ISSUER = f"{BASE_URL}/auth/v1"


def _token(secret: str = SECRET, **overrides) -> str:
    claims = {
        "sub": "user-1",
        "email": "user@example.com",
        "aud": "authenticated",
        "iss": ISSUER,
        "exp": int(time.time()) + 3600,
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def verifier() -> TokenVerifier:
    return TokenVerifier(identity_base_url=BASE_URL + "/", secret=SECRET)


class TestParseBearer:

    @pytest.mark.parametrize("header, expected", [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer   abc ", "abc"),
        ("Basic abc", None),
        ("Bearer ", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, header, expected):
        assert parse_bearer(header) == expected


class TestTokenVerifier:

    def test_valid_token_yields_identity(self, verifier):
        token = _token()

        identity = verifier.verify(token)

        assert identity.user_id == "user-1"
        assert identity.email == "user@example.com"
        assert identity.access_token == token

    def test_missing_token(self, verifier):
        with pytest.raises(AuthenticationError, match="Missing"):
            verifier.verify(None)

    def test_expired_token(self, verifier):
        with pytest.raises(AuthenticationError, match="expired"):
            verifier.verify(_token(exp=int(time.time()) - 60))

    @pytest.mark.parametrize("overrides", [
        {"aud": "anon"},
        {"iss": "https://elsewhere.example/auth/v1"},
        {"sub": None},
        {"exp": None},
    ])
    def test_rejected_claims(self, verifier, overrides):
        with pytest.raises(AuthenticationError):
            verifier.verify(_token(**overrides))

    def test_wrong_signature(self, verifier):
        with pytest.raises(AuthenticationError, match="Invalid"):
            verifier.verify(_token(secret="another-secret-of-sufficient-length"))

    def test_garbage_token(self, verifier):
        with pytest.raises(AuthenticationError):
            verifier.verify("not.a.token")

    def test_unconfigured_verifier_rejects_everything(self):
        verifier = TokenVerifier(identity_base_url=BASE_URL)

        assert not verifier.configured
        with pytest.raises(AuthenticationError):
            verifier.verify(_token())
