"""
Tests for EnrichmentClient and parameter clamping.

The HTTP side is an ``httpx.MockTransport`` so every request the client makes
is visible to the test.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import List

import httpx
import pytest

from mindspace.features.journaling.enrichment import EnrichmentClient, clamp_generation_params
from mindspace.features.journaling.models import Mood
from mindspace.shared.errors import (
    AuthenticationError,
    EmptyGenerationError,
    UpstreamServiceError,
)

from tests.fakes import TOKEN, make_entry

ENDPOINT = "http://enrichment.test/enrichment"


def _client(handler, requests: List[httpx.Request], **kwargs) -> EnrichmentClient:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(record))
    kwargs.setdefault("max_retries", 0)
    return EnrichmentClient(endpoint_url=ENDPOINT, http_client=http, backoff_seconds=0, **kwargs)


async def _insight(client: EnrichmentClient, token=TOKEN, regenerate=False) -> str:
    return await client.generate_entry_insight(
        mood=Mood.GOOD,
        gratitude="family",
        intentions="exercise",
        thoughts="tired",
        token=token,
        regenerate=regenerate,
    )


class TestClampGenerationParams:

    @pytest.mark.parametrize("temperature, expected", [
        (-5, 0.0),
        (50, 1.0),
        (0.3, 0.3),
        ("0.4", 0.4),
        (None, 0.7),
        ("warm", 0.7),
        (True, 0.7),
        (float("nan"), 0.7),
    ])
    def test_temperature(self, temperature, expected):
        assert clamp_generation_params(temperature=temperature)[0] == pytest.approx(expected)

    @pytest.mark.parametrize("max_tokens, expected", [
        (0, 1),
        (9999, 2048),
        (300.9, 300),
        ("128", 128),
        (None, 512),
        ([], 512),
        (float("inf"), 512),
    ])
    def test_max_tokens(self, max_tokens, expected):
        assert clamp_generation_params(max_tokens=max_tokens)[1] == expected


class TestEntryInsight:

    @pytest.mark.asyncio
    async def test_success_sends_prompt_token_and_clamped_params(self):
        requests: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(200, json={"text": "Nice work"}), requests)

        assert await _insight(client) == "Nice work"

        [request] = requests
        body = json.loads(request.content)
        assert request.headers["Authorization"] == f"Bearer {TOKEN}"
        assert body["temperature"] == 0.7
        assert body["maxTokens"] == 1024
        assert "Mood: Good (4/5)" in body["prompt"]
        assert 'Gratitude: "family"' in body["prompt"]
        assert 'Thoughts: "tired"' in body["prompt"]

    @pytest.mark.asyncio
    async def test_regenerate_uses_higher_temperature(self):
        requests: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(200, json={"text": "Again"}), requests)

        await _insight(client, regenerate=True)

        assert json.loads(requests[0].content)["temperature"] == 0.9

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b"])
    async def test_bad_token_fails_before_network(self, token):
        requests: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(200, json={"text": "x"}), requests)

        with pytest.raises(AuthenticationError):
            await _insight(client, token=token)

        assert requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_token_is_authentication_error(self, status):
        client = _client(lambda r: httpx.Response(status, json={"error": {"code": "UNAUTHORIZED"}}), [])

        with pytest.raises(AuthenticationError):
            await _insight(client)

    @pytest.mark.asyncio
    async def test_server_error_is_upstream_error_without_body(self):
        client = _client(lambda r: httpx.Response(500, text="stack trace with secrets"), [])

        with pytest.raises(UpstreamServiceError) as exc_info:
            await _insight(client)

        assert exc_info.value.upstream_status == 500
        assert "secrets" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_text_is_empty_generation(self):
        client = _client(lambda r: httpx.Response(200, json={"text": "   "}), [])

        with pytest.raises(EmptyGenerationError):
            await _insight(client)

    @pytest.mark.asyncio
    async def test_missing_text_is_empty_generation(self):
        client = _client(lambda r: httpx.Response(200, json={}), [])

        with pytest.raises(EmptyGenerationError):
            await _insight(client)

    @pytest.mark.asyncio
    async def test_empty_generation_code_from_endpoint(self):
        payload = {"error": {"code": "EMPTY_GENERATION", "message": "No text generated"}}
        client = _client(lambda r: httpx.Response(500, json=payload), [])

        with pytest.raises(EmptyGenerationError):
            await _insight(client)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [["boom"], "boom", 42, {"error": "boom"}])
    async def test_error_body_that_is_not_an_object_is_upstream_error(self, body):
        client = _client(lambda r: httpx.Response(500, json=body), [])

        with pytest.raises(UpstreamServiceError) as exc_info:
            await _insight(client)

        assert not isinstance(exc_info.value, EmptyGenerationError)

    @pytest.mark.asyncio
    async def test_non_json_success_is_upstream_error(self):
        client = _client(lambda r: httpx.Response(200, text="<html>"), [])

        with pytest.raises(UpstreamServiceError):
            await _insight(client)

    @pytest.mark.asyncio
    async def test_transport_error_is_upstream_error(self):
        def fail(request):
            raise httpx.ConnectError("refused", request=request)

        client = _client(fail, [])

        with pytest.raises(UpstreamServiceError):
            await _insight(client)


class TestRetries:

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        responses = iter([httpx.Response(503), httpx.Response(200, json={"text": "Recovered"})])
        requests: List[httpx.Request] = []
        client = _client(lambda r: next(responses), requests, max_retries=2)

        assert await _insight(client) == "Recovered"
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        requests: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(400, json={}), requests, max_retries=3)

        with pytest.raises(UpstreamServiceError):
            await _insight(client)

        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        requests: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(502), requests, max_retries=2)

        with pytest.raises(UpstreamServiceError):
            await _insight(client)

        assert len(requests) == 3


class TestWeeklyDigest:

    @pytest.mark.asyncio
    async def test_digest_keeps_order_and_truncates_to_seven(self):
        now = datetime(2026, 10, 18, 12, tzinfo=timezone.utc)
        entries = [
            make_entry(f"e{i}", now - timedelta(days=i), gratitude=f"thing {i}")
            for i in range(9)
        ]
        requests: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(200, json={"text": "Great week"}), requests)

        assert await client.generate_weekly_digest(entries, token=TOKEN) == "Great week"

        prompt = json.loads(requests[0].content)["prompt"]
        assert "Day 7 (2026-10-12)" in prompt
        assert "Day 8" not in prompt
        assert prompt.index("thing 0") < prompt.index("thing 6")
        assert "thing 7" not in prompt

    @pytest.mark.asyncio
    async def test_empty_digest_still_calls_endpoint(self):
        requests: List[httpx.Request] = []
        client = _client(lambda r: httpx.Response(200, json={"text": "Quiet week"}), requests)

        assert await client.generate_weekly_digest([], token=TOKEN) == "Quiet week"
        assert "No journal entries were recorded" in json.loads(requests[0].content)["prompt"]
