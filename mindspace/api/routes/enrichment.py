"""
Enrichment API Route

``POST /enrichment`` turns a prompt into generated text for an authenticated
caller. Checks run in this order: method, configuration, bearer token,
prompt. Generation parameters are clamped unconditionally before the upstream
call, and upstream failures are reported without their details.

Request:  {"prompt": "...", "temperature": 0.7, "maxTokens": 512}
Response: {"text": "..."}
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from mindspace.api.dependencies import get_generation_service, get_verifier
from mindspace.features.journaling.enrichment import clamp_generation_params
from mindspace.services.auth import TokenVerifier, parse_bearer
from mindspace.services.generation import ClaudeGenerator
from mindspace.shared.errors import (
    EmptyGenerationError,
    ErrorCode,
    JournalError,
    UpstreamServiceError,
    ValidationError,
    configuration_error,
    error_response,
    get_correlation_id,
    journal_error_response,
    method_not_allowed_error,
)

router = APIRouter(tags=["Enrichment"])
logger = logging.getLogger("MindSpace.API.Enrichment")


@router.api_route("/enrichment", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def enrichment_wrong_method(request: Request) -> JSONResponse:
    return method_not_allowed_error(get_correlation_id(request))


async def _read_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.post("/enrichment")
async def enrich(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    generator: Optional[ClaudeGenerator] = Depends(get_generation_service),
    verifier: TokenVerifier = Depends(get_verifier),
) -> JSONResponse:
    """Generate reflective text for a journal prompt."""
    correlation_id = get_correlation_id(request)

    if generator is None or not verifier.configured:
        logger.error(
            "Enrichment endpoint is not configured",
            extra={"generator": generator is not None, "verifier": verifier.configured},
        )
        return configuration_error(correlation_id)

    try:
        identity = verifier.verify(parse_bearer(authorization))

        body = await _read_body(request)
        prompt = body.get("prompt")
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationError("Prompt is required", {"field": "prompt"})

        temperature, max_tokens = clamp_generation_params(body.get("temperature"), body.get("maxTokens"))
        logger.info(
            "Generating enrichment",
            extra={
                "user_id": identity.user_id,
                "prompt_chars": len(prompt),
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )

        text = await generator.generate(prompt, temperature=temperature, max_tokens=max_tokens)
    except EmptyGenerationError:
        return error_response(ErrorCode.EMPTY_GENERATION, "No text generated", status_code=500, correlation_id=correlation_id)
    except UpstreamServiceError as exc:
        logger.error("Generation failed: %s", exc.message)
        return error_response(
            ErrorCode.EXTERNAL_SERVICE_ERROR, "Generation service failed", status_code=500, correlation_id=correlation_id
        )
    except JournalError as exc:
        return journal_error_response(exc, correlation_id)

    return JSONResponse(status_code=200, content={"text": text})
