"""Fit assessment router. Resolves a job description and asks the LLM for a report."""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from portfolio_api.core.auth import verify_api_key
from portfolio_api.core.config import settings
from portfolio_api.core.url_safety import HostResolver, SystemHostResolver
from portfolio_api.models.schemas import (
    ErrorResponse,
    FitAssessmentRequest,
    FitAssessmentResponse,
    TokenUsage,
)
from portfolio_api.services.fit_assessment import generate_fit_assessment
from portfolio_api.services.job_description_input import (
    JobDescriptionInputError,
    resolve_job_description_input,
)

logger = structlog.get_logger(__name__)

MISSING_INPUT_MESSAGE = 'Job description or URL is required in "input" field.'

router = APIRouter(dependencies=[Depends(verify_api_key)])


def get_host_resolver() -> HostResolver:
    """Per-request DNS capability used for SSRF checks."""
    return SystemHostResolver(timeout=settings.JD_DNS_TIMEOUT_SECONDS)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content=ErrorResponse(error=message).model_dump(), status_code=status_code)


def _declared_body_too_large(request: Request) -> bool:
    raw = request.headers.get("content-length")
    if not raw:
        return False
    try:
        return int(raw) > settings.FIT_ASSESSMENT_MAX_BODY_BYTES
    except ValueError:
        return False


async def _read_body_limited(request: Request) -> bytes | None:
    """Read the request body, or return None once it exceeds the size cap."""
    if _declared_body_too_large(request):
        return None

    chunks: list[bytes] = []
    total_bytes = 0
    async for chunk in request.stream():
        total_bytes += len(chunk)
        if total_bytes > settings.FIT_ASSESSMENT_MAX_BODY_BYTES:
            return None
        chunks.append(chunk)

    return b"".join(chunks)


@router.post(
    "",
    response_model=FitAssessmentResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": FitAssessmentRequest.model_json_schema()}},
            "required": True,
        }
    },
)
async def create_fit_assessment(
    request: Request,
    host_resolver: HostResolver = Depends(get_host_resolver),
):
    """
    Generate a fit report for a pasted job description or a job posting URL.

    URL input is fetched server-side behind SSRF guards; every resolver
    failure comes back as 400 with a message asking for pasted text instead.
    """
    raw = await _read_body_limited(request)
    if raw is None:
        logger.info("fit_assessment.body_too_large")
        return _error("Request body too large.", 400)

    try:
        body = FitAssessmentRequest.model_validate_json(raw)
    except ValidationError as exc:
        if any(err["type"] == "json_invalid" for err in exc.errors()):
            return _error("Invalid JSON body.", 400)
        return _error(MISSING_INPUT_MESSAGE, 400)

    submitted = body.job_description_input()
    if submitted is None:
        return _error(MISSING_INPUT_MESSAGE, 400)

    try:
        resolved = await resolve_job_description_input(
            submitted,
            settings.JD_FETCH_USER_AGENT,
            host_resolver=host_resolver,
        )
    except JobDescriptionInputError as exc:
        return _error(exc.message, exc.status_code)

    logger.info(
        "fit_assessment.input_resolved",
        input_type=resolved.input_type,
        chars=len(resolved.text),
    )

    try:
        result = await generate_fit_assessment(resolved.text)
    except Exception:
        return _error("AI service error.", 500)

    return FitAssessmentResponse(
        assessment=result.assessment,
        model=result.model,
        input_type=resolved.input_type,
        extracted_url=resolved.extracted_url,
        usage=TokenUsage(
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
        ),
    )
