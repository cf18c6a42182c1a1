"""Resolve a fit-assessment submission into job description text.

A submission is either pasted text, which is passed through untouched, or a
URL, which is validated against SSRF rules, fetched with hard bounds, reduced
to plain text and checked to look like a job posting.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from functools import partial
from typing import Literal

import httpx
import structlog

from portfolio_api.core.config import settings
from portfolio_api.core.constants import JobDescriptionFetch
from portfolio_api.core.url_safety import HostResolver, SystemHostResolver, validate_public_url
from portfolio_api.services.html_text import extract_text_from_html
from portfolio_api.services.jd_relevance import looks_like_job_description
from portfolio_api.services.url_fetcher import (
    RedirectBlockedError,
    ResponseTooLargeError,
    UrlFetchError,
    fetch_with_size_limit,
)

logger = structlog.get_logger(__name__)

_URL_INPUT_RE = re.compile(r"^https?://", re.IGNORECASE)

GUIDANCE = JobDescriptionFetch.GUIDANCE


class JobDescriptionInputError(Exception):
    """User-facing failure to turn a submission into job description text."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class ResolvedJobDescription:
    text: str
    input_type: Literal["text", "url"]
    extracted_url: str | None = None


def is_url_input(value: str) -> bool:
    return bool(_URL_INPUT_RE.match(value.strip()))


def _fetch_error_message(exc: Exception) -> str:
    if isinstance(exc, RedirectBlockedError):
        return f"The URL redirected to a blocked destination. {GUIDANCE}"
    if isinstance(exc, ResponseTooLargeError):
        return f"The page is too large to process. {GUIDANCE}"
    return (
        "Could not fetch the job posting. The site may be unavailable or blocking access. "
        f"{GUIDANCE}"
    )


async def resolve_job_description_input(
    value: str,
    user_agent: str,
    *,
    host_resolver: HostResolver | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ResolvedJobDescription:
    """Return job description text for a pasted description or a posting URL.

    Raises JobDescriptionInputError (status 400) for every URL failure. No
    network access happens for plain-text input, and none happens for a URL
    until validate_public_url has approved it.
    """
    if not is_url_input(value):
        return ResolvedJobDescription(text=value, input_type="text")

    url = value.strip()
    if host_resolver is None:
        host_resolver = SystemHostResolver(timeout=settings.JD_DNS_TIMEOUT_SECONDS)

    reason = await validate_public_url(url, host_resolver)
    if reason:
        logger.info("jd_input.url_blocked", url=url[:200], reason=reason)
        raise JobDescriptionInputError(f"{reason} {GUIDANCE}")

    started = time.monotonic()
    try:
        html = await fetch_with_size_limit(
            url,
            max_bytes=JobDescriptionFetch.MAX_RESPONSE_SIZE,
            timeout=JobDescriptionFetch.URL_FETCH_TIMEOUT_MS / 1000,
            user_agent=user_agent,
            validate_redirect=partial(validate_public_url, host_resolver=host_resolver),
            client=http_client,
            max_redirects=JobDescriptionFetch.MAX_REDIRECTS,
        )
    except UrlFetchError as exc:
        logger.warning(
            "jd_input.fetch_failed",
            url=url[:200],
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise JobDescriptionInputError(_fetch_error_message(exc)) from exc
    except Exception as exc:
        logger.exception("jd_input.fetch_unexpected_error", url=url[:200], error=str(exc))
        raise JobDescriptionInputError(_fetch_error_message(exc)) from exc

    text = extract_text_from_html(html)
    logger.info(
        "jd_input.fetched",
        url=url[:200],
        html_chars=len(html),
        extracted_chars=len(text),
        duration_ms=round((time.monotonic() - started) * 1000),
    )

    if len(text) < JobDescriptionFetch.MIN_EXTRACTED_CONTENT_LENGTH:
        raise JobDescriptionInputError(
            f"Could not extract enough job description content from the URL. {GUIDANCE}"
        )

    if not looks_like_job_description(text):
        raise JobDescriptionInputError(
            f"The URL does not appear to contain a job description. {GUIDANCE}"
        )

    return ResolvedJobDescription(text=text, input_type="url", extracted_url=url)
