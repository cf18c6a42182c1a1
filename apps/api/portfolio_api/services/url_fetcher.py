"""Fetch a remote page with manual redirects, a deadline and a byte cap."""

from __future__ import annotations

import asyncio
import codecs
from collections.abc import Awaitable, Callable

import httpx
import structlog

from portfolio_api.core.constants import JobDescriptionFetch
from portfolio_api.core.url_safety import INVALID_URL_REASON

logger = structlog.get_logger(__name__)

RedirectValidator = Callable[[str], Awaitable[str | None]]


class UrlFetchError(Exception):
    """Base class for every way a bounded fetch can fail."""


class RedirectBlockedError(UrlFetchError):
    pass


class TooManyRedirectsError(UrlFetchError):
    pass


class ResponseTooLargeError(UrlFetchError):
    pass


class FetchFailedError(UrlFetchError):
    """Network error, timeout or non-2xx response."""


def _check_declared_length(raw: str | None, max_bytes: int) -> None:
    if not raw:
        return
    try:
        declared = int(raw.strip())
    except ValueError:
        return
    if declared > max_bytes:
        raise ResponseTooLargeError(f"Response too large (declared {declared} bytes)")


async def _read_text_limited(response: httpx.Response, max_bytes: int) -> str:
    """Stream the body through an incremental UTF-8 decoder, enforcing max_bytes."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts: list[str] = []
    seen = 0
    async for chunk in response.aiter_bytes():
        seen += len(chunk)
        if seen > max_bytes:
            raise ResponseTooLargeError(f"Response too large (read {seen} bytes)")
        parts.append(decoder.decode(chunk))
    parts.append(decoder.decode(b"", final=True))
    return "".join(parts)


async def _follow_redirects(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_bytes: int,
    user_agent: str,
    validate_redirect: RedirectValidator,
    max_redirects: int,
) -> str:
    current_url = url
    redirect_count = 0
    while True:
        if redirect_count >= max_redirects:
            raise TooManyRedirectsError("Too many redirects")

        async with client.stream(
            "GET",
            current_url,
            headers={"User-Agent": user_agent},
            follow_redirects=False,
        ) as response:
            location = str(response.headers.get("location") or "").strip()
            if 300 <= response.status_code < 400 and location:
                try:
                    redirect_url = str(httpx.URL(current_url).join(location))
                except httpx.InvalidURL as exc:
                    raise RedirectBlockedError(f"Redirect blocked: {INVALID_URL_REASON}") from exc

                reason = await validate_redirect(redirect_url)
                if reason:
                    raise RedirectBlockedError(f"Redirect blocked: {reason}")

                logger.debug(
                    "url_fetch.redirect",
                    status_code=response.status_code,
                    hop=redirect_count + 1,
                    target=redirect_url[:200],
                )
                current_url = redirect_url
                redirect_count += 1
                continue

            if not response.is_success:
                raise FetchFailedError(f"HTTP {response.status_code}")

            _check_declared_length(response.headers.get("content-length"), max_bytes)
            return await _read_text_limited(response, max_bytes)


async def fetch_with_size_limit(
    url: str,
    *,
    max_bytes: int = JobDescriptionFetch.MAX_RESPONSE_SIZE,
    timeout: float = JobDescriptionFetch.URL_FETCH_TIMEOUT_MS / 1000,
    user_agent: str,
    validate_redirect: RedirectValidator,
    client: httpx.AsyncClient | None = None,
    max_redirects: int = JobDescriptionFetch.MAX_REDIRECTS,
) -> str:
    """Fetch url and return its body decoded as UTF-8.

    Redirects are followed by hand so every hop can be re-validated with
    ``validate_redirect`` before it is contacted. ``timeout`` is one deadline
    for the whole chain, not per hop. Raises a ``UrlFetchError`` subclass on
    any failure.

    The caller is responsible for validating ``url`` itself.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=False)

    try:
        async with asyncio.timeout(timeout):
            return await _follow_redirects(
                client,
                url,
                max_bytes=max_bytes,
                user_agent=user_agent,
                validate_redirect=validate_redirect,
                max_redirects=max_redirects,
            )
    except TimeoutError as exc:
        raise FetchFailedError("Request timed out") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchFailedError(f"{type(exc).__name__}: {exc}") from exc
    finally:
        if owns_client:
            await client.aclose()
