"""Shared fakes and fixtures for the job description resolver tests."""

from collections.abc import Callable

import httpx
import pytest


class FakeHostResolver:
    """In-memory HostResolver that records every lookup."""

    def __init__(self, records: dict[str, list[str]] | None = None, error: Exception | None = None):
        self.records = records or {}
        self.error = error
        self.calls: list[str] = []

    async def resolve(self, hostname: str) -> list[str]:
        self.calls.append(hostname)
        if self.error is not None:
            raise self.error
        return list(self.records.get(hostname, []))


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable):
        self.requests: list[httpx.Request] = []

        async def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            response = handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        super().__init__(_record)


@pytest.fixture
def make_resolver() -> Callable[..., FakeHostResolver]:
    return FakeHostResolver


@pytest.fixture
def public_resolver() -> FakeHostResolver:
    return FakeHostResolver(
        {
            "jobs.example.com": ["93.184.216.34"],
            "careers.example.org": ["93.184.216.35", "2606:2800:220:1::1"],
            "internal.example.com": ["10.0.0.5"],
        }
    )


@pytest.fixture
def make_transport() -> Callable[[Callable], RecordingTransport]:
    return RecordingTransport


def _html_page(body: str) -> str:
    return f"<html><head><title>Careers</title></head><body>{body}</body></html>"


@pytest.fixture
def job_posting_html() -> str:
    return _html_page(
        "<h1>Senior Backend Engineer</h1>"
        "<h2>About the role</h2><p>You will design and run the APIs behind our platform.</p>"
        "<h2>Responsibilities</h2><ul><li>Own services end to end</li><li>Mentor engineers</li></ul>"
        "<h2>Qualifications</h2><ul><li>5+ years building Python services</li></ul>"
        "<h2>Compensation</h2><p>Competitive salary &amp; equity.</p>"
        "<script>window.analytics = {track: function () {}};</script>"
    )


@pytest.fixture
def login_page_html() -> str:
    return _html_page(
        "<form><label>Email address</label><input name='email'/>"
        "<label>Password</label><input type='password' name='password'/>"
        "<button>Sign in</button><a href='/forgot'>Forgot your password? Reset it here.</a>"
        "<p>Do not have an account yet? Create one in under a minute and start exploring.</p>"
        "</form>"
    )
