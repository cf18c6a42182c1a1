"""Unit tests for SSRF URL validation."""

import asyncio
import socket

import pytest

from portfolio_api.core.url_safety import (
    BLOCKED_URL_REASON,
    DNS_UNAVAILABLE_REASON,
    INVALID_URL_REASON,
    UNSUPPORTED_SCHEME_REASON,
    SystemHostResolver,
    is_blocked_ip,
    validate_public_url,
)


@pytest.mark.parametrize(
    "address",
    [
        "127.0.0.1",
        "127.255.0.9",
        "10.1.2.3",
        "172.16.0.1",
        "172.31.255.255",
        "192.168.1.10",
        "169.254.169.254",
        "100.64.0.1",
        "100.127.255.254",
        "0.1.2.3",
        "224.0.0.251",
        "239.255.255.250",
        "240.0.0.1",
        "255.255.255.255",
        "::1",
        "fc00::1",
        "fd12:3456:789a::1",
        "fe80::1",
        "febf::1",
        "::ffff:127.0.0.1",
        "::ffff:7f00:1",
        "::ffff:a9fe:a9fe",
        "::ffff:192.168.0.1",
    ],
)
def test_is_blocked_ip_rejects_private_and_reserved(address: str) -> None:
    assert is_blocked_ip(address) is True


@pytest.mark.parametrize(
    "address",
    [
        "93.184.216.34",
        "8.8.8.8",
        "172.32.0.1",
        "100.128.0.1",
        "2606:2800:220:1::1",
        "fec0::1",
        "::ffff:93.184.216.34",
        "not-an-ip",
    ],
)
def test_is_blocked_ip_allows_public(address: str) -> None:
    assert is_blocked_ip(address) is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    [
        "http://localhost/admin",
        "http://LOCALHOST:8080/",
        "http://localhost./",
        "http://127.0.0.1/",
        "http://0.0.0.0/",
        "http://[::1]/",
        "http://169.254.169.254/latest/meta-data",
        "http://10.0.0.8/",
        "https://192.168.0.1:8443/",
        "http://[::ffff:10.0.0.1]/",
        "http://[fd00::5]/",
    ],
)
async def test_blocked_hosts_rejected_without_dns(url: str, make_resolver) -> None:
    resolver = make_resolver()
    assert await validate_public_url(url, resolver) == BLOCKED_URL_REASON
    assert resolver.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["ftp://example.com/file", "file:///etc/passwd", "gopher://x/"])
async def test_non_http_schemes_rejected(url: str, make_resolver) -> None:
    assert await validate_public_url(url, make_resolver()) == UNSUPPORTED_SCHEME_REASON


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["http://", "http://example.com:notaport/"])
async def test_unparsable_urls_rejected(url: str, make_resolver) -> None:
    assert await validate_public_url(url, make_resolver()) == INVALID_URL_REASON


@pytest.mark.asyncio
async def test_public_ip_literal_allowed_without_dns(make_resolver) -> None:
    resolver = make_resolver()
    assert await validate_public_url("https://93.184.216.34/jobs/1", resolver) is None
    assert resolver.calls == []


@pytest.mark.asyncio
async def test_hostname_resolving_publicly_is_allowed(public_resolver) -> None:
    assert await validate_public_url("https://careers.example.org/jobs/42", public_resolver) is None
    assert public_resolver.calls == ["careers.example.org"]


@pytest.mark.asyncio
async def test_any_private_resolved_address_blocks(make_resolver) -> None:
    resolver = make_resolver({"mixed.example.com": ["93.184.216.34", "127.0.0.1"]})
    assert await validate_public_url("https://mixed.example.com/", resolver) == BLOCKED_URL_REASON


@pytest.mark.asyncio
async def test_missing_dns_capability_fails_closed() -> None:
    assert await validate_public_url("https://jobs.example.com/", None) == DNS_UNAVAILABLE_REASON


@pytest.mark.asyncio
async def test_dns_error_blocks(make_resolver) -> None:
    resolver = make_resolver(error=socket.gaierror("Name or service not known"))
    assert await validate_public_url("https://nope.example.com/", resolver) == BLOCKED_URL_REASON


@pytest.mark.asyncio
async def test_empty_dns_answer_blocks(make_resolver) -> None:
    assert await validate_public_url("https://empty.example.com/", make_resolver()) == BLOCKED_URL_REASON


@pytest.mark.asyncio
async def test_system_resolver_dedupes_addresses(monkeypatch) -> None:
    async def fake_getaddrinfo(host, port, type=0):
        return [
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0)),
            (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("2606:2800:220:1::1", 0, 0, 0)),
        ]

    loop = asyncio.get_running_loop()
    monkeypatch.setattr(loop, "getaddrinfo", fake_getaddrinfo)

    resolver = SystemHostResolver(timeout=1.0)
    assert await resolver.resolve("jobs.example.com") == ["93.184.216.34", "2606:2800:220:1::1"]


@pytest.mark.asyncio
async def test_system_resolver_times_out(monkeypatch) -> None:
    async def slow_getaddrinfo(host, port, type=0):
        await asyncio.sleep(5)
        return []

    loop = asyncio.get_running_loop()
    monkeypatch.setattr(loop, "getaddrinfo", slow_getaddrinfo)

    resolver = SystemHostResolver(timeout=0.05)
    assert await validate_public_url("https://slow.example.com/", resolver) == BLOCKED_URL_REASON
