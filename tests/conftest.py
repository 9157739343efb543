"""
Pytest configuration and fixtures for httpreplay tests.

This module provides shared fixtures used across unit and integration
tests. Live requests are answered by an in-process echo server:

    Given a [METHOD] request of [URL] with [HEADERS] and [BODY], a body that
    is a plain integer gets 200 with the text
        [NUMBER + 1]\\n[METHOD] [PATH]\\n[HEADERS]
    and any other body gets 400 echoing the body.
"""

import re
import tempfile
from pathlib import Path
from typing import Generator
from urllib.parse import urlsplit

import httpx
import pytest

from httpreplay.clients.base import Client
from httpreplay.schema import ClientConfig, Request, Response

NUMBER_RE = re.compile(r"^(\d+)$")


def echo(method: str, url: str, headers: dict[str, str], body: bytes) -> tuple[int, bytes]:
    """Compute the echo server's status and body for a request."""
    match = NUMBER_RE.match(body.decode("utf-8", errors="replace"))
    if match is None:
        return 400, body
    rendered_headers = "; ".join(f"{name}: {value}" for name, value in sorted(headers.items()))
    path = urlsplit(url).path or "/"
    text = f"{int(match.group(1)) + 1}\n{method} {path}\n{{{rendered_headers}}}"
    return 200, text.encode("utf-8")


class EchoTransport(Client):
    """Live transport stand-in that answers like the echo server and counts calls."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[Request] = []
        self.configs: list[ClientConfig | None] = []

    def execute(self, request: Request, config: ClientConfig | None = None) -> Response:
        self.calls.append(request)
        self.configs.append(config)
        status, body = echo(request.method, request.url, request.headers, request.body or b"")
        return Response(
            url=request.url,
            status=status,
            headers={"content-type": "text/plain"},
            body=body,
        )


class CountingHandler:
    """httpx.MockTransport handler serving the echo server."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        headers = {
            name: value
            for name, value in request.headers.items()
            if name not in ("host", "content-length")
        }
        status, body = echo(request.method, str(request.url), headers, request.content)
        return httpx.Response(status, content=body, headers={"Content-Type": "text/plain"})


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def transport() -> EchoTransport:
    """A fresh counting echo transport."""
    return EchoTransport()


@pytest.fixture
def echo_handler() -> CountingHandler:
    """A fresh httpx handler serving the echo server."""
    return CountingHandler()


@pytest.fixture
def mock_transport(echo_handler: CountingHandler) -> httpx.MockTransport:
    """An httpx transport backed by the echo server."""
    return httpx.MockTransport(echo_handler)


@pytest.fixture
def sample_request() -> Request:
    """The request used in most scenarios."""
    return Request(method="GET", url="http://x/y", body=b"42")
