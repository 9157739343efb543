"""
Stub client for httpreplay.

The StubClient answers requests from an in-memory table of explicitly
registered stubs. How strictly a request has to match a stub is set once
per client with StubStrictness; the url is always compared.

Stubs are checked against the strictness when they are registered, not
when they are looked up: a stub that sets a field the strictness ignores,
or leaves out a field it compares, is rejected right away.

The stub table is not synchronized. Registering stubs while other threads
execute requests needs external locking.
"""

import logging
from dataclasses import dataclass

from httpreplay.clients.base import Client, HeadersInput
from httpreplay.clients.direct import DirectClient
from httpreplay.errors import (
    MissingStubFieldError,
    StubPanic,
    UnexpectedStubFieldError,
    UnmatchedStubError,
)
from httpreplay.schema import (
    ClientConfig,
    Request,
    Response,
    StubDefault,
    StubPattern,
    StubSettings,
    StubStrictness,
)

logger = logging.getLogger(__name__)

# Optional pattern fields, in the order they are validated
STUB_FIELDS = ("method", "body", "headers")

# Fields each strictness compares besides the url
REQUIRED_FIELDS: dict[StubStrictness, frozenset[str]] = {
    StubStrictness.FULL: frozenset({"method", "body", "headers"}),
    StubStrictness.BODY_METHOD_URL: frozenset({"method", "body"}),
    StubStrictness.HEADERS_METHOD_URL: frozenset({"method", "headers"}),
    StubStrictness.METHOD_URL: frozenset({"method"}),
    StubStrictness.URL: frozenset(),
}


@dataclass(frozen=True)
class StubKey:
    """
    The part of a request a stub is matched on.

    Fields the active strictness does not compare are None.
    """

    url: str
    method: str | None = None
    body: bytes | None = None
    headers: tuple[tuple[str, str], ...] | None = None


def validate_pattern(pattern: StubPattern, strictness: StubStrictness) -> None:
    """
    Check that a pattern sets exactly the fields a strictness compares.

    Raises:
        UnexpectedStubFieldError: If a field the strictness ignores is set
        MissingStubFieldError: If a field the strictness compares is unset
    """
    required = REQUIRED_FIELDS[strictness]
    for name in STUB_FIELDS:
        present = getattr(pattern, name) is not None
        if present and name not in required:
            raise UnexpectedStubFieldError(field_name=name, strictness=strictness.value)
        if not present and name in required:
            raise MissingStubFieldError(field_name=name, strictness=strictness.value)


def pattern_key(pattern: StubPattern) -> StubKey:
    """Build the key of an already validated pattern."""
    return StubKey(
        url=pattern.url,
        method=pattern.method,
        body=pattern.body,
        headers=tuple(pattern.headers.items()) if pattern.headers is not None else None,
    )


def request_key(request: Request, strictness: StubStrictness) -> StubKey:
    """Build the key a request is looked up with under a strictness."""
    required = REQUIRED_FIELDS[strictness]
    return StubKey(
        url=request.url,
        method=request.method if "method" in required else None,
        body=request.body if "body" in required else None,
        headers=tuple(request.headers.items()) if "headers" in required else None,
    )


class StubClient(Client):
    """
    A client which returns explicitly stubbed responses.

    Usage:
        client = StubClient(StubSettings(
            strictness=StubStrictness.METHOD_URL,
            default=StubDefault.ERROR,
        ))
        client.register(
            StubPattern(url="http://example.com/mocking", method="GET"),
            Response(url="http://example.com/mocking", body=b"Mocking is fun!"),
        )
        assert client.get("http://example.com/mocking").text() == "Mocking is fun!"

    Attributes:
        settings: Strictness and unmatched-request behavior
        transport: Client used when the default is PERFORM_REQUEST
    """

    def __init__(
        self,
        settings: StubSettings | None = None,
        transport: Client | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        super().__init__(config)
        self.settings = settings or StubSettings()
        self.transport = transport if transport is not None else DirectClient()
        self._stubs: dict[StubKey, Response] = {}

    def register(self, pattern: StubPattern, response: Response) -> None:
        """
        Register the response for requests matching a pattern.

        Registering the same pattern again replaces the earlier response.

        Args:
            pattern: Request fields to match; must fit the strictness
            response: Returned verbatim for matching requests

        Raises:
            RegistrationError: If the pattern does not fit the strictness
        """
        validate_pattern(pattern, self.settings.strictness)
        self._stubs[pattern_key(pattern)] = response

    def stub(self, url: str) -> "RequestStubber":
        """
        Start building a stub for a URL.

        Example:
            client.stub("http://example.com/mocking").method("GET") \\
                .response().body("Mocking is fun!").mock()
        """
        return RequestStubber(self, url)

    def execute(self, request: Request, config: ClientConfig | None = None) -> Response:
        """
        Answer a request from the stub table.

        Args:
            request: The request to match
            config: Options for a live call when the default is PERFORM_REQUEST

        Returns:
            The registered response, or the live response

        Raises:
            UnmatchedStubError: If nothing matches and the default is ERROR
            StubPanic: If nothing matches and the default is PANIC
            TransportError: If the live call fails
        """
        key = request_key(request, self.settings.strictness)
        response = self._stubs.get(key)
        if response is not None:
            return response

        logger.debug("No stub for %s %s", request.method, request.url)
        default = self.settings.default
        if default == StubDefault.PERFORM_REQUEST:
            return self.transport.execute(request, config or self.config)
        if default == StubDefault.PANIC:
            raise StubPanic(request.url)
        raise UnmatchedStubError(method=request.method, url=request.url)

    def __len__(self) -> int:
        """Return the number of registered stubs."""
        return len(self._stubs)

    def __repr__(self) -> str:
        return (
            f"<StubClient: {len(self._stubs)} stubs "
            f"({self.settings.strictness.value}, {self.settings.default.value})>"
        )


class RequestStubber:
    """
    Builder for the request side of a stub.

    Call response() once the request is described, then finish with
    ResponseStubber.mock().
    """

    def __init__(self, client: StubClient, url: str) -> None:
        self._client = client
        self._url = url
        self._method: str | None = None
        self._body: bytes | str | None = None
        self._headers: list[tuple[str, str]] | None = None

    def method(self, method: str) -> "RequestStubber":
        """Set the method of the request."""
        self._method = method
        return self

    def body(self, body: bytes | str) -> "RequestStubber":
        """Set the body of the request."""
        self._body = body
        return self

    def header(self, name: str, value: str) -> "RequestStubber":
        """Add a header to the request."""
        self._headers = (self._headers or []) + [(name, value)]
        return self

    def headers(self, headers: HeadersInput) -> "RequestStubber":
        """Add multiple headers to the request."""
        items = headers.items() if isinstance(headers, dict) else (headers or [])
        self._headers = (self._headers or []) + list(items)
        return self

    def response(self) -> "ResponseStubber":
        """Finish the request and start describing the response."""
        pattern = StubPattern(
            url=self._url,
            method=self._method,
            body=self._body,
            headers=self._headers,
        )
        return ResponseStubber(self._client, pattern)


class ResponseStubber:
    """Builder for the response side of a stub."""

    def __init__(self, client: StubClient, pattern: StubPattern) -> None:
        self._client = client
        self._pattern = pattern
        self._status = 200
        self._body: bytes | str = b""
        self._headers: list[tuple[str, str]] = []

    def status(self, status: int) -> "ResponseStubber":
        """Set the status code of the response."""
        self._status = status
        return self

    def body(self, body: bytes | str) -> "ResponseStubber":
        """Set the body of the response."""
        self._body = body
        return self

    def header(self, name: str, value: str) -> "ResponseStubber":
        """Add a header to the response."""
        self._headers.append((name, value))
        return self

    def mock(self) -> None:
        """
        Register the stub in the client.

        Raises:
            RegistrationError: If the request does not fit the strictness
        """
        response = Response(
            url=self._pattern.url,
            status=self._status,
            headers=self._headers,
            body=self._body,
        )
        self._client.register(self._pattern, response)
