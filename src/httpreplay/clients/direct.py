"""
Live HTTP client for httpreplay.

DirectClient performs real requests with httpx and performs no mocking at
all. It is what production code uses, and it is the live transport that
ReplayClient and StubClient fall back to when they need the network.

Failures are raised as TransportError (or TransportTimeoutError), carrying
the method, URL and the original httpx error text.
"""

import logging

import httpx

from httpreplay.clients.base import Client
from httpreplay.errors import (
    ERROR_TRANSPORT_REDIRECTS,
    TransportError,
    TransportTimeoutError,
)
from httpreplay.schema import ClientConfig, Request, Response

logger = logging.getLogger(__name__)


class DirectClient(Client):
    """
    Perform requests against the network.

    Arguments:
        config: Default options for requests made by this client
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            in tests

    Example:
        client = DirectClient(ClientConfig(timeout_seconds=10))
        response = client.get("https://api.github.com/users/octocat")
        data = response.text()
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        self._transport = transport

    def execute(self, request: Request, config: ClientConfig | None = None) -> Response:
        """
        Execute a request over the network.

        Args:
            request: The request to send
            config: Options for this call; the client's own config if None

        Returns:
            Response with the final URL, status, headers and full body

        Raises:
            TransportTimeoutError: If the request timed out
            TransportError: For any other httpx failure
        """
        config = config or self.config
        logger.debug("DirectClient performing %s request of URL: %s", request.method, request.url)

        try:
            with httpx.Client(
                timeout=config.timeout_seconds,
                follow_redirects=config.follow_redirects,
                max_redirects=config.max_redirects,
                transport=self._transport,
            ) as client:
                response = client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=request.body,
                )

                return Response(
                    url=str(response.url),  # Final URL after redirects
                    status=response.status_code,
                    headers=response.headers,
                    body=response.content,
                )

        except httpx.TimeoutException as e:
            raise TransportTimeoutError(
                method=request.method,
                url=request.url,
                underlying_error=str(e),
                timeout_seconds=config.timeout_seconds or 0,
            ) from e
        except httpx.TooManyRedirects as e:
            raise TransportError(
                method=request.method,
                url=request.url,
                message=f"{request.method} {request.url} failed: too many redirects",
                code=ERROR_TRANSPORT_REDIRECTS,
                underlying_error=str(e),
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                method=request.method,
                url=request.url,
                underlying_error=str(e) or type(e).__name__,
            ) from e
