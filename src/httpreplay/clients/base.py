"""
Base class for the client interface.

Code under test is written against Client and never cares which concrete
client it was given:
- DirectClient: performs live requests (the live transport)
- ReplayClient: records interactions to disk and replays them
- StubClient: answers from explicitly registered stubs
- GenericClient: wraps one of the above behind a single concrete type

Subclasses implement execute(). The HTTP verb helpers build a Request and
hand it to execute(), so every client supports them for free.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from httpreplay.schema import ClientConfig, Request, Response

HeadersInput = Mapping[str, str] | list[tuple[str, str]] | None
BodyInput = bytes | str | None


class Client(ABC):
    """
    Abstract base class for all httpreplay clients.

    Example:
        def fetch_user(client: Client, name: str) -> str:
            response = client.get(f"https://api.github.com/users/{name}")
            return response.text()

        fetch_user(DirectClient(), "octocat")
        fetch_user(ReplayClient(RecordingTarget.dir("recordings")), "octocat")
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        self._config = config or ClientConfig()

    @property
    def config(self) -> ClientConfig:
        """Config used when execute() is called without one."""
        return self._config

    @config.setter
    def config(self, value: ClientConfig) -> None:
        self._config = value

    @abstractmethod
    def execute(self, request: Request, config: ClientConfig | None = None) -> Response:
        """
        Execute a request.

        Args:
            request: The request to perform
            config: Options for this call; the client's own config if None

        Returns:
            The response

        Raises:
            HttpReplayError: Subclass-specific failures
        """
        ...

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: HeadersInput = None,
        body: BodyInput = None,
        config: ClientConfig | None = None,
    ) -> Response:
        """Build a request from its parts and execute it."""
        return self.execute(
            Request(method=method, url=url, headers=headers, body=body),
            config,
        )

    def get(self, url: str, **kwargs: Any) -> Response:
        """Execute a GET request."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> Response:
        """Execute a POST request."""
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> Response:
        """Execute a PUT request."""
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> Response:
        """Execute a PATCH request."""
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Response:
        """Execute a DELETE request."""
        return self.request("DELETE", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> Response:
        """Execute a HEAD request."""
        return self.request("HEAD", url, **kwargs)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
