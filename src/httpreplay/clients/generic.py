"""
Generic client for httpreplay.

GenericClient is one concrete type that wraps any of the other clients.
Use it when code should not have to be typed against the Client base class,
e.g. an application object built once with a client attribute that tests
swap for a replay or stub client.
"""

from pathlib import Path

from httpreplay.clients.base import Client
from httpreplay.clients.direct import DirectClient
from httpreplay.clients.replay import ReplayClient
from httpreplay.clients.stub import StubClient
from httpreplay.schema import (
    ClientConfig,
    RecordingTarget,
    RecordMode,
    Request,
    Response,
    StubSettings,
)

# Clients a GenericClient may wrap
INNER_CLIENT_TYPES = (DirectClient, ReplayClient, StubClient)


class GenericClient(Client):
    """
    Dispatch requests to a wrapped direct, replay or stub client.

    Usage:
        client = GenericClient.direct()
        client = GenericClient.replay_dir("tests/recordings")
        client = GenericClient(StubClient(settings))

    Attributes:
        inner: The wrapped client
    """

    def __init__(self, inner: Client) -> None:
        """
        Wrap a client.

        Raises:
            TypeError: If inner is not a DirectClient, ReplayClient or StubClient
        """
        if not isinstance(inner, INNER_CLIENT_TYPES):
            msg = f"GenericClient cannot wrap {type(inner).__name__}"
            raise TypeError(msg)
        super().__init__(inner.config)
        self.inner = inner

    @classmethod
    def direct(cls, config: ClientConfig | None = None) -> "GenericClient":
        """Wrap a DirectClient."""
        return cls(DirectClient(config))

    @classmethod
    def replay_file(
        cls,
        path: Path | str,
        mode: RecordMode = RecordMode.NEW_EPISODES,
    ) -> "GenericClient":
        """
        Wrap a ReplayClient recording one single request to one file.

        If a differing request is made, the file is overwritten.
        """
        return cls(ReplayClient(RecordingTarget.file(path), mode=mode))

    @classmethod
    def replay_dir(
        cls,
        path: Path | str,
        mode: RecordMode = RecordMode.NEW_EPISODES,
    ) -> "GenericClient":
        """
        Wrap a ReplayClient recording many requests to one directory.

        Each unique request gets its own file.
        """
        return cls(ReplayClient(RecordingTarget.dir(path), mode=mode))

    @classmethod
    def stub(cls, settings: StubSettings | None = None) -> "GenericClient":
        """Wrap a StubClient."""
        return cls(StubClient(settings))

    @property
    def config(self) -> ClientConfig:
        """Config of the wrapped client."""
        return self.inner.config

    @config.setter
    def config(self, value: ClientConfig) -> None:
        self.inner.config = value

    def execute(self, request: Request, config: ClientConfig | None = None) -> Response:
        """Execute the request with the wrapped client."""
        return self.inner.execute(request, config)

    def __repr__(self) -> str:
        return f"<GenericClient: {self.inner!r}>"
