"""
httpreplay - Record, replay and stub HTTP interactions in tests.

Write code against the Client interface and pick the client at the edge:
- DirectClient in production performs real requests
- ReplayClient in tests records each request once and replays it after
- StubClient in tests answers from declaratively registered stubs

Example usage:
    from httpreplay import RecordingTarget, ReplayClient

    client = ReplayClient(RecordingTarget.dir("tests/recordings"))
    response = client.get("https://api.github.com/users/octocat")

    $ httpreplay list tests/recordings
    $ httpreplay verify tests/recordings
"""

from httpreplay.clients import (
    Client,
    DirectClient,
    GenericClient,
    ReplayClient,
    StubClient,
)
from httpreplay.errors import (
    HttpReplayError,
    RegistrationError,
    ReplayPolicyViolationError,
    SerializationError,
    StorageError,
    StubPanic,
    TransportError,
    UnmatchedStubError,
)
from httpreplay.fingerprint import Fingerprint, compute_fingerprint
from httpreplay.schema import (
    FORMAT_VERSION,
    ClientConfig,
    RecordingTarget,
    RecordMode,
    Request,
    Response,
    StoredEntry,
    StubDefault,
    StubPattern,
    StubSettings,
    StubStrictness,
)

__version__ = "0.1.0"
__author__ = "httpreplay Contributors"

__all__ = [
    "__version__",
    "__author__",
    "FORMAT_VERSION",
    "Client",
    "ClientConfig",
    "DirectClient",
    "Fingerprint",
    "GenericClient",
    "HttpReplayError",
    "RecordMode",
    "RecordingTarget",
    "RegistrationError",
    "ReplayClient",
    "ReplayPolicyViolationError",
    "Request",
    "Response",
    "SerializationError",
    "StorageError",
    "StoredEntry",
    "StubClient",
    "StubDefault",
    "StubPanic",
    "StubPattern",
    "StubSettings",
    "StubStrictness",
    "TransportError",
    "UnmatchedStubError",
    "compute_fingerprint",
]
