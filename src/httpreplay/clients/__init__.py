"""
Clients module for httpreplay.

Every client implements the same execute() entry point, so code written
against Client runs unchanged with any of them:

    - DirectClient: live requests with httpx
    - ReplayClient: record to disk once, replay afterwards
    - StubClient: answer from registered stubs
    - GenericClient: one concrete type wrapping any of the above

Example:
    from httpreplay.clients import ReplayClient
    from httpreplay.schema import RecordingTarget

    client = ReplayClient(RecordingTarget.dir("tests/recordings"))
    response = client.get("https://api.github.com/users/octocat")
"""

from httpreplay.clients.base import Client
from httpreplay.clients.direct import DirectClient
from httpreplay.clients.generic import GenericClient
from httpreplay.clients.replay import ReplayClient
from httpreplay.clients.stub import (
    REQUIRED_FIELDS,
    RequestStubber,
    ResponseStubber,
    StubClient,
    StubKey,
)

__all__ = [
    "Client",
    "DirectClient",
    "GenericClient",
    "ReplayClient",
    "StubClient",
    "StubKey",
    "RequestStubber",
    "ResponseStubber",
    "REQUIRED_FIELDS",
]
