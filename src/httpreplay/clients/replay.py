"""
Replay client for httpreplay.

The ReplayClient records responses to requests and replays them while the
request is unchanged. The first time a request is made it goes to the live
transport and the interaction is written to disk; afterwards the stored
response is returned without touching the network.

Use cases:
    - Run tests against real API responses without network access
    - Keep test runs deterministic when the remote service changes
    - Fail CI when code starts making requests that were never recorded

Design Principles:
    - Bit-exact: Replays return exactly what was stored
    - Verified: A recording is only replayed if its request is structurally
      equal to the submitted one, fingerprint collisions included
    - Versioned: Recordings of another format version count as missing
    - Fail-safe: ONLY_REPLAY never falls back to the network

Each execute() makes at most one live call and at most one file write,
and neither on a replay.
"""

import logging
import threading
from pathlib import Path

from httpreplay.clients.base import Client
from httpreplay.clients.direct import DirectClient
from httpreplay.errors import ForceRecordNotAllowedError, ReplayPolicyViolationError
from httpreplay.schema import (
    FORMAT_VERSION,
    ClientConfig,
    RecordingTarget,
    RecordMode,
    ReplaySettings,
    Request,
    Response,
    StoredEntry,
)
from httpreplay.store import ReplayStore

logger = logging.getLogger(__name__)


class ReplayClient(Client):
    """
    Record interactions to disk and replay them.

    Usage:
        client = ReplayClient(RecordingTarget.dir("tests/recordings"))
        response = client.get("https://api.github.com/users/octocat")

    With a FILE target a single interaction is kept; making a different
    request overwrites it. With a DIR target every distinct request gets its
    own file named after its fingerprint.

    Attributes:
        target: Where recordings are kept
        mode: Whether new interactions may be recorded
        transport: Client used for live requests on a miss
        store: Storage for the target
    """

    def __init__(
        self,
        target: RecordingTarget,
        mode: RecordMode = RecordMode.NEW_EPISODES,
        transport: Client | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        """
        Initialize the replay client.

        Args:
            target: Recording file or directory
            mode: Record mode, fixed for the lifetime of the client
            transport: Client for live requests; a DirectClient if None
            config: Default options handed to the transport
        """
        super().__init__(config)
        self.target = target
        self.mode = mode
        self.transport = transport if transport is not None else DirectClient()
        self.store = ReplayStore(target)
        self._force_record_next = False
        self._force_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: ReplaySettings,
        transport: Client | None = None,
        config: ClientConfig | None = None,
    ) -> "ReplayClient":
        """Create a replay client from loaded settings."""
        return cls(settings.target, mode=settings.mode, transport=transport, config=config)

    def force_record_next(self) -> None:
        """
        Record the next request again, even if a matching recording exists.

        The flag is consumed by the next execute() whatever its outcome.

        Raises:
            ForceRecordNotAllowedError: If the client is in ONLY_REPLAY mode
        """
        if self.mode == RecordMode.ONLY_REPLAY:
            raise ForceRecordNotAllowedError()
        with self._force_lock:
            self._force_record_next = True

    def _take_force_record(self) -> bool:
        with self._force_lock:
            forced = self._force_record_next
            self._force_record_next = False
            return forced

    def replay_path(self, request: Request) -> Path:
        """The file holding the recording for a request."""
        return self.store.path_for(request)

    def execute(self, request: Request, config: ClientConfig | None = None) -> Response:
        """
        Replay a recorded response or record a new one.

        Args:
            request: The request to perform
            config: Options for a live call; the client's own config if None

        Returns:
            The stored response on a replay, the live response otherwise

        Raises:
            ReplayPolicyViolationError: If nothing matches in ONLY_REPLAY mode
            TransportError: If the live call fails
            StorageError: If the recording cannot be read or written
        """
        logger.debug("ReplayClient performing %s request of URL: %s", request.method, request.url)
        path = self.replay_path(request)
        forced = self._take_force_record()

        if forced:
            logger.debug("Force record was requested, ignoring replay file %s", path)
        else:
            entry = self.store.load(path)
            if entry is not None:
                if entry.request == request:
                    logger.debug("Replaying %s %s from %s", request.method, request.url, path)
                    return entry.response
                logger.warning(
                    "Request for %s has changed since it was recorded to %s", request.url, path
                )

        if self.mode == RecordMode.ONLY_REPLAY:
            raise ReplayPolicyViolationError(
                method=request.method,
                url=request.url,
                path=str(path),
            )

        response = self.transport.execute(request, config or self.config)
        self.store.save(
            StoredEntry(format_version=FORMAT_VERSION, request=request, response=response)
        )
        logger.debug("Recorded %s %s to %s", request.method, request.url, path)
        return response

    def __repr__(self) -> str:
        return f"<ReplayClient: {self.target.kind.value} {self.target.path} ({self.mode.value})>"
