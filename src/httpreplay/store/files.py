"""
JSON file storage for recorded interactions.

Each recording is a self-describing JSON document holding the request, the
response and the storage format version it was written with.

Addressing:
    - FILE target: the configured path holds exactly one recording
    - DIR target: ``<dir>/<fingerprint-hex>.json``, one file per request

Reading decodes the document into plain JSON first and checks
``format_version`` before anything else, so a recording written by another
format version is reported as missing instead of failing to decode.

Writes go to a temporary file that is then renamed over the recording, so
readers never see a partial document. Concurrent writers are
last-writer-wins. There is no cross-process locking.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from httpreplay.errors import SerializationError, StorageReadError, StorageWriteError
from httpreplay.fingerprint import compute_fingerprint
from httpreplay.schema import (
    ENCODED_BODIES,
    FORMAT_VERSION,
    RecordingTarget,
    Request,
    StoredEntry,
    TargetKind,
)

logger = logging.getLogger(__name__)


def read_format_version(document: Any) -> int | None:
    """Extract the format version from a decoded document, if it has one."""
    if not isinstance(document, dict):
        return None
    version = document.get("format_version")
    if isinstance(version, bool) or not isinstance(version, int):
        return None
    return version


def decode_entry(document: Any, path: Path | str = "") -> StoredEntry:
    """
    Validate a decoded JSON document into a StoredEntry.

    Raises:
        SerializationError: If the document does not match the schema
    """
    try:
        return StoredEntry.model_validate(document, context={ENCODED_BODIES: True})
    except ValidationError as e:
        raise SerializationError(path=str(path), underlying_error=str(e)) from e


def encode_entry(entry: StoredEntry) -> str:
    """Serialize an entry into its on-disk JSON form."""
    return entry.model_dump_json(indent=2)


class ReplayStore:
    """
    Reads and writes recordings for one recording target.

    Usage:
        store = ReplayStore(RecordingTarget.dir("tests/recordings"))
        path = store.path_for(request)
        entry = store.load(path)
        if entry is None:
            store.save(StoredEntry(request=request, response=response))

    Attributes:
        target: Where recordings are kept
    """

    def __init__(self, target: RecordingTarget) -> None:
        self.target = target

    def path_for(self, request: Request) -> Path:
        """
        Resolve the file that holds the recording for a request.

        Args:
            request: The normalized request

        Returns:
            The target path for FILE targets, otherwise a fingerprint-named
            file inside the target directory
        """
        if self.target.kind == TargetKind.FILE:
            return self.target.path
        return self.target.path / compute_fingerprint(request).filename

    def load(self, path: Path) -> StoredEntry | None:
        """
        Load the recording at a path.

        Args:
            path: File to read

        Returns:
            The stored entry, or None if the file does not exist or was
            written with a different format version

        Raises:
            StorageReadError: If the file exists but cannot be read
            SerializationError: If the file is not valid JSON or does not
                match the schema of the current format version
        """
        logger.debug("Checking presence of replay file: %s", path)
        if not path.exists():
            logger.debug("No replay file found at %s", path)
            return None

        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageReadError(path=str(path), underlying_error=str(e)) from e

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SerializationError(path=str(path), underlying_error=str(e)) from e

        version = read_format_version(document)
        if version != FORMAT_VERSION:
            logger.debug(
                "Replay file %s has format version %s, expected %s; ignoring it",
                path,
                version,
                FORMAT_VERSION,
            )
            return None

        return decode_entry(document, path)

    def save(self, entry: StoredEntry) -> Path:
        """
        Persist an entry, replacing any previous recording at its path.

        Missing parent directories are created.

        Args:
            entry: The entry to write

        Returns:
            The path that was written

        Raises:
            StorageWriteError: If the file cannot be written
        """
        path = self.path_for(entry.request)
        logger.debug("Writing replay file at: %s", path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                f.write(encode_entry(entry))
            # Readers only ever see the old or the new document
            try:
                os.replace(f.name, path)
            except OSError:
                os.unlink(f.name)
                raise
        except OSError as e:
            raise StorageWriteError(path=str(path), underlying_error=str(e)) from e
        return path

    def files(self) -> list[Path]:
        """
        List the recording files of this target.

        Returns:
            Sorted ``*.json`` files of a DIR target, or the single file of
            a FILE target if it exists
        """
        if self.target.kind == TargetKind.FILE:
            return [self.target.path] if self.target.path.exists() else []
        if not self.target.path.is_dir():
            return []
        return sorted(self.target.path.glob("*.json"))

    def __repr__(self) -> str:
        return f"<ReplayStore: {self.target.kind.value} {self.target.path}>"
