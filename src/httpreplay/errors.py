"""
Exception hierarchy for httpreplay.

All httpreplay exceptions inherit from HttpReplayError, allowing callers to
catch every library failure with a single except clause.

Exception Categories:
    - TransportError: The live HTTP call failed
    - RegistrationError: A stub does not fit the configured strictness
    - UnmatchedStubError: No stub matched and the client is set to error
    - ReplayPolicyViolationError: A replay-only client would have to record
    - StorageError: Reading or writing a recording failed
    - SerializationError: A recording could not be decoded

A cache miss is never an error. A recording written by another format
version is treated as missing and never raises.

StubPanic is deliberately not an HttpReplayError: it derives from
BaseException so that ordinary ``except Exception`` handlers in the code
under test do not swallow a misconfigured stub client.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Transport errors: 2xxx
ERROR_TRANSPORT_FAILED = 2001
ERROR_TRANSPORT_TIMEOUT = 2002
ERROR_TRANSPORT_REDIRECTS = 2003

# Stub errors: 3xxx
ERROR_STUB_MISSING_FIELD = 3001
ERROR_STUB_UNEXPECTED_FIELD = 3002
ERROR_STUB_REGISTRATION = 3003
ERROR_STUB_UNMATCHED = 3004

# Replay errors: 4xxx
ERROR_REPLAY_POLICY_VIOLATION = 4001
ERROR_REPLAY_FORCE_RECORD = 4002

# Storage errors: 5xxx
ERROR_STORAGE_READ = 5001
ERROR_STORAGE_WRITE = 5002
ERROR_STORAGE_SERIALIZATION = 5004


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class HttpReplayError(Exception):
    """
    Base exception for all httpreplay errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Transport Errors
# =============================================================================


@dataclass
class TransportError(HttpReplayError):
    """
    Raised when the live HTTP call fails.

    Replay and stub clients propagate this unchanged from the transport.

    Attributes:
        method: HTTP method of the failed request
        url: URL of the failed request
        underlying_error: Text of the original exception
    """

    method: str = ""
    url: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"{self.method} {self.url} failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_TRANSPORT_FAILED
        self.context.update({
            "method": self.method,
            "url": self.url,
            "underlying_error": self.underlying_error,
        })


@dataclass
class TransportTimeoutError(TransportError):
    """Raised when the live HTTP call exceeds its timeout."""

    timeout_seconds: float = 0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"{self.method} {self.url} timed out after {self.timeout_seconds}s"
        if self.code == 0:
            self.code = ERROR_TRANSPORT_TIMEOUT
        if not self.suggestion:
            self.suggestion = "Increase timeout_seconds in the client config"
        super().__post_init__()
        self.context["timeout_seconds"] = self.timeout_seconds


# =============================================================================
# Stub Errors
# =============================================================================


@dataclass
class RegistrationError(HttpReplayError):
    """
    Raised when a stub pattern does not fit the client's strictness.

    Attributes:
        field_name: The request field that caused the problem
        strictness: The strictness the client was configured with
    """

    field_name: str = ""
    strictness: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if self.code == 0:
            self.code = ERROR_STUB_REGISTRATION
        self.context.update({
            "field_name": self.field_name,
            "strictness": self.strictness,
        })


@dataclass
class MissingStubFieldError(RegistrationError):
    """Raised when a stub lacks a field its strictness compares."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Tried registering stub without `{self.field_name}` "
                f"even though `{self.strictness}` requires its presence"
            )
        if self.code == 0:
            self.code = ERROR_STUB_MISSING_FIELD
        super().__post_init__()


@dataclass
class UnexpectedStubFieldError(RegistrationError):
    """Raised when a stub sets a field its strictness never compares."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Tried registering stub with `{self.field_name}`, "
                f"but `{self.strictness}` does not compare it"
            )
        if self.code == 0:
            self.code = ERROR_STUB_UNEXPECTED_FIELD
        if not self.suggestion:
            self.suggestion = "Remove the field or choose a stricter StubStrictness"
        super().__post_init__()


@dataclass
class UnmatchedStubError(HttpReplayError):
    """Raised when no stub matches a request and the default is ERROR."""

    method: str = ""
    url: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Requested {self.url}, without having provided a stub for it"
        if self.code == 0:
            self.code = ERROR_STUB_UNMATCHED
        self.context.update({
            "method": self.method,
            "url": self.url,
        })


class StubPanic(BaseException):
    """
    Raised when no stub matches a request and the default is PANIC.

    Signals a misconfigured test rather than a recoverable condition.
    """

    def __init__(self, url: str) -> None:
        super().__init__(f"Requested {url}, without having provided a stub for it.")
        self.url = url


# =============================================================================
# Replay Errors
# =============================================================================


@dataclass
class ReplayPolicyViolationError(HttpReplayError):
    """
    Raised when a replay-only client would have to record.

    Attributes:
        method: HTTP method of the request
        url: URL of the request
        path: The recording that was consulted
    """

    method: str = ""
    url: str = ""
    path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"No matching recording for {self.method} {self.url} "
                f"and record mode is only_replay"
            )
        if self.code == 0:
            self.code = ERROR_REPLAY_POLICY_VIOLATION
        if not self.suggestion:
            self.suggestion = "Record the interaction with record mode new_episodes first"
        self.context.update({
            "method": self.method,
            "url": self.url,
            "path": self.path,
        })


@dataclass
class ForceRecordNotAllowedError(ReplayPolicyViolationError):
    """Raised when force_record_next() is called on a replay-only client."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Cannot force a recording while record mode is only_replay"
        if self.code == 0:
            self.code = ERROR_REPLAY_FORCE_RECORD
        if not self.suggestion:
            self.suggestion = "Use record mode new_episodes to re-record interactions"
        super().__post_init__()


# =============================================================================
# Storage Errors
# =============================================================================


@dataclass
class StorageError(HttpReplayError):
    """
    Base class for recording storage errors.

    Attributes:
        operation: The operation that failed ("read" or "write")
        path: The file involved
    """

    operation: str = ""
    path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "operation": self.operation,
            "path": self.path,
        })


@dataclass
class StorageReadError(StorageError):
    """Raised when a recording cannot be read from disk."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.operation:
            self.operation = "read"
        if not self.message:
            self.message = f"Reading recording {self.path} failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_READ
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class StorageWriteError(StorageError):
    """Raised when a recording cannot be written to disk."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.operation:
            self.operation = "write"
        if not self.message:
            self.message = f"Writing recording {self.path} failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_WRITE
        if not self.suggestion:
            self.suggestion = "Check that the recording location is writable"
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class SerializationError(StorageError):
    """Raised when a current-version recording cannot be decoded."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.operation:
            self.operation = "decode"
        if not self.message:
            self.message = f"Recording {self.path} is malformed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_SERIALIZATION
        if not self.suggestion:
            self.suggestion = "Delete the file to record the interaction again"
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error
