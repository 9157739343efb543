"""
Schema definitions for httpreplay.

This module defines the Pydantic models used throughout httpreplay:
- Request/Response: The HTTP interaction being executed or replayed
- StoredEntry: The self-describing document persisted for a recording
- RecordingTarget/ReplaySettings: Where and how recordings are kept
- StubPattern/StubSettings: Declarative stubs and how strictly they match
- ClientConfig: Per-call options handed to the live transport

Design Decisions:
    - Requests and responses are normalized on construction: methods are
      upper-cased, URLs are parsed, headers are lower-cased, merged and
      sorted by name. Two requests that differ only in header order are
      equal and hash to the same fingerprint.
    - Bodies are bytes in Python and base64 strings in JSON. Decoding base64
      only happens when validating with the ``encoded_bodies`` context flag,
      so ``Request(body="42")`` still means the bytes ``b"42"``.
    - Models are immutable (frozen=True) and reject unknown fields.
"""

import base64
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import httpx
import yaml
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationInfo,
    field_validator,
)


# The version of the storage format. Files of any other version are
# discarded and recorded again.
FORMAT_VERSION = 2

# Validation context key marking bodies as base64 text
ENCODED_BODIES = "encoded_bodies"


# =============================================================================
# Enums
# =============================================================================


class RecordMode(str, Enum):
    """
    Whether a replay client may capture new interactions.

    NEW_EPISODES records every request without a matching recording.
    ONLY_REPLAY fails instead of touching the network.
    """

    NEW_EPISODES = "new_episodes"
    ONLY_REPLAY = "only_replay"


class TargetKind(str, Enum):
    """Addressing mode of a recording target."""

    FILE = "file"
    DIR = "dir"


class StubStrictness(str, Enum):
    """
    Which request fields a stub client compares.

    The url is always compared.
    """

    FULL = "full"
    BODY_METHOD_URL = "body_method_url"
    HEADERS_METHOD_URL = "headers_method_url"
    METHOD_URL = "method_url"
    URL = "url"


class StubDefault(str, Enum):
    """What a stub client does with a request no stub matches."""

    PERFORM_REQUEST = "perform_request"
    PANIC = "panic"
    ERROR = "error"


# =============================================================================
# Normalization Helpers
# =============================================================================


def normalize_url(value: Any) -> Any:
    """Parse a URL into its canonical string form."""
    if isinstance(value, httpx.URL):
        value = str(value)
    if not isinstance(value, str):
        return value
    try:
        url = httpx.URL(value.strip())
    except httpx.InvalidURL as e:
        msg = f"Invalid URL {value!r}: {e}"
        raise ValueError(msg) from e
    if url.scheme not in ("http", "https"):
        msg = f"URL scheme must be http or https: {value!r}"
        raise ValueError(msg)
    if not url.host:
        msg = f"URL must have a host: {value!r}"
        raise ValueError(msg)
    return str(url)


def canonical_headers(value: Any) -> Any:
    """
    Canonicalize a header multimap.

    Accepts a mapping, an ``httpx.Headers`` instance or an iterable of
    ``(name, value)`` pairs. Names are lower-cased, repeated names are
    joined with ", " in insertion order, and the result is sorted by name.

    Args:
        value: Headers in any of the accepted shapes, or None

    Returns:
        A new dict sorted by header name

    Raises:
        ValueError: If a name or value is not a string
    """
    if value is None:
        return {}
    if isinstance(value, httpx.Headers):
        pairs: Iterable[Any] = value.multi_items()
    elif isinstance(value, Mapping):
        pairs = value.items()
    elif isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        pairs = value
    else:
        return value

    merged: dict[str, list[str]] = {}
    for pair in pairs:
        name, header_value = pair
        if not isinstance(name, str) or not isinstance(header_value, str):
            msg = "Header names and values must be strings"
            raise ValueError(msg)
        merged.setdefault(name.strip().lower(), []).append(header_value)

    return {name: ", ".join(merged[name]) for name in sorted(merged)}


def _decode_body(value: Any, info: ValidationInfo) -> Any:
    if isinstance(value, str):
        if info.context and info.context.get(ENCODED_BODIES):
            return base64.b64decode(value, validate=True)
        return value.encode("utf-8")
    if isinstance(value, bytearray):
        return bytes(value)
    return value


def _encode_body(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


Url = Annotated[str, BeforeValidator(normalize_url)]
HeaderMap = Annotated[dict[str, str], BeforeValidator(canonical_headers)]
Body = Annotated[
    bytes,
    BeforeValidator(_decode_body),
    PlainSerializer(_encode_body, return_type=str, when_used="json-unless-none"),
]


# =============================================================================
# HTTP Models
# =============================================================================


class Request(BaseModel):
    """
    A normalized HTTP request.

    Attributes:
        method: HTTP method, upper-cased
        url: Absolute http(s) URL in canonical form
        headers: Lower-cased header names mapped to values, sorted by name
        body: Raw request body, or None when the request has none
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str = Field(default="GET", min_length=1, description="HTTP method")
    url: Url = Field(..., description="Absolute request URL")
    headers: HeaderMap = Field(default_factory=dict, description="Request headers")
    body: Body | None = Field(default=None, description="Raw request body")

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        """Upper-case the method name."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class Response(BaseModel):
    """
    An HTTP response, either live, replayed or stubbed.

    Attributes:
        url: Final URL of the response (after redirects)
        status: Status code
        headers: Lower-cased header names mapped to values, sorted by name
        body: Raw response body
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Url = Field(..., description="Final response URL")
    status: int = Field(default=200, ge=100, le=999, description="Status code")
    headers: HeaderMap = Field(default_factory=dict, description="Response headers")
    body: Body = Field(default=b"", description="Raw response body")

    def text(self, encoding: str = "utf-8") -> str:
        """Decode the body as text."""
        return self.body.decode(encoding)


class StoredEntry(BaseModel):
    """
    One recorded interaction as persisted on disk.

    Attributes:
        format_version: Storage format the document was written with
        request: The request that was sent
        response: The response that was received
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    format_version: int = Field(default=FORMAT_VERSION, ge=0, le=255)
    request: Request
    response: Response


# =============================================================================
# Configuration Models
# =============================================================================


class ClientConfig(BaseModel):
    """
    Options for performing a live request.

    Attributes:
        timeout_seconds: Request timeout, or None to wait indefinitely
        follow_redirects: Whether redirects are followed
        max_redirects: Maximum number of redirects to follow
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout_seconds: float | None = Field(
        default=None,
        description="Request timeout in seconds (None = no timeout)",
        gt=0,
    )
    follow_redirects: bool = Field(
        default=True,
        description="Whether redirects are followed",
    )
    max_redirects: int = Field(
        default=10,
        description="Maximum number of redirects to follow",
        ge=0,
    )


class RecordingTarget(BaseModel):
    """
    Where a replay client keeps its recordings.

    A FILE target holds exactly one interaction and is overwritten when a
    different request is recorded. A DIR target holds one file per distinct
    request, named after its fingerprint.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: TargetKind
    path: Path

    @classmethod
    def file(cls, path: Path | str) -> "RecordingTarget":
        """Record a single interaction to one file."""
        return cls(kind=TargetKind.FILE, path=Path(path))

    @classmethod
    def dir(cls, path: Path | str) -> "RecordingTarget":
        """Record each distinct request to its own file in a directory."""
        return cls(kind=TargetKind.DIR, path=Path(path))


class ReplaySettings(BaseModel):
    """Settings for a replay client."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    target: RecordingTarget
    mode: RecordMode = Field(default=RecordMode.NEW_EPISODES)


class StubSettings(BaseModel):
    """
    Settings for a stub client.

    Attributes:
        strictness: Which request fields are compared against stubs
        default: What to do when no stub matches
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    strictness: StubStrictness = Field(default=StubStrictness.FULL)
    default: StubDefault = Field(default=StubDefault.ERROR)


class StubPattern(BaseModel):
    """
    The request side of a stub.

    Fields left as None are unset. Which fields must be set depends on the
    stub client's strictness.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Url
    method: str | None = None
    body: Body | None = None
    headers: HeaderMap | None = None

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        """Upper-case the method name."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def _load_yaml(path: Path | str) -> Any:
    path = Path(path)
    with path.open() as f:
        return yaml.safe_load(f) or {}


def load_client_config(path: Path | str) -> ClientConfig:
    """
    Load a client config from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the YAML doesn't match the schema
    """
    return ClientConfig.model_validate(_load_yaml(path))


def load_stub_settings(path: Path | str) -> StubSettings:
    """
    Load stub settings from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the YAML doesn't match the schema
    """
    return StubSettings.model_validate(_load_yaml(path))


def load_replay_settings(path: Path | str) -> ReplaySettings:
    """
    Load replay settings from a YAML file.

    Relative target paths are resolved against the YAML file's directory.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the YAML doesn't match the schema
    """
    path = Path(path)
    settings = ReplaySettings.model_validate(_load_yaml(path))
    if settings.target.path.is_absolute():
        return settings
    target = RecordingTarget(
        kind=settings.target.kind,
        path=path.parent / settings.target.path,
    )
    return ReplaySettings(target=target, mode=settings.mode)


def load_client_config_from_string(content: str) -> ClientConfig:
    """Load a client config from a YAML string."""
    return ClientConfig.model_validate(yaml.safe_load(content) or {})


def load_stub_settings_from_string(content: str) -> StubSettings:
    """Load stub settings from a YAML string."""
    return StubSettings.model_validate(yaml.safe_load(content) or {})
