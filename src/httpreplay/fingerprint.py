"""
Request fingerprints.

A fingerprint is a stable digest of a normalized request. Directory
recordings are named after it, so it must never depend on process state:
no seeded hashes, no dict ordering, no header insertion order.
"""

import hashlib
import json
from dataclasses import dataclass

from httpreplay.schema import Request


@dataclass(frozen=True)
class Fingerprint:
    """
    Digest identifying a normalized request.

    Attributes:
        hex: Lower-case hexadecimal SHA-256 digest
    """

    hex: str

    @property
    def filename(self) -> str:
        """File name used for this request in a directory target."""
        return f"{self.hex}.json"

    def __str__(self) -> str:
        return self.hex


def canonical_request(request: Request) -> str:
    """Serialize a request into the canonical text that gets hashed."""
    return json.dumps(request.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))


def compute_fingerprint(request: Request) -> Fingerprint:
    """
    Compute the fingerprint of a request.

    Equal normalized requests always produce equal fingerprints. Structural
    equality is still checked on replay, since a digest alone does not rule
    out collisions.
    """
    digest = hashlib.sha256(canonical_request(request).encode("utf-8")).hexdigest()
    return Fingerprint(hex=digest)
