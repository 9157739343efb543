"""
Storage module for httpreplay.

Recordings are plain JSON files so they can be committed next to the tests
that replay them and reviewed in diffs.

Layout:
    - FILE target: one file, one interaction
    - DIR target: ``<fingerprint-hex>.json`` per distinct request

Every document carries ``format_version``. Files written by another
version are treated as missing and get recorded again.
"""

from httpreplay.store.files import (
    ReplayStore,
    decode_entry,
    encode_entry,
    read_format_version,
)

__all__ = [
    "ReplayStore",
    "decode_entry",
    "encode_entry",
    "read_format_version",
]
