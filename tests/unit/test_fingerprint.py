"""
Unit tests for request fingerprints.
"""

from httpreplay.fingerprint import Fingerprint, canonical_request, compute_fingerprint
from httpreplay.schema import Request


class TestFingerprint:
    """Tests for compute_fingerprint."""

    def test_deterministic(self, sample_request: Request) -> None:
        assert compute_fingerprint(sample_request) == compute_fingerprint(sample_request)

    def test_equal_requests_equal_fingerprints(self) -> None:
        r1 = Request(method="get", url="http://x/y", body="42")
        r2 = Request(method="GET", url="http://x/y", body=b"42")
        assert compute_fingerprint(r1) == compute_fingerprint(r2)

    def test_header_order_independent(self) -> None:
        r1 = Request(url="http://x/y", headers=[("User-Agent", "t"), ("Content-Type", "a/b")])
        r2 = Request(url="http://x/y", headers=[("Content-Type", "a/b"), ("User-Agent", "t")])
        assert compute_fingerprint(r1) == compute_fingerprint(r2)

    def test_body_changes_fingerprint(self) -> None:
        r1 = Request(url="http://x/y", body="42")
        r2 = Request(url="http://x/y", body="43")
        assert compute_fingerprint(r1) != compute_fingerprint(r2)

    def test_empty_body_differs_from_no_body(self) -> None:
        r1 = Request(url="http://x/y", body=b"")
        r2 = Request(url="http://x/y")
        assert compute_fingerprint(r1) != compute_fingerprint(r2)

    def test_method_changes_fingerprint(self) -> None:
        r1 = Request(method="GET", url="http://x/y")
        r2 = Request(method="POST", url="http://x/y")
        assert compute_fingerprint(r1) != compute_fingerprint(r2)

    def test_header_value_changes_fingerprint(self) -> None:
        r1 = Request(url="http://x/y", headers={"Accept": "a"})
        r2 = Request(url="http://x/y", headers={"Accept": "b"})
        assert compute_fingerprint(r1) != compute_fingerprint(r2)

    def test_hex_format(self, sample_request: Request) -> None:
        fingerprint = compute_fingerprint(sample_request)
        assert len(fingerprint.hex) == 64
        assert fingerprint.hex == fingerprint.hex.lower()
        int(fingerprint.hex, 16)

    def test_filename(self) -> None:
        assert Fingerprint(hex="abc123").filename == "abc123.json"
        assert str(Fingerprint(hex="abc123")) == "abc123"

    def test_canonical_request_sorted(self) -> None:
        text = canonical_request(Request(url="http://x/y", headers={"B": "2", "A": "1"}))
        assert text.index('"a"') < text.index('"b"')
        assert text.index('"body"') < text.index('"headers"') < text.index('"method"')
