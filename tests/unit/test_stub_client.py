"""
Unit tests for StubClient.

Tests cover:
- Registration validation per strictness
- Matching on the selected fields only
- Unmatched request defaults
- The fluent stub builder
"""

import pytest

from httpreplay.clients.stub import (
    REQUIRED_FIELDS,
    StubClient,
    StubKey,
    request_key,
    validate_pattern,
)
from httpreplay.errors import (
    MissingStubFieldError,
    RegistrationError,
    StubPanic,
    UnexpectedStubFieldError,
    UnmatchedStubError,
)
from httpreplay.schema import (
    Request,
    Response,
    StubDefault,
    StubPattern,
    StubSettings,
    StubStrictness,
)

URL = "http://example.com/mocking"


def make_client(strictness: StubStrictness, default: StubDefault = StubDefault.ERROR, **kwargs):
    return StubClient(StubSettings(strictness=strictness, default=default), **kwargs)


def canned(body: str = "Mocking is fun!") -> Response:
    return Response(url=URL, body=body)


class TestRequiredFields:
    """Tests for the strictness table."""

    def test_every_strictness_covered(self) -> None:
        assert set(REQUIRED_FIELDS) == set(StubStrictness)

    @pytest.mark.parametrize(
        ("strictness", "pattern"),
        [
            (StubStrictness.FULL, StubPattern(url=URL, method="GET", body="1", headers={})),
            (StubStrictness.BODY_METHOD_URL, StubPattern(url=URL, method="GET", body="1")),
            (StubStrictness.HEADERS_METHOD_URL, StubPattern(url=URL, method="GET", headers={})),
            (StubStrictness.METHOD_URL, StubPattern(url=URL, method="GET")),
            (StubStrictness.URL, StubPattern(url=URL)),
        ],
    )
    def test_exact_patterns_accepted(self, strictness, pattern) -> None:
        validate_pattern(pattern, strictness)


class TestRegistration:
    """Registration is validated against the strictness."""

    def test_body_rejected_under_method_url(self) -> None:
        client = make_client(StubStrictness.METHOD_URL)
        with pytest.raises(UnexpectedStubFieldError) as exc_info:
            client.register(StubPattern(url=URL, method="GET", body="42"), canned())
        assert exc_info.value.field_name == "body"
        assert len(client) == 0

    def test_body_accepted_under_body_method_url(self) -> None:
        client = make_client(StubStrictness.BODY_METHOD_URL)
        client.register(StubPattern(url=URL, method="GET", body="42"), canned())
        assert len(client) == 1

    def test_missing_method(self) -> None:
        client = make_client(StubStrictness.METHOD_URL)
        with pytest.raises(MissingStubFieldError) as exc_info:
            client.register(StubPattern(url=URL), canned())
        assert exc_info.value.field_name == "method"

    def test_missing_headers_under_full(self) -> None:
        client = make_client(StubStrictness.FULL)
        with pytest.raises(MissingStubFieldError):
            client.register(StubPattern(url=URL, method="GET", body="1"), canned())

    def test_method_rejected_under_url(self) -> None:
        client = make_client(StubStrictness.URL)
        with pytest.raises(RegistrationError):
            client.register(StubPattern(url=URL, method="GET"), canned())

    def test_headers_rejected_under_body_method_url(self) -> None:
        client = make_client(StubStrictness.BODY_METHOD_URL)
        with pytest.raises(UnexpectedStubFieldError):
            client.register(
                StubPattern(url=URL, method="GET", body="1", headers={"A": "1"}),
                canned(),
            )

    def test_reregistration_replaces(self) -> None:
        client = make_client(StubStrictness.URL)
        client.register(StubPattern(url=URL), canned("first"))
        client.register(StubPattern(url=URL), canned("second"))
        assert len(client) == 1
        assert client.get(URL).text() == "second"


class TestMatching:
    """Lookup compares the selected fields only."""

    def test_hit_returns_response_verbatim(self) -> None:
        client = make_client(StubStrictness.METHOD_URL)
        response = Response(url=URL, status=201, headers={"X-Stub": "yes"}, body=b"\x00\x01")
        client.register(StubPattern(url=URL, method="GET"), response)
        assert client.get(URL) is response

    def test_different_body_misses(self) -> None:
        client = make_client(StubStrictness.BODY_METHOD_URL)
        client.register(StubPattern(url=URL, method="POST", body="42"), canned())

        assert client.post(URL, body="42").text() == "Mocking is fun!"
        with pytest.raises(UnmatchedStubError):
            client.post(URL, body="43")

    def test_method_ignored_under_url(self) -> None:
        client = make_client(StubStrictness.URL)
        client.register(StubPattern(url=URL), canned())
        assert client.delete(URL, body="x", headers={"A": "1"}).text() == "Mocking is fun!"

    def test_body_ignored_under_method_url(self) -> None:
        client = make_client(StubStrictness.METHOD_URL)
        client.register(StubPattern(url=URL, method="PUT"), canned())
        assert client.put(URL, body="anything").text() == "Mocking is fun!"
        with pytest.raises(UnmatchedStubError):
            client.get(URL)

    def test_headers_compared_under_headers_method_url(self) -> None:
        client = make_client(StubStrictness.HEADERS_METHOD_URL)
        client.register(
            StubPattern(url=URL, method="GET", headers={"Accept": "text/plain"}),
            canned(),
        )
        assert client.get(URL, headers={"accept": "text/plain"}).text() == "Mocking is fun!"
        with pytest.raises(UnmatchedStubError):
            client.get(URL, headers={"Accept": "application/json"})

    def test_full_header_order_independent(self) -> None:
        client = make_client(StubStrictness.FULL)
        client.register(
            StubPattern(url=URL, method="GET", body="1", headers=[("A", "1"), ("B", "2")]),
            canned(),
        )
        response = client.get(URL, body="1", headers=[("B", "2"), ("A", "1")])
        assert response.text() == "Mocking is fun!"

    def test_full_key_header_order_independent(self) -> None:
        r1 = Request(url=URL, headers=[("A", "1"), ("B", "2")])
        r2 = Request(url=URL, headers=[("B", "2"), ("A", "1")])
        assert request_key(r1, StubStrictness.FULL) == request_key(r2, StubStrictness.FULL)

    def test_request_key_drops_unselected_fields(self) -> None:
        request = Request(method="POST", url=URL, headers={"A": "1"}, body="1")
        assert request_key(request, StubStrictness.URL) == StubKey(url=URL)
        assert request_key(request, StubStrictness.METHOD_URL) == StubKey(url=URL, method="POST")

    def test_no_partial_url_matching(self) -> None:
        client = make_client(StubStrictness.URL)
        client.register(StubPattern(url=URL), canned())
        with pytest.raises(UnmatchedStubError):
            client.get(URL + "/more")


class TestDefaults:
    """Unmatched requests follow StubDefault."""

    def test_error_names_url(self) -> None:
        client = make_client(StubStrictness.URL)
        with pytest.raises(UnmatchedStubError) as exc_info:
            client.get("http://example.com/missing")
        assert "http://example.com/missing" in str(exc_info.value)

    def test_panic(self) -> None:
        client = make_client(StubStrictness.URL, StubDefault.PANIC)
        with pytest.raises(StubPanic):
            client.get("http://example.com/missing")

    def test_perform_request(self, transport) -> None:
        client = make_client(StubStrictness.URL, StubDefault.PERFORM_REQUEST, transport=transport)
        response = client.get("http://x/y", body="42")
        assert len(transport.calls) == 1
        assert response.text() == "43\nGET /y\n{}"

    def test_perform_request_not_used_on_hit(self, transport) -> None:
        client = make_client(StubStrictness.URL, StubDefault.PERFORM_REQUEST, transport=transport)
        client.register(StubPattern(url=URL), canned())
        client.get(URL)
        assert transport.calls == []

    def test_default_settings(self) -> None:
        client = StubClient()
        assert client.settings == StubSettings()


class TestBuilder:
    """The fluent builder registers through register()."""

    def test_method_url_stub(self) -> None:
        client = make_client(StubStrictness.METHOD_URL)
        client.stub(URL).method("GET").response().body("Mocking is fun!").mock()
        assert client.get(URL).text() == "Mocking is fun!"

    def test_response_details(self) -> None:
        client = make_client(StubStrictness.URL)
        client.stub(URL).response().status(404).header("X-Reason", "gone").body(b"none").mock()
        response = client.get(URL)
        assert response.status == 404
        assert response.headers == {"x-reason": "gone"}
        assert response.body == b"none"
        assert response.url == URL

    def test_full_stub_with_headers(self) -> None:
        client = make_client(StubStrictness.FULL)
        (
            client.stub(URL)
            .method("POST")
            .body("1")
            .header("Accept", "text/plain")
            .headers({"X-Token": "t"})
            .response()
            .body("ok")
            .mock()
        )
        response = client.post(URL, body="1", headers={"X-Token": "t", "Accept": "text/plain"})
        assert response.text() == "ok"

    def test_builder_validates(self) -> None:
        client = make_client(StubStrictness.METHOD_URL)
        with pytest.raises(UnexpectedStubFieldError):
            client.stub(URL).method("GET").body("42").response().mock()


class TestTransportSelection:
    """The given transport is used even when it is falsy."""

    def test_empty_stub_transport_kept(self) -> None:
        inner = make_client(StubStrictness.URL)
        client = make_client(StubStrictness.URL, StubDefault.PERFORM_REQUEST, transport=inner)
        assert client.transport is inner

        with pytest.raises(UnmatchedStubError):
            client.get("http://example.com/missing")
