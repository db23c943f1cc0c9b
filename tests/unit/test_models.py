"""
Unit tests for headers, requests, responses and exchanges.
"""

import copy
import pickle
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from http_types import (
    HttpExchange,
    HttpHeaders,
    HttpMethod,
    HttpProtocol,
    HttpRequest,
    HttpResponse,
    HttpUrl,
    InvalidArgumentError,
    UnrecognizedEnumValueError,
)


class TestHttpHeaders:
    """Tests for the multi-valued header store."""

    @pytest.fixture
    def headers(self) -> HttpHeaders:
        return (
            HttpHeaders.Builder()
            .add("header", "value")
            .add("header1", "value1")
            .add("header1", "value2")
            .add_all("headers", ["v1", "v2"])
            .build()
        )

    def test_get_first(self, headers: HttpHeaders):
        """Test reading the first value of a header."""
        assert headers.get_first("header") == "value"
        assert headers.get_first("header1") == "value1"
        assert headers.get_first("headers") == "v1"

    def test_get_all(self, headers: HttpHeaders):
        """Test reading every value of a header in order."""
        assert headers.get_all("header") == ["value"]
        assert headers.get_all("header1") == ["value1", "value2"]
        assert headers.get_all("headers") == ["v1", "v2"]

    def test_case_insensitive(self):
        """Names are case-insensitive for both adding and lookup."""
        headers = HttpHeaders.Builder().add("X-Foo", "bar").add("x-foo", "baz").build()

        assert headers.get_first("x-foo") == "bar"
        assert headers.get_first("X-FOO") == "bar"
        assert headers.get_all("X-Foo") == ["bar", "baz"]
        assert headers.names() == ["x-foo"]
        assert "X-FOO" in headers

    def test_missing_header(self, headers: HttpHeaders):
        """Absent names give None and an empty list, never an error."""
        assert headers.get_first("non-existing") is None
        assert headers.get_all("non-existing") == []
        assert "non-existing" not in headers

    def test_first_seen_name_order(self, headers: HttpHeaders):
        """Names keep the order in which they were first added."""
        assert list(headers) == ["header", "header1", "headers"]
        assert len(headers) == 3

    def test_add_all_empty(self):
        """Adding no values stores nothing under the name."""
        headers = HttpHeaders.Builder().add_all("empty", []).build()

        assert len(headers) == 0
        assert headers.get_all("empty") == []

    def test_equality_and_hash(self, headers: HttpHeaders):
        """Two header sets built the same way are equal."""
        headers2 = (
            HttpHeaders.Builder()
            .add("header", "value")
            .add("header1", "value1")
            .add("header1", "value2")
            .add_all("headers", ["v1", "v2"])
            .build()
        )

        assert headers == headers2
        assert hash(headers) == hash(headers2)
        assert headers != HttpHeaders.empty()

    def test_as_dict_is_a_copy(self, headers: HttpHeaders):
        """Mutating the returned dict does not change the headers."""
        copy = headers.as_dict()
        copy["header"].append("other")
        headers.get_all("header1").append("other")

        assert headers.get_all("header") == ["value"]
        assert headers.get_all("header1") == ["value1", "value2"]

    def test_rejects_non_string_value(self):
        """Header values must be strings."""
        with pytest.raises(InvalidArgumentError):
            HttpHeaders.Builder().add("content-length", 42)

    def test_to_builder(self, headers: HttpHeaders):
        """A builder from existing headers extends a copy."""
        extended = headers.to_builder().add("Header", "more").build()

        assert extended.get_all("header") == ["value", "more"]
        assert headers.get_all("header") == ["value"]


class TestHttpMethod:
    """Tests for HttpMethod parsing."""

    def test_all_methods(self):
        """Every standard method is available."""
        names = [m.value for m in HttpMethod]
        assert names == [
            "GET", "HEAD", "POST", "PUT", "DELETE",
            "CONNECT", "OPTIONS", "TRACE", "PATCH",
        ]

    def test_parse_case_insensitive(self):
        """Method names match regardless of case."""
        assert HttpMethod.parse("get") is HttpMethod.GET
        assert HttpMethod.parse("Patch") is HttpMethod.PATCH

    def test_parse_unknown(self):
        """Unknown methods are rejected."""
        with pytest.raises(UnrecognizedEnumValueError):
            HttpMethod.parse("FETCH")


class TestHttpRequest:
    """Tests for HttpRequest."""

    def test_build(self):
        """Test building a request from a URL string."""
        request = (
            HttpRequest.Builder()
            .headers(HttpHeaders.Builder().add("header", "value").build())
            .method(HttpMethod.GET)
            .url("http://example.com/path?param=value")
            .body("body")
            .build()
        )

        assert request.method is HttpMethod.GET
        assert request.protocol is HttpProtocol.HTTP
        assert request.body == "body"
        assert request.url.get_first_query_parameter("param") == "value"
        assert request.headers.get_first("Header") == "value"
        assert request.timestamp is None

    def test_defaults(self):
        """Headers default to empty, body and timestamp to None."""
        request = HttpRequest.Builder().url("https://example.com/").method("post").build()

        assert request.method is HttpMethod.POST
        assert request.headers == HttpHeaders.empty()
        assert request.body is None

    def test_requires_url(self):
        """A request without a URL cannot be built."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            HttpRequest.Builder().method(HttpMethod.GET).build()

        assert exc_info.value.field == "url"

    def test_requires_method(self):
        """A request without a method cannot be built."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            HttpRequest.Builder().url("http://example.com/").build()

        assert exc_info.value.field == "method"

    def test_immutable(self):
        """Built requests cannot be modified."""
        request = HttpRequest.Builder().url("http://example.com/").method("GET").build()

        with pytest.raises(FrozenInstanceError):
            request.body = "changed"

    def test_to_builder(self):
        """Updating a request means building a new one."""
        request = HttpRequest.Builder().url("http://example.com/").method("GET").build()
        updated = request.to_builder().body("new body").build()

        assert updated.body == "new body"
        assert request.body is None
        assert updated.url == request.url


class TestHttpResponse:
    """Tests for HttpResponse."""

    def test_equality(self):
        """Responses compare by value."""
        response1 = HttpResponse.Builder().body("body").status_code(200).build()
        response2 = HttpResponse.Builder().body("body").status_code(200).build()
        response3 = HttpResponse.Builder().body("...").status_code(200).build()
        response4 = HttpResponse.Builder().body("body").status_code(201).build()

        assert response1 == response2
        assert hash(response1) == hash(response2)
        assert response1 != response3
        assert response1 != response4
        assert response3 != response4

    def test_requires_status_code(self):
        """A response without a status code cannot be built."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            HttpResponse.Builder().body("body").build()

        assert exc_info.value.field == "status_code"

    def test_rejects_non_integer_status(self):
        """Status codes must be integers."""
        with pytest.raises(InvalidArgumentError):
            HttpResponse.Builder().status_code("200").build()

    def test_ok(self):
        """Test the 2xx check."""
        assert HttpResponse.Builder().status_code(204).build().ok is True
        assert HttpResponse.Builder().status_code(404).build().ok is False


class TestHttpExchange:
    """Tests for HttpExchange."""

    def test_basic_usage(self):
        """Test building an exchange and reading it back."""
        exchange = (
            HttpExchange.Builder()
            .request(
                HttpRequest.Builder()
                .headers(HttpHeaders.Builder().add("RequestHeader", "value").build())
                .method(HttpMethod.GET)
                .url("http://example.com/path?param=value")
                .body("requestBody")
                .build()
            )
            .response(
                HttpResponse.Builder()
                .headers(HttpHeaders.Builder().add("ResponseHeader", "value").build())
                .status_code(200)
                .body("responseBody")
                .build()
            )
            .build()
        )

        assert exchange.request.body == "requestBody"
        assert exchange.request.headers.get_first("RequestHeader") == "value"
        assert exchange.response.body == "responseBody"

    def test_requires_request_and_response(self, sample_exchange: HttpExchange):
        """Both halves are required."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            HttpExchange.Builder().response(sample_exchange.response).build()
        assert exc_info.value.field == "request"

        with pytest.raises(InvalidArgumentError) as exc_info:
            HttpExchange.Builder().request(sample_exchange.request).build()
        assert exc_info.value.field == "response"

    def test_structural_equality(self, sample_exchange: HttpExchange):
        """Exchanges are equal when every nested field is equal."""
        copy = sample_exchange.to_builder().build()
        assert copy == sample_exchange
        assert hash(copy) == hash(sample_exchange)
        assert len({copy, sample_exchange}) == 1

        changed = sample_exchange.to_builder().response(
            sample_exchange.response.to_builder()
            .timestamp(datetime(2020, 1, 1, tzinfo=timezone.utc))
            .build()
        ).build()
        assert changed != sample_exchange

    def test_deep_copy_and_pickle(self, sample_exchange: HttpExchange):
        """Exchanges can be deep-copied and pickled by value."""
        copied = copy.deepcopy(sample_exchange)
        unpickled = pickle.loads(pickle.dumps(sample_exchange))

        assert copied == sample_exchange
        assert unpickled == sample_exchange
        assert unpickled.request.headers.get_all("x-forwarded-for") == ["10.0.0.1", "10.0.0.2"]
        assert unpickled.request.url.get_all_query_parameters("anotherkey") == ["value1", "value2"]

    def test_url_string_and_builder_agree(self):
        """A request URL given as a string equals the built HttpUrl."""
        built = (
            HttpUrl.Builder()
            .protocol(HttpProtocol.HTTPS)
            .host("example.com")
            .pathname("/p")
            .add_query_parameter("a", "1")
            .build()
        )
        request = HttpRequest.Builder().url("https://example.com/p?a=1").method("GET").build()

        assert request.url == built
