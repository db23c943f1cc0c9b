# Copyright 2025 Jesse Bate (https://github.com/jbatesy)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Data models for HTTP requests, responses, and exchanges.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import InvalidArgumentError, UnrecognizedEnumValueError
from .url import HttpProtocol, HttpUrl


class HttpMethod(str, Enum):
    """Standard HTTP request methods."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, value: str) -> "HttpMethod":
        """Match a method name case-insensitively."""
        if isinstance(value, str):
            member = cls.__members__.get(value.upper())
            if member is not None:
                return member
        raise UnrecognizedEnumValueError(value, cls.__name__)


class HttpHeaders:
    """
    A set of HTTP request or response headers.

    Names are stored lower-cased and every lookup lower-cases the queried
    name, so access is case-insensitive. Each name maps to one or more
    values kept in insertion order.
    """

    __slots__ = ("_headers",)

    def __init__(self, headers: Optional[Mapping[str, Iterable[str]]] = None):
        self._headers: Dict[str, Tuple[str, ...]] = {}
        for name, values in (headers or {}).items():
            values = tuple(values)
            if values:
                self._headers[name.lower()] = values

    @classmethod
    def empty(cls) -> "HttpHeaders":
        return cls()

    def get_first(self, name: str) -> Optional[str]:
        """Get the first value for a header name, or None if absent."""
        values = self._headers.get(name.lower())
        if not values:
            return None
        return values[0]

    def get_all(self, name: str) -> List[str]:
        """Get all values for a header name, or an empty list if absent."""
        return list(self._headers.get(name.lower(), ()))

    def names(self) -> List[str]:
        """Get the (lower-cased) header names in first-seen order."""
        return list(self._headers)

    def as_dict(self) -> Dict[str, List[str]]:
        """Get a mutable copy of the headers."""
        return {name: list(values) for name, values in self._headers.items()}

    def to_builder(self) -> "HttpHeaders.Builder":
        builder = HttpHeaders.Builder()
        for name, values in self._headers.items():
            builder.add_all(name, values)
        return builder

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._headers

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HttpHeaders):
            return NotImplemented
        return self._headers == other._headers

    def __hash__(self) -> int:
        return hash(frozenset(self._headers.items()))

    def __repr__(self) -> str:
        return f"HttpHeaders({self.as_dict()!r})"

    class Builder:
        """Accumulates header values; names are lower-cased on the way in."""

        def __init__(self):
            self._headers: Dict[str, List[str]] = {}

        def add(self, name: str, value: str) -> "HttpHeaders.Builder":
            """Add a single value under the given name."""
            self._check(name, value)
            self._headers.setdefault(name.lower(), []).append(value)
            return self

        def add_all(self, name: str, values: Iterable[str]) -> "HttpHeaders.Builder":
            """Add several values under the given name."""
            for value in values:
                self.add(name, value)
            return self

        def build(self) -> "HttpHeaders":
            return HttpHeaders(self._headers)

        @staticmethod
        def _check(name: str, value: str) -> None:
            if not isinstance(name, str):
                raise InvalidArgumentError(
                    f"Header name must be a string, got {type(name).__name__}",
                    field="headers",
                )
            if not isinstance(value, str):
                raise InvalidArgumentError(
                    f"Value of header {name!r} must be a string, got {type(value).__name__}",
                    field="headers",
                )


@dataclass(frozen=True)
class HttpRequest:
    """Represents a captured HTTP request."""

    url: HttpUrl
    method: HttpMethod
    headers: HttpHeaders = field(default_factory=HttpHeaders)
    body: Optional[str] = None
    timestamp: Optional[datetime] = None

    @property
    def protocol(self) -> HttpProtocol:
        return self.url.protocol

    def to_builder(self) -> "HttpRequest.Builder":
        return (
            HttpRequest.Builder()
            .url(self.url)
            .method(self.method)
            .headers(self.headers)
            .body(self.body)
            .timestamp(self.timestamp)
        )

    def __repr__(self) -> str:
        return f"HttpRequest({self.method.value} {self.url.to_url()})"

    class Builder:
        def __init__(self):
            self._url: Optional[HttpUrl] = None
            self._method: Optional[HttpMethod] = None
            self._headers: HttpHeaders = HttpHeaders.empty()
            self._body: Optional[str] = None
            self._timestamp: Optional[datetime] = None

        def url(self, url: Union[HttpUrl, str]) -> "HttpRequest.Builder":
            """Set the URL from an HttpUrl or an absolute URL string."""
            if isinstance(url, str):
                url = HttpUrl.from_url(url)
            self._url = url
            return self

        def method(self, method: Union[HttpMethod, str]) -> "HttpRequest.Builder":
            if not isinstance(method, HttpMethod):
                method = HttpMethod.parse(method)
            self._method = method
            return self

        def headers(self, headers: HttpHeaders) -> "HttpRequest.Builder":
            self._headers = headers
            return self

        def body(self, body: Optional[str]) -> "HttpRequest.Builder":
            self._body = body
            return self

        def timestamp(self, timestamp: Optional[datetime]) -> "HttpRequest.Builder":
            self._timestamp = timestamp
            return self

        def build(self) -> "HttpRequest":
            """
            Build the request.

            Raises:
                InvalidArgumentError: if url or method has not been set
            """
            if self._url is None:
                raise InvalidArgumentError("HttpRequest requires a url", field="url")
            if self._method is None:
                raise InvalidArgumentError("HttpRequest requires a method", field="method")
            return HttpRequest(
                url=self._url,
                method=self._method,
                headers=self._headers,
                body=self._body,
                timestamp=self._timestamp,
            )


@dataclass(frozen=True)
class HttpResponse:
    """Represents a captured HTTP response."""

    status_code: int
    headers: HttpHeaders = field(default_factory=HttpHeaders)
    body: Optional[str] = None
    timestamp: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        """Check if status is successful (2xx)."""
        return 200 <= self.status_code < 300

    def to_builder(self) -> "HttpResponse.Builder":
        return (
            HttpResponse.Builder()
            .status_code(self.status_code)
            .headers(self.headers)
            .body(self.body)
            .timestamp(self.timestamp)
        )

    def __repr__(self) -> str:
        return f"HttpResponse({self.status_code})"

    class Builder:
        def __init__(self):
            self._status_code: Optional[int] = None
            self._headers: HttpHeaders = HttpHeaders.empty()
            self._body: Optional[str] = None
            self._timestamp: Optional[datetime] = None

        def status_code(self, status_code: int) -> "HttpResponse.Builder":
            self._status_code = status_code
            return self

        def headers(self, headers: HttpHeaders) -> "HttpResponse.Builder":
            self._headers = headers
            return self

        def body(self, body: Optional[str]) -> "HttpResponse.Builder":
            self._body = body
            return self

        def timestamp(self, timestamp: Optional[datetime]) -> "HttpResponse.Builder":
            self._timestamp = timestamp
            return self

        def build(self) -> "HttpResponse":
            if self._status_code is None:
                raise InvalidArgumentError(
                    "HttpResponse requires a status code", field="status_code"
                )
            if isinstance(self._status_code, bool) or not isinstance(self._status_code, int):
                raise InvalidArgumentError(
                    f"Status code must be an integer, got {self._status_code!r}",
                    field="status_code",
                )
            return HttpResponse(
                status_code=self._status_code,
                headers=self._headers,
                body=self._body,
                timestamp=self._timestamp,
            )


@dataclass(frozen=True)
class HttpExchange:
    """An HTTP request and the response it received."""

    request: HttpRequest
    response: HttpResponse

    def to_builder(self) -> "HttpExchange.Builder":
        return HttpExchange.Builder().request(self.request).response(self.response)

    def __repr__(self) -> str:
        return f"HttpExchange({self.request!r} -> {self.response!r})"

    class Builder:
        def __init__(self):
            self._request: Optional[HttpRequest] = None
            self._response: Optional[HttpResponse] = None

        def request(self, request: HttpRequest) -> "HttpExchange.Builder":
            self._request = request
            return self

        def response(self, response: HttpResponse) -> "HttpExchange.Builder":
            self._response = response
            return self

        def build(self) -> "HttpExchange":
            if self._request is None:
                raise InvalidArgumentError("HttpExchange requires a request", field="request")
            if self._response is None:
                raise InvalidArgumentError("HttpExchange requires a response", field="response")
            return HttpExchange(request=self._request, response=self._response)
