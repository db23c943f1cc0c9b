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
HTTP URL model.

An HttpUrl keeps the path and query of a URL in two interchangeable views:

    pathname + query_parameters     "/user/repos", {"n": ("v1", "v2")}
    path                            "/user/repos?n=v1&n=v2"

The structured view is what gets stored; ``path`` is derived from it and
``HttpUrl.Builder.path()`` decomposes a combined string back into it.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote_plus, unquote_plus, urlsplit

from .errors import DecodeError, InvalidArgumentError, UnrecognizedEnumValueError

QueryValues = Tuple[Optional[str], ...]

# A '%' not followed by two hex digits.
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class HttpProtocol(str, Enum):
    """The protocol of an HTTP URL."""

    HTTP = "http"
    HTTPS = "https"

    @classmethod
    def parse(cls, value: str) -> "HttpProtocol":
        """Match a protocol name case-insensitively."""
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        raise UnrecognizedEnumValueError(value, cls.__name__)


def decode_component(text: str) -> str:
    """
    Percent-decode a query string component as UTF-8.

    '+' decodes to a space, as in form encoding.

    Raises:
        DecodeError: on a malformed escape or invalid UTF-8
    """
    match = _BAD_ESCAPE.search(text)
    if match:
        raise DecodeError(
            f"Malformed percent escape at position {match.start()} in {text!r}"
        )
    try:
        return unquote_plus(text, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid UTF-8 in percent-encoded {text!r}: {e}") from e


def encode_component(text: str) -> str:
    """Percent-encode a query string component as UTF-8."""
    return quote_plus(text, safe="", encoding="utf-8")


def parse_query(query: str) -> List[Tuple[str, Optional[str]]]:
    """
    Split a raw query string into decoded (key, value) pairs.

    A pair without '=' has a None value. Empty segments are skipped.
    """
    pairs = []
    for segment in query.split("&"):
        if not segment:
            continue
        if "=" in segment:
            key, value = segment.split("=", 1)
            pairs.append((decode_component(key), decode_component(value)))
        else:
            pairs.append((decode_component(segment), None))
    return pairs


def format_query(query_parameters: Mapping[str, Iterable[Optional[str]]]) -> str:
    """Encode query parameters as 'k=v&k=v2&flag', keys in mapping order."""
    parts = []
    for name, values in query_parameters.items():
        encoded_name = encode_component(name)
        for value in values:
            if value is None:
                parts.append(encoded_name)
            else:
                parts.append(f"{encoded_name}={encode_component(value)}")
    return "&".join(parts)


@dataclass(frozen=True)
class HttpUrl:
    """
    An http or https URL split into protocol, host, pathname and query.

    Instances are immutable; create them with ``HttpUrl.Builder`` or
    ``HttpUrl.from_url``.
    """

    protocol: HttpProtocol
    host: Optional[str]
    pathname: str
    query_parameters: Mapping[str, QueryValues] = field(default_factory=dict)

    def __post_init__(self):
        frozen = {}
        for name, values in self.query_parameters.items():
            values = tuple(values)
            if values:
                frozen[name] = values
        object.__setattr__(self, "query_parameters", MappingProxyType(frozen))

    def __reduce__(self):
        # MappingProxyType cannot be pickled; rebuild from plain tuples.
        return (
            HttpUrl,
            (self.protocol, self.host, self.pathname, dict(self.query_parameters)),
        )

    def __hash__(self) -> int:
        return hash((
            self.protocol,
            self.host,
            self.pathname,
            frozenset(self.query_parameters.items()),
        ))

    @property
    def path(self) -> str:
        """The pathname followed by '?' and the encoded query, if any."""
        if not self.query_parameters:
            return self.pathname
        return f"{self.pathname}?{format_query(self.query_parameters)}"

    def get_first_query_parameter(self, name: str) -> Optional[str]:
        """Get the first value of a query parameter, or None if absent."""
        values = self.query_parameters.get(name)
        if not values:
            return None
        return values[0]

    def get_all_query_parameters(self, name: str) -> List[Optional[str]]:
        """Get all values of a query parameter, or an empty list if absent."""
        return list(self.query_parameters.get(name, ()))

    def query_dict(self) -> Dict[str, List[Optional[str]]]:
        """Get a mutable copy of the query parameters."""
        return {name: list(values) for name, values in self.query_parameters.items()}

    def to_url(self) -> str:
        """Render as an absolute URL string."""
        return f"{self.protocol.value}://{self.host or ''}{self.path}"

    def to_builder(self) -> "HttpUrl.Builder":
        """Get a builder pre-filled with this URL's fields."""
        return (
            HttpUrl.Builder()
            .protocol(self.protocol)
            .host(self.host)
            .pathname(self.pathname)
            .query_parameters_multivalued(self.query_parameters)
        )

    @classmethod
    def from_url(cls, url: str) -> "HttpUrl":
        """Parse an absolute http or https URL."""
        return cls.Builder().url(url).build()

    def __repr__(self) -> str:
        return f"HttpUrl({self.to_url()})"

    class Builder:
        """Accumulates URL fields and validates them in ``build()``."""

        def __init__(self):
            self._protocol: Optional[HttpProtocol] = None
            self._host: Optional[str] = None
            self._pathname: Optional[str] = None
            self._query: Dict[str, List[Optional[str]]] = {}

        def protocol(self, protocol: Union[HttpProtocol, str]) -> "HttpUrl.Builder":
            if not isinstance(protocol, HttpProtocol):
                protocol = HttpProtocol.parse(protocol)
            self._protocol = protocol
            return self

        def host(self, host: Optional[str]) -> "HttpUrl.Builder":
            self._host = host
            return self

        def pathname(self, pathname: str) -> "HttpUrl.Builder":
            """
            Set the pathname.

            Raises:
                InvalidArgumentError: if the pathname contains '?' or '#'; use
                    ``path()`` for a combined pathname and query
            """
            if not isinstance(pathname, str):
                raise InvalidArgumentError(
                    f"pathname must be a string, got {type(pathname).__name__}",
                    field="pathname",
                )
            if "?" in pathname or "#" in pathname:
                raise InvalidArgumentError(
                    f"pathname must not contain '?' or '#', use path() instead: {pathname!r}",
                    field="pathname",
                )
            self._pathname = pathname
            return self

        def path(self, path: str) -> "HttpUrl.Builder":
            """
            Set pathname and query parameters from a combined path string.

            Any fragment is dropped. Existing query parameters are replaced.

            Raises:
                DecodeError: if the query is not valid percent-encoded UTF-8
            """
            path = path.split("#", 1)[0]
            pathname, _, query = path.partition("?")
            self._pathname = pathname
            self._query = {}
            for key, value in parse_query(query):
                self.add_query_parameter(key, value)
            return self

        def query_parameters(self, query: Mapping[str, Optional[str]]) -> "HttpUrl.Builder":
            """Replace the query with single-valued parameters."""
            self._query = {name: [value] for name, value in query.items()}
            return self

        def query_parameters_multivalued(
            self, query: Mapping[str, Iterable[Optional[str]]]
        ) -> "HttpUrl.Builder":
            """Replace the query with multi-valued parameters."""
            self._query = {name: list(values) for name, values in query.items()}
            return self

        def add_query_parameter(self, key: str, value: Optional[str]) -> "HttpUrl.Builder":
            self._query.setdefault(key, []).append(value)
            return self

        def url(self, url: str) -> "HttpUrl.Builder":
            """
            Set every field from an absolute URL string.

            Raises:
                InvalidArgumentError: if the scheme is not http or https
            """
            parts = urlsplit(url)
            scheme = parts.scheme.lower()
            if scheme not in ("http", "https"):
                raise InvalidArgumentError(
                    f"Invalid protocol (only 'http' and 'https' supported): {parts.scheme!r}",
                    field="protocol",
                )
            path = parts.path
            if parts.query:
                path += "?" + parts.query
            # Drop any userinfo, keep the port.
            host = parts.netloc.rpartition("@")[2]
            return self.protocol(HttpProtocol(scheme)).host(host).path(path)

        def build(self) -> "HttpUrl":
            if self._protocol is None:
                raise InvalidArgumentError("HttpUrl requires a protocol", field="protocol")
            if self._pathname is None:
                raise InvalidArgumentError("HttpUrl requires a pathname", field="pathname")
            return HttpUrl(
                protocol=self._protocol,
                host=self._host,
                pathname=self._pathname,
                query_parameters=self._query,
            )
