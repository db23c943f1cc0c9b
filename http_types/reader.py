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
Reader for HTTP exchanges in the HTTP Types JSON and JSON Lines formats.

Example usage:
    from http_types import reader

    exchange = reader.from_json(text)

    with reader.open_json_lines("recordings.jsonl") as exchanges:
        for exchange in exchanges:
            print(exchange.request.method, exchange.request.url.path)

Two encodings of the request URL are accepted: a ``pathname`` string with an
optional ``query`` object, and a legacy combined ``path`` string. Header and
query values may be a single string or an array of strings.
"""

import io
import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, TextIO, Union

from .errors import DecodeError, HttpTypesError, InvalidArgumentError, MalformedInputError
from .models import HttpExchange, HttpHeaders, HttpMethod, HttpRequest, HttpResponse
from .url import HttpProtocol, HttpUrl

logger = logging.getLogger(__name__)

Source = Union[str, bytes, TextIO, io.IOBase]

_MISSING = object()


class JsonObject:
    """A parsed JSON object that knows its own JSON path, for error messages."""

    def __init__(self, data: Any, path: str = "$"):
        if not isinstance(data, dict):
            raise MalformedInputError(
                f"Expected a JSON object at {path}, got {_json_type(data)}",
                path=path,
            )
        self.data = data
        self.path = path

    def has(self, key: str) -> bool:
        return self.data.get(key) is not None

    def child_path(self, key: str) -> str:
        return f"{self.path}.{key}"

    def _get(self, key: str, required: bool) -> Any:
        value = self.data.get(key, _MISSING)
        if value is _MISSING or value is None:
            if required:
                raise MalformedInputError(
                    f"Missing required field '{key}' at {self.child_path(key)}",
                    field=key,
                    path=self.child_path(key),
                )
            return None
        return value

    def _wrong_type(self, key: str, expected: str, value: Any) -> MalformedInputError:
        return MalformedInputError(
            f"Field '{key}' at {self.child_path(key)} must be {expected}, got {_json_type(value)}",
            field=key,
            path=self.child_path(key),
        )

    def get_object(self, key: str, required: bool = True) -> Optional["JsonObject"]:
        value = self._get(key, required)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise self._wrong_type(key, "an object", value)
        return JsonObject(value, self.child_path(key))

    def get_string(self, key: str, required: bool = True) -> Optional[str]:
        value = self._get(key, required)
        if value is not None and not isinstance(value, str):
            raise self._wrong_type(key, "a string", value)
        return value

    def get_int(self, key: str, required: bool = True) -> Optional[int]:
        value = self._get(key, required)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise self._wrong_type(key, "an integer", value)
        return value


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _read_multi_valued(obj: JsonObject, allow_null: bool) -> Iterator[tuple]:
    """Yield (name, value) for every value of a string-or-array-of-strings map."""
    for name, raw in obj.data.items():
        values = raw if isinstance(raw, list) else [raw]
        for value in values:
            if isinstance(value, str) or (allow_null and value is None):
                yield name, value
            else:
                raise MalformedInputError(
                    f"Field '{name}' at {obj.child_path(name)} must be a string "
                    f"or an array of strings, got {_json_type(raw)}",
                    field=name,
                    path=obj.child_path(name),
                )


def _read_headers(parent: JsonObject) -> HttpHeaders:
    headers = parent.get_object("headers")
    builder = HttpHeaders.Builder()
    for name, value in _read_multi_valued(headers, allow_null=False):
        builder.add(name, value)
    return builder.build()


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z' for UTC."""
    # fromisoformat() only learned the 'Z' suffix in Python 3.11
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _read_timestamp(obj: JsonObject) -> Optional[datetime]:
    text = obj.get_string("timestamp", required=False)
    if text is None:
        return None
    try:
        return parse_timestamp(text)
    except ValueError as e:
        raise MalformedInputError(
            f"Field 'timestamp' at {obj.child_path('timestamp')} is not an ISO-8601 timestamp: {text!r}",
            field="timestamp",
            path=obj.child_path("timestamp"),
        ) from e


def _read_url(request: JsonObject) -> HttpUrl:
    builder = HttpUrl.Builder()
    builder.protocol(HttpProtocol.parse(request.get_string("protocol")))
    builder.host(request.get_string("host", required=False))

    if request.has("pathname"):
        pathname = request.get_string("pathname")
        try:
            builder.pathname(pathname)
        except InvalidArgumentError as e:
            raise MalformedInputError(
                f"Field 'pathname' at {request.child_path('pathname')} must not contain '?' or '#': {pathname!r}",
                field="pathname",
                path=request.child_path("pathname"),
            ) from e
        query = request.get_object("query", required=False)
        if query is not None:
            for name, value in _read_multi_valued(query, allow_null=True):
                builder.add_query_parameter(name, value)
    else:
        # Legacy encoding: pathname and query combined into one string.
        builder.path(request.get_string("path"))

    return builder.build()


def _read_request(request: JsonObject) -> HttpRequest:
    return (
        HttpRequest.Builder()
        .method(HttpMethod.parse(request.get_string("method")))
        .url(_read_url(request))
        .headers(_read_headers(request))
        .body(request.get_string("body", required=False))
        .timestamp(_read_timestamp(request))
        .build()
    )


def _read_response(response: JsonObject) -> HttpResponse:
    return (
        HttpResponse.Builder()
        .status_code(response.get_int("statusCode"))
        .headers(_read_headers(response))
        .body(response.get_string("body", required=False))
        .timestamp(_read_timestamp(response))
        .build()
    )


def exchange_from_dict(data: Dict[str, Any]) -> HttpExchange:
    """
    Convert a parsed JSON object into an HttpExchange.

    Raises:
        MalformedInputError: if a required field is missing or has the wrong type
        UnrecognizedEnumValueError: for an unknown method or protocol
        DecodeError: if a legacy ``path`` has an undecodable query
    """
    root = JsonObject(data)
    return (
        HttpExchange.Builder()
        .request(_read_request(root.get_object("request")))
        .response(_read_response(root.get_object("response")))
        .build()
    )


def _parse_json(text: str, line: Optional[int] = None) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        where = f" on line {line}" if line is not None else ""
        raise MalformedInputError(f"Invalid JSON{where}: {e}", line=line) from e


def _decode(data: Union[str, bytes], encoding: str) -> str:
    if isinstance(data, str):
        return data
    try:
        return bytes(data).decode(encoding)
    except UnicodeDecodeError as e:
        raise DecodeError(f"Input is not valid {encoding}: {e}") from e


def _is_binary(source: Any) -> bool:
    if isinstance(source, (bytes, bytearray, io.RawIOBase, io.BufferedIOBase)):
        return True
    return not isinstance(source, (str, io.TextIOBase)) and "b" in getattr(source, "mode", "")


def _lines(source: Source) -> Iterator[Union[str, bytes]]:
    """Iterate over the raw lines of the input, split on '\\n' only."""
    if isinstance(source, str):
        lines = io.StringIO(source, newline="\n")
    elif isinstance(source, (bytes, bytearray)):
        lines = io.BytesIO(source)
    else:
        lines = source
    return iter(lines)


def from_json(source: Source, encoding: str = "utf-8") -> HttpExchange:
    """
    Read a single HTTP exchange from JSON.

    Args:
        source: JSON text, bytes, a text stream or a binary stream
        encoding: Encoding used for bytes and binary streams

    Returns:
        The parsed HttpExchange
    """
    if isinstance(source, (str, bytes, bytearray)):
        text = _decode(source, encoding)
    else:
        text = _decode(source.read(), encoding)
    return exchange_from_dict(_parse_json(text))


def from_json_lines(source: Source, encoding: str = "utf-8") -> Iterator[HttpExchange]:
    """
    Lazily read HTTP exchanges from JSON Lines input.

    Each line is parsed only when the iterator reaches it. Blank lines are
    skipped. The first bad line raises and ends the iteration; the iterator
    is single pass.

    Args:
        source: JSON Lines text, bytes, a text stream or a binary stream
        encoding: Encoding used for bytes and binary streams

    Yields:
        One HttpExchange per non-blank line
    """
    count = 0
    binary = _is_binary(source)
    for number, raw in enumerate(_lines(source), start=1):
        try:
            line = _decode(raw, encoding) if binary else raw
            if not line.strip():
                continue
            exchange = exchange_from_dict(_parse_json(line, line=number))
        except HttpTypesError as e:
            e.line = number
            raise
        count += 1
        logger.debug("Read exchange %d from line %d", count, number)
        yield exchange
    logger.debug("Finished reading %d exchanges", count)


@contextmanager
def open_json_lines(path: str, encoding: str = "utf-8") -> Iterator[Iterator[HttpExchange]]:
    """
    Open a JSON Lines file and yield a lazy iterator over its exchanges.

    The file is closed when the ``with`` block exits, including on errors.
    """
    with open(path, "r", encoding=encoding, newline="\n") as f:
        logger.debug("Opened %s", path)
        yield from_json_lines(f)
