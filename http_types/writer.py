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
Writer for HTTP exchanges in the HTTP Types JSON Lines format.

Output written here can be read back with ``http_types.reader``. The URL is
always written as ``pathname`` plus ``query``, and header and query values
are always written as arrays.
"""

import io
import json
import logging
import os
from typing import Any, Dict, Iterable, Optional, TextIO, Union

from .errors import InvalidArgumentError
from .models import HttpExchange, HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

Target = Union[str, "os.PathLike[str]", TextIO, io.IOBase]


def request_to_dict(request: HttpRequest) -> Dict[str, Any]:
    """Convert a request to its JSON object form."""
    url = request.url
    result: Dict[str, Any] = {
        "protocol": url.protocol.value,
        "method": request.method.value.lower(),
        "headers": request.headers.as_dict(),
        "pathname": url.pathname,
    }
    if url.host is not None:
        result["host"] = url.host
    if url.query_parameters:
        result["query"] = url.query_dict()
    if request.body is not None:
        result["body"] = request.body
    if request.timestamp is not None:
        result["timestamp"] = request.timestamp.isoformat()
    return result


def response_to_dict(response: HttpResponse) -> Dict[str, Any]:
    """Convert a response to its JSON object form."""
    result: Dict[str, Any] = {
        "statusCode": response.status_code,
        "headers": response.headers.as_dict(),
    }
    if response.body is not None:
        result["body"] = response.body
    if response.timestamp is not None:
        result["timestamp"] = response.timestamp.isoformat()
    return result


def exchange_to_dict(exchange: HttpExchange) -> Dict[str, Any]:
    """Convert an exchange to its JSON object form."""
    return {
        "request": request_to_dict(exchange.request),
        "response": response_to_dict(exchange.response),
    }


def to_json(exchange: HttpExchange, ensure_ascii: bool = False) -> str:
    """Serialize an exchange as a single line of JSON."""
    return json.dumps(
        exchange_to_dict(exchange),
        ensure_ascii=ensure_ascii,
        separators=(",", ":"),
    )


def to_json_lines(exchanges: Iterable[HttpExchange], ensure_ascii: bool = False) -> str:
    """Serialize exchanges as JSON Lines, without a trailing newline."""
    return "\n".join(to_json(e, ensure_ascii=ensure_ascii) for e in exchanges)


class HttpExchangeWriter:
    """
    Writes HTTP exchanges as JSON Lines to a file or stream.

    A path is opened (and closed again) by the writer. Streams passed in are
    flushed on close but left open; binary streams are written as UTF-8.

    Usage:
        with HttpExchangeWriter("recordings.jsonl") as writer:
            writer.write_all(exchanges)
    """

    def __init__(self, target: Target, encoding: str = "utf-8", ensure_ascii: bool = False):
        """
        Initialize the writer.

        Args:
            target: Output path, text stream or binary stream
            encoding: Encoding for paths and binary streams
            ensure_ascii: Escape non-ASCII characters in the JSON output
        """
        self.encoding = encoding
        self.ensure_ascii = ensure_ascii
        self._owns_stream = False
        self._binary = False
        self._first = True
        self._closed = False
        self.count = 0

        if isinstance(target, (str, os.PathLike)):
            self._stream = open(target, "w", encoding=encoding, newline="\n")
            self._owns_stream = True
            logger.debug("Opened %s for writing", target)
        else:
            self._stream = target
            self._binary = isinstance(target, (io.RawIOBase, io.BufferedIOBase)) or (
                not isinstance(target, io.TextIOBase) and "b" in getattr(target, "mode", "")
            )

    @property
    def closed(self) -> bool:
        return self._closed

    def _emit(self, text: str) -> None:
        if self._binary:
            self._stream.write(text.encode(self.encoding))
        else:
            self._stream.write(text)

    def write(self, exchange: HttpExchange) -> None:
        """Write one exchange as a single JSON line."""
        if self._closed:
            raise InvalidArgumentError("Cannot write to a closed HttpExchangeWriter")
        line = to_json(exchange, ensure_ascii=self.ensure_ascii)
        if self._first:
            self._first = False
        else:
            self._emit("\n")
        self._emit(line)
        self.count += 1

    def write_all(self, exchanges: Iterable[HttpExchange]) -> None:
        """Write several exchanges, one per line, in iteration order."""
        for exchange in exchanges:
            self.write(exchange)

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        """Flush buffered output and release the stream if the writer opened it."""
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.flush()
        finally:
            if self._owns_stream:
                self._stream.close()
        logger.debug("Closed writer after %d exchanges", self.count)

    def __enter__(self) -> "HttpExchangeWriter":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Any) -> None:
        self.close()
