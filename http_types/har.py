"""
HAR (HTTP Archive) import and export for HTTP exchanges.

Implements the subset of HAR 1.2 that maps onto HttpExchange: method, URL,
headers, bodies and start/end times. Cookies, cache and detailed timings are
written with neutral defaults and ignored on import.
"""

import base64
import gzip
import json
import logging
import zlib
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO, Union

import brotli

from . import __version__
from .errors import DecodeError, MalformedInputError
from .models import HttpExchange, HttpHeaders, HttpMethod, HttpRequest, HttpResponse
from .reader import JsonObject, parse_timestamp
from .url import HttpUrl

logger = logging.getLogger(__name__)

HAR_VERSION = "1.2"


def decode_content(body: bytes, content_encoding: str) -> bytes:
    """
    Decompress a body according to its Content-Encoding.

    Supports gzip, deflate (zlib-wrapped or raw) and br. Unknown encodings
    and gzip bodies without the gzip magic bytes are returned unchanged,
    since capture tools often store the body already decompressed.

    Raises:
        DecodeError: if the body is corrupt for its declared encoding
    """
    encoding = (content_encoding or "").strip().lower()
    if not body or encoding in ("", "identity"):
        return body

    try:
        if encoding == "gzip":
            # Check if actually gzip (magic bytes 1f 8b)
            if body[:2] == b"\x1f\x8b":
                return gzip.decompress(body)
            return body
        if encoding == "br":
            return brotli.decompress(body)
        if encoding == "deflate":
            try:
                return zlib.decompress(body)
            except zlib.error:
                return zlib.decompress(body, -zlib.MAX_WBITS)
    except (OSError, EOFError, zlib.error, brotli.error) as e:
        raise DecodeError(f"Could not decode {encoding} content: {e}") from e

    return body


def _parse_datetime(obj: JsonObject, key: str) -> Optional[datetime]:
    text = obj.get_string(key, required=False)
    if not text:
        return None
    try:
        return parse_timestamp(text)
    except ValueError as e:
        raise MalformedInputError(
            f"Field '{key}' at {obj.child_path(key)} is not an ISO-8601 timestamp",
            field=key,
            path=obj.child_path(key),
        ) from e


def _read_har_headers(parent: JsonObject) -> HttpHeaders:
    builder = HttpHeaders.Builder()
    raw = parent.data.get("headers") or []
    if not isinstance(raw, list):
        raise MalformedInputError(
            f"Field 'headers' at {parent.child_path('headers')} must be an array",
            field="headers",
            path=parent.child_path("headers"),
        )
    for index, item in enumerate(raw):
        header = JsonObject(item, f"{parent.child_path('headers')}[{index}]")
        builder.add(header.get_string("name"), header.get_string("value"))
    return builder.build()


def _read_har_content(response: JsonObject, headers: HttpHeaders) -> Optional[str]:
    content = response.get_object("content", required=False)
    if content is None:
        return None
    text = content.get_string("text", required=False)
    if text is None:
        return None
    if content.get_string("encoding", required=False) != "base64":
        return text

    try:
        raw = base64.b64decode(text, validate=True)
    except ValueError as e:
        raise DecodeError(f"Invalid base64 content at {content.child_path('text')}") from e
    raw = decode_content(raw, headers.get_first("content-encoding") or "")
    return raw.decode("utf-8", errors="replace")


def exchange_from_har_entry(entry: Dict[str, Any], path: str = "$") -> HttpExchange:
    """
    Convert a HAR entry into an HttpExchange.

    Args:
        entry: A parsed HAR ``entries[]`` object
        path: JSON path of the entry, used in error messages

    Returns:
        The converted HttpExchange
    """
    root = JsonObject(entry, path)
    har_request = root.get_object("request")
    har_response = root.get_object("response")

    started = _parse_datetime(root, "startedDateTime")
    finished = None
    elapsed = root.data.get("time")
    if started is not None and isinstance(elapsed, (int, float)) and elapsed >= 0:
        finished = started + timedelta(milliseconds=elapsed)

    post_data = har_request.get_object("postData", required=False)
    request = (
        HttpRequest.Builder()
        .method(HttpMethod.parse(har_request.get_string("method")))
        .url(HttpUrl.from_url(har_request.get_string("url")))
        .headers(_read_har_headers(har_request))
        .body(post_data.get_string("text", required=False) if post_data else None)
        .timestamp(started)
        .build()
    )

    response_headers = _read_har_headers(har_response)
    response = (
        HttpResponse.Builder()
        .status_code(har_response.get_int("status"))
        .headers(response_headers)
        .body(_read_har_content(har_response, response_headers))
        .timestamp(finished)
        .build()
    )

    return HttpExchange.Builder().request(request).response(response).build()


def exchanges_from_har(source: Union[Dict[str, Any], str, TextIO]) -> Iterator[HttpExchange]:
    """
    Read the entries of a HAR document as HTTP exchanges, in entry order.

    Args:
        source: A parsed HAR dict, HAR JSON text, or a text stream
    """
    if not isinstance(source, dict):
        text = source if isinstance(source, str) else source.read()
        try:
            source = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"Invalid HAR JSON: {e}") from e

    log = JsonObject(source).get_object("log")
    entries = log.data.get("entries") or []
    if not isinstance(entries, list):
        raise MalformedInputError(
            "Field 'entries' at $.log.entries must be an array",
            field="entries",
            path="$.log.entries",
        )

    for index, entry in enumerate(entries):
        yield exchange_from_har_entry(entry, path=f"$.log.entries[{index}]")
    logger.debug("Read %d exchanges from HAR", len(entries))


def _har_headers(headers: HttpHeaders) -> List[Dict[str, str]]:
    return [
        {"name": name, "value": value}
        for name, values in headers.as_dict().items()
        for value in values
    ]


def _status_text(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def _body_size(body: Optional[str]) -> int:
    return len(body.encode("utf-8")) if body is not None else 0


def exchange_to_har_entry(exchange: HttpExchange) -> Dict[str, Any]:
    """Convert an HttpExchange into a HAR entry dict."""
    request = exchange.request
    response = exchange.response

    started = request.timestamp or datetime.now(timezone.utc)
    if request.timestamp and response.timestamp:
        total_time = (response.timestamp - request.timestamp).total_seconds() * 1000
    else:
        total_time = 0

    har_request: Dict[str, Any] = {
        "method": request.method.value,
        "url": request.url.to_url(),
        "httpVersion": "",
        "cookies": [],
        "headers": _har_headers(request.headers),
        "queryString": [
            {"name": name, "value": value if value is not None else ""}
            for name, values in request.url.query_parameters.items()
            for value in values
        ],
        "headersSize": -1,
        "bodySize": _body_size(request.body),
    }
    if request.body is not None:
        har_request["postData"] = {
            "mimeType": request.headers.get_first("content-type") or "application/octet-stream",
            "text": request.body,
        }

    content: Dict[str, Any] = {
        "size": _body_size(response.body),
        "mimeType": response.headers.get_first("content-type") or "",
    }
    if response.body is not None:
        content["text"] = response.body

    har_response = {
        "status": response.status_code,
        "statusText": _status_text(response.status_code),
        "httpVersion": "",
        "cookies": [],
        "headers": _har_headers(response.headers),
        "content": content,
        "redirectURL": response.headers.get_first("location") or "",
        "headersSize": -1,
        "bodySize": _body_size(response.body),
    }

    return {
        "startedDateTime": started.isoformat(),
        "time": total_time,
        "request": har_request,
        "response": har_response,
        "cache": {},
        "timings": {
            "blocked": -1,
            "dns": -1,
            "connect": -1,
            "send": 0,
            "wait": total_time,
            "receive": 0,
            "ssl": -1,
        },
    }


def exchanges_to_har(
    exchanges: Iterable[HttpExchange],
    creator_name: str = "http-types",
    creator_version: str = __version__,
) -> Dict[str, Any]:
    """
    Build a HAR document from HTTP exchanges.

    Args:
        exchanges: The exchanges to include, in order
        creator_name: Name recorded in ``log.creator``
        creator_version: Version recorded in ``log.creator``

    Returns:
        The HAR document as a dict, ready for ``json.dumps``
    """
    entries = [exchange_to_har_entry(exchange) for exchange in exchanges]
    logger.debug("Wrote %d exchanges to HAR", len(entries))
    return {
        "log": {
            "version": HAR_VERSION,
            "creator": {"name": creator_name, "version": creator_version},
            # pages must always be present (even if empty) for Firefox DevTools compatibility
            "pages": [],
            "entries": entries,
        }
    }
