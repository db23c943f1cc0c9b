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
http_types - Immutable HTTP exchange models and a JSON Lines codec.

An exchange is one captured HTTP request paired with its response. Exchanges
are read from and written to the HTTP Types JSON Lines format, one JSON
object per line, and can be converted to and from HAR.

Usage:
    from http_types import HttpExchangeWriter, from_json_lines

    with open("recordings.jsonl", encoding="utf-8") as f:
        for exchange in from_json_lines(f):
            print(exchange.request.method, exchange.request.url.path)

    with HttpExchangeWriter("copy.jsonl") as writer:
        writer.write_all(exchanges)
"""

__version__ = "0.1.0"

from .errors import (
    DecodeError,
    HttpTypesError,
    InvalidArgumentError,
    MalformedInputError,
    UnrecognizedEnumValueError,
)
from .har import (
    exchange_from_har_entry,
    exchange_to_har_entry,
    exchanges_from_har,
    exchanges_to_har,
)
from .models import HttpExchange, HttpHeaders, HttpMethod, HttpRequest, HttpResponse
from .reader import exchange_from_dict, from_json, from_json_lines, open_json_lines
from .url import HttpProtocol, HttpUrl
from .writer import HttpExchangeWriter, exchange_to_dict, to_json, to_json_lines

__all__ = [
    # Models
    "HttpExchange",
    "HttpHeaders",
    "HttpMethod",
    "HttpProtocol",
    "HttpRequest",
    "HttpResponse",
    "HttpUrl",
    # Reader
    "exchange_from_dict",
    "from_json",
    "from_json_lines",
    "open_json_lines",
    # Writer
    "HttpExchangeWriter",
    "exchange_to_dict",
    "to_json",
    "to_json_lines",
    # HAR
    "exchange_from_har_entry",
    "exchange_to_har_entry",
    "exchanges_from_har",
    "exchanges_to_har",
    # Errors
    "DecodeError",
    "HttpTypesError",
    "InvalidArgumentError",
    "MalformedInputError",
    "UnrecognizedEnumValueError",
]
