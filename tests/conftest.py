"""
pytest configuration and fixtures.
"""

import json
from datetime import datetime, timezone

import pytest

# Add the repository root to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from http_types import (
    HttpExchange,
    HttpHeaders,
    HttpMethod,
    HttpProtocol,
    HttpRequest,
    HttpResponse,
    HttpUrl,
)


@pytest.fixture
def sample_url() -> HttpUrl:
    """URL with a single-valued and a multi-valued query parameter."""
    return (
        HttpUrl.Builder()
        .protocol(HttpProtocol.HTTPS)
        .host("api.github.com")
        .pathname("/user/repos")
        .add_query_parameter("mykey", "myvalue")
        .add_query_parameter("anotherkey", "value1")
        .add_query_parameter("anotherkey", "value2")
        .build()
    )


@pytest.fixture
def sample_exchange(sample_url: HttpUrl) -> HttpExchange:
    """A complete exchange with multi-valued headers, bodies and timestamps."""
    request = (
        HttpRequest.Builder()
        .url(sample_url)
        .method(HttpMethod.POST)
        .headers(
            HttpHeaders.Builder()
            .add("Accept", "*/*")
            .add("Content-Type", "application/json")
            .add("X-Forwarded-For", "10.0.0.1")
            .add("X-Forwarded-For", "10.0.0.2")
            .build()
        )
        .body('{"name": "my-repo"}')
        .timestamp(datetime(2018, 11, 13, 20, 20, 39, tzinfo=timezone.utc))
        .build()
    )
    response = (
        HttpResponse.Builder()
        .status_code(201)
        .headers(
            HttpHeaders.Builder()
            .add("Content-Type", "application/json; charset=utf-8")
            .add_all("Set-Cookie", ["a=1", "b=2"])
            .build()
        )
        .body('{"id": 1, "name": "my-repo"}')
        .timestamp(datetime(2018, 11, 13, 20, 20, 39, 512000, tzinfo=timezone.utc))
        .build()
    )
    return HttpExchange.Builder().request(request).response(response).build()


@pytest.fixture
def minimal_exchange() -> HttpExchange:
    """An exchange without query, bodies or timestamps."""
    return (
        HttpExchange.Builder()
        .request(
            HttpRequest.Builder()
            .url(HttpUrl.from_url("http://localhost:8080/health"))
            .method(HttpMethod.GET)
            .build()
        )
        .response(HttpResponse.Builder().status_code(204).build())
        .build()
    )


@pytest.fixture
def legacy_path_json() -> str:
    """Exchange encoded with the combined 'path' field and single-string headers."""
    return json.dumps({
        "request": {
            "method": "get",
            "protocol": "https",
            "host": "api.github.com",
            "path": "/user/repos?mykey=myvalue&anotherkey=value1&anotherkey=value2",
            "headers": {"accept": "*/*"},
        },
        "response": {
            "statusCode": 200,
            "headers": {"content-type": "application/json"},
            "body": "[]",
        },
    })


@pytest.fixture
def pathname_query_json() -> str:
    """Exchange encoded with 'pathname' and a 'query' object."""
    return json.dumps({
        "request": {
            "method": "GET",
            "protocol": "HTTPS",
            "host": "api.github.com",
            "pathname": "/user/repos",
            "query": {"mykey": "myvalue", "anotherkey": ["value1", "value2"]},
            "headers": {"accept": ["*/*"]},
        },
        "response": {
            "statusCode": 200,
            "headers": {"content-type": ["application/json"]},
            "body": "[]",
        },
    })
