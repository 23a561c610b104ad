"""TVM response fixtures and aiohttp mocking helpers."""

import json
from unittest.mock import AsyncMock, Mock

import pytest

FUTURE = "9999-12-31T23:59:59.000Z"
PAST = "2000-01-01T00:00:00.000Z"


@pytest.fixture
def tvm_input():
    return {"namespace": "fakens", "auth_token": "fakeauth"}


@pytest.fixture
def aws_s3_response():
    return {
        "expiration": FUTURE,
        "accessKeyId": "fake",
        "secretAccessKey": "fake",
        "sessionToken": "fake",
        "params": {"Bucket": "fake"},
    }


@pytest.fixture
def azure_blob_response():
    return {
        "expiration": FUTURE,
        "sasURLPrivate": "https://fake.com",
        "sasURLPublic": "https://fake.com",
    }


@pytest.fixture
def azure_cosmos_response():
    return {
        "expiration": FUTURE,
        "endpoint": "https://fake.com",
        "resourceTokens": "fake",
        "partitionKey": "fake",
        "databaseId": "fakeDB",
        "containerId": "fakeContainer",
    }


@pytest.fixture
def azure_presign_response():
    return {"signature": "fakesign"}


def make_http_response(status=200, body=None):
    """Build a mock aiohttp response usable as the ``session.request(...)`` context."""
    response = Mock()
    response.status = status
    text = body if isinstance(body, str) else json.dumps(body if body is not None else {})
    response.text = AsyncMock(return_value=text)
    return response


def set_http_responses(mock_request, *responses):
    """Make a patched ``aiohttp.ClientSession.request`` yield ``responses`` in order."""
    mock_request.return_value.__aenter__.side_effect = list(responses)
