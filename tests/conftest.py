"""Shared configuration for tvm-client tests."""

import pytest

from src.tvmclient.cache.memory import get_process_cache
from tests.fixtures.tvm import (  # noqa: F401
    aws_s3_response,
    azure_blob_response,
    azure_cosmos_response,
    azure_presign_response,
    tvm_input,
)


@pytest.fixture(autouse=True)
def clean_process_state(monkeypatch):
    """Start every test with an empty process-wide cache and no identity in the env."""
    monkeypatch.delenv("__OW_NAMESPACE", raising=False)
    monkeypatch.delenv("__OW_API_KEY", raising=False)
    get_process_cache().clear()
    yield
    get_process_cache().clear()
