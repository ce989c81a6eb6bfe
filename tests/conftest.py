"""Pytest configuration and fixtures for b2client tests.

HTTP traffic goes to an in-memory FakeB2 through httpx.MockTransport.
"""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from b2client.client import B2Client
from b2client.config import B2Config
from tests.fixtures.fake_b2 import API_BASE_URL, APPLICATION_KEY, BUCKET_ID, KEY_ID, FakeB2

B2_ENV_VARS = (
    "B2_KEY_ID",
    "B2_APPLICATION_KEY",
    "B2_BUCKET_ID",
    "B2_API_BASE_URL",
    "B2_TIMEOUT_SECONDS",
    "B2_ACTIVITY_LOG_LEVEL",
    "B2_ACTIVITY_LOG_PATH",
    "B2_OTEL_ENABLED",
)


@pytest.fixture(autouse=True)
def clean_b2_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without B2_* variables from the developer's shell."""
    for name in B2_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def b2_config() -> B2Config:
    """Configuration matching the FakeB2 credentials."""
    return B2Config(
        key_id=KEY_ID,
        application_key=APPLICATION_KEY,
        api_base_url=API_BASE_URL,
        bucket_id=BUCKET_ID,
        timeout_seconds=5.0,
    )


@pytest.fixture
def fake_b2() -> FakeB2:
    return FakeB2()


@pytest.fixture
def http_client(fake_b2: FakeB2) -> Iterator[httpx.Client]:
    with httpx.Client(transport=fake_b2.transport()) as client:
        yield client


@pytest.fixture
def client(b2_config: B2Config, http_client: httpx.Client) -> B2Client:
    return B2Client(b2_config, http_client=http_client)


@pytest.fixture
def authorized_client(client: B2Client) -> B2Client:
    client.authorize()
    return client
