"""Shared fixtures for the commercetools client tests."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator

import httpx
import pytest
import respx

from commercetools_api_client import Client, Configuration
from tests.api_test_utils import API_URL, OAUTH_URL, PROJECT_KEY


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CTP_* variables of the developer machine out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("CTP_"):
            monkeypatch.delenv(name)


@pytest.fixture
def configuration() -> Configuration:
    return Configuration(
        api_url=API_URL,
        oauth_url=OAUTH_URL,
        project_key=PROJECT_KEY,
        client_id="client-id",
        client_secret="client-secret",
    )


@pytest.fixture
def api_mock() -> Iterator[respx.MockRouter]:
    """Route every httpx request through respx; unmatched requests fail."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
async def client(configuration: Configuration) -> AsyncIterator[Client]:
    async with httpx.AsyncClient() as http_client:
        yield Client(configuration, http_client=http_client)
