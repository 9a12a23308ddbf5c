"""Shared test fixtures."""

import pytest
import pytest_asyncio
from helpers import BASE_URL

from sparklr.client import WebClient
from sparklr.connection import Connection


@pytest.fixture
def web_client() -> WebClient:
    return WebClient(base_url=BASE_URL, session_token="1,secret")


@pytest_asyncio.fixture
async def connection(web_client):
    """A fresh connection, so every test starts with empty caches."""
    conn = Connection(web_client)
    yield conn
    await conn.close()
