"""HTTP transport for the Sparklr JSON API.

Requests are authenticated with the session cookie ``D`` that Sparklr's
web client sets after login. The API base URL can be overridden with an
environment variable:
    SPARKLR_BASE_URL

Non-200 responses are returned with their status code and no payload; it
is up to the caller to decide what a failed status means. Network and
JSON decoding errors are raised as-is.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

BASE_URL = os.environ.get("SPARKLR_BASE_URL", "https://sparklr.me/api/")

DEFAULT_TIMEOUT = 30.0


@dataclass
class SparklrResponse:
    """Status code plus the decoded body (only decoded on HTTP 200)."""

    code: int
    payload: Any = None

    @property
    def ok(self) -> bool:
        return self.code == httpx.codes.OK


class WebClient:
    """Async client for Sparklr's JSON API using cookie auth."""

    def __init__(
        self,
        base_url: str | None = None,
        session_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        base_url = base_url or BASE_URL
        if not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url
        cookies = {"D": session_token} if session_token else None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Accept": "application/json",
                "User-Agent": "sparklr-sdk (+https://sparklr.me)",
            },
            cookies=cookies,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def get_json_response(self, path: str) -> SparklrResponse:
        """GET ``path`` and decode the JSON body on success."""
        logger.debug("GET %s%s", self.base_url, path)
        response = await self._client.get(path)
        return self._to_sparklr_response("GET", path, response)

    async def post_json_response(self, path: str, body: dict) -> SparklrResponse:
        """POST ``body`` as JSON to ``path`` and decode the reply on success."""
        logger.debug("POST %s%s", self.base_url, path)
        response = await self._client.post(path, json=body)
        return self._to_sparklr_response("POST", path, response)

    @staticmethod
    def _to_sparklr_response(
        method: str, path: str, response: httpx.Response
    ) -> SparklrResponse:
        if response.status_code != httpx.codes.OK:
            logger.warning(
                "%s %s returned HTTP %d", method, path, response.status_code
            )
            return SparklrResponse(code=response.status_code)

        payload = response.json() if response.content else None
        return SparklrResponse(code=response.status_code, payload=payload)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
