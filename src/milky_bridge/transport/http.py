"""
HTTP action client — POST /api/<action> with the standard response envelope.
"""

from typing import Any, Optional

import httpx

from milky_bridge.config import BotConfig
from milky_bridge.errors import TransportError
from milky_bridge.transport.envelope import build_body, unwrap_response

USER_AGENT = "milky-bridge/0.1.0"


class HttpClient:
    def __init__(self, config: BotConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_base,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json", **config.request_headers()},
            timeout=config.timeout,
            transport=transport,
        )

    async def call(self, action: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Call one action and return its unwrapped ``data``.

        Raises RemoteActionError when the server reports failure and
        TransportError for anything that prevents reading an envelope.
        Nothing is retried here.
        """
        try:
            resp = await self._client.post(f"/{action}", json=build_body(params))
        except httpx.HTTPError as e:
            raise TransportError(f"{action}: {e.__class__.__name__}: {e}", action) from e
        if resp.status_code >= 400:
            raise TransportError(f"{action}: HTTP {resp.status_code}: {resp.text[:200]}", action)
        try:
            body = resp.json()
        except ValueError as e:
            raise TransportError(f"{action}: response is not JSON: {resp.text[:200]}", action) from e
        return unwrap_response(action, body)

    async def close(self) -> None:
        await self._client.aclose()
