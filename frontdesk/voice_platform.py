"""Thin async client for the Retell voice platform REST API.

Only the administrative calls the dashboard needs: originating phone and
web calls, fetching a call, and registering the agent. Real-time call
events arrive separately over the WebSocket handled by the router.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

log = logging.getLogger("frontdesk.voice_platform")


class VoicePlatformError(Exception):
    """The voice platform API was unreachable or rejected the request."""


class RetellClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.retellai.com",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _request(self, method: str, path: str, json: dict | None = None) -> dict[str, Any]:
        if not self.is_configured:
            raise VoicePlatformError("RETELL_API_KEY is not configured")
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Authorization": f"Bearer {self._api_key}"},
                transport=self._transport,
            ) as client:
                resp = await client.request(method, path, json=json)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            log.error("Retell %s %s returned %s", method, path, exc.response.status_code)
            raise VoicePlatformError(
                f"Voice platform returned status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            log.error("Retell %s %s failed: %s", method, path, exc)
            raise VoicePlatformError(f"Voice platform unreachable: {exc}") from exc

    async def create_phone_call(self, from_number: str, to_number: str, agent_id: str = "") -> dict[str, Any]:
        body: dict[str, Any] = {"from_number": from_number, "to_number": to_number}
        if agent_id:
            body["override_agent_id"] = agent_id
        return await self._request("POST", "/v2/create-phone-call", json=body)

    async def create_web_call(self, agent_id: str) -> dict[str, Any]:
        return await self._request("POST", "/v2/create-web-call", json={"agent_id": agent_id})

    async def get_call(self, call_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v2/get-call/{call_id}")

    async def create_agent(
        self,
        agent_name: str,
        voice_id: str,
        language: str,
        llm_id: str,
        webhook_url: str = "",
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "agent_name": agent_name,
            "voice_id": voice_id,
            "language": language,
            "response_engine": {"type": "retell-llm", "llm_id": llm_id},
        }
        if webhook_url:
            body["webhook_url"] = webhook_url
        return await self._request("POST", "/create-agent", json=body)
