"""Tests for the Retell REST client."""

import json

import httpx
import pytest

from frontdesk.voice_platform import RetellClient, VoicePlatformError


def make_client(handler, api_key="key_test") -> RetellClient:
    return RetellClient(api_key=api_key, transport=httpx.MockTransport(handler))


class TestRetellClient:
    async def test_create_phone_call(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"call_id": "call_1", "call_status": "registered"})

        call = await make_client(handler).create_phone_call(
            from_number="+15550001111", to_number="+15552223333", agent_id="agent_1"
        )

        assert call["call_id"] == "call_1"
        assert seen["path"] == "/v2/create-phone-call"
        assert seen["auth"] == "Bearer key_test"
        assert seen["body"] == {
            "from_number": "+15550001111",
            "to_number": "+15552223333",
            "override_agent_id": "agent_1",
        }

    async def test_get_call(self):
        def handler(request):
            assert request.method == "GET"
            assert request.url.path == "/v2/get-call/call_1"
            return httpx.Response(200, json={"call_id": "call_1"})

        assert (await make_client(handler).get_call("call_1"))["call_id"] == "call_1"

    async def test_create_agent_includes_llm_and_webhook(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"agent_id": "agent_9"})

        agent = await make_client(handler).create_agent(
            agent_name="ABC Plumbing Receptionist",
            voice_id="jennifer",
            language="en-US",
            llm_id="llm_1",
            webhook_url="https://example.com/api/retell/webhook",
        )

        assert agent["agent_id"] == "agent_9"
        assert seen["body"]["response_engine"] == {"type": "retell-llm", "llm_id": "llm_1"}
        assert seen["body"]["webhook_url"] == "https://example.com/api/retell/webhook"

    async def test_error_status(self):
        client = make_client(lambda request: httpx.Response(422, json={"error": "bad"}))
        with pytest.raises(VoicePlatformError):
            await client.create_web_call(agent_id="agent_1")

    async def test_not_configured(self):
        client = make_client(lambda request: httpx.Response(200, json={}), api_key="")
        assert client.is_configured is False
        with pytest.raises(VoicePlatformError):
            await client.get_call("call_1")
