"""Voice platform endpoints: lifecycle webhook, call admin, agent info.

  POST /api/retell/webhook          Call lifecycle events (analytics log)
  POST /api/retell/create-call      Outbound phone call
  POST /api/retell/create-web-call  Browser test call
  GET  /api/retell/call/{call_id}   Call details
  GET  /api/retell/agent-config     Agent definition (dashboard)
  GET  /api/retell/company-info     Company profile (dashboard)
  POST /api/retell/register-agent   Register the agent with the platform
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from frontdesk.agent_config import get_agent_prompt, get_company_info
from frontdesk.voice_platform import VoicePlatformError

log = logging.getLogger("frontdesk.routes.retell")

router = APIRouter(prefix="/api/retell", tags=["retell"])


class CreateCallRequest(BaseModel):
    phoneNumber: str = ""
    agentId: str = ""


def call_analytics(event: dict[str, Any]) -> dict[str, Any]:
    """Flatten a call_ended webhook payload into a log record."""
    call = event.get("call") if isinstance(event.get("call"), dict) else event
    return {
        "callId": call.get("call_id"),
        "duration": call.get("duration_seconds"),
        "endedBy": call.get("ended_by"),
        "disconnectionReason": call.get("disconnection_reason"),
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }


@router.post("/webhook")
async def webhook(request: Request):
    """Main webhook endpoint for voice platform call events."""
    try:
        event = await request.json()
    except ValueError:
        return JSONResponse({"error": "Webhook processing failed"}, status_code=400)
    if not isinstance(event, dict):
        return JSONResponse({"error": "Webhook processing failed"}, status_code=400)

    event_type = event.get("event_type") or event.get("event")
    call_id = event.get("call_id") or (event.get("call") or {}).get("call_id")

    if event_type == "call_started":
        log.info("Call started: %s", call_id)
    elif event_type == "call_ended":
        log.info("Call ended: %s", call_id)
        log.info("Call analytics: %s", json.dumps(call_analytics(event)))
    elif event_type == "call_analyzed":
        log.info("Call analyzed: %s", call_id)
    else:
        log.info("Unknown webhook event type: %s", event_type)

    return {"received": True}


@router.post("/create-call")
async def create_call(body: CreateCallRequest, request: Request):
    if not body.phoneNumber:
        return JSONResponse({"error": "Phone number is required"}, status_code=400)

    settings = request.app.state.settings
    try:
        call = await request.app.state.retell.create_phone_call(
            from_number=settings.retell_phone_number,
            to_number=body.phoneNumber,
            agent_id=body.agentId or settings.retell_agent_id,
        )
    except VoicePlatformError as e:
        log.error("Error creating call: %s", e)
        return JSONResponse({"error": "Failed to create call"}, status_code=502)

    return {"success": True, "callId": call.get("call_id"), "status": call.get("call_status")}


@router.post("/create-web-call")
async def create_web_call(request: Request):
    try:
        web_call = await request.app.state.retell.create_web_call(
            agent_id=request.app.state.settings.retell_agent_id,
        )
    except VoicePlatformError as e:
        log.error("Error creating web call: %s", e)
        return JSONResponse({"error": "Failed to create web call"}, status_code=502)

    return {
        "success": True,
        "callId": web_call.get("call_id"),
        "accessToken": web_call.get("access_token"),
    }


@router.get("/call/{call_id}")
async def get_call(call_id: str, request: Request):
    try:
        return await request.app.state.retell.get_call(call_id)
    except VoicePlatformError as e:
        log.error("Error retrieving call %s: %s", call_id, e)
        return JSONResponse({"error": "Failed to retrieve call"}, status_code=502)


@router.get("/agent-config")
async def agent_config(request: Request):
    return get_agent_prompt(request.app.state.settings)


@router.get("/company-info")
async def company_info(request: Request):
    return get_company_info(request.app.state.settings)


@router.post("/register-agent")
async def register_agent(request: Request):
    """Create the agent on the voice platform from the local definition."""
    settings = request.app.state.settings
    config = get_agent_prompt(settings)
    try:
        agent = await request.app.state.retell.create_agent(
            agent_name=config["name"],
            voice_id=config["voice"],
            language=config["language"],
            llm_id=settings.retell_llm_id,
            webhook_url=settings.webhook_url,
        )
    except VoicePlatformError as e:
        log.error("Error registering agent: %s", e)
        return JSONResponse({"error": "Failed to register agent"}, status_code=502)

    return {
        "success": True,
        "agentId": agent.get("agent_id"),
        "message": "Agent registered successfully",
    }
