from typing import Any

from fastapi import APIRouter, Body

from app.dependencies import GatewayDep
from app.schemas.elevenlabs import OutboundCallRequest
from app.services.elevenlabs import DEFAULT_VOICES_PAGE_SIZE

router = APIRouter(prefix="/api/elevenlabs", tags=["elevenlabs"])


@router.get("/agents")
async def list_agents(gateway: GatewayDep) -> Any:
    return await gateway.list_agents()


@router.get("/agents/{agent_id}")
async def get_agent(agent_id: str, gateway: GatewayDep) -> Any:
    return await gateway.get_agent(agent_id)


@router.patch("/agents/{agent_id}")
async def update_agent(
    agent_id: str,
    gateway: GatewayDep,
    body: dict[str, Any] = Body(...),
) -> Any:
    return await gateway.update_agent(agent_id, body)


@router.get("/voices")
async def list_voices(
    gateway: GatewayDep,
    page_size: int | None = None,
    next_page_token: str | None = None,
    voice_id: str | None = None,
) -> Any:
    if voice_id:
        return await gateway.get_voice(voice_id)
    return await gateway.list_voices(
        page_size=page_size or DEFAULT_VOICES_PAGE_SIZE,
        next_page_token=next_page_token,
    )


@router.get("/conversations/{conversation_id}")
async def get_conversation(conversation_id: str, gateway: GatewayDep) -> Any:
    return await gateway.get_conversation(conversation_id)


@router.post("/calls")
async def start_call(request: OutboundCallRequest, gateway: GatewayDep) -> Any:
    return await gateway.start_call(request.model_dump(exclude_none=True))
