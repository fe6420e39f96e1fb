import logging

import httpx

from app.exceptions.custom import ConsoleRequestError
from app.schemas.elevenlabs import (
    AgentDetails,
    AgentList,
    AgentSummary,
    CallStarted,
    ConversationStatus,
    VoiceList,
    VoiceSummary,
)
from app.services.elevenlabs import DEFAULT_VOICES_PAGE_SIZE

logger = logging.getLogger(__name__)

API_PREFIX = "/api/elevenlabs"


class ConsoleClient:
    """Talks to the console's own proxy surface, the way a browser view would."""

    def __init__(self, client: httpx.AsyncClient, prefix: str = API_PREFIX):
        self._client = client
        self._prefix = prefix

    async def _call(
        self,
        method: str,
        path: str,
        fallback: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> dict:
        resp = await self._client.request(
            method, f"{self._prefix}{path}", params=params, json=json
        )
        data = resp.json()
        if resp.status_code >= 400:
            error = data.get("error") if isinstance(data, dict) else None
            raise ConsoleRequestError(
                error if isinstance(error, str) else fallback,
                status_code=resp.status_code,
            )
        return data

    async def list_agents(self) -> list[AgentSummary]:
        data = await self._call("GET", "/agents", "Failed to load agents")
        return AgentList(**data).agents

    async def get_agent(self, agent_id: str) -> AgentDetails:
        data = await self._call("GET", f"/agents/{agent_id}", "Failed to load agent details")
        return AgentDetails(**data)

    async def update_agent(self, agent_id: str, body: dict) -> dict:
        return await self._call("PATCH", f"/agents/{agent_id}", "Failed to save agent", json=body)

    async def list_voices(self, page_size: int = DEFAULT_VOICES_PAGE_SIZE) -> list[VoiceSummary]:
        data = await self._call(
            "GET", "/voices", "Failed to load voices", params={"page_size": page_size}
        )
        return VoiceList(**data).voices

    async def get_voice(self, voice_id: str) -> VoiceSummary | None:
        data = await self._call(
            "GET", "/voices", "Failed to load voice", params={"voice_id": voice_id}
        )
        voices = data.get("voices") or []
        if not voices or not isinstance(voices[0], dict) or not voices[0].get("voice_id"):
            return None
        return VoiceSummary(**voices[0])

    async def start_call(self, body: dict) -> CallStarted:
        data = await self._call("POST", "/calls", "Failed to start call", json=body)
        return CallStarted(**data)

    async def get_conversation(self, conversation_id: str) -> ConversationStatus:
        data = await self._call(
            "GET", f"/conversations/{conversation_id}", "Failed to load conversation"
        )
        return ConversationStatus(**data)
