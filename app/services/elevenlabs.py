import logging

import httpx

from app.exceptions.custom import (
    ConfigurationError,
    RateLimitError,
    TransportError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.elevenlabs.io"
AGENTS_PATH = "/v1/convai/agents"
VOICES_PATH = "/v2/voices"
CONVERSATIONS_PATH = "/v1/convai/conversations"
OUTBOUND_CALL_PATH = "/v1/convai/{provider}/outbound-call"
DEFAULT_VOICES_PAGE_SIZE = 100


def _parse_body(resp: httpx.Response) -> object:
    """Decode JSON when the upstream says it is JSON, else wrap the raw text."""
    content_type = resp.headers.get("content-type", "")
    if "application/json" in content_type:
        return resp.json() if resp.content else {}
    return {"raw": resp.text}


def _error_details(resp: httpx.Response) -> object:
    content_type = resp.headers.get("content-type", "")
    if "application/json" in content_type and resp.content:
        try:
            return resp.json()
        except ValueError:
            return resp.text
    return resp.text


class ElevenLabsGateway:
    """Forwards console requests to ElevenLabs with the server-held key attached.

    Every call fails fast with ConfigurationError when no key is configured,
    so nothing leaves the process without credentials.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        api_base: str = DEFAULT_API_BASE,
        call_provider: str = "twilio",
    ):
        self._client = client
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._call_provider = call_provider

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> object:
        if not self._api_key:
            raise ConfigurationError()

        url = f"{self._api_base}{path}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            resp = await self._client.request(
                method,
                url,
                params=query or None,
                json=json,
                headers={"xi-api-key": self._api_key},
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s: %s", method, path, type(exc).__name__, exc)
            raise TransportError(str(exc)) from exc

        if resp.status_code == 429:
            raise RateLimitError(_error_details(resp))
        if resp.status_code >= 400:
            raise UpstreamError(resp.status_code, _error_details(resp))

        try:
            return _parse_body(resp)
        except ValueError as exc:
            raise TransportError(str(exc)) from exc

    async def list_agents(self) -> object:
        return await self._request("GET", AGENTS_PATH)

    async def get_agent(self, agent_id: str) -> object:
        return await self._request("GET", f"{AGENTS_PATH}/{agent_id}")

    async def update_agent(self, agent_id: str, body: dict) -> object:
        logger.info("Updating agent %s", agent_id)
        return await self._request("PATCH", f"{AGENTS_PATH}/{agent_id}", json=body)

    async def list_voices(
        self,
        page_size: int = DEFAULT_VOICES_PAGE_SIZE,
        next_page_token: str | None = None,
    ) -> object:
        return await self._request(
            "GET",
            VOICES_PATH,
            params={"next_page_token": next_page_token, "page_size": page_size},
        )

    async def get_voice(self, voice_id: str) -> dict:
        """Single-voice lookup, shaped like a one-element voice listing."""
        voice = await self._request("GET", f"{VOICES_PATH}/{voice_id}")
        return {"voices": [voice]}

    async def get_conversation(self, conversation_id: str) -> object:
        return await self._request("GET", f"{CONVERSATIONS_PATH}/{conversation_id}")

    async def start_call(self, body: dict) -> object:
        path = OUTBOUND_CALL_PATH.format(provider=self._call_provider)
        logger.info(
            "Starting outbound call: agent=%s to=%s",
            body.get("agent_id"),
            body.get("to_number"),
        )
        data = await self._request("POST", path, json=body)
        if isinstance(data, dict):
            logger.info("Outbound call started: conversation_id=%s", data.get("conversation_id"))
        return data
