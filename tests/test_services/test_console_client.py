import json

import pytest
import respx
from httpx import AsyncClient, Response

from app.exceptions.custom import ConsoleRequestError
from app.services.console import ConsoleSession
from app.services.console_client import ConsoleClient

AGENTS_URL = "https://api.elevenlabs.io/v1/convai/agents"
VOICES_URL = "https://api.elevenlabs.io/v2/voices"
CONVERSATIONS_URL = "https://api.elevenlabs.io/v1/convai/conversations"
OUTBOUND_CALL_URL = "https://api.elevenlabs.io/v1/convai/twilio/outbound-call"

AGENT_PAYLOAD = {
    "agent_id": "a1",
    "name": "Sales",
    "conversation_config": {
        "agent": {
            "first_message": "Hi {{customer_name}}",
            "prompt": {"prompt": "Sell politely."},
            "dynamic_variables": {"dynamic_variable_placeholders": {"customer_name": "Jane"}},
        },
        "tts": {"voice_id": "v9"},
    },
    "phone_numbers": [{"phone_number_id": "p1", "phone_number": "+15550001", "label": "Main"}],
}


def _mock_catalog():
    respx.get(AGENTS_URL).mock(
        return_value=Response(200, json={"agents": [{"agent_id": "a1", "name": "Sales"}]})
    )
    respx.route(method="GET", host="api.elevenlabs.io", path="/v2/voices").mock(
        return_value=Response(200, json={"voices": [{"voice_id": "v1", "name": "Rachel"}]})
    )


@respx.mock
async def test_get_voice_returns_none_for_empty_listing(client: AsyncClient):
    respx.get(f"{VOICES_URL}/v1").mock(return_value=Response(200, json={}))

    voice = await ConsoleClient(client).get_voice("v1")

    assert voice is None


@respx.mock
async def test_error_envelope_becomes_console_error(client: AsyncClient):
    respx.get(f"{AGENTS_URL}/a1").mock(return_value=Response(500, text="boom"))

    with pytest.raises(ConsoleRequestError) as exc_info:
        await ConsoleClient(client).get_agent("a1")

    assert exc_info.value.message == "Upstream error"
    assert exc_info.value.status_code == 500


async def test_missing_key_message(unconfigured_client: AsyncClient):
    with pytest.raises(ConsoleRequestError) as exc_info:
        await ConsoleClient(unconfigured_client).list_agents()

    assert str(exc_info.value) == "Missing ELEVENLABS_API_KEY"


@respx.mock
async def test_full_session_through_proxy(client: AsyncClient):
    _mock_catalog()
    respx.get(f"{AGENTS_URL}/a1").mock(return_value=Response(200, json=AGENT_PAYLOAD))
    respx.get(f"{VOICES_URL}/v9").mock(
        return_value=Response(200, json={"voice_id": "v9", "name": "Nova"})
    )
    patch_route = respx.patch(f"{AGENTS_URL}/a1").mock(
        return_value=Response(200, json=AGENT_PAYLOAD)
    )
    call_route = respx.post(OUTBOUND_CALL_URL).mock(
        return_value=Response(200, json={"success": True, "conversation_id": "conv-1"})
    )
    respx.get(f"{CONVERSATIONS_URL}/conv-1").mock(
        side_effect=[
            Response(200, json={"conversation_id": "conv-1", "status": "in-progress"}),
            Response(
                200,
                json={
                    "conversation_id": "conv-1",
                    "status": "done",
                    "transcript": [
                        {"role": "agent", "message": "Hi Ana"},
                        {"role": "user", "message": None},
                    ],
                    "analysis": {
                        "transcript_summary": "Customer agreed to a demo.",
                        "call_summary_title": "Demo booked",
                    },
                },
            ),
        ]
    )

    session = ConsoleSession(ConsoleClient(client), poll_interval=0.01)
    await session.load_catalog()
    await session.select_agent("a1")

    assert [v.voice_id for v in session.voices] == ["v9", "v1"]
    assert session.form.dynamic_variables == {"customer_name": ""}
    assert session.agent_phone_number_id == "p1"

    session.form.prompt = "Sell very politely."
    await session.save()
    assert session.error == ""
    saved = json.loads(patch_route.calls[0].request.content)
    assert saved["conversation_config"]["agent"]["prompt"] == {"prompt": "Sell very politely."}
    assert saved["conversation_config"]["tts"] == {"voice_id": "v9"}

    session.to_number = "+15551234567"
    session.form.set_variable("customer_name", "Ana")
    await session.start_call()
    await session.poller.join()

    sent = json.loads(call_route.calls[0].request.content)
    assert sent["conversation_initiation_client_data"]["dynamic_variables"] == {"customer_name": "Ana"}
    assert session.conversation.status == "done"
    assert session.conversation.analysis.call_summary_title == "Demo booked"
    assert session.conversation.transcript[1].message is None
    await session.aclose()
