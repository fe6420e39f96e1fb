from app.schemas.elevenlabs import AgentDetails, EditableAgentForm, VoiceSummary

UNKNOWN_VOICE_NAME = "Unknown voice"


def build_agent_form(agent: AgentDetails) -> EditableAgentForm:
    """Derive the editable form from a freshly loaded agent.

    Placeholder names become the dynamic variable keys, but their default
    values are NOT copied: every value starts empty and is filled in by the
    operator before a call.
    """
    return EditableAgentForm(
        first_message=agent.first_message,
        prompt=agent.prompt_text,
        voice_id=agent.voice_id,
        dynamic_variables={name: "" for name in agent.placeholders},
    )


def default_phone_number_id(agent: AgentDetails) -> str:
    if agent.phone_numbers:
        return agent.phone_numbers[0].phone_number_id
    return ""


def build_agent_update(form: EditableAgentForm) -> dict:
    config: dict = {
        "agent": {
            "prompt": {"prompt": form.prompt},
            "first_message": form.first_message,
        },
    }
    if form.voice_id:
        config["tts"] = {"voice_id": form.voice_id}
    return {"conversation_config": config}


def build_call_request(
    agent_id: str,
    to_number: str,
    agent_phone_number_id: str = "",
    dynamic_variables: dict[str, str] | None = None,
) -> dict:
    payload: dict = {"agent_id": agent_id, "to_number": to_number}
    if agent_phone_number_id:
        payload["agent_phone_number_id"] = agent_phone_number_id
    payload["conversation_initiation_client_data"] = {
        "dynamic_variables": dict(dynamic_variables or {}),
    }
    return payload


def prepend_voice(voices: list[VoiceSummary], voice: VoiceSummary) -> list[VoiceSummary]:
    """Put ``voice`` at the head of the catalog unless its id is already listed."""
    if any(v.voice_id == voice.voice_id for v in voices):
        return voices
    return [voice, *voices]


def unknown_voice(voice_id: str) -> VoiceSummary:
    return VoiceSummary(voice_id=voice_id, name=UNKNOWN_VOICE_NAME)
