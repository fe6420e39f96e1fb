from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class AgentSummary(BaseModel):
    agent_id: str
    name: str = ""


class AgentList(BaseModel):
    agents: list[AgentSummary] = []


class PhoneNumber(BaseModel):
    phone_number_id: str
    phone_number: str = ""
    label: str | None = None


class AgentPrompt(BaseModel):
    prompt: str | None = None


class DynamicVariables(BaseModel):
    dynamic_variable_placeholders: dict[str, str | int | float | bool | None] = {}


class AgentSettings(BaseModel):
    first_message: str | None = None
    prompt: AgentPrompt | None = None
    dynamic_variables: DynamicVariables | None = None


class TtsSettings(BaseModel):
    voice_id: str | None = None


class ConversationConfig(BaseModel):
    agent: AgentSettings | None = None
    tts: TtsSettings | None = None


class AgentDetails(BaseModel):
    agent_id: str
    name: str = ""
    conversation_config: ConversationConfig | None = None
    phone_numbers: list[PhoneNumber] = []

    @property
    def first_message(self) -> str:
        agent = self.conversation_config.agent if self.conversation_config else None
        return (agent.first_message if agent else None) or ""

    @property
    def prompt_text(self) -> str:
        agent = self.conversation_config.agent if self.conversation_config else None
        if agent is None or agent.prompt is None:
            return ""
        return agent.prompt.prompt or ""

    @property
    def placeholders(self) -> dict[str, str | int | float | bool | None]:
        agent = self.conversation_config.agent if self.conversation_config else None
        if agent is None or agent.dynamic_variables is None:
            return {}
        return agent.dynamic_variables.dynamic_variable_placeholders

    @property
    def voice_id(self) -> str:
        tts = self.conversation_config.tts if self.conversation_config else None
        return (tts.voice_id if tts else None) or ""


class VoiceSummary(BaseModel):
    voice_id: str
    name: str = ""
    preview_url: str | None = None


class VoiceList(BaseModel):
    voices: list[VoiceSummary] = []
    has_more: bool = False
    next_page_token: str | None = None


class CallStarted(BaseModel):
    success: bool = False
    message: str | None = None
    conversation_id: str | None = None
    callSid: str | None = None
    sip_call_id: str | None = None


class ConversationState(StrEnum):
    initiated = "initiated"
    in_progress = "in-progress"
    processing = "processing"
    done = "done"
    failed = "failed"
    error = "error"
    unknown = "unknown"

    @classmethod
    def parse(cls, status: str | None) -> ConversationState:
        try:
            return cls((status or "").lower())
        except ValueError:
            return cls.unknown


TERMINAL_STATES = {ConversationState.done, ConversationState.failed, ConversationState.error}


class ConversationTranscriptEntry(BaseModel):
    role: str = ""  # "agent" | "user"
    message: str | None = None


class ConversationAnalysis(BaseModel):
    transcript_summary: str | None = None
    call_summary_title: str | None = None


class ConversationStatus(BaseModel):
    conversation_id: str = ""
    status: str = ""  # initiated | in-progress | processing | done | failed | error
    transcript: list[ConversationTranscriptEntry] | None = None
    analysis: ConversationAnalysis | None = None

    @property
    def state(self) -> ConversationState:
        return ConversationState.parse(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES


class EditableAgentForm(BaseModel):
    """Working copy of an agent's editable fields.

    ``dynamic_variables`` holds values to send at call time, keyed by the
    agent's placeholder names. The key set is fixed when the form is built.
    """

    first_message: str = ""
    prompt: str = ""
    voice_id: str = ""
    dynamic_variables: dict[str, str] = {}

    def set_variable(self, name: str, value: str) -> None:
        if name not in self.dynamic_variables:
            raise KeyError(name)
        self.dynamic_variables[name] = value


class ConversationInitiationClientData(BaseModel):
    dynamic_variables: dict[str, str | int | float | bool] = {}


class OutboundCallRequest(BaseModel):
    agent_id: str
    to_number: str
    agent_phone_number_id: str | None = None
    conversation_initiation_client_data: ConversationInitiationClientData | None = None
