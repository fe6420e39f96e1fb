import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from app.mappers.agent_form import (
    build_agent_form,
    build_agent_update,
    build_call_request,
    default_phone_number_id,
    prepend_voice,
    unknown_voice,
)
from app.schemas.elevenlabs import (
    AgentDetails,
    AgentSummary,
    ConversationState,
    ConversationStatus,
    EditableAgentForm,
    VoiceSummary,
)
from app.services.console_client import ConsoleClient

logger = logging.getLogger(__name__)

POLL_INTERVAL = 3.0  # seconds

PreviewPlayer = Callable[[str], Awaitable[None]]


async def _cancel(task: asyncio.Task | None) -> None:
    if task is None:
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


class ConversationPoller:
    """Repeatedly fetches one conversation until it ends.

    Fetches right away, then every ``interval`` seconds. Stops for good on a
    terminal status or on the first failed fetch; the last good status is
    whatever ``on_update`` last received.
    """

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[ConversationStatus]],
        conversation_id: str,
        on_update: Callable[[ConversationStatus], None],
        interval: float = POLL_INTERVAL,
    ):
        self.conversation_id = conversation_id
        self._fetch = fetch
        self._on_update = on_update
        self._interval = interval
        self._task: asyncio.Task | None = None
        self._unknown_seen: set[str] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while True:
            try:
                conversation = await self._fetch(self.conversation_id)
            except Exception as exc:
                logger.info(
                    "Stopped polling conversation %s: %s: %s",
                    self.conversation_id, type(exc).__name__, exc,
                )
                return

            self._on_update(conversation)
            state = conversation.state
            if state is ConversationState.unknown and conversation.status not in self._unknown_seen:
                self._unknown_seen.add(conversation.status)
                logger.warning(
                    "Conversation %s reported unrecognized status %r",
                    self.conversation_id, conversation.status,
                )
            if conversation.is_terminal:
                logger.info("Conversation %s finished with status %s", self.conversation_id, state)
                return

            await asyncio.sleep(self._interval)

    async def stop(self) -> None:
        await _cancel(self._task)

    async def join(self) -> None:
        if self._task is not None:
            await self._task


class ConsoleSession:
    """In-memory state for one operator working with the console.

    The four stages (catalog load, detail load, save, call + poll) each
    catch their own failures and report them through ``error``.
    """

    def __init__(
        self,
        api: ConsoleClient,
        poll_interval: float = POLL_INTERVAL,
        player: PreviewPlayer | None = None,
    ):
        self._api = api
        self._poll_interval = poll_interval
        self._player = player

        self.agents: list[AgentSummary] = []
        self.voices: list[VoiceSummary] = []
        self.selected_agent_id = ""
        self.agent: AgentDetails | None = None
        self.form: EditableAgentForm | None = None
        self.to_number = ""
        self.agent_phone_number_id = ""
        self.conversation_id = ""
        self.conversation: ConversationStatus | None = None
        self.preview_url: str | None = None
        self.is_previewing = False
        self.error = ""

        self.agents_loading = False
        self.voices_loading = False
        self.details_loading = False
        self.save_loading = False

        self._detail_generation = 0
        self._poller: ConversationPoller | None = None
        self._preview_task: asyncio.Task | None = None

    # -- catalog -----------------------------------------------------------

    async def load_catalog(self) -> None:
        self.error = ""
        await asyncio.gather(self._load_agents(), self._load_voices())

    async def _load_agents(self) -> None:
        self.agents_loading = True
        try:
            self.agents = await self._api.list_agents()
            logger.info("Loaded %d agents", len(self.agents))
        except Exception as exc:
            logger.warning("Agent list failed: %s", exc)
            self.error = str(exc)
        finally:
            self.agents_loading = False

    async def _load_voices(self) -> None:
        self.voices_loading = True
        try:
            voices = await self._api.list_voices()
            # keep voices already backfilled for a loaded agent
            listed = {v.voice_id for v in voices}
            self.voices = [v for v in self.voices if v.voice_id not in listed] + voices
        except Exception as exc:
            logger.warning("Voice list failed: %s", exc)
            self.error = str(exc)
        finally:
            self.voices_loading = False

    # -- agent details -----------------------------------------------------

    async def select_agent(self, agent_id: str) -> None:
        self.selected_agent_id = agent_id
        if not agent_id:
            return

        self._detail_generation += 1
        generation = self._detail_generation
        self.details_loading = True
        self.error = ""
        try:
            agent = await self._api.get_agent(agent_id)
            if generation != self._detail_generation:
                logger.debug("Discarding stale details for agent %s", agent_id)
                return
            self._apply_agent(agent)
            await self._backfill_voice(agent.voice_id, generation)
        except Exception as exc:
            logger.warning("Loading agent %s failed: %s", agent_id, exc)
            if generation == self._detail_generation:
                self.error = str(exc)
        finally:
            if generation == self._detail_generation:
                self.details_loading = False

    def _apply_agent(self, agent: AgentDetails) -> None:
        self.agent = agent
        self.form = build_agent_form(agent)
        self.agent_phone_number_id = default_phone_number_id(agent)

    async def _backfill_voice(self, voice_id: str, generation: int) -> None:
        """Make sure the agent's configured voice is selectable in the catalog."""
        if not voice_id or any(v.voice_id == voice_id for v in self.voices):
            return
        try:
            voice = await self._api.get_voice(voice_id)
        except Exception as exc:
            logger.info("Voice lookup for %s failed: %s", voice_id, exc)
            voice = None
        if generation != self._detail_generation:
            return
        self.voices = prepend_voice(self.voices, voice or unknown_voice(voice_id))

    # -- save --------------------------------------------------------------

    async def save(self) -> None:
        if self.agent is None or self.form is None:
            return
        self.save_loading = True
        self.error = ""
        try:
            await self._api.update_agent(self.agent.agent_id, build_agent_update(self.form))
            logger.info("Saved agent %s", self.agent.agent_id)
        except Exception as exc:
            logger.warning("Saving agent %s failed: %s", self.agent.agent_id, exc)
            self.error = str(exc)
        finally:
            self.save_loading = False

    # -- call + poll -------------------------------------------------------

    @property
    def can_start_call(self) -> bool:
        return bool(self.agent and self.to_number and self.agent_phone_number_id)

    @property
    def polling(self) -> bool:
        return self._poller is not None and self._poller.running

    @property
    def poller(self) -> ConversationPoller | None:
        return self._poller

    async def start_call(self) -> None:
        if not self.can_start_call:
            return
        self.error = ""
        payload = build_call_request(
            self.agent.agent_id,
            self.to_number,
            agent_phone_number_id=self.agent_phone_number_id,
            dynamic_variables=self.form.dynamic_variables if self.form else None,
        )
        try:
            started = await self._api.start_call(payload)
        except Exception as exc:
            logger.warning("Starting call to %s failed: %s", self.to_number, exc)
            self.error = str(exc)
            return

        if not started.conversation_id:
            self.error = started.message or "Call not started"
            return

        # the new poller is current before the old one is awaited
        previous = self._poller
        self.conversation_id = started.conversation_id
        self.conversation = None
        poller = ConversationPoller(
            self._api.get_conversation,
            started.conversation_id,
            lambda conversation: self._on_conversation(poller, conversation),
            interval=self._poll_interval,
        )
        self._poller = poller
        poller.start()
        if previous is not None:
            await previous.stop()

    def _on_conversation(self, poller: ConversationPoller, conversation: ConversationStatus) -> None:
        if poller is self._poller:
            self.conversation = conversation

    async def stop_polling(self) -> None:
        previous, self._poller = self._poller, None
        if previous is not None:
            await previous.stop()

    # -- voice preview -----------------------------------------------------

    async def preview_voice(self) -> None:
        voice_id = self.form.voice_id if self.form else ""
        if not voice_id:
            return

        url = next((v.preview_url for v in self.voices if v.voice_id == voice_id), None)
        if not url:
            try:
                voice = await self._api.get_voice(voice_id)
            except Exception as exc:
                logger.debug("Preview lookup for %s failed: %s", voice_id, exc)
                return
            url = voice.preview_url if voice else None
            if not url:
                return

        previous, self._preview_task = self._preview_task, None
        self.preview_url = url
        if self._player is not None:
            self.is_previewing = True
            self._preview_task = asyncio.create_task(self._play(url))
        else:
            self.is_previewing = False
        await _cancel(previous)

    async def _play(self, url: str) -> None:
        try:
            await self._player(url)
        except Exception as exc:
            logger.info("Voice preview failed: %s", exc)
        finally:
            if self._preview_task is asyncio.current_task():
                self.is_previewing = False

    async def stop_preview(self) -> None:
        previous, self._preview_task = self._preview_task, None
        self.is_previewing = False
        await _cancel(previous)

    async def aclose(self) -> None:
        await self.stop_polling()
        await self.stop_preview()
