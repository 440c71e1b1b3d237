"""Client-side orchestration of a voice conversation.

Owns the conversation and the request state for one session. Every mutation
goes through the controller's operations; the presentation layer only reads
state and subscribes to change notifications.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from chatbot.errors import (
    EMPTY_REPLY_MESSAGE,
    NO_SPEECH_MESSAGE,
    TIMEOUT_MESSAGE,
    ChatClientError,
    ConversationBusyError,
)
from chatbot.models import Conversation, Message, RequestState, Role
from chatbot.ProxyClient import ProxyClient

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0

T = TypeVar("T")
StateListener = Callable[["ConversationController"], None]


class ConversationController:
    """Drives transcription and completion requests for one conversation.

    A completion is requested automatically, exactly once, each time a
    ``user`` message is appended to the conversation.
    """

    def __init__(
        self,
        client: ProxyClient,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the controller.

        Args:
            client: Client for the transcription and chat proxies.
            timeout: Upper bound in seconds for each outbound request.
        """
        self._client = client
        self._timeout = timeout
        self._conversation = Conversation()
        self._state = RequestState()
        self._listeners: list[StateListener] = []
        self._pending: asyncio.Task | None = None
        # Bumped on reset so replies to a discarded conversation are dropped.
        self._generation = 0

        self._conversation.on_user_turn(self._on_user_turn)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def conversation_id(self) -> str:
        return self._conversation.id

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._conversation.messages

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> str | None:
        return self._state.error

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback invoked after every state change."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def submit_audio(self, clip: bytes, filename: str = "audio.wav") -> None:
        """Transcribe a recorded clip and append it as a user turn.

        Returns after the triggered completion (if any) has finished.

        Raises:
            ValueError: If the clip is empty.
            ConversationBusyError: If a request is already in flight.
        """
        if not clip:
            raise ValueError("Audio clip must not be empty.")
        self._ensure_idle()

        generation = self._generation
        self._set_state(loading=True, error=None)
        try:
            text = await self._bounded(self._client.transcribe(clip, filename))
        except ChatClientError as e:
            self._fail(generation, e.user_message)
            return
        except asyncio.TimeoutError:
            self._fail(generation, TIMEOUT_MESSAGE)
            return

        if generation != self._generation:
            return
        if not text.strip():
            self._fail(generation, NO_SPEECH_MESSAGE)
            return

        self._append(Message(role=Role.USER, content=text))
        await self._drain()

    async def submit_text(self, text: str) -> None:
        """Append a typed user turn and wait for the triggered completion.

        Raises:
            ValueError: If the text is blank.
            ConversationBusyError: If a request is already in flight.
        """
        self._ensure_idle()
        message = Message(role=Role.USER, content=text)
        self._append(message)
        await self._drain()

    async def request_completion(self) -> None:
        """Send the whole conversation to the chat proxy and append the reply.

        Failures are recorded in ``error`` and leave the conversation as is.
        """
        generation = self._generation
        self._set_state(loading=True, error=None)
        try:
            reply = await self._bounded(
                self._client.complete(list(self._conversation.messages))
            )
        except ChatClientError as e:
            self._fail(generation, e.user_message)
            return
        except asyncio.TimeoutError:
            self._fail(generation, TIMEOUT_MESSAGE)
            return

        if generation != self._generation:
            return
        if reply is None:
            self._fail(generation, EMPTY_REPLY_MESSAGE)
            return

        self._state.loading = False
        self._append(Message(role=Role.ASSISTANT, content=reply.content))

    async def retry_last_turn(self) -> None:
        """Re-request the completion for a trailing user turn.

        Raises:
            ConversationBusyError: If a request is already in flight.
            ValueError: If the conversation does not end in a user turn.
        """
        self._ensure_idle()
        last = self._conversation.last
        if last is None or last.role is not Role.USER:
            raise ValueError("There is no unanswered user turn to retry.")
        await self.request_completion()

    def reset(self) -> None:
        """Start over: empty the conversation and clear any error."""
        self._generation += 1
        self._pending = None
        self._conversation.clear()
        self._set_state(loading=False, error=None)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_user_turn(self, message: Message) -> None:
        """Schedule the completion for a freshly appended user turn."""
        logger.debug("user turn appended to %s", self._conversation.id)
        self._pending = asyncio.get_running_loop().create_task(
            self.request_completion()
        )

    async def _drain(self) -> None:
        """Wait for the completion scheduled by the last user turn."""
        pending, self._pending = self._pending, None
        if pending is not None:
            await pending

    def _ensure_idle(self) -> None:
        if self._state.loading or self._pending is not None:
            raise ConversationBusyError("A request is already in flight.")

    async def _bounded(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self._timeout)

    def _append(self, message: Message) -> None:
        self._conversation.add_message(message)
        self._notify()

    def _fail(self, generation: int, message: str) -> None:
        if generation != self._generation:
            return
        logger.info("request failed: %s", message)
        self._set_state(loading=False, error=message)

    def _set_state(self, loading: bool, error: str | None) -> None:
        self._state.loading = loading
        self._state.error = error
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
