"""Data models for conversation messages and request state."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Author of a conversational turn."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    """A single immutable turn within a conversation.

    Attributes:
        role: Who produced the turn. ``user`` is transcribed or typed human
            input, ``assistant`` is a model reply. ``system`` is accepted
            but never produced by the proxies.
        content: The non-empty text of the turn.
        timestamp: When the message was created.
    """

    role: Role
    content: str
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self) -> None:
        """Coerce the role and reject empty content."""
        try:
            object.__setattr__(self, "role", Role(self.role))
        except ValueError as e:
            raise ValueError(f"Unknown message role: {self.role!r}") from e

        if not isinstance(self.content, str) or not self.content.strip():
            raise ValueError("Message content must be a non-empty string.")

    def to_api_dict(self) -> dict:
        """Serialize this message into the ``{role, content}`` wire format."""
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_api_dict(cls, data: dict) -> "Message":
        """Build a message from a ``{role, content}`` payload.

        Raises:
            ValueError: If the payload is not a mapping or fails validation.
        """
        if not isinstance(data, dict):
            raise ValueError("Message payload must be a JSON object.")
        return cls(role=data.get("role"), content=data.get("content"))


UserTurnListener = Callable[[Message], None]


class Conversation:
    """An ordered, append-only sequence of messages.

    Appending a ``user`` message emits a user-turn event to every listener
    registered with :meth:`on_user_turn`, once per append.

    Attributes:
        id: A unique hex string identifying this conversation.
        created_at: When the conversation was created.
        last_message: Timestamp of the most recently added message.
    """

    def __init__(self) -> None:
        self.id: str = uuid.uuid4().hex
        self.created_at: datetime = datetime.now()
        self.last_message: datetime = self.created_at
        self._messages: list[Message] = []
        self._user_turn_listeners: list[UserTurnListener] = []

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the messages in chronological order."""
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        """The trailing message, or ``None`` when the conversation is empty."""
        return self._messages[-1] if self._messages else None

    def on_user_turn(self, listener: UserTurnListener) -> None:
        """Register a callback fired each time a user message is appended."""
        self._user_turn_listeners.append(listener)

    def add_message(self, message: Message) -> None:
        """Append a message and update the last_message timestamp."""
        self._messages.append(message)
        self.last_message = message.timestamp
        if message.role is Role.USER:
            for listener in list(self._user_turn_listeners):
                listener(message)

    def clear(self) -> None:
        """Drop every message. Listeners stay registered."""
        self._messages.clear()
        self.last_message = datetime.now()


@dataclass
class RequestState:
    """Transient flags for the single request that may be in flight."""

    loading: bool = False
    error: str | None = None
