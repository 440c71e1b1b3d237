"""Pydantic request/response models for the API."""

from typing import Literal

from pydantic import BaseModel, Field


class MessageSchema(BaseModel):
    """A single message within a conversation."""

    role: Literal["user", "assistant", "system"]
    content: str = Field(min_length=1)


class ChatRequest(BaseModel):
    """Body for the chat completion endpoint.

    ``model`` is accepted for compatibility but ignored; the server always
    uses its configured model.
    """

    model: str | None = None
    messages: list[MessageSchema]


class TranscriptionResponse(BaseModel):
    """Response from the transcription endpoint."""

    text: str


class ErrorResponse(BaseModel):
    """Flat error body shared by every endpoint."""

    error: str
    code: str | None = None
    details: str | None = None
