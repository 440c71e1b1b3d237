"""Vendor calls for transcription and chat completion.

Each call validates the shape of the vendor response and translates SDK
failures into :class:`VendorError` so the HTTP layer can answer with the
vendor's status and message.
"""

import logging
from collections.abc import Awaitable
from typing import TypeVar

from openai import (
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
)

from gateway.errors import (
    GENERIC_VENDOR_MESSAGE,
    QUOTA_ERROR_CODE,
    InvalidVendorResponseError,
    VendorError,
    VendorTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CHAT_MODEL = "gpt-4"
DEFAULT_TRANSCRIPTION_MODEL = "whisper-1"


class RequestExecutor:
    """Executes single, unretried requests against the OpenAI API."""

    def __init__(
        self,
        client: AsyncOpenAI,
        chat_model: str = DEFAULT_CHAT_MODEL,
        transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL,
    ) -> None:
        self._client = client
        self._chat_model = chat_model
        self._transcription_model = transcription_model

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.wav",
        content_type: str | None = None,
    ) -> str:
        """Transcribe an audio clip.

        Args:
            audio: Raw bytes of the uploaded clip.
            filename: Name sent to the vendor; its extension hints the format.
            content_type: MIME type of the clip, if known.

        Returns:
            The transcript text.

        Raises:
            VendorError: If the vendor rejects the call, times out, or
                answers without a transcript.
        """
        upload = (filename, audio, content_type or "audio/wav")
        result = await self._call(
            self._client.audio.transcriptions.create(
                model=self._transcription_model,
                file=upload,
            )
        )

        text = getattr(result, "text", None)
        if not isinstance(text, str) or not text:
            logger.error("Unexpected transcription response structure: %r", result)
            raise InvalidVendorResponseError()
        return text

    async def complete(self, messages: list[dict]) -> str:
        """Generate the next assistant turn for a conversation.

        Args:
            messages: The ordered ``{role, content}`` history, sent unmodified.

        Returns:
            The content of the first completion choice.

        Raises:
            VendorError: If the vendor rejects the call, times out, or
                answers without message content.
        """
        completion = await self._call(
            self._client.chat.completions.create(
                model=self._chat_model,
                messages=messages,
            )
        )

        choices = getattr(completion, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content:
            logger.error("Unexpected completion response structure: %r", completion)
            raise InvalidVendorResponseError()
        return content

    @staticmethod
    async def _call(request: Awaitable[T]) -> T:
        """Await an SDK request, translating vendor failures."""
        try:
            return await request
        except APITimeoutError as e:
            logger.warning("OpenAI request timed out: %s", e)
            raise VendorTimeoutError() from e
        except APIResponseValidationError as e:
            logger.error("OpenAI response failed validation: %s", e)
            raise InvalidVendorResponseError() from e
        except APIStatusError as e:
            raise _translate_status_error(e) from e


def _translate_status_error(error: APIStatusError) -> VendorError:
    """Map an SDK status error onto the vendor's status, message and code."""
    body = error.body if isinstance(error.body, dict) else {}
    message = body.get("message")
    if not isinstance(message, str) or not message:
        message = GENERIC_VENDOR_MESSAGE

    code = error.code if isinstance(error.code, str) else None
    translated = VendorError(error.status_code, message, code)
    if translated.is_quota_exceeded:
        translated.code = QUOTA_ERROR_CODE

    logger.warning(
        "OpenAI API error: status=%s code=%s message=%s",
        translated.status_code, translated.code, message,
    )
    return translated
