"""HTTP client for the transcription and chat completion proxy endpoints."""

import logging
import os

import httpx

from chatbot.errors import (
    QUOTA_ERROR_CODE,
    UNKNOWN_ERROR_MESSAGE,
    ChatClientError,
    MalformedResponseError,
    ProxyReportedError,
    QuotaExceededError,
)
from chatbot.models import Message

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"
TRANSCRIBE_PATH = "/api/transcribe"
CHAT_PATH = "/api/chat"

# Advisory only; the proxy always uses its own configured model.
REQUESTED_CHAT_MODEL = "gpt-3.5-turbo"


def get_base_url() -> str:
    return os.environ.get("PROXY_BASE_URL", DEFAULT_BASE_URL)


class ProxyClient:
    """Talks to the two proxy endpoints and normalizes their failures.

    Every failure is raised as a :class:`ChatClientError` subclass whose
    ``user_message`` is ready to show in the presentation layer.
    """

    def __init__(
        self,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Where the proxies are served. Defaults to
                ``PROXY_BASE_URL`` or ``http://localhost:3000``.
            http_client: Optional pre-configured client (tests pass one with
                a mock transport). When given, its base URL is used as is.
        """
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url or get_base_url(),
            timeout=None,
        )

    async def __aenter__(self) -> "ProxyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def transcribe(self, clip: bytes, filename: str = "audio.wav") -> str:
        """Upload an audio clip and return the transcript text.

        Raises:
            ChatClientError: On any transport, proxy or parse failure.
        """
        files = {"file": (filename, clip, "audio/wav")}
        payload = await self._post(TRANSCRIBE_PATH, files=files)
        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise MalformedResponseError()
        return text

    async def complete(self, messages: list[Message]) -> Message | None:
        """Send the conversation and return the assistant reply.

        Returns ``None`` when the proxy answered successfully but without
        any content.

        Raises:
            ChatClientError: On any transport, proxy or parse failure.
        """
        body = {
            "model": REQUESTED_CHAT_MODEL,
            "messages": [m.to_api_dict() for m in messages],
        }
        payload = await self._post(CHAT_PATH, json=body)
        if not isinstance(payload, dict) or not str(payload.get("content") or "").strip():
            return None
        try:
            return Message.from_api_dict(payload)
        except ValueError as e:
            raise MalformedResponseError() from e

    async def _post(self, path: str, **kwargs) -> object:
        try:
            response = await self._client.post(path, **kwargs)
        except httpx.TransportError as e:
            logger.warning("request to %s failed: %s", path, e)
            raise ChatClientError(UNKNOWN_ERROR_MESSAGE) from e

        if response.status_code == 429:
            logger.warning("proxy %s returned 429", path)
            raise QuotaExceededError()

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError() from e

        if response.is_success:
            return payload

        message, code = _extract_error(payload)
        logger.warning(
            "proxy %s returned %s (code=%s): %s",
            path, response.status_code, code, message,
        )
        if code == QUOTA_ERROR_CODE:
            raise QuotaExceededError()
        raise ProxyReportedError(response.status_code, message)


def _extract_error(payload: object) -> tuple[str, str | None]:
    """Pull ``(message, code)`` out of a flat or nested error body."""
    if not isinstance(payload, dict):
        return UNKNOWN_ERROR_MESSAGE, None

    error = payload.get("error")
    code = payload.get("code")
    if isinstance(error, dict):
        code = code or error.get("code")
        error = error.get("message")

    if not isinstance(error, str) or not error:
        error = UNKNOWN_ERROR_MESSAGE
    return error, code if isinstance(code, str) else None
