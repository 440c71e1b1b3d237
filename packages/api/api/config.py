"""Environment-driven settings for the proxy server.

Values are read on every call so a missing credential is reported per
request rather than crashing the process at startup.
"""

import os

from gateway.RequestExecutor import DEFAULT_CHAT_MODEL, DEFAULT_TRANSCRIPTION_MODEL


def get_openai_api_key() -> str | None:
    """Return the configured OpenAI key, or ``None`` when unset or blank."""
    key = os.environ.get("OPENAI_API_KEY", "").strip()
    return key or None


def is_development() -> bool:
    """Whether internal error details may be echoed to clients."""
    return os.environ.get("APP_ENV", "production").strip().lower() == "development"


def get_chat_model() -> str:
    return os.environ.get("OPENAI_CHAT_MODEL", DEFAULT_CHAT_MODEL)


def get_transcription_model() -> str:
    return os.environ.get("OPENAI_TRANSCRIPTION_MODEL", DEFAULT_TRANSCRIPTION_MODEL)


def get_vendor_timeout() -> float:
    return float(os.environ.get("OPENAI_TIMEOUT_SECONDS", "60"))
