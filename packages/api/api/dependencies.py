"""Request dependencies: credential precondition and vendor executor."""

import logging

from fastapi import Depends, HTTPException, Request, status

from api.config import (
    get_chat_model,
    get_openai_api_key,
    get_transcription_model,
    get_vendor_timeout,
)
from gateway.ClientProvider import ClientProvider
from gateway.RequestExecutor import RequestExecutor

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "OpenAI API key is not configured"


async def require_openai_key() -> str:
    """Fail fast when the server has no vendor credential.

    Returns:
        The configured OpenAI API key.

    Raises:
        HTTPException 500 before any vendor call is attempted.
    """
    api_key = get_openai_api_key()
    if api_key is None:
        logger.error("OPENAI_API_KEY is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=MISSING_KEY_MESSAGE,
        )
    return api_key


def get_executor(
    request: Request,
    api_key: str = Depends(require_openai_key),
) -> RequestExecutor:
    """Build a vendor executor on top of the app-wide connection pool."""
    provider = ClientProvider(
        api_key,
        timeout=get_vendor_timeout(),
        http_client=request.app.state.http_client,
    )
    return RequestExecutor(
        provider.get_client(),
        chat_model=get_chat_model(),
        transcription_model=get_transcription_model(),
    )
