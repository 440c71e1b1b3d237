"""API route definitions."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from api.dependencies import get_executor
from api.errors import internal_error_response, vendor_error_response
from api.schemas import (
    ChatRequest,
    ErrorResponse,
    MessageSchema,
    TranscriptionResponse,
)
from gateway.errors import VendorError
from gateway.RequestExecutor import RequestExecutor

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    405: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@router.get("/health")
async def health_check():
    """Basic liveness check -- no credential required."""
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Transcription proxy
# ---------------------------------------------------------------------------


@router.post(
    "/api/transcribe",
    response_model=TranscriptionResponse,
    responses=_ERROR_RESPONSES,
)
async def transcribe(
    file: UploadFile | None = File(default=None),
    executor: RequestExecutor = Depends(get_executor),
):
    """Forward one uploaded audio clip to the speech-to-text service."""
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    audio = await file.read()
    if not audio:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty",
        )

    try:
        text = await executor.transcribe(
            audio,
            filename=file.filename or "audio.wav",
            content_type=file.content_type,
        )
    except VendorError as e:
        return vendor_error_response(e)
    except Exception as e:  # noqa: BLE001
        return internal_error_response(e)

    logger.info("Transcribed %d bytes into %d characters", len(audio), len(text))
    return TranscriptionResponse(text=text)


# ---------------------------------------------------------------------------
# Chat completion proxy
# ---------------------------------------------------------------------------


@router.post(
    "/api/chat",
    response_model=MessageSchema,
    responses=_ERROR_RESPONSES,
)
async def chat(
    body: ChatRequest,
    executor: RequestExecutor = Depends(get_executor),
):
    """Forward the full conversation and return the assistant's reply.

    The reply is always labelled with the ``assistant`` role.
    """
    messages = [m.model_dump() for m in body.messages]

    try:
        content = await executor.complete(messages)
    except VendorError as e:
        return vendor_error_response(e)
    except Exception as e:  # noqa: BLE001
        return internal_error_response(e)

    return MessageSchema(role="assistant", content=content)
