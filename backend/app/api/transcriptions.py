"""Transcription API endpoints."""

import asyncio
from contextlib import suppress
from datetime import datetime
from typing import Any, Coroutine, TypeVar

from fastapi import APIRouter, File, Request, Response, UploadFile
from pydantic import BaseModel

from app.api.dependencies import TranscriptionServiceDep, TranscriptionStoreDep
from app.core.errors import InvalidInputError
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)

T = TypeVar("T")

# How often a running transcription checks whether its client is still there
DISCONNECT_CHECK_INTERVAL = 1.0

# nginx's "client closed request"; nobody is left to read it
CLIENT_CLOSED_REQUEST = 499


class TranscribeResponse(BaseModel):
    transcription: str


class TranscriptionResponse(BaseModel):
    id: int | str
    transcription: str
    created_at: datetime

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str


async def run_until_disconnected(
    request: Request,
    coro: Coroutine[Any, Any, T],
    check_interval: float = DISCONNECT_CHECK_INTERVAL,
) -> T | None:
    """
    Run ``coro`` as a task tied to the client connection.

    Returns the coroutine's result, re-raising its exception. Returns None if
    the client disconnected first; the task is cancelled in that case.
    """
    task = asyncio.create_task(coro)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=check_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning("transcription_abandoned", reason="client_disconnected")
                return None
    finally:
        if not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe_audio(
    request: Request,
    service: TranscriptionServiceDep,
    audio: UploadFile | None = File(None),
) -> TranscribeResponse | Response:
    """
    Upload an audio file and transcribe it.

    Blocks until the provider finishes (bounded by the polling ceiling),
    stores the transcript, and returns it.
    """
    if audio is None:
        raise InvalidInputError()

    content = await audio.read()
    if not content:
        raise InvalidInputError()

    logger.info("processing_file", filename=audio.filename, content_type=audio.content_type)

    text = await run_until_disconnected(
        request,
        service.transcribe(content, filename=audio.filename),
    )
    if text is None:
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    return TranscribeResponse(transcription=text)


@router.get("/transcriptions", response_model=list[TranscriptionResponse])
async def list_transcriptions(store: TranscriptionStoreDep) -> list[TranscriptionResponse]:
    """List all stored transcriptions, newest first."""
    records = await store.list_all()
    return [TranscriptionResponse.model_validate(r) for r in records]


@router.delete("/transcriptions/{record_id}", response_model=MessageResponse)
async def delete_transcription(record_id: str, store: TranscriptionStoreDep) -> MessageResponse:
    """Delete one transcription. Unknown ids succeed."""
    await store.delete_by_id(record_id)
    return MessageResponse(message="Transcription deleted successfully")


@router.delete("/transcriptions", response_model=MessageResponse)
async def delete_all_transcriptions(store: TranscriptionStoreDep) -> MessageResponse:
    """Delete every stored transcription."""
    await store.delete_all()
    return MessageResponse(message="All transcriptions deleted successfully")
