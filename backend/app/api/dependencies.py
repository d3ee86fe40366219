"""FastAPI dependencies resolving the components built at startup."""

from typing import Annotated

from fastapi import Depends, Request

from app.core.store.base import TranscriptionStore
from app.core.transcription.service import TranscriptionService


def get_transcription_service(request: Request) -> TranscriptionService:
    return request.app.state.transcription_service


def get_transcription_store(request: Request) -> TranscriptionStore:
    return request.app.state.transcription_store


TranscriptionServiceDep = Annotated[TranscriptionService, Depends(get_transcription_service)]
TranscriptionStoreDep = Annotated[TranscriptionStore, Depends(get_transcription_store)]
