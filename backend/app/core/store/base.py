"""Transcription record store interface and model."""

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel


class TranscriptionRecord(BaseModel):
    """A persisted transcription. Immutable once created."""

    model_config = {"frozen": True}

    id: int | str
    transcription: str
    created_at: datetime


class TranscriptionStore(ABC):
    """Abstract base class for transcription persistence."""

    @abstractmethod
    async def insert(self, text: str) -> None:
        """Append one record stamped with the current time."""
        ...

    @abstractmethod
    async def list_all(self) -> list[TranscriptionRecord]:
        """All records, newest first."""
        ...

    @abstractmethod
    async def delete_by_id(self, record_id: str) -> None:
        """Delete one record. Missing ids are not an error."""
        ...

    @abstractmethod
    async def delete_all(self) -> None:
        """Delete every record."""
        ...
