"""Base speech-to-text provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class JobStatus(str, Enum):
    """Lifecycle of a provider-side transcription job."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def from_provider(cls, value: str | None) -> "JobStatus":
        """Map a raw provider status onto the job lifecycle.

        AssemblyAI reports failures as ``error``. Unknown values are treated
        as still in progress so the poller keeps waiting.
        """
        if value in ("error", "failed"):
            return cls.FAILED
        if value == "completed":
            return cls.COMPLETED
        if value == "queued":
            return cls.QUEUED
        return cls.PROCESSING

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class TranscriptionJob:
    """Snapshot of a provider job as seen by one status fetch."""

    id: str
    status: JobStatus
    text: str | None = None  # only when completed
    error: str | None = None  # provider failure reason, if any


class TranscriptionProvider(ABC):
    """Abstract base class for speech-to-text providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        ...

    @abstractmethod
    async def submit(self, audio_data: bytes) -> str:
        """Upload audio and create a transcription job. Returns the job id."""
        ...

    @abstractmethod
    async def fetch_status(self, job_id: str) -> TranscriptionJob:
        """Fetch the current state of a job."""
        ...
