"""Speech-to-text workflow module."""

from app.core.transcription.base import JobStatus, TranscriptionJob, TranscriptionProvider
from app.core.transcription.assemblyai import AssemblyAIClient
from app.core.transcription.polling import PollingCoordinator
from app.core.transcription.service import TranscriptionService

__all__ = [
    "JobStatus",
    "TranscriptionJob",
    "TranscriptionProvider",
    "AssemblyAIClient",
    "PollingCoordinator",
    "TranscriptionService",
]
