"""Transcription workflow: upload, poll, persist."""

from app.core.logging import get_logger
from app.core.store.base import TranscriptionStore
from app.core.transcription.base import TranscriptionProvider
from app.core.transcription.polling import PollingCoordinator

logger = get_logger(__name__)


class TranscriptionService:
    """
    Runs one transcription request end to end.

    Failures from any step propagate to the caller unchanged. A store failure
    after a successful transcription fails the request; the text is not
    returned without being persisted.
    """

    def __init__(
        self,
        provider: TranscriptionProvider,
        coordinator: PollingCoordinator,
        store: TranscriptionStore,
    ):
        self.provider = provider
        self.coordinator = coordinator
        self.store = store

    async def transcribe(self, audio_data: bytes, filename: str | None = None) -> str:
        logger.info(
            "transcription_requested",
            filename=filename,
            size_bytes=len(audio_data),
        )

        job_id = await self.provider.submit(audio_data)
        text = await self.coordinator.wait_for_completion(job_id)
        await self.store.insert(text)

        return text
