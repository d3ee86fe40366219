"""Polling coordinator: turns an asynchronous provider job into a result."""

import asyncio
from typing import Awaitable, Callable

from app.core.errors import PollingTimeoutError, TranscriptionFailedError
from app.core.logging import get_logger
from app.core.transcription.base import JobStatus, TranscriptionProvider

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PollingCoordinator:
    """
    Waits for a provider job to reach a terminal status.

    Each attempt sleeps ``interval`` seconds, then fetches one status
    snapshot. The loop is bounded by ``max_attempts``; there is no backoff.
    The sleep is a cooperative suspension point, so other requests keep
    running, and cancelling the calling task stops the loop.
    """

    def __init__(
        self,
        provider: TranscriptionProvider,
        interval: float = 5.0,
        max_attempts: int = 20,
        sleep: Sleep = asyncio.sleep,
    ):
        self.provider = provider
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def wait_for_completion(self, job_id: str) -> str:
        """
        Poll until the job completes and return its text.

        Raises:
            TranscriptionFailedError: Provider reported failure, or completed
                without any text
            PollingTimeoutError: ``max_attempts`` fetches without a terminal status
            ProviderQueryError: Propagated from the provider, not retried
        """
        for attempt in range(1, self.max_attempts + 1):
            await self._sleep(self.interval)
            job = await self.provider.fetch_status(job_id)

            logger.debug(
                "transcription_poll",
                job_id=job_id,
                attempt=attempt,
                status=job.status.value,
            )

            if job.status is JobStatus.COMPLETED:
                if not job.text:
                    logger.error("transcription_empty", job_id=job_id, attempt=attempt)
                    raise TranscriptionFailedError("Transcription completed without text")
                logger.info(
                    "transcription_completed",
                    job_id=job_id,
                    attempts=attempt,
                    text_length=len(job.text),
                )
                return job.text

            if job.status is JobStatus.FAILED:
                logger.error(
                    "transcription_failed",
                    job_id=job_id,
                    attempt=attempt,
                    provider_error=job.error,
                )
                if job.error:
                    raise TranscriptionFailedError(f"Transcription failed: {job.error}")
                raise TranscriptionFailedError()

        logger.error(
            "transcription_poll_timeout",
            job_id=job_id,
            attempts=self.max_attempts,
            interval_seconds=self.interval,
        )
        raise PollingTimeoutError()
