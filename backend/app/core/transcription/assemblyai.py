"""AssemblyAI speech-to-text provider."""

from typing import Any

import httpx

from app.core.errors import (
    InvalidInputError,
    ProviderQueryError,
    SubmissionError,
    UploadError,
)
from app.core.logging import get_logger
from app.core.transcription.base import JobStatus, TranscriptionJob, TranscriptionProvider

logger = get_logger(__name__)


def _json_object(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, raising ValueError for anything else."""
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _error_detail(exc: Exception) -> str:
    """Short human-readable description of a failed provider call."""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        try:
            message = _json_object(response).get("error")
        except ValueError:
            message = None
        return f"HTTP {response.status_code}: {message or response.reason_phrase}"
    return str(exc) or exc.__class__.__name__


class AssemblyAIClient(TranscriptionProvider):
    """
    AssemblyAI provider using the v2 REST API.

    A transcription is three calls:
    - POST /v2/upload with the raw bytes -> upload_url
    - POST /v2/transcript referencing the upload_url -> job id
    - GET /v2/transcript/{id} for status snapshots
    """

    UPLOAD_PATH = "/v2/upload"
    TRANSCRIPT_PATH = "/v2/transcript"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.assemblyai.com",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        client_kwargs: dict[str, Any] = {
            "base_url": base_url,
            "headers": {"Authorization": api_key},
        }
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)

    @property
    def name(self) -> str:
        return "assemblyai"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit(self, audio_data: bytes) -> str:
        """
        Upload audio and start a transcription job.

        Args:
            audio_data: Raw audio bytes, must be non-empty

        Returns:
            Provider-assigned job id

        Raises:
            InvalidInputError: Empty payload (no remote call is made)
            UploadError: The upload call failed
            SubmissionError: The job creation call failed
        """
        if not audio_data:
            raise InvalidInputError()

        audio_url = await self._upload(audio_data)
        logger.info("audio_uploaded", provider=self.name, size_bytes=len(audio_data))

        job_id = await self._create_job(audio_url)
        logger.info("transcription_started", provider=self.name, job_id=job_id)
        return job_id

    async def _upload(self, audio_data: bytes) -> str:
        try:
            response = await self._client.post(
                self.UPLOAD_PATH,
                content=audio_data,
                headers={"Content-Type": "application/octet-stream"},
            )
            response.raise_for_status()
            upload_url = _json_object(response).get("upload_url")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("audio_upload_failed", provider=self.name, error=_error_detail(e))
            raise UploadError(f"Audio upload failed: {_error_detail(e)}") from e

        if not upload_url:
            raise UploadError("Audio upload failed: response has no upload_url")
        return upload_url

    async def _create_job(self, audio_url: str) -> str:
        try:
            response = await self._client.post(
                self.TRANSCRIPT_PATH,
                json={"audio_url": audio_url},
            )
            response.raise_for_status()
            job_id = _json_object(response).get("id")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("transcription_submit_failed", provider=self.name, error=_error_detail(e))
            raise SubmissionError(f"Transcription request failed: {_error_detail(e)}") from e

        if not job_id:
            raise SubmissionError("Transcription request failed: response has no job id")
        return str(job_id)

    async def fetch_status(self, job_id: str) -> TranscriptionJob:
        """
        Fetch a status snapshot for a job.

        Raises:
            ProviderQueryError: Transport failure or unusable response
        """
        try:
            response = await self._client.get(f"{self.TRANSCRIPT_PATH}/{job_id}")
            response.raise_for_status()
            data = _json_object(response)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                "transcription_status_failed",
                provider=self.name,
                job_id=job_id,
                error=_error_detail(e),
            )
            raise ProviderQueryError(
                f"Transcription status check failed: {_error_detail(e)}"
            ) from e

        status = JobStatus.from_provider(data.get("status"))
        return TranscriptionJob(
            id=str(data.get("id") or job_id),
            status=status,
            text=data.get("text") if status is JobStatus.COMPLETED else None,
            error=data.get("error") if status is JobStatus.FAILED else None,
        )
