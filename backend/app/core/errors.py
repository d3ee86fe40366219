"""Error taxonomy for the transcription relay.

Every failure a component can raise is a ``RelayError``. The API layer renders
any of them as ``{"error": message}`` with the error's ``status_code``.
"""

from fastapi import status


class RelayError(Exception):
    """Base class for all expected relay failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(RelayError):
    """Missing or empty audio payload (client fault)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "No file uploaded"


# Provider transport / API faults


class ProviderError(RelayError):
    default_message = "Speech-to-text provider error"


class UploadError(ProviderError):
    default_message = "Audio upload failed"


class SubmissionError(ProviderError):
    default_message = "Transcription request failed"


class ProviderQueryError(ProviderError):
    default_message = "Transcription status check failed"


# Job outcomes


class TranscriptionFailedError(RelayError):
    """The provider reported the job as failed."""

    default_message = "Transcription failed"


class PollingTimeoutError(RelayError):
    """The polling ceiling was reached without a terminal status."""

    default_message = "Transcription polling timed out."


# Persistence faults


class StoreError(RelayError):
    default_message = "Transcription store error"


class StoreReadError(StoreError):
    default_message = "Supabase Fetch Error"


class StoreWriteError(StoreError):
    default_message = "Supabase Write Error"
