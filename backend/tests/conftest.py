"""
Shared pytest fixtures for SpeechRelay tests.

Test categories:
    - Unit tests: one component at a time, remote APIs faked
    - Integration tests: the full FastAPI app over ASGI, remote APIs faked

Remote services:
    AssemblyAI and Supabase are replaced with in-process fakes plugged into
    httpx through ``httpx.MockTransport``, so the real clients run unchanged
    and no network access is needed.
"""

import json
import os
from collections.abc import AsyncGenerator
from datetime import datetime
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

# =============================================================================
# Environment Setup
# =============================================================================

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.config import Settings  # noqa: E402
from app.core.store.supabase import SupabaseTranscriptionStore  # noqa: E402
from app.core.transcription.assemblyai import AssemblyAIClient  # noqa: E402
from app.core.transcription.polling import PollingCoordinator  # noqa: E402
from app.core.transcription.service import TranscriptionService  # noqa: E402

ASSEMBLYAI_URL = "https://assemblyai.test"
SUPABASE_URL = "https://project.supabase.test"


# =============================================================================
# Remote service fakes
# =============================================================================


class FakeAssemblyAI:
    """
    Scripted AssemblyAI v2 API.

    ``statuses`` is consumed one entry per status fetch; the last entry
    repeats once the script runs out.
    """

    def __init__(
        self,
        statuses: list[str] | None = None,
        text: str = "hello world",
        error: str | None = None,
    ):
        self.statuses = list(statuses or ["completed"])
        self.text = text
        self.error = error
        self.upload_status = 200
        self.submit_status = 200
        self.poll_status = 200
        self.requests: list[httpx.Request] = []
        self.uploads: list[bytes] = []
        self.fetches = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/v2/upload":
            if self.upload_status != 200:
                return httpx.Response(self.upload_status, json={"error": "upload rejected"})
            self.uploads.append(request.content)
            return httpx.Response(200, json={"upload_url": "https://cdn.assemblyai.test/upload/abc"})

        if request.method == "POST" and path == "/v2/transcript":
            if self.submit_status != 200:
                return httpx.Response(self.submit_status, json={"error": "bad audio_url"})
            body = json.loads(request.content)
            return httpx.Response(
                200,
                json={"id": "job-123", "status": "queued", "audio_url": body["audio_url"]},
            )

        if request.method == "GET" and path.startswith("/v2/transcript/"):
            if self.poll_status != 200:
                return httpx.Response(self.poll_status, json={"error": "provider down"})
            index = min(self.fetches, len(self.statuses) - 1)
            status = self.statuses[index]
            self.fetches += 1
            payload: dict = {"id": path.rsplit("/", 1)[-1], "status": status, "text": None}
            if status == "completed":
                payload["text"] = self.text
            if status == "error":
                payload["error"] = self.error
            return httpx.Response(200, json=payload)

        return httpx.Response(404, json={"error": "not found"})

    @property
    def remote_calls(self) -> int:
        return len(self.requests)


class FakeSupabase:
    """In-memory PostgREST table supporting the filters the store uses."""

    def __init__(self, table: str = "transcriptions"):
        self.table = table
        self.rows: list[dict] = []
        self.next_id = 1
        self.fail_status: int | None = None
        self.requests: list[httpx.Request] = []

    def seed(self, transcription: str, created_at: str) -> dict:
        row = {"id": self.next_id, "transcription": transcription, "created_at": created_at}
        self.next_id += 1
        self.rows.append(row)
        return row

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path != f"/rest/v1/{self.table}":
            return httpx.Response(404, json={"message": f"relation {request.url.path} does not exist"})
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "database unavailable"})

        params = request.url.params

        if request.method == "POST":
            for item in json.loads(request.content):
                self.seed(item["transcription"], item["created_at"])
            return httpx.Response(201)

        if request.method == "GET":
            rows = list(self.rows)
            if params.get("order") == "created_at.desc":
                rows.sort(key=lambda r: datetime.fromisoformat(r["created_at"]), reverse=True)
            return httpx.Response(200, json=rows)

        if request.method == "DELETE":
            id_filter = params.get("id")
            if id_filter is None:
                return httpx.Response(400, json={"message": "DELETE requires a WHERE clause"})
            if id_filter == "not.is.null":
                self.rows = []
            elif id_filter.startswith("eq."):
                target = id_filter[3:]
                self.rows = [r for r in self.rows if str(r["id"]) != target]
            return httpx.Response(204)

        return httpx.Response(405)


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with fake credentials, isolated from any local .env file."""
    return Settings(
        _env_file=None,
        assemblyai_api_key="test-assemblyai-key",
        assemblyai_base_url=ASSEMBLYAI_URL,
        supabase_url=SUPABASE_URL,
        supabase_anon_key="test-anon-key",
        app_env="testing",
        debug=False,
        log_level="WARNING",
        poll_interval_seconds=0.0,
    )


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def fake_assemblyai() -> FakeAssemblyAI:
    return FakeAssemblyAI()


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Stand-in for asyncio.sleep that returns immediately and records calls."""
    return AsyncMock(return_value=None)


@pytest_asyncio.fixture
async def provider(fake_assemblyai: FakeAssemblyAI) -> AsyncGenerator[AssemblyAIClient, None]:
    client = AssemblyAIClient(
        api_key="test-assemblyai-key",
        base_url=ASSEMBLYAI_URL,
        transport=httpx.MockTransport(fake_assemblyai),
    )
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def store(fake_supabase: FakeSupabase) -> AsyncGenerator[SupabaseTranscriptionStore, None]:
    supabase_store = SupabaseTranscriptionStore(
        url=SUPABASE_URL,
        key="test-anon-key",
        transport=httpx.MockTransport(fake_supabase),
    )
    yield supabase_store
    await supabase_store.aclose()


@pytest.fixture
def coordinator(provider: AssemblyAIClient, no_sleep: AsyncMock) -> PollingCoordinator:
    return PollingCoordinator(provider, interval=5.0, max_attempts=20, sleep=no_sleep)


@pytest.fixture
def service(
    provider: AssemblyAIClient,
    coordinator: PollingCoordinator,
    store: SupabaseTranscriptionStore,
) -> TranscriptionService:
    return TranscriptionService(provider, coordinator, store)


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(
    test_settings: Settings,
    service: TranscriptionService,
    store: SupabaseTranscriptionStore,
) -> FastAPI:
    """Create test application wired to the faked components.

    Lifespan events are not triggered by ASGITransport, so the components
    are provided through dependency overrides.
    """
    from app.api.dependencies import get_transcription_service, get_transcription_store
    from app.main import create_app

    app_instance = create_app(test_settings)
    app_instance.dependency_overrides[get_transcription_service] = lambda: service
    app_instance.dependency_overrides[get_transcription_store] = lambda: store
    return app_instance


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def sample_audio_file() -> bytes:
    """Return minimal valid MP3 file bytes (silence)."""
    # Minimal valid MP3 frame
    return bytes([0xFF, 0xFB, 0x90, 0x00] + [0x00] * 100)
