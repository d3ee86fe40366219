"""Supabase transcription store over the PostgREST HTTP interface."""

from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from app.core.errors import StoreReadError, StoreWriteError
from app.core.logging import get_logger
from app.core.store.base import TranscriptionRecord, TranscriptionStore

logger = get_logger(__name__)

_records_adapter = TypeAdapter(list[TranscriptionRecord])


def _error_detail(exc: Exception) -> str:
    """Prefer PostgREST's ``message`` field when the body carries one."""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {response.status_code} {response.reason_phrase}"
    return str(exc) or exc.__class__.__name__


class SupabaseTranscriptionStore(TranscriptionStore):
    """
    Stores transcriptions in a Supabase table.

    Table layout: ``id`` (assigned by the database), ``transcription`` (text),
    ``created_at`` (timestamptz). Ordering and isolation are left to the
    database.
    """

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "transcriptions",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        client_kwargs: dict[str, Any] = {
            "base_url": f"{url}/rest/v1",
            "headers": {
                "apikey": key,
                "Authorization": f"Bearer {key}",
            },
        }
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)
        self.table = table

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def _path(self) -> str:
        return f"/{self.table}"

    async def insert(self, text: str) -> None:
        created_at = datetime.now(timezone.utc).isoformat()
        try:
            response = await self._client.post(
                self._path,
                json=[{"transcription": text, "created_at": created_at}],
                headers={"Prefer": "return=minimal"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("store_insert_failed", table=self.table, error=_error_detail(e))
            raise StoreWriteError(f"Supabase Insert Error: {_error_detail(e)}") from e

        logger.info("transcription_saved", table=self.table, text_length=len(text))

    async def list_all(self) -> list[TranscriptionRecord]:
        try:
            response = await self._client.get(
                self._path,
                params={"select": "*", "order": "created_at.desc"},
            )
            response.raise_for_status()
            records = _records_adapter.validate_python(response.json())
        except (httpx.HTTPError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            detail = "malformed rows" if isinstance(e, ValidationError) else _error_detail(e)
            logger.error("store_fetch_failed", table=self.table, error=detail)
            raise StoreReadError(f"Supabase Fetch Error: {detail}") from e

        return records

    async def delete_by_id(self, record_id: str) -> None:
        await self._delete({"id": f"eq.{record_id}"})
        logger.info("transcription_deleted", table=self.table, record_id=record_id)

    async def delete_all(self) -> None:
        # PostgREST refuses an unfiltered DELETE
        await self._delete({"id": "not.is.null"})
        logger.info("transcriptions_cleared", table=self.table)

    async def _delete(self, params: dict[str, str]) -> None:
        try:
            response = await self._client.delete(self._path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("store_delete_failed", table=self.table, error=_error_detail(e))
            raise StoreWriteError(f"Supabase Delete Error: {_error_detail(e)}") from e
