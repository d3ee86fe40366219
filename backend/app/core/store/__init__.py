"""Transcription persistence."""

from app.core.store.base import TranscriptionRecord, TranscriptionStore
from app.core.store.supabase import SupabaseTranscriptionStore

__all__ = ["TranscriptionRecord", "TranscriptionStore", "SupabaseTranscriptionStore"]
