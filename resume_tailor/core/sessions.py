from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Literal

from resume_tailor.core.config import settings
from resume_tailor.parsing.models import ParsedDoc, RawDocument
from resume_tailor.schemas.ats import ATSComparison
from resume_tailor.schemas.normalized import JobDescription, ResumeProfile
from resume_tailor.services.interrogation_service import InterrogationEngine

SessionStatus = Literal["in_progress", "completed"]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TailorSession:
    """Everything one tailoring run owns.

    The original upload is kept here so a later download step can re-embed it.
    """

    session_id: str
    original_document: RawDocument
    parsed_resume: ParsedDoc
    resume: ResumeProfile
    job_description: JobDescription
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
    engine: InterrogationEngine | None = None
    ats_comparison: ATSComparison | None = None
    status: SessionStatus = "in_progress"

    def touch(self) -> None:
        self.updated_at = _utc_now()


class SessionStore:
    def __init__(self, ttl_minutes: int = 120):
        self._ttl = timedelta(minutes=max(1, int(ttl_minutes)))
        self._sessions: dict[str, TailorSession] = {}
        self._lock = threading.Lock()

    def create(
        self,
        *,
        original_document: RawDocument,
        parsed_resume: ParsedDoc,
        resume: ResumeProfile,
        job_description: JobDescription,
    ) -> TailorSession:
        self.purge_expired()
        session = TailorSession(
            session_id=secrets.token_urlsafe(12),
            original_document=original_document,
            parsed_resume=parsed_resume,
            resume=resume,
            job_description=job_description,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> TailorSession | None:
        now = _utc_now()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.updated_at + self._ttl <= now:
                del self._sessions[session_id]
                return None
            return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def purge_expired(self) -> int:
        cutoff = _utc_now() - self._ttl
        with self._lock:
            expired = [key for key, session in self._sessions.items() if session.updated_at <= cutoff]
            for key in expired:
                del self._sessions[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    return SessionStore(ttl_minutes=settings.session_ttl_minutes)
