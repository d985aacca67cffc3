from __future__ import annotations

from fastapi import Depends, HTTPException, UploadFile, status

from resume_tailor.ai.errors import OracleError
from resume_tailor.ai.factory import get_oracle_client
from resume_tailor.ai.types import OracleClient
from resume_tailor.api.v1.errors import raise_http_error
from resume_tailor.core.config import settings
from resume_tailor.core.sessions import SessionStore, TailorSession, get_session_store
from resume_tailor.parsing import RawDocument
from resume_tailor.services.ats_service import ATSScoringClient, HeuristicScoringOracle, LLMScoringOracle

UPLOAD_CHUNK_BYTES = 64 * 1024


def get_oracle() -> OracleClient:
    try:
        return get_oracle_client()
    except OracleError as exc:
        raise_http_error(exc)


def get_scoring_client() -> ATSScoringClient:
    if settings.scoring_backend == "llm":
        return ATSScoringClient(LLMScoringOracle(get_oracle(), timeout_s=settings.oracle_timeout_s))
    return ATSScoringClient(HeuristicScoringOracle())


def get_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> TailorSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found or expired.")
    return session


async def read_upload(file: UploadFile, *, max_bytes: int | None = None) -> RawDocument:
    limit = settings.max_upload_bytes if max_bytes is None else max_bytes
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum allowed size is {limit // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    content = b"".join(chunks)
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")
    return RawDocument(
        content=content,
        media_type=file.content_type or "",
        filename=file.filename or "uploaded-file",
    )
