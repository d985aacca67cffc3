import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import Response

from resume_tailor.ai.types import OracleClient
from resume_tailor.api.v1.dependencies import get_oracle, get_scoring_client, get_session, read_upload
from resume_tailor.api.v1.errors import HANDLED_ERRORS, raise_http_error
from resume_tailor.core.config import settings
from resume_tailor.core.rate_limit import rate_limit
from resume_tailor.core.sessions import SessionStore, TailorSession, get_session_store
from resume_tailor.normalize import normalize_jd, normalize_resume
from resume_tailor.parsing import parse_document
from resume_tailor.parsing.parse import bound_text
from resume_tailor.schemas.api import (
    AnswerRequest,
    ATSScoreRequest,
    InterrogationView,
    SessionCreatedResponse,
    SessionResponse,
)
from resume_tailor.schemas.ats import ATSComparison
from resume_tailor.schemas.interrogation import DialogueStatus
from resume_tailor.services.ats_service import ATSScoringClient
from resume_tailor.services.interrogation_service import InterrogationEngine, expand_quick_reply

logger = logging.getLogger(__name__)

router = APIRouter()


def _interrogation_view(session: TailorSession) -> InterrogationView:
    engine = session.engine
    if engine is None:
        return InterrogationView(status=DialogueStatus.NOT_STARTED)
    state = engine.state
    return InterrogationView(
        status=engine.status,
        turns=list(state.turns),
        is_complete=state.is_complete,
        gaps_identified=list(state.gaps_identified),
        confirmed_skills=list(state.confirmed_skills),
        summary=state.summary,
    )


@router.post("/sessions", response_model=SessionCreatedResponse, status_code=status.HTTP_201_CREATED)
@rate_limit()
async def create_session(
    request: Request,
    resume: UploadFile = File(...),
    job_description_text: str | None = Form(default=None),
    job_description_file: UploadFile | None = File(default=None),
    store: SessionStore = Depends(get_session_store),
):
    _ = request
    raw_resume = await read_upload(resume)
    parsed_resume = parse_document(raw_resume)
    warnings = list(parsed_resume.parsing_warnings)

    jd_text = (job_description_text or "").strip()
    if not jd_text and job_description_file is not None:
        parsed_jd = parse_document(await read_upload(job_description_file))
        jd_text = parsed_jd.text.strip()
        warnings.extend(f"Job description: {item}" for item in parsed_jd.parsing_warnings)
    if not jd_text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide the job description as text or as a file.",
        )
    jd_text, jd_truncated = bound_text(jd_text)
    if jd_truncated:
        warnings.append(f"Job description truncated to {len(jd_text)} characters.")

    if not parsed_resume.text.strip():
        warnings.append("No text could be extracted from the resume.")

    session = store.create(
        original_document=raw_resume,
        parsed_resume=parsed_resume,
        resume=normalize_resume(parsed_resume.text),
        job_description=normalize_jd(jd_text),
    )
    logger.info(
        "session_created doc_id=%s resume_skills=%s jd_skills=%s",
        parsed_resume.doc_id,
        len(session.resume.skills),
        len(session.job_description.skills),
    )
    return SessionCreatedResponse(
        session_id=session.session_id,
        status=session.status,
        resume=session.resume,
        job_description=session.job_description,
        parsing_warnings=warnings,
    )


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def read_session(session: TailorSession = Depends(get_session)):
    return SessionResponse(
        session_id=session.session_id,
        status=session.status,
        created_at=session.created_at,
        updated_at=session.updated_at,
        original_filename=session.original_document.filename,
        resume=session.resume,
        job_description=session.job_description,
        interrogation=_interrogation_view(session),
        ats=session.ats_comparison,
    )


@router.get("/sessions/{session_id}/original")
async def download_original(session: TailorSession = Depends(get_session)):
    original = session.original_document
    filename = original.filename.replace('"', "") or "resume"
    return Response(
        content=original.content,
        media_type=original.media_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/sessions/{session_id}/interrogation/start", response_model=InterrogationView)
@rate_limit()
async def start_interrogation(
    request: Request,
    session: TailorSession = Depends(get_session),
    oracle: OracleClient = Depends(get_oracle),
):
    _ = request
    # A failed start leaves the engine NOT_STARTED; rebind it to the current client.
    if session.engine is None or session.engine.status == DialogueStatus.NOT_STARTED:
        session.engine = InterrogationEngine(
            oracle,
            timeout_s=settings.oracle_timeout_s,
            max_turns=settings.interrogation_max_turns,
        )
    try:
        await session.engine.start(session.job_description, session.resume)
    except HANDLED_ERRORS as exc:
        raise_http_error(exc)
    session.touch()
    return _interrogation_view(session)


@router.post("/sessions/{session_id}/interrogation/answer", response_model=InterrogationView)
@rate_limit()
async def answer_interrogation(
    request: Request,
    payload: AnswerRequest,
    session: TailorSession = Depends(get_session),
):
    _ = request
    if session.engine is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "interrogation_state", "message": "The interrogation has not started yet."},
        )
    text = payload.text if payload.quick_reply is None else expand_quick_reply(payload.quick_reply)
    try:
        await session.engine.send_answer(text or "")
    except HANDLED_ERRORS as exc:
        raise_http_error(exc)
    session.touch()
    return _interrogation_view(session)


@router.post("/sessions/{session_id}/ats-score", response_model=ATSComparison)
@rate_limit()
async def score_session(
    request: Request,
    payload: ATSScoreRequest,
    session: TailorSession = Depends(get_session),
    scoring: ATSScoringClient = Depends(get_scoring_client),
):
    _ = request
    confirmed = payload.confirmed_skills
    if confirmed is None:
        confirmed = list(session.engine.state.confirmed_skills) if session.engine else []
    try:
        comparison = await scoring.score(
            session.job_description,
            session.resume,
            confirmed,
            payload.tailored_experience,
        )
    except HANDLED_ERRORS as exc:
        raise_http_error(exc)
    session.ats_comparison = comparison
    if session.engine is not None and session.engine.is_complete:
        session.status = "completed"
    session.touch()
    return comparison
