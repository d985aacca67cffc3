from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, Sequence

from pydantic import BaseModel, Field, ValidationError

from resume_tailor.schemas.ats import TailoredBullet
from resume_tailor.schemas.interrogation import ConversationTurn
from resume_tailor.schemas.normalized import JobDescription, ResumeProfile

logger = logging.getLogger(__name__)

MAX_TITLE_CHARS = 200
MAX_SKILLS = 50
MAX_SKILL_CHARS = 100
MAX_JD_LINES = 20
MAX_LINE_CHARS = 500
MAX_HISTORY_TURNS = 20
MAX_TURN_CHARS = 5000
MAX_ANSWER_CHARS = 2000
MAX_RAW_TEXT_CHARS = 50000

SkillText = Annotated[str, Field(max_length=MAX_SKILL_CHARS)]
LineText = Annotated[str, Field(max_length=MAX_LINE_CHARS)]


class OracleRequestInvalid(ValueError):
    def __init__(self, field_errors: dict[str, list[str]]):
        fields = ", ".join(sorted(field_errors)) or "request"
        super().__init__(f"Request exceeds allowed limits: {fields}")
        self.field_errors = field_errors


class OracleJobDescription(BaseModel):
    title: str = Field(max_length=MAX_TITLE_CHARS)
    company: str = Field(default="", max_length=MAX_TITLE_CHARS)
    skills: list[SkillText] = Field(default_factory=list, max_length=MAX_SKILLS)
    requirements: list[LineText] = Field(default_factory=list, max_length=MAX_JD_LINES)
    responsibilities: list[LineText] = Field(default_factory=list, max_length=MAX_JD_LINES)
    raw_text: str = Field(default="", max_length=MAX_RAW_TEXT_CHARS)


class OracleExperience(BaseModel):
    title: str = Field(max_length=MAX_TITLE_CHARS)
    company: str = Field(default="", max_length=MAX_TITLE_CHARS)
    bullets: list[LineText] = Field(default_factory=list, max_length=40)


class OracleResume(BaseModel):
    name: str = Field(default="", max_length=MAX_TITLE_CHARS)
    title: str = Field(default="", max_length=MAX_TITLE_CHARS)
    skills: list[SkillText] = Field(default_factory=list, max_length=MAX_SKILLS)
    experience: list[OracleExperience] = Field(default_factory=list, max_length=MAX_JD_LINES)
    raw_text: str = Field(default="", max_length=MAX_RAW_TEXT_CHARS)


class HistoryTurn(BaseModel):
    role: Literal["assistant", "user"]
    content: str = Field(max_length=MAX_TURN_CHARS)


class InterrogationRequest(BaseModel):
    job_description: OracleJobDescription
    resume: OracleResume
    conversation_history: list[HistoryTurn] = Field(default_factory=list, max_length=MAX_HISTORY_TURNS)
    user_answer: str | None = Field(default=None, max_length=MAX_ANSWER_CHARS)


class ScoringRequest(BaseModel):
    job_description: OracleJobDescription
    resume: OracleResume
    confirmed_skills: list[SkillText] = Field(default_factory=list, max_length=MAX_SKILLS)
    tailored_experience: list[TailoredBullet] | None = Field(default=None, max_length=40)


def field_errors_from(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for item in exc.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "request"
        errors.setdefault(location, []).append(str(item.get("msg", "invalid value")))
    return errors


def _validate(model: type[BaseModel], payload: dict[str, Any]) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise OracleRequestInvalid(field_errors_from(exc)) from exc


def _resume_payload(resume: ResumeProfile) -> dict[str, Any]:
    # Analyzer-derived skills are trimmed to the cap in first-appearance order.
    payload = resume.model_dump()
    if len(payload["skills"]) > MAX_SKILLS:
        logger.warning("oracle_request_skills_capped skills=%s max=%s", len(payload["skills"]), MAX_SKILLS)
        payload["skills"] = payload["skills"][:MAX_SKILLS]
    return payload


def validate_interrogation_request(
    job_description: JobDescription,
    resume: ResumeProfile,
    history: Sequence[ConversationTurn],
    user_answer: str | None = None,
) -> InterrogationRequest:
    return _validate(
        InterrogationRequest,
        {
            "job_description": job_description.model_dump(),
            "resume": _resume_payload(resume),
            "conversation_history": [{"role": turn.role, "content": turn.content} for turn in history],
            "user_answer": user_answer,
        },
    )


def validate_scoring_request(
    job_description: JobDescription,
    resume: ResumeProfile,
    confirmed_skills: Sequence[str],
    tailored_experience: Sequence[TailoredBullet] | None = None,
) -> ScoringRequest:
    return _validate(
        ScoringRequest,
        {
            "job_description": job_description.model_dump(),
            "resume": _resume_payload(resume),
            "confirmed_skills": list(confirmed_skills),
            "tailored_experience": (
                [item.model_dump() for item in tailored_experience] if tailored_experience is not None else None
            ),
        },
    )
