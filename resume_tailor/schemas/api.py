from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from resume_tailor.schemas.ats import ATSComparison, TailoredBullet
from resume_tailor.schemas.interrogation import ConversationTurn, DialogueStatus, QuickReply
from resume_tailor.schemas.normalized import JobDescription, ResumeProfile


class ExtractedDocumentResponse(BaseModel):
    doc_id: str
    source_type: str
    filename: str
    extractor: str
    truncated: bool
    characters: int
    parsing_warnings: list[str] = Field(default_factory=list)
    text: str


class InterrogationView(BaseModel):
    status: DialogueStatus
    turns: list[ConversationTurn] = Field(default_factory=list)
    is_complete: bool = False
    gaps_identified: list[str] = Field(default_factory=list)
    confirmed_skills: list[str] = Field(default_factory=list)
    summary: str | None = None


class SessionCreatedResponse(BaseModel):
    session_id: str
    status: str
    resume: ResumeProfile
    job_description: JobDescription
    parsing_warnings: list[str] = Field(default_factory=list)


class SessionResponse(BaseModel):
    session_id: str
    status: str
    created_at: datetime
    updated_at: datetime
    original_filename: str
    resume: ResumeProfile
    job_description: JobDescription
    interrogation: InterrogationView
    ats: ATSComparison | None = None


class AnswerRequest(BaseModel):
    text: str | None = Field(default=None, max_length=2000)
    quick_reply: QuickReply | None = None

    @model_validator(mode="after")
    def _one_answer(self) -> "AnswerRequest":
        has_text = bool((self.text or "").strip())
        if has_text == (self.quick_reply is not None):
            raise ValueError("Provide either text or quick_reply.")
        return self


class ATSScoreRequest(BaseModel):
    confirmed_skills: list[str] | None = None
    tailored_experience: list[TailoredBullet] | None = None


class JobFromUrlRequest(BaseModel):
    url: str = Field(min_length=1, max_length=2048)


class JobFromUrlResponse(BaseModel):
    url: str
    final_url: str
    domain: str
    characters: int
    job_description_text: str
    job_description: JobDescription
