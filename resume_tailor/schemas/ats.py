from __future__ import annotations

from pydantic import BaseModel, Field


class TailoredBullet(BaseModel):
    text: str = Field(min_length=1, max_length=500)
    is_modified: bool = False


class ATSBreakdown(BaseModel):
    skill_match: int = Field(default=0, ge=0, le=100)
    keyword_match: int = Field(default=0, ge=0, le=100)
    experience_relevance: int = Field(default=0, ge=0, le=100)
    title_match: int = Field(default=0, ge=0, le=100)


class ATSScoreResult(BaseModel):
    total: int = Field(ge=0, le=100)
    breakdown: ATSBreakdown
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    matched_keywords: list[str] = Field(default_factory=list, max_length=20)
    suggestions: list[str] = Field(default_factory=list)


class ATSComparison(BaseModel):
    original_score: ATSScoreResult
    new_score: ATSScoreResult
    improvement: int = Field(ge=0)
