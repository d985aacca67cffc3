from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ._caps import cap_list, dedupe_casefold

MAX_BULLETS = 15
MAX_BULLET_CHARS = 500


class ExperienceEntry(BaseModel):
    title: str
    company: str
    bullets: list[str] = Field(default_factory=list)

    @field_validator("bullets")
    @classmethod
    def _cap_bullets(cls, value: list[str]) -> list[str]:
        return cap_list([item for item in value if item.strip()], MAX_BULLETS, MAX_BULLET_CHARS)


class ResumeProfile(BaseModel):
    name: str = ""
    title: str = ""
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    raw_text: str = ""

    @field_validator("skills", mode="before")
    @classmethod
    def _dedupe_skills(cls, value: object) -> list[str]:
        return dedupe_casefold(value)
