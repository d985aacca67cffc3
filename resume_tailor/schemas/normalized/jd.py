from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ._caps import cap_list, dedupe_casefold

MAX_JD_SKILLS = 15
MAX_JD_LINES = 10


class JobDescription(BaseModel):
    title: str = "Job Position"
    company: str = "Company"
    skills: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)
    raw_text: str = ""

    @field_validator("skills", mode="before")
    @classmethod
    def _dedupe_skills(cls, value: object) -> list[str]:
        return cap_list(dedupe_casefold(value), MAX_JD_SKILLS)

    @field_validator("requirements", "responsibilities")
    @classmethod
    def _cap_lines(cls, value: list[str]) -> list[str]:
        return cap_list([item for item in value if item.strip()], MAX_JD_LINES)
