from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

TurnRole = Literal["assistant", "user"]
QuickReply = Literal["yes", "no", "edit"]


class DialogueStatus(str, Enum):
    NOT_STARTED = "not_started"
    AWAITING_ORACLE = "awaiting_oracle"
    AWAITING_USER = "awaiting_user"
    COMPLETE = "complete"


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: TurnRole
    content: str
    skill_being_probed: str | None = None
    context: str | None = None


class InterrogationState(BaseModel):
    turns: list[ConversationTurn] = Field(default_factory=list)
    is_complete: bool = False
    gaps_identified: list[str] = Field(default_factory=list)
    confirmed_skills: list[str] = Field(default_factory=list)
    summary: str | None = None


def _string_list(value: Any) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        return None
    return [str(item).strip() for item in value if str(item).strip()]


class OracleTurn(BaseModel):
    """One dialogue response from the oracle, in its camelCase wire shape.

    List fields stay ``None`` when the oracle omitted them so the engine can
    keep the values it already holds.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    question: str | None = None
    skill_being_probed: str | None = Field(default=None, alias="skillBeingProbed")
    context: str | None = None
    is_complete: bool = Field(default=False, alias="isComplete")
    gaps_identified: list[str] | None = Field(default=None, alias="gapsIdentified")
    confirmed_skills: list[str] | None = Field(default=None, alias="confirmedSkills")
    summary: str | None = None

    @field_validator("question", "skill_being_probed", "context", "summary", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("is_complete", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes"}
        return bool(value)

    @field_validator("gaps_identified", "confirmed_skills", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> list[str] | None:
        return _string_list(value)
