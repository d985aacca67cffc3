from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentFormat(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    PLAIN_TEXT = "txt"
    UNKNOWN = "unknown"


class RawDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: bytes
    media_type: str = ""
    filename: str = ""

    @property
    def size(self) -> int:
        return len(self.content)


class ParsedDoc(BaseModel):
    doc_id: str
    source_type: str
    filename: str = ""
    text: str
    truncated: bool = False
    extractor: str = "text"
    parsing_warnings: list[str] = Field(default_factory=list)

    @field_validator("source_type")
    @classmethod
    def _validate_source_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"pdf", "docx", "txt"}:
            raise ValueError("source_type must be one of: pdf, docx, txt")
        return normalized
