from __future__ import annotations

import hashlib
import logging

from resume_tailor.core.config import settings

from .detect import detect_format
from .docx_text import extract_docx_text
from .models import DocumentFormat, ParsedDoc, RawDocument
from .pdf_text import extract_pdf_text

logger = logging.getLogger(__name__)


def _compute_doc_id(text: str, raw: RawDocument) -> str:
    seed = text.encode("utf-8", errors="ignore") if text.strip() else (raw.filename.encode("utf-8") + raw.content[:4096])
    return hashlib.sha256(seed).hexdigest()[:16]


def decode_plain_text(content: bytes) -> str:
    if content.startswith((b"\xff\xfe", b"\xfe\xff")):
        try:
            return content.decode("utf-16")
        except UnicodeDecodeError:
            pass
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def bound_text(text: str, max_chars: int | None = None) -> tuple[str, bool]:
    limit = settings.max_extracted_chars if max_chars is None else max_chars
    if len(text) <= limit:
        return text, False
    return text[:limit], True


def parse_document(raw: RawDocument, *, max_chars: int | None = None) -> ParsedDoc:
    """Turn an upload into bounded plain text; never fails on content alone."""
    detected = detect_format(raw.filename, raw.media_type)
    warnings: list[str] = []

    if detected is DocumentFormat.PDF:
        source_type = "pdf"
        text, extractor, warnings = extract_pdf_text(raw.content, library_first=settings.pdf_library_first)
    elif detected is DocumentFormat.DOCX:
        source_type = "docx"
        text, extractor, warnings = extract_docx_text(raw.content)
    else:
        source_type = "txt"
        extractor = "text"
        text = decode_plain_text(raw.content)
        if detected is DocumentFormat.UNKNOWN:
            warnings.append("Unrecognised file type; read as plain text.")

    text, truncated = bound_text(text, max_chars)
    if truncated:
        warnings.append(f"Text truncated to {len(text)} characters.")

    logger.info(
        "document_parsed source_type=%s extractor=%s bytes=%s chars=%s truncated=%s",
        source_type,
        extractor,
        raw.size,
        len(text),
        truncated,
    )
    return ParsedDoc(
        doc_id=_compute_doc_id(text, raw),
        source_type=source_type,
        filename=raw.filename,
        text=text,
        truncated=truncated,
        extractor=extractor,
        parsing_warnings=warnings,
    )
