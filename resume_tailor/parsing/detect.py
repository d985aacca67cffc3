from __future__ import annotations

import logging

from .models import DocumentFormat

logger = logging.getLogger(__name__)

_MEDIA_TYPE_FORMATS = {
    "application/pdf": DocumentFormat.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentFormat.DOCX,
    "application/msword": DocumentFormat.DOCX,
    "text/plain": DocumentFormat.PLAIN_TEXT,
}

_SUFFIX_FORMATS = {
    ".pdf": DocumentFormat.PDF,
    ".docx": DocumentFormat.DOCX,
    ".doc": DocumentFormat.DOCX,
    ".txt": DocumentFormat.PLAIN_TEXT,
}


def detect_format(filename: str | None = None, media_type: str | None = None) -> DocumentFormat:
    """Classify an upload by declared media type, then by file name suffix.

    Unrecognised inputs come back as ``UNKNOWN``; callers decode those as text.
    """
    declared = (media_type or "").split(";", 1)[0].strip().lower()
    if declared in _MEDIA_TYPE_FORMATS:
        return _MEDIA_TYPE_FORMATS[declared]

    name = (filename or "").strip().lower()
    for suffix, detected in _SUFFIX_FORMATS.items():
        if name.endswith(suffix):
            return detected

    logger.info("format_detect_fallback media_type=%s suffix=%s", declared or "-", name.rsplit(".", 1)[-1] if "." in name else "-")
    return DocumentFormat.UNKNOWN
