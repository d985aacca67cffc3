from __future__ import annotations

import html
from io import BytesIO
import logging
import re
from zipfile import BadZipFile, ZipFile

import defusedxml.ElementTree as ET

logger = logging.getLogger(__name__)

_TEXT_RUN_RE = re.compile(r"<w:t(?:\s[^>]*)?>(.*?)</w:t>", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")


def _printable_view(content: bytes) -> str:
    chars: list[str] = []
    for value in content:
        if 32 <= value <= 126:
            chars.append(chr(value))
        elif value in (10, 13):
            chars.append("\n")
    return "".join(chars)


def scan_docx_text(content: bytes) -> str:
    """Pull ``<w:t>`` runs out of raw bytes without opening the archive.

    Only works where the XML is stored uncompressed; anything else yields
    whatever runs happen to be readable.
    """
    view = _printable_view(content)
    runs: list[str] = []
    for match in _TEXT_RUN_RE.finditer(view):
        value = html.unescape(_TAG_RE.sub("", match.group(1)))
        if value.strip():
            runs.append(value)
    return re.sub(r"\s+", " ", " ".join(runs)).strip()


def _document_xml_text(content: bytes) -> str:
    with ZipFile(BytesIO(content)) as archive:
        raw = archive.read("word/document.xml")
    root = ET.fromstring(raw)
    paragraphs: list[str] = []
    for paragraph in root.iter():
        if not paragraph.tag.endswith("}p"):
            continue
        texts = [node.text for node in paragraph.iter() if node.tag.endswith("}t") and node.text]
        line = "".join(texts).strip()
        if line:
            paragraphs.append(line)
    return "\n".join(paragraphs)


def _python_docx_text(content: bytes) -> str:
    from docx import Document

    document = Document(BytesIO(content))
    lines = [paragraph.text.strip() for paragraph in document.paragraphs if paragraph.text and paragraph.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text and cell.text.strip()]
            if cells:
                lines.append(" | ".join(dict.fromkeys(cells)))
    return "\n".join(lines)


def extract_docx_text(content: bytes) -> tuple[str, str, list[str]]:
    """Return ``(text, extractor, warnings)`` for a Word upload."""
    warnings: list[str] = []
    try:
        text = _python_docx_text(content)
        if text.strip():
            return text, "python-docx", warnings
    except Exception as exc:  # noqa: BLE001 - fall through to the archive scan
        logger.info("docx_library_failed error=%s", type(exc).__name__)

    try:
        text = _document_xml_text(content)
        if text.strip():
            warnings.append("python-docx could not read this file; used archive XML scan.")
            return text, "zipxml", warnings
    except (BadZipFile, KeyError, ValueError, ET.ParseError) as exc:
        logger.info("docx_zipxml_failed error=%s", type(exc).__name__)

    warnings.append("Document is not a readable Word archive; used raw byte scan.")
    text = scan_docx_text(content)
    if not text:
        warnings.append("No extractable text found in DOCX.")
    return text, "docx-scan", warnings
