"""PDF text recovery.

Real uploads go through ``pypdf`` first. When that fails or finds almost
nothing, a format-unaware scanner walks the raw bytes:

1. ``beginbfchar`` CMap tables map glyph codes to unicode,
2. ``BT ... ET`` text objects yield ``Tj`` / ``TJ`` strings in document order,
3. too few fragments triggers a scan for bare ``(Word ...)`` literals,
4. every ``stream ... endstream`` body is searched for leftover words.

The scanner never raises; unreadable input produces an empty string.
"""
from __future__ import annotations

from io import BytesIO
import logging
import re
import zlib

logger = logging.getLogger(__name__)

LIBRARY_MIN_CHARS = 40
MIN_TEXT_FRAGMENTS = 5
MAX_INFLATED_BYTES = 4 * 1024 * 1024

_BFCHAR_BLOCK_RE = re.compile(r"beginbfchar(.*?)endbfchar", re.DOTALL)
_BFCHAR_ENTRY_RE = re.compile(r"<([0-9A-Fa-f]+)>\s*<([0-9A-Fa-f]+)>")
_TEXT_OBJECT_RE = re.compile(r"(?<![A-Za-z])BT(?![A-Za-z])(.*?)(?<![A-Za-z])ET(?![A-Za-z])", re.DOTALL)
_TEXT_OPERATOR_RE = re.compile(
    r"\((?P<literal>(?:\\.|[^\\)])*)\)\s*Tj"
    r"|\[(?P<array>(?:\\.|[^\]\\])*)\]\s*TJ"
    r"|<(?P<hex>[0-9A-Fa-f\s]+)>\s*Tj",
    re.DOTALL,
)
_ARRAY_ITEM_RE = re.compile(
    r"\((?P<literal>(?:\\.|[^\\)])*)\)|<(?P<hex>[0-9A-Fa-f\s]+)>|(?P<number>-?\d+(?:\.\d+)?)"
)
_ESCAPE_RE = re.compile(r"\\([0-7]{1,3}|\r\n|[\s\S])")
_BARE_LITERAL_RE = re.compile(r"\(([A-Za-z][A-Za-z0-9 .,;:'&/+#%!?-]+)\)")
_STREAM_RE = re.compile(rb"stream\r?\n(.*?)endstream", re.DOTALL)
_STREAM_WORD_RE = re.compile(r"[A-Za-z]{3,}")
_STREAM_DICT_TAIL = 200

# Text operators plus PDF names that never occur as ordinary words.
_PDF_SYNTAX_TOKENS = {
    "BT", "ET", "Tj", "TJ", "Tf", "BDC", "EMC", "BMC", "MCID", "ActualText",
    "ExtGState", "XObject", "FontFile", "FlateDecode", "DecodeParms", "ProcSet",
}

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f", "(": "(", ")": ")", "\\": "\\"}
_KERNING_SPACE_THRESHOLD = -200.0


def _unescape_literal(raw: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        token = match.group(1)
        if token[0] in "01234567":
            return chr(int(token, 8) & 0xFF)
        if token in {"\n", "\r", "\r\n"}:
            return ""
        return _ESCAPES.get(token, token)

    return _ESCAPE_RE.sub(_replace, raw)


def parse_cmap(pdf_text: str) -> dict[str, str]:
    """Collect ``beginbfchar`` entries into an upper-case hex code -> character table."""
    table: dict[str, str] = {}
    for block in _BFCHAR_BLOCK_RE.finditer(pdf_text):
        for source, target in _BFCHAR_ENTRY_RE.findall(block.group(1)):
            code_point = int(target, 16)
            if code_point <= 31 or code_point >= 65536:
                continue
            table[source.upper()] = chr(code_point)
    return table


def _printable_ascii(value: int) -> str:
    return chr(value) if 32 <= value < 127 else ""


def decode_hex_string(raw: str, cmap: dict[str, str]) -> str:
    digits = re.sub(r"\s+", "", raw).upper()
    if not digits:
        return ""
    if len(digits) % 2:
        digits += "0"

    if len(digits) % 4 == 0:
        wide = [digits[i : i + 4] for i in range(0, len(digits), 4)]
        if any(code in cmap for code in wide):
            return "".join(cmap.get(code) or _printable_ascii(int(code, 16)) for code in wide)

    narrow = [digits[i : i + 2] for i in range(0, len(digits), 2)]
    return "".join(cmap.get(code) or _printable_ascii(int(code, 16)) for code in narrow)


def _decode_text_array(raw: str, cmap: dict[str, str]) -> str:
    parts: list[str] = []
    for item in _ARRAY_ITEM_RE.finditer(raw):
        if item.group("literal") is not None:
            parts.append(_unescape_literal(item.group("literal")))
        elif item.group("hex") is not None:
            parts.append(decode_hex_string(item.group("hex"), cmap))
        elif float(item.group("number")) <= _KERNING_SPACE_THRESHOLD:
            parts.append(" ")
    return "".join(parts)


def _inflate_streams(content: bytes, budget: int = MAX_INFLATED_BYTES) -> list[str]:
    """Inflate FlateDecode streams so their text objects can be scanned too.

    Output across all streams is limited to ``budget`` bytes; a stream that
    would exceed it is cut short and later streams are skipped.
    """
    inflated: list[str] = []
    remaining = budget
    for match in _STREAM_RE.finditer(content):
        if remaining <= 0:
            logger.warning("pdf_inflate_budget_spent budget=%s", budget)
            break
        header = content[max(0, match.start() - _STREAM_DICT_TAIL) : match.start()]
        if b"FlateDecode" not in header:
            continue
        try:
            chunk = zlib.decompressobj().decompress(match.group(1), max_length=remaining)
        except zlib.error:
            continue
        remaining -= len(chunk)
        inflated.append(chunk.decode("latin-1"))
    return inflated


def _scan_text_objects(source: str, cmap: dict[str, str]) -> list[str]:
    fragments: list[str] = []
    for text_object in _TEXT_OBJECT_RE.finditer(source):
        for operator in _TEXT_OPERATOR_RE.finditer(text_object.group(1)):
            if operator.group("literal") is not None:
                value = _unescape_literal(operator.group("literal"))
            elif operator.group("array") is not None:
                value = _decode_text_array(operator.group("array"), cmap)
            else:
                value = decode_hex_string(operator.group("hex"), cmap)
            if value.strip():
                fragments.append(value)
    return fragments


def _scan_stream_words(content: bytes, recovered: str) -> list[str]:
    words: list[str] = []
    seen = set(recovered.split())
    for match in _STREAM_RE.finditer(content):
        body = match.group(1).decode("latin-1")
        for word in _STREAM_WORD_RE.findall(body):
            if word in _PDF_SYNTAX_TOKENS or word in seen:
                continue
            if word[0].isupper() or len(word) > 10:
                seen.add(word)
                words.append(word)
    return words


def finalize_text(fragments: list[str]) -> str:
    joined = " ".join(fragments)
    joined = re.sub(r"\s+", " ", joined).strip()
    return re.sub(r"([a-z])([A-Z])", r"\1 \2", joined)


def scan_pdf_text(content: bytes) -> str:
    """Best-effort text recovery straight from PDF bytes."""
    source = content.decode("latin-1")
    cmap = parse_cmap(source)

    fragments: list[str] = []
    for scan_source in [source, *_inflate_streams(content)]:
        if scan_source is not source:
            cmap.update({code: char for code, char in parse_cmap(scan_source).items() if code not in cmap})
        fragments.extend(_scan_text_objects(scan_source, cmap))

    if len(fragments) < MIN_TEXT_FRAGMENTS:
        known = set(fragments)
        for bare in _BARE_LITERAL_RE.findall(source):
            value = _unescape_literal(bare)
            if value not in known:
                known.add(value)
                fragments.append(value)

    fragments.extend(_scan_stream_words(content, " ".join(fragments)))
    text = finalize_text(fragments)
    logger.debug("pdf_scan fragments=%s cmap_entries=%s chars=%s", len(fragments), len(cmap), len(text))
    return text


def _library_pdf_text(content: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(content))
    page_chunks: list[str] = []
    for page in reader.pages:
        page_text = page.extract_text() or ""
        if page_text.strip():
            page_chunks.append(page_text)
    return "\n\n".join(page_chunks)


def extract_pdf_text(content: bytes, *, library_first: bool = True) -> tuple[str, str, list[str]]:
    """Return ``(text, extractor, warnings)`` for a PDF upload."""
    warnings: list[str] = []
    if library_first:
        try:
            text = _library_pdf_text(content)
            if len(text.strip()) >= LIBRARY_MIN_CHARS:
                return text, "pypdf", warnings
            warnings.append("pypdf found little text; using raw content scan.")
        except Exception as exc:  # noqa: BLE001 - malformed producers fall through to the scanner
            logger.info("pdf_library_failed error=%s", type(exc).__name__)
            warnings.append("pypdf could not read this PDF; using raw content scan.")

    text = scan_pdf_text(content)
    if not text:
        warnings.append("No extractable text found in PDF.")
    return text, "pdf-scan", warnings
