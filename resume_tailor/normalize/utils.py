from __future__ import annotations

import re

_EMAIL_MARKERS = ("@", "http", "www.")


def non_empty_lines(text: str) -> list[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def strip_bullet_prefix(line: str, glyphs: tuple[str, ...]) -> tuple[str, bool]:
    """Drop one leading bullet glyph; report whether one was present."""
    stripped = line.lstrip()
    for glyph in glyphs:
        if glyph and stripped.startswith(glyph):
            return stripped[len(glyph) :].strip(), True
    return stripped.strip(), False


def contains_any(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def looks_like_contact(line: str) -> bool:
    lowered = line.lower()
    return any(marker in lowered for marker in _EMAIL_MARKERS)


def contains_word(text: str, words: tuple[str, ...]) -> bool:
    if not words:
        return False
    pattern = r"\b(?:" + "|".join(re.escape(word) for word in words) + r")\b"
    return re.search(pattern, text, re.IGNORECASE) is not None
