from __future__ import annotations

from typing import Protocol


class TaxonomyProvider(Protocol):
    title_keywords: tuple[str, ...]
    action_verbs: tuple[str, ...]
    section_headers: tuple[str, ...]
    bullet_glyphs: tuple[str, ...]
    jd_label_prefixes: tuple[str, ...]
    jd_requirement_markers: tuple[str, ...]
    jd_responsibility_markers: tuple[str, ...]
    quick_replies: dict[str, str]
    ats_stop_words: frozenset[str]

    def find_skills(self, text: str) -> list[str]:
        """Return lower-cased skill matches in order of first appearance."""
