from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml


def _as_str_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    items = [str(item).strip().lower() for item in value if str(item).strip()]
    return tuple(dict.fromkeys(items))


def _flatten_skill_groups(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, dict):
        merged: list[str] = []
        for group in raw.values():
            merged.extend(_as_str_tuple(group))
        return tuple(dict.fromkeys(merged))
    return _as_str_tuple(raw)


def _build_skill_pattern(skills: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so "react native" wins over "react".
    ordered = sorted(skills, key=len, reverse=True)
    alternation = "|".join(re.escape(skill) for skill in ordered)
    return re.compile(rf"(?<![A-Za-z0-9])(?:{alternation})(?![A-Za-z0-9+#])", re.IGNORECASE)


class LocalTaxonomy:
    def __init__(self, keywords_path: str | Path | None = None) -> None:
        path = Path(keywords_path) if keywords_path else Path(__file__).with_name("keywords.yaml")
        raw = self._load(path)

        self.skills = _flatten_skill_groups(raw.get("skills"))
        self.title_keywords = _as_str_tuple(raw.get("title_keywords"))
        self.action_verbs = _as_str_tuple(raw.get("action_verbs"))
        self.section_headers = _as_str_tuple(raw.get("section_headers"))
        self.bullet_glyphs = tuple(str(item) for item in raw.get("bullet_glyphs") or ())
        self.ats_stop_words = frozenset(_as_str_tuple(raw.get("ats_stop_words")))

        jd = raw.get("job_description") or {}
        self.jd_label_prefixes = _as_str_tuple(jd.get("label_prefixes"))
        self.jd_requirement_markers = _as_str_tuple(jd.get("requirement_markers"))
        self.jd_responsibility_markers = _as_str_tuple(jd.get("responsibility_markers"))

        replies = raw.get("quick_replies") or {}
        self.quick_replies = {str(key).strip().lower(): str(value) for key, value in replies.items()}

        if not self.skills:
            raise RuntimeError(f"Keyword file '{path}' defines no skills.")
        self.skill_pattern = _build_skill_pattern(self.skills)

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        try:
            with path.open("r", encoding="utf-8") as handle:
                parsed = yaml.safe_load(handle)
        except OSError as exc:
            raise RuntimeError(f"Failed to read keyword file '{path}': {exc}") from exc
        except yaml.YAMLError as exc:
            raise RuntimeError(f"Invalid YAML in keyword file '{path}': {exc}") from exc
        if not isinstance(parsed, dict):
            raise RuntimeError(f"Invalid keyword file '{path}': expected a top-level mapping.")
        return parsed

    def find_skills(self, text: str) -> list[str]:
        found: dict[str, None] = {}
        for match in self.skill_pattern.finditer(text or ""):
            found.setdefault(match.group(0).lower(), None)
        return list(found)
