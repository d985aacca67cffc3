from __future__ import annotations

import re

from resume_tailor.schemas.normalized import ExperienceEntry, ResumeProfile
from resume_tailor.schemas.normalized.resume import MAX_BULLET_CHARS, MAX_BULLETS
from resume_tailor.taxonomy import TaxonomyProvider, get_default_taxonomy

from .utils import contains_word, looks_like_contact, non_empty_lines, strip_bullet_prefix

NAME_SCAN_LINES = 15
LOOSE_NAME_LINES = 5
DEFAULT_EXPERIENCE_TITLE = "Professional Experience"
DEFAULT_EXPERIENCE_COMPANY = "Various"

_TITLE_CASE_TOKEN = r"[A-Z][a-z]+(?:[-'][A-Z]?[a-z]+)*"
_FULL_NAME_RE = re.compile(rf"^{_TITLE_CASE_TOKEN}(?:\s+{_TITLE_CASE_TOKEN}){{1,3}}$")
_SINGLE_NAME_RE = re.compile(r"^[A-Z][a-z]{2,19}$")
_ALL_CAPS_NAME_RE = re.compile(r"^[A-Z][A-Z'-]*(?:\s+[A-Z][A-Z'-]*)*$")
_LOOSE_NAME_RE = re.compile(r"^[A-Za-z\s'-]{3,40}$")


def _section_header_re(headers: tuple[str, ...]) -> re.Pattern[str]:
    alternation = "|".join(re.escape(header) for header in headers) or "(?!)"
    return re.compile(rf"^\s*(?:{alternation})\b", re.IGNORECASE)


def extract_candidate_name(lines: list[str], taxonomy: TaxonomyProvider) -> str:
    header_re = _section_header_re(taxonomy.section_headers)
    for index, line in enumerate(lines[:NAME_SCAN_LINES]):
        if looks_like_contact(line) or header_re.match(line):
            continue
        if _FULL_NAME_RE.match(line) or _SINGLE_NAME_RE.match(line):
            return line
        if len(line) <= 40 and _ALL_CAPS_NAME_RE.match(line):
            return line.title()
        if index < LOOSE_NAME_LINES and _LOOSE_NAME_RE.match(line):
            return line.strip()
    return ""


def extract_candidate_title(lines: list[str], taxonomy: TaxonomyProvider, *, skip: str = "") -> str:
    for line in lines:
        if line == skip or not 5 <= len(line) <= 60:
            continue
        lowered = line.lower()
        if any(keyword in lowered for keyword in taxonomy.title_keywords):
            return line
    return ""


def extract_experience_bullets(lines: list[str], taxonomy: TaxonomyProvider) -> list[str]:
    bullets: list[str] = []
    for line in lines:
        cleaned, had_glyph = strip_bullet_prefix(line, taxonomy.bullet_glyphs)
        if had_glyph:
            if len(cleaned) > 20:
                bullets.append(cleaned[:MAX_BULLET_CHARS])
        elif 40 <= len(cleaned) < 500 and contains_word(cleaned, taxonomy.action_verbs):
            bullets.append(cleaned)
        if len(bullets) >= MAX_BULLETS:
            break
    return bullets


def normalize_resume(text: str, taxonomy: TaxonomyProvider | None = None) -> ResumeProfile:
    """Heuristically pull name, title, skills and bullets out of resume text."""
    taxonomy = taxonomy or get_default_taxonomy()
    lines = non_empty_lines(text)

    name = extract_candidate_name(lines, taxonomy)
    title = extract_candidate_title(lines, taxonomy, skip=name)
    skills = taxonomy.find_skills(text)
    bullets = extract_experience_bullets(lines, taxonomy)

    experience: list[ExperienceEntry] = []
    if bullets or skills:
        experience.append(
            ExperienceEntry(
                title=title or DEFAULT_EXPERIENCE_TITLE,
                company=DEFAULT_EXPERIENCE_COMPANY,
                bullets=bullets,
            )
        )

    return ResumeProfile(
        name=name,
        title=title,
        skills=skills,
        experience=experience,
        raw_text=text or "",
    )
