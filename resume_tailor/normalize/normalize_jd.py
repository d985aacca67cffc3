from __future__ import annotations

import re

from resume_tailor.schemas.normalized import JobDescription
from resume_tailor.schemas.normalized.jd import MAX_JD_LINES, MAX_JD_SKILLS
from resume_tailor.taxonomy import TaxonomyProvider, get_default_taxonomy

from .utils import contains_any, non_empty_lines, strip_bullet_prefix

DEFAULT_TITLE = "Job Position"
DEFAULT_COMPANY = "Company"
MIN_CLASSIFIED_LINE = 10

_COMPANY_RE = re.compile(r"(company|organization|employer):\s*(.+)", re.IGNORECASE)


def extract_jd_title(lines: list[str], taxonomy: TaxonomyProvider) -> str:
    if not lines:
        return DEFAULT_TITLE
    first = lines[0]
    lowered = first.lower()
    for prefix in taxonomy.jd_label_prefixes:
        if lowered.startswith(prefix):
            first = first[len(prefix) :]
            break
    return first.strip() or DEFAULT_TITLE


def extract_company(lines: list[str]) -> str:
    for line in lines:
        match = _COMPANY_RE.search(line)
        if match and match.group(2).strip():
            return match.group(2).strip()
    return DEFAULT_COMPANY


def classify_lines(lines: list[str], taxonomy: TaxonomyProvider) -> tuple[list[str], list[str]]:
    requirements: list[str] = []
    responsibilities: list[str] = []
    for line in lines:
        cleaned, _ = strip_bullet_prefix(line, taxonomy.bullet_glyphs)
        if len(cleaned) <= MIN_CLASSIFIED_LINE:
            continue
        if contains_any(cleaned, taxonomy.jd_requirement_markers):
            if len(requirements) < MAX_JD_LINES:
                requirements.append(cleaned)
        elif contains_any(cleaned, taxonomy.jd_responsibility_markers):
            if len(responsibilities) < MAX_JD_LINES:
                responsibilities.append(cleaned)
    return requirements, responsibilities


def normalize_jd(text: str, taxonomy: TaxonomyProvider | None = None) -> JobDescription:
    taxonomy = taxonomy or get_default_taxonomy()
    lines = non_empty_lines(text)
    requirements, responsibilities = classify_lines(lines, taxonomy)
    return JobDescription(
        title=extract_jd_title(lines, taxonomy),
        company=extract_company(lines),
        skills=taxonomy.find_skills(text)[:MAX_JD_SKILLS],
        requirements=requirements,
        responsibilities=responsibilities,
        raw_text=text or "",
    )
