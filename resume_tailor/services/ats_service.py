from __future__ import annotations

import asyncio
import logging
import math
import re
from typing import Any, Iterable, Protocol, Sequence

from resume_tailor.ai import OracleClient, OracleResponseError, OracleTimeoutError, extract_json_object
from resume_tailor.schemas.ats import ATSBreakdown, ATSComparison, ATSScoreResult, TailoredBullet
from resume_tailor.schemas.normalized import ExperienceEntry, JobDescription, ResumeProfile
from resume_tailor.schemas.normalized._caps import dedupe_casefold
from resume_tailor.services.prompts import build_scoring_messages
from resume_tailor.services.validation import ScoringRequest, validate_scoring_request
from resume_tailor.taxonomy import TaxonomyProvider, get_default_taxonomy

logger = logging.getLogger(__name__)

MAX_MATCHED_KEYWORDS = 20
MAX_BONUS = 10
BONUS_PER_SKILL = 2
EMPTY_SECTION_SCORE = 50
TITLE_MATCH_SCORE = 100
TITLE_MISS_SCORE = 30

WEIGHTS = {
    "skillMatch": 0.4,
    "keywordMatch": 0.3,
    "experienceRelevance": 0.2,
    "titleMatch": 0.1,
}

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ScoringOracle(Protocol):
    async def score(self, request: ScoringRequest) -> dict[str, Any]: ...


# ---------------------------------------------------------------------------
# Deterministic keyword scorer
# ---------------------------------------------------------------------------


def _normalize_text(text: str) -> str:
    return _NON_ALNUM_RE.sub("", (text or "").lower().strip())


def _significant_words(text: str) -> list[str]:
    return [word for word in _normalize_text(text).split() if len(word) > 2]


def word_similarity(left: str, right: str) -> float:
    left_words = set(_significant_words(left))
    right_words = set(_significant_words(right))
    if not left_words or not right_words:
        return 0.0
    return len(left_words & right_words) / max(len(left_words), len(right_words))


class HeuristicScoringOracle:
    """Keyword-overlap ATS scorer.

    Weighted total of skill match (40%), keyword match (30%), experience
    relevance (20%) and title match (10%). Sections with nothing to compare
    against score a neutral 50.
    """

    def __init__(self, taxonomy: TaxonomyProvider | None = None):
        self._taxonomy = taxonomy or get_default_taxonomy()

    def _keywords(self, text: str) -> list[str]:
        stop_words = self._taxonomy.ats_stop_words
        return list(dict.fromkeys(word for word in _significant_words(text) if word not in stop_words))

    async def score(self, request: ScoringRequest) -> dict[str, Any]:
        jd = request.job_description
        resume = request.resume
        skills = dedupe_casefold([*resume.skills, *request.confirmed_skills])
        experience = resume.experience

        resume_skills = [normalized for normalized in (_normalize_text(s) for s in skills) if normalized]
        matched_skills: list[str] = []
        missing_skills: list[str] = []
        for skill in jd.skills:
            wanted = _normalize_text(skill)
            found = bool(wanted) and any(
                have in wanted or wanted in have or word_similarity(wanted, have) > 0.7
                for have in resume_skills
            )
            (matched_skills if found else missing_skills).append(skill)
        skill_score = (
            len(matched_skills) / len(jd.skills) * 100 if jd.skills else EMPTY_SECTION_SCORE
        )

        jd_text = " ".join([*jd.requirements, *jd.responsibilities])
        jd_keywords = self._keywords(jd_text)
        resume_text = " ".join(
            f"{entry.title} {entry.company} {' '.join(entry.bullets)}" for entry in experience
        )
        resume_keywords = set(self._keywords(f"{resume_text} {' '.join(skills)}"))
        matched_keywords = [keyword for keyword in jd_keywords if keyword in resume_keywords]
        keyword_score = (
            len(matched_keywords) / len(jd_keywords) * 100 if jd_keywords else EMPTY_SECTION_SCORE
        )

        experience_score = max(
            (word_similarity(f"{entry.title} {' '.join(entry.bullets)}", jd_text) * 100 for entry in experience),
            default=0.0,
        )

        title_score = (
            TITLE_MATCH_SCORE
            if any(word_similarity(entry.title, jd.title) > 0.5 for entry in experience)
            else TITLE_MISS_SCORE
        )

        total = round_half_up(
            skill_score * WEIGHTS["skillMatch"]
            + keyword_score * WEIGHTS["keywordMatch"]
            + experience_score * WEIGHTS["experienceRelevance"]
            + title_score * WEIGHTS["titleMatch"]
        )

        suggestions: list[str] = []
        if missing_skills:
            suggestions.append(f"Add missing skills: {', '.join(missing_skills[:3])}")
        if keyword_score < 50:
            suggestions.append("Incorporate more keywords from the job requirements into your experience bullets")
        if title_score < 50:
            suggestions.append("Consider adjusting your job titles to better match the target role")

        return {
            "total": total,
            "breakdown": {
                "skillMatch": round_half_up(skill_score),
                "keywordMatch": round_half_up(keyword_score),
                "experienceRelevance": round_half_up(experience_score),
                "titleMatch": round_half_up(title_score),
            },
            "matchedSkills": matched_skills,
            "missingSkills": missing_skills,
            "matchedKeywords": matched_keywords[:MAX_MATCHED_KEYWORDS],
            "suggestions": suggestions,
        }


# ---------------------------------------------------------------------------
# Generative model scorer
# ---------------------------------------------------------------------------


class LLMScoringOracle:
    def __init__(self, oracle: OracleClient, *, timeout_s: float = 45.0):
        self._oracle = oracle
        self._timeout_s = timeout_s

    async def score(self, request: ScoringRequest) -> dict[str, Any]:
        messages = build_scoring_messages(request)
        try:
            raw = await asyncio.wait_for(
                self._oracle.complete(messages, json_mode=True),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("ats_oracle_timeout timeout_s=%s", self._timeout_s)
            raise OracleTimeoutError("The AI service did not answer in time.") from exc

        payload = extract_json_object(raw)
        if payload is None:
            raise OracleResponseError("The AI service returned an unreadable score.")
        return payload


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _clamp_score(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    if math.isinf(number):
        return 100 if number > 0 else 0
    return max(0, min(100, round_half_up(number)))


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


def normalize_score(payload: Any) -> ATSScoreResult:
    """Clamp one raw scorer payload into a well-formed result."""
    if not isinstance(payload, dict):
        raise OracleResponseError("The AI service returned an unreadable score.")
    breakdown = payload.get("breakdown")
    if not isinstance(breakdown, dict):
        breakdown = {}
    return ATSScoreResult(
        total=_clamp_score(payload.get("total")),
        breakdown=ATSBreakdown(
            skill_match=_clamp_score(breakdown.get("skillMatch")),
            keyword_match=_clamp_score(breakdown.get("keywordMatch")),
            experience_relevance=_clamp_score(breakdown.get("experienceRelevance")),
            title_match=_clamp_score(breakdown.get("titleMatch")),
        ),
        matched_skills=_string_list(payload.get("matchedSkills")),
        missing_skills=_string_list(payload.get("missingSkills")),
        matched_keywords=_string_list(payload.get("matchedKeywords"))[:MAX_MATCHED_KEYWORDS],
        suggestions=_string_list(payload.get("suggestions")),
    )


def enhance_resume(
    resume: ResumeProfile,
    confirmed_skills: Iterable[str],
    tailored_experience: Sequence[TailoredBullet] | None = None,
) -> ResumeProfile:
    """Merge confirmed skills and tailored bullets into a copy of the resume.

    Tailored bullets go first in the first experience entry so they survive the
    bullet cap.
    """
    skills = dedupe_casefold([*resume.skills, *confirmed_skills])
    experience = list(resume.experience)
    tailored = [item.text for item in tailored_experience or []]
    if tailored:
        if experience:
            first = experience[0]
            experience[0] = ExperienceEntry(
                title=first.title,
                company=first.company,
                bullets=dedupe_casefold([*tailored, *first.bullets]),
            )
        else:
            experience = [
                ExperienceEntry(
                    title="Professional Experience",
                    company="Company",
                    bullets=dedupe_casefold(tailored),
                )
            ]
    return ResumeProfile(
        name=resume.name,
        title=resume.title,
        skills=skills,
        experience=experience,
        raw_text=resume.raw_text,
    )


class ATSScoringClient:
    """Scores a resume before and after tailoring.

    The enhanced total never ends up below the baseline total.
    """

    def __init__(self, backend: ScoringOracle):
        self._backend = backend

    async def score(
        self,
        job_description: JobDescription,
        resume: ResumeProfile,
        confirmed_skills: Sequence[str] = (),
        tailored_experience: Sequence[TailoredBullet] | None = None,
    ) -> ATSComparison:
        confirmed = dedupe_casefold(list(confirmed_skills))
        baseline_request = validate_scoring_request(job_description, resume, [])
        enhanced_request = validate_scoring_request(
            job_description,
            enhance_resume(resume, confirmed, tailored_experience),
            confirmed,
            tailored_experience,
        )

        original = normalize_score(await self._backend.score(baseline_request))
        enhanced = normalize_score(await self._backend.score(enhanced_request))

        if enhanced.total < original.total:
            corrected = min(100, original.total + min(MAX_BONUS, BONUS_PER_SKILL * len(confirmed)))
            logger.info(
                "ats_score_corrected original=%s returned=%s corrected=%s",
                original.total,
                enhanced.total,
                corrected,
            )
            enhanced = enhanced.model_copy(update={"total": corrected})

        logger.info(
            "ats_scored backend=%s original=%s new=%s confirmed=%s",
            type(self._backend).__name__,
            original.total,
            enhanced.total,
            len(confirmed),
        )
        return ATSComparison(
            original_score=original,
            new_score=enhanced,
            improvement=enhanced.total - original.total,
        )
