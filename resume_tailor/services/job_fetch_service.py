from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from resume_tailor.ai import OracleClient, OracleTimeoutError
from resume_tailor.services.prompts import MAX_PAGE_CHARS, build_job_extraction_messages
from resume_tailor.services.url_security import host_is_private_or_local, normalize_public_url

logger = logging.getLogger(__name__)

MIN_JOB_TEXT_CHARS = 50

LOGIN_WALL_MARKERS = (
    "sign in to view",
    "login to view",
    "join to view",
    "sign up to view",
    "authwall",
    "login-modal",
    "signin-modal",
)

REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

_BLANK_LINES_RE = re.compile(r"\n{3,}")


class JobFetchError(ValueError):
    """The job page could not be turned into a job description."""


@dataclass(frozen=True)
class FetchedJob:
    url: str
    final_url: str
    domain: str
    text: str


def has_login_wall(html: str) -> bool:
    lowered = (html or "").lower()
    return any(marker in lowered for marker in LOGIN_WALL_MARKERS)


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style", "noscript", "svg", "nav", "footer", "header", "form"]):
        tag.decompose()
    lines = [line.strip() for line in soup.get_text("\n", strip=True).splitlines()]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(line for line in lines if line)).strip()


async def fetch_job_description(
    raw_url: str,
    oracle: OracleClient,
    *,
    timeout_s: float = 12.0,
    oracle_timeout_s: float = 45.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FetchedJob:
    normalized_url, hostname = normalize_public_url(raw_url, field_label="Job URL")
    if host_is_private_or_local(hostname):
        raise JobFetchError("Private or local URLs are not allowed for job extraction.")

    try:
        async with httpx.AsyncClient(
            timeout=timeout_s,
            follow_redirects=True,
            headers=REQUEST_HEADERS,
            transport=transport,
        ) as client:
            response = await client.get(normalized_url)
    except httpx.HTTPError as exc:
        logger.warning("job_fetch_failed host=%s error=%s", hostname, type(exc).__name__)
        raise JobFetchError("Could not reach the job page.") from exc

    final_url = str(response.url)
    final_host = (urlparse(final_url).hostname or hostname).lower()
    if final_host != hostname and host_is_private_or_local(final_host):
        raise JobFetchError("Private or local URLs are not allowed for job extraction.")
    if response.status_code >= 400:
        raise JobFetchError(f"Failed to fetch URL: {response.status_code}")

    html = response.text or ""
    logger.info("job_page_fetched host=%s html_chars=%s", final_host, len(html))
    if has_login_wall(html):
        raise JobFetchError(
            "This job posting requires login to view. Please paste the job description text directly instead of using the URL."
        )

    page_text = html_to_text(html)[:MAX_PAGE_CHARS]
    if not page_text:
        raise JobFetchError("Could not extract job description from this URL")

    try:
        extracted = await asyncio.wait_for(
            oracle.complete(build_job_extraction_messages(page_text)),
            timeout=oracle_timeout_s,
        )
    except asyncio.TimeoutError as exc:
        raise OracleTimeoutError("The AI service did not answer in time.") from exc

    text = (extracted or "").strip()
    logger.info("job_description_extracted host=%s chars=%s", final_host, len(text))
    if len(text) < MIN_JOB_TEXT_CHARS:
        raise JobFetchError("Could not extract job description from this URL")
    return FetchedJob(url=raw_url, final_url=final_url, domain=final_host, text=text)
