from fastapi import APIRouter, Depends, Request

from resume_tailor.ai.types import OracleClient
from resume_tailor.api.v1.dependencies import get_oracle
from resume_tailor.api.v1.errors import HANDLED_ERRORS, raise_http_error
from resume_tailor.core.config import settings
from resume_tailor.core.rate_limit import rate_limit
from resume_tailor.normalize import normalize_jd
from resume_tailor.schemas.api import JobFromUrlRequest, JobFromUrlResponse
from resume_tailor.services.job_fetch_service import fetch_job_description

router = APIRouter()


@router.post("/jobs/extract-from-url", response_model=JobFromUrlResponse)
@rate_limit()
async def extract_job_from_url(
    request: Request,
    payload: JobFromUrlRequest,
    oracle: OracleClient = Depends(get_oracle),
):
    _ = request
    try:
        fetched = await fetch_job_description(
            payload.url,
            oracle,
            timeout_s=settings.job_fetch_timeout_s,
            oracle_timeout_s=settings.oracle_timeout_s,
        )
    except HANDLED_ERRORS as exc:
        raise_http_error(exc)
    return JobFromUrlResponse(
        url=payload.url,
        final_url=fetched.final_url,
        domain=fetched.domain,
        characters=len(fetched.text),
        job_description_text=fetched.text,
        job_description=normalize_jd(fetched.text),
    )
