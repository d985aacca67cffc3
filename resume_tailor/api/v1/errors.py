from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException, status

from resume_tailor.ai.errors import (
    OracleError,
    OracleQuotaExceededError,
    OracleRateLimitedError,
    OracleTimeoutError,
)
from resume_tailor.services.interrogation_service import InterrogationBusyError, InterrogationStateError
from resume_tailor.services.job_fetch_service import JobFetchError
from resume_tailor.services.validation import OracleRequestInvalid

HANDLED_ERRORS = (
    OracleError,
    OracleRequestInvalid,
    InterrogationBusyError,
    InterrogationStateError,
    JobFetchError,
    ValueError,
)


def raise_http_error(exc: Exception) -> NoReturn:
    if isinstance(exc, OracleRequestInvalid):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": "invalid_request", "message": str(exc), "field_errors": exc.field_errors},
        ) from exc
    if isinstance(exc, OracleRateLimitedError):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"code": exc.code, "message": str(exc)},
        ) from exc
    if isinstance(exc, OracleQuotaExceededError):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={"code": exc.code, "message": str(exc)},
        ) from exc
    if isinstance(exc, OracleTimeoutError):
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail={"code": exc.code, "message": str(exc)},
        ) from exc
    if isinstance(exc, OracleError):
        code = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if exc.code == "oracle_not_configured"
            else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(status_code=code, detail={"code": exc.code, "message": str(exc)}) from exc
    if isinstance(exc, InterrogationBusyError):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "interrogation_busy", "message": str(exc)},
        ) from exc
    if isinstance(exc, InterrogationStateError):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "interrogation_state", "message": str(exc)},
        ) from exc
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    raise exc
