from __future__ import annotations


class OracleError(RuntimeError):
    """Base for failures talking to the generative model."""

    code = "oracle_error"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


class OracleUnavailableError(OracleError):
    code = "oracle_unavailable"


class OracleTimeoutError(OracleError):
    code = "oracle_timeout"


class OracleRateLimitedError(OracleError):
    code = "rate_limited"


class OracleQuotaExceededError(OracleError):
    code = "quota_exhausted"


class OracleResponseError(OracleError):
    code = "invalid_oracle_response"
