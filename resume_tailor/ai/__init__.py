from .errors import (
    OracleError,
    OracleQuotaExceededError,
    OracleRateLimitedError,
    OracleResponseError,
    OracleTimeoutError,
    OracleUnavailableError,
)
from .json_payload import extract_json_object
from .types import ChatMessage, OracleClient

__all__ = [
    "ChatMessage",
    "OracleClient",
    "OracleError",
    "OracleQuotaExceededError",
    "OracleRateLimitedError",
    "OracleResponseError",
    "OracleTimeoutError",
    "OracleUnavailableError",
    "extract_json_object",
]
