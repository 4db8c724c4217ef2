"""Research error model."""

from __future__ import annotations

from enum import Enum

API_ERROR_PREFIX = "API Error: "


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    AUTH = "auth"
    MALFORMED_RESPONSE = "malformed_response"
    SCHEMA_VIOLATION = "schema_violation"
    UNEXPECTED = "unexpected"


class ResearchError(Exception):
    """A failed research call, tagged with what went wrong.

    ``detail`` is the provider-level message; ``message`` (and ``str()``)
    carries the uniform ``API Error:`` prefix shown to users.
    """

    def __init__(self, kind: ErrorKind, detail: str, provider: str = "") -> None:
        self.kind = kind
        self.detail = detail
        self.provider = provider
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.detail.startswith(API_ERROR_PREFIX):
            return self.detail
        return f"{API_ERROR_PREFIX}{self.detail}"

    @property
    def retryable(self) -> bool:
        return self.kind == ErrorKind.TRANSPORT

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ResearchError(kind={self.kind.value!r}, provider={self.provider!r}, detail={self.detail!r})"


def extract_error_message(exc: BaseException) -> str:
    """Pull the most specific message out of a provider exception.

    Provider errors usually nest a JSON body like
    ``{"error": {"message": ...}}``; fall back to the exception text.
    """
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if body.get("message"):
            return str(body["message"])
    text = str(exc)
    return text or "Unknown error occurred"
