"""
Core Errors

Exception taxonomy shared by all modules. Each error knows the HTTP status
it is surfaced with; the application registers one handler that renders
them as {"ok": false, "error": ..., "detail": ...}.
"""
import json
from typing import Any, Optional


class ServiceError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = 500

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict:
        body = {"ok": False, "error": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class ValidationError(ServiceError):
    """Malformed inbound request; the caller must fix the payload."""

    status_code = 400


class AuthError(ServiceError):
    """Missing or wrong bearer token."""

    status_code = 401


class ConfigError(ServiceError):
    """Operator-fixable misconfiguration, e.g. a missing API key."""

    status_code = 500


class UpstreamError(ServiceError):
    """The LLM provider answered with a non-success status."""

    def __init__(self, status_code: int, body: str = ""):
        self.upstream_status = status_code
        self.body = body
        super().__init__(f"Upstream error {status_code}", detail=_parse_body(body))

    @property
    def status_code(self) -> int:
        if 400 <= self.upstream_status <= 599:
            return self.upstream_status
        return 502


class TransportError(ServiceError):
    """The request to the LLM provider could not complete."""

    status_code = 502


class UpstreamTimeoutError(TransportError):
    status_code = 504


class OutputDefect(ServiceError):
    """
    Model output failed validation.

    Handled by the translation retry policy; never rendered to a caller.
    """

    def __init__(self, verdict):
        self.verdict = verdict
        super().__init__(f"Output defect: {verdict.reason.value}")


def _parse_body(body: str) -> Optional[Any]:
    """Return the provider's error object when the body is JSON, else the raw text."""
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict) and "error" in data:
        return data["error"]
    return data
