"""
Core Authentication

Static bearer-token check shared by all routers.
"""
import secrets
import logging
from typing import Optional

from fastapi import Header, Request

from .errors import AuthError

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token after "Bearer ", or "" when the header has another shape."""
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]
    return ""


def verify_client_token(authorization: Optional[str], expected_token: Optional[str]) -> None:
    """
    Compare the inbound bearer token with the configured static secret.

    No configured token means authentication is disabled.

    Raises:
        AuthError: if a token is configured and the header does not match it
    """
    if not expected_token:
        return

    incoming = extract_bearer_token(authorization).strip()
    if not secrets.compare_digest(incoming.encode("utf-8"), expected_token.strip().encode("utf-8")):
        logger.warning("[AUTH] Rejected request | reason=invalid_client_token")
        raise AuthError("Unauthorized: Invalid client token.")


async def require_client_token(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> None:
    """FastAPI dependency applying verify_client_token with the app's settings."""
    verify_client_token(authorization, request.app.state.settings.client_token)
