"""
Request dependencies: the shared client and the shared-secret header check.
"""

import hmac
from typing import Optional

from fastapi import Header, HTTPException, Request, status

from airstats.client import AirstatsClient

API_KEY_HEADER = "x-api-key"


def get_client(request: Request) -> AirstatsClient:
    """The process-wide client stored on the application."""
    return request.app.state.client


def require_api_key(request: Request,
                    x_api_key: Optional[str] = Header(None, alias=API_KEY_HEADER)) -> None:
    """Reject the request with 403 unless it carries the configured secret."""
    expected = request.app.state.settings.private_api_key
    if not expected or not x_api_key or not hmac.compare_digest(
            x_api_key.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid or missing API key",
        )
