"""
Static API-key guard for private routes.
Accepts "Authorization: Bearer <key>" or "X-API-Key: <key>". Attach to private routers:

    private = APIRouter(dependencies=[Depends(require_api_key(api_key))])
"""

from __future__ import annotations

import hmac
from typing import Callable

from fastapi import Request

from app.errors import AuthException, ForbiddenException


def extract_api_key(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip()
    return request.headers.get("X-API-Key", "").strip()


def require_api_key(api_key: str | None) -> Callable[[Request], None]:
    """Build a FastAPI dependency that rejects requests without the configured key."""

    async def _check(request: Request) -> None:
        if not api_key:
            raise ForbiddenException(
                "Private routes are disabled (no API key configured)",
                code="PRIVATE_ROUTES_DISABLED",
            )
        supplied = extract_api_key(request)
        if not supplied:
            raise AuthException("Missing API key", code="AUTH_REQUIRED")
        if not hmac.compare_digest(supplied.encode("utf-8"), api_key.encode("utf-8")):
            raise AuthException("Invalid API key", code="AUTH_INVALID")

    return _check
