"""Response envelopes shared by module routes and the host app."""

from __future__ import annotations

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from app.errors import AppException


def success(data: Any = None, message: str = "OK") -> dict[str, Any]:
    """{"success": true, "message": ..., "data": ...}"""
    return {"success": True, "message": message, "data": {} if data is None else data}


def created(data: Any = None, message: str = "Created") -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_201_CREATED, content=success(data, message)
    )


def error_response(exc: AppException) -> JSONResponse:
    """{"success": false, "error": {"message", "code", "status", "details"?}}"""
    return JSONResponse(
        status_code=exc.status,
        content={"success": False, "error": exc.to_payload()},
    )
