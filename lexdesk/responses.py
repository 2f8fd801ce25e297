"""Response envelope shared by every router.

Success bodies are ``{"success": true, "message": ..., "data": ...}``; error
bodies are ``{"success": false, "message": ..., "errors": ...}`` and are
produced by the exception handlers registered in ``main.py``.
"""
from typing import Any, Dict, Generic, Optional, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str = "Success"
    data: Optional[T] = None


class APIError(HTTPException):
    """HTTPException that also carries a field-keyed error map."""

    def __init__(self, status_code: int, message: str, errors: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=status_code, detail=message)
        self.errors = errors


def envelope(data: Any = None, message: str = "Success") -> dict:
    return {"success": True, "message": message, "data": data}


def error_body(message: str, errors: Any = None, **extra) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    body.update(extra)
    return body
