"""
Response envelope shared by every endpoint: {success, data?, error?, message?}.
"""

from typing import Any, Optional
from pydantic import BaseModel


class ApiResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    message: Optional[str] = None


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    # Built by hand so None values inside `data` (e.g. completed_at) survive.
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data.model_dump() if isinstance(data, BaseModel) else data
    if message is not None:
        body["message"] = message
    return body


def fail(error: str, message: Optional[str] = None) -> dict:
    body: dict = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    return body
