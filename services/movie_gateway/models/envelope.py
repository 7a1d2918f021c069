"""
Response envelope.

Every JSON endpoint under /api answers with {code, message, data}.
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

SUCCESS_CODE = 0

# The only body a client ever sees for an unhandled failure.
INTERNAL_ERROR_BODY: Dict[str, Any] = {
    "code": 500,
    "message": "internal server error",
    "data": None,
}


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope."""

    code: int = SUCCESS_CODE
    message: str = "success"
    data: Optional[T] = None


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(code=SUCCESS_CODE, message=message, data=data)


def error_response(code: int, message: str) -> ApiResponse:
    if code == SUCCESS_CODE:
        raise ValueError("error envelopes need a non-zero code")
    return ApiResponse(code=code, message=message, data=None)
