"""
Error envelope schemas, referenced from router `responses` so the OpenAPI
document describes the `{code, message, details}` shape.
"""
from typing import Any, Optional
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """A single field-level validation error (inside `details.errors`)."""
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
