"""Pydantic schemas for proxy responses."""

from __future__ import annotations

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Error detail schema."""

    message: str


class ErrorPayload(BaseModel):
    """Normalized error body returned for every failure."""

    error: ErrorDetail

    @classmethod
    def from_message(cls, message: str) -> "ErrorPayload":
        return cls(error=ErrorDetail(message=message))
