"""Response envelope shared by every JSON endpoint."""
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Standard response body: ``{success, message?, data?}``.

    Error responses use the same shape with ``success`` false and no data.
    """

    success: bool = True
    message: str | None = None
    data: T | None = None


class MessageResponse(BaseModel):
    """Envelope for responses that carry only a message (e.g. deletes)."""

    success: bool = True
    message: str
