"""Pydantic schemas for board endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.column import ColumnResponse
from schemas.validators import MAX_TITLE_LENGTH, reject_null


class BoardCreate(BaseModel):
    """Schema for creating a board."""

    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = None


class BoardUpdate(BaseModel):
    """Schema for updating a board. Only fields present in the request are written."""

    title: str | None = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = None

    @field_validator("title")
    @classmethod
    def check_title_not_null(cls, v: str | None) -> str | None:
        """Title can be omitted but not nulled."""
        return reject_null(v, "title")


class BoardResponse(BaseModel):
    """Schema for board responses, with columns, cards, and labels nested in order."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: str | None
    columns: list[ColumnResponse]
    created_at: datetime
    updated_at: datetime


class BoardData(BaseModel):
    """Data payload for single-board responses."""

    board: BoardResponse


class BoardListData(BaseModel):
    """Data payload for the board listing."""

    boards: list[BoardResponse]
