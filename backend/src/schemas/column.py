"""Pydantic schemas for column endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from schemas.card import CardResponse
from schemas.validators import MAX_TITLE_LENGTH, reject_null, validate_color


class ColumnCreate(BaseModel):
    """Schema for creating a column. Omitting position appends to the board."""

    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    color: str | None = None
    position: int | None = None

    @field_validator("color")
    @classmethod
    def check_color(cls, v: str | None) -> str | None:
        """Validate hex colour."""
        return validate_color(v)


class ColumnUpdate(BaseModel):
    """Schema for updating a column. Only fields present in the request are written."""

    title: str | None = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    color: str | None = None
    position: int | None = None

    @field_validator("title", "color", "position")
    @classmethod
    def check_not_null(cls, v: object, info: ValidationInfo) -> object:
        """Fields can be omitted but not nulled."""
        return reject_null(v, info.field_name)

    @field_validator("color")
    @classmethod
    def check_color(cls, v: str | None) -> str | None:
        """Validate hex colour."""
        return validate_color(v)


class ColumnPosition(BaseModel):
    """One (id, position) pair of a reorder batch."""

    id: int
    position: int


class ColumnReorder(BaseModel):
    """Batch of column positions, applied in the order given."""

    columns: list[ColumnPosition] = Field(min_length=1)


class ColumnResponse(BaseModel):
    """Schema for column responses, including its cards in position order."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    board_id: int
    title: str
    color: str
    position: int
    cards: list[CardResponse]
    created_at: datetime
    updated_at: datetime


class ColumnData(BaseModel):
    """Data payload for single-column responses."""

    column: ColumnResponse
