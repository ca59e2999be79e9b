"""Pydantic schemas for card endpoints."""
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from schemas.validators import MAX_TITLE_LENGTH, normalize_labels, reject_null


class CardCreate(BaseModel):
    """Schema for creating a card. Omitting position appends to the column."""

    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = None
    image: str | None = None
    due_date: date | None = None
    completed: bool | None = None
    position: int | None = None
    labels: list[str] | None = None

    @field_validator("labels")
    @classmethod
    def check_labels(cls, v: list[str] | None) -> list[str] | None:
        """Trim and validate labels."""
        return normalize_labels(v)


class CardUpdate(BaseModel):
    """
    Schema for updating a card.

    Only fields present in the request are written. When ``labels`` is present
    the card's labels are replaced wholesale.
    """

    title: str | None = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = None
    image: str | None = None
    due_date: date | None = None
    completed: bool | None = None
    position: int | None = None
    labels: list[str] | None = None

    @field_validator("title", "completed", "position")
    @classmethod
    def check_not_null(cls, v: object, info: ValidationInfo) -> object:
        """Title, completed, and position can be omitted but not nulled."""
        return reject_null(v, info.field_name)

    @field_validator("labels")
    @classmethod
    def check_labels(cls, v: list[str] | None) -> list[str] | None:
        """Trim and validate labels. null is treated as an empty label set."""
        return normalize_labels(v) if v is not None else []


class CardMove(BaseModel):
    """Schema for moving a card to a (possibly different) column."""

    column_id: int
    position: int


class CardLabelResponse(BaseModel):
    """Schema for a label on a card."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    card_id: int
    label: str


class CardResponse(BaseModel):
    """Schema for card responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    column_id: int
    title: str
    description: str | None
    image: str | None
    due_date: date | None
    completed: bool
    position: int
    labels: list[CardLabelResponse]
    created_at: datetime
    updated_at: datetime


class CardData(BaseModel):
    """Data payload for single-card responses."""

    card: CardResponse
