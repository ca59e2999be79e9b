"""CardLabel model - free-text tags attached to a card."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.card import Card


class CardLabel(Base, TimestampMixin):
    """A label on a card. Duplicate text within one card is allowed."""

    __tablename__ = "card_labels"

    id: Mapped[int] = mapped_column(primary_key=True)
    card_id: Mapped[int] = mapped_column(
        ForeignKey("cards.id", ondelete="CASCADE"),
        index=True,
    )
    label: Mapped[str] = mapped_column(String(255))

    card: Mapped["Card"] = relationship(back_populates="labels")
