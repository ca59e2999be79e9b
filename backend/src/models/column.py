"""Column model - ordered container of cards within a board."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.board import Board
    from models.card import Card

DEFAULT_COLUMN_COLOR = "#E8EAF6"


class Column(Base, TimestampMixin):
    """
    A column within a board.

    Columns render in ascending ``position`` order. Positions are not unique;
    ties fall back to insertion order (id).
    """

    __tablename__ = "columns"

    id: Mapped[int] = mapped_column(primary_key=True)
    board_id: Mapped[int] = mapped_column(
        ForeignKey("boards.id", ondelete="CASCADE"),
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255))
    color: Mapped[str] = mapped_column(String(50), default=DEFAULT_COLUMN_COLOR)
    position: Mapped[int] = mapped_column(Integer, default=0)

    board: Mapped["Board"] = relationship(back_populates="columns")
    cards: Mapped[list["Card"]] = relationship(
        back_populates="column",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[Card.position, Card.id]",
    )
