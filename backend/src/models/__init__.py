"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.board import Board
from models.card import Card
from models.card_label import CardLabel
from models.column import Column
from models.user import User
from models.user_session import UserSession

__all__ = [
    "Base",
    "Board",
    "Card",
    "CardLabel",
    "Column",
    "TimestampMixin",
    "User",
    "UserSession",
]
