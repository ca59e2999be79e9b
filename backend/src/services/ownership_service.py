"""
Ownership checks for boards, columns, and cards.

Only boards store an owner. A column or card is authorized by walking its
parents (Card -> Column -> Board -> user_id) on every check, so moving a card
or column can never leave a stale owner behind.

Existence is checked before ownership: an unknown id raises
ResourceNotFoundError, an existing resource owned by someone else raises
ResourceForbiddenError.
"""
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

from models.board import Board
from models.card import Card
from models.column import Column
from services.exceptions import ResourceForbiddenError, ResourceNotFoundError


class AccessDecision(StrEnum):
    """Result of comparing a resource owner with the session user."""

    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"


def authorize(owner_id: int, user_id: int) -> AccessDecision:
    """Compare the resolved owner of a resource with the session user."""
    return AccessDecision.ALLOWED if owner_id == user_id else AccessDecision.FORBIDDEN


async def resolve_owner(db: AsyncSession, resource: Board | Column | Card) -> int:
    """Walk the parent chain of a resource up to its board and return the owner id."""
    if isinstance(resource, Card):
        column = await db.get(Column, resource.column_id)
        if column is None:
            raise ResourceNotFoundError("column", resource.column_id)
        resource = column
    if isinstance(resource, Column):
        board = await db.get(Board, resource.board_id)
        if board is None:
            raise ResourceNotFoundError("board", resource.board_id)
        resource = board
    return resource.user_id


async def _require(
    db: AsyncSession,
    model: type[Board] | type[Column] | type[Card],
    resource: str,
    resource_id: int,
    user_id: int,
) -> Board | Column | Card:
    instance = await db.get(model, resource_id)
    if instance is None:
        raise ResourceNotFoundError(resource, resource_id)
    owner_id = await resolve_owner(db, instance)
    if authorize(owner_id, user_id) is AccessDecision.FORBIDDEN:
        raise ResourceForbiddenError(resource, resource_id)
    return instance


async def require_board(db: AsyncSession, user_id: int, board_id: int) -> Board:
    """Return a board owned by the user, or raise."""
    return await _require(db, Board, "board", board_id, user_id)


async def require_column(db: AsyncSession, user_id: int, column_id: int) -> Column:
    """Return a column whose board is owned by the user, or raise."""
    return await _require(db, Column, "column", column_id, user_id)


async def require_card(db: AsyncSession, user_id: int, card_id: int) -> Card:
    """Return a card whose column's board is owned by the user, or raise."""
    return await _require(db, Card, "card", card_id, user_id)
