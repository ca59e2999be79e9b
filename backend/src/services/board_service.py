"""Service layer for board operations."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.board import Board
from models.card import Card
from models.column import Column
from schemas.board import BoardCreate, BoardUpdate
from services.ownership_service import require_board
from services.provisioning_service import add_default_columns

logger = logging.getLogger(__name__)


def board_tree_options() -> tuple:
    """Eager-load columns, cards, and labels; each level ordered by relationship order_by."""
    return (
        selectinload(Board.columns).selectinload(Column.cards).selectinload(Card.labels),
    )


async def load_board(db: AsyncSession, board_id: int) -> Board:
    """Re-fetch a board with its full tree, overwriting stale identity-map state."""
    query = (
        select(Board)
        .where(Board.id == board_id)
        .options(*board_tree_options())
        .execution_options(populate_existing=True)
    )
    return (await db.execute(query)).scalar_one()


async def list_boards(db: AsyncSession, user_id: int) -> list[Board]:
    """All boards owned by the user, oldest first, with nested columns and cards."""
    query = (
        select(Board)
        .where(Board.user_id == user_id)
        .options(*board_tree_options())
        .order_by(Board.id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_board(db: AsyncSession, user_id: int, board_id: int) -> Board:
    """
    Get a single board owned by the user.

    Raises:
        ResourceNotFoundError: If the board does not exist.
        ResourceForbiddenError: If the board belongs to another user.
    """
    await require_board(db, user_id, board_id)
    return await load_board(db, board_id)


async def create_board(db: AsyncSession, user_id: int, data: BoardCreate) -> Board:
    """
    Create a board with the default Todo / In Progress / Done columns.

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    """
    board = Board(user_id=user_id, title=data.title, description=data.description)
    db.add(board)
    await db.flush()
    await add_default_columns(db, board.id)
    logger.info("Created board id=%s user_id=%s", board.id, user_id)
    return await load_board(db, board.id)


async def update_board(
    db: AsyncSession,
    user_id: int,
    board_id: int,
    data: BoardUpdate,
) -> Board:
    """Update the fields present in the request."""
    board = await require_board(db, user_id, board_id)
    for field in data.model_fields_set:
        setattr(board, field, getattr(data, field))
    await db.flush()
    return await load_board(db, board_id)


async def delete_board(db: AsyncSession, user_id: int, board_id: int) -> None:
    """Delete a board. Columns, cards, and labels go with it via ON DELETE CASCADE."""
    board = await require_board(db, user_id, board_id)
    await db.delete(board)
    await db.flush()
    logger.info("Deleted board id=%s user_id=%s", board_id, user_id)
