"""
Default board provisioning for first-time users.

Provisioning runs during the login callback. It is re-checked under a row lock
on the user inside a savepoint, so two concurrent first logins of the same user
cannot both create a default board on PostgreSQL, and a provisioning failure
rolls back only its own savepoint.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.board import Board
from models.column import Column
from models.user import User

logger = logging.getLogger(__name__)

DEFAULT_BOARD_TITLE = "My Board"
DEFAULT_BOARD_DESCRIPTION = "Default board"

# (title, color), created at positions 0, 1, 2
DEFAULT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Todo", "#E8EAF6"),
    ("In Progress", "#E3F2FD"),
    ("Done", "#E0F2F1"),
)


async def add_default_columns(db: AsyncSession, board_id: int) -> list[Column]:
    """Create the three default columns on a board."""
    columns = [
        Column(board_id=board_id, title=title, color=color, position=position)
        for position, (title, color) in enumerate(DEFAULT_COLUMNS)
    ]
    db.add_all(columns)
    await db.flush()
    return columns


async def count_boards(db: AsyncSession, user_id: int) -> int:
    """Number of boards owned by a user."""
    query = select(func.count()).select_from(Board).where(Board.user_id == user_id)
    return (await db.execute(query)).scalar_one()


async def provision_defaults(db: AsyncSession, user_id: int) -> Board:
    """
    Create the default board with its three columns.

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    """
    board = Board(
        user_id=user_id,
        title=DEFAULT_BOARD_TITLE,
        description=DEFAULT_BOARD_DESCRIPTION,
    )
    db.add(board)
    await db.flush()
    await add_default_columns(db, board.id)
    return board


async def provision_if_needed(db: AsyncSession, user_id: int) -> Board | None:
    """
    Provision the default board when the user owns no boards.

    Returns the new board, or None when the user already had one.
    """
    async with db.begin_nested():
        # Serializes concurrent first logins; SQLite ignores FOR UPDATE.
        await db.execute(select(User.id).where(User.id == user_id).with_for_update())
        if await count_boards(db, user_id) > 0:
            return None
        board = await provision_defaults(db, user_id)

    logger.info("Provisioned default board for user_id=%s", user_id)
    return board
