"""Service layer for column operations."""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.card import Card
from models.column import DEFAULT_COLUMN_COLOR, Column
from schemas.column import ColumnCreate, ColumnPosition, ColumnUpdate
from services.ownership_service import require_board, require_column

logger = logging.getLogger(__name__)


async def load_column(db: AsyncSession, column_id: int) -> Column:
    """Re-fetch a column with its cards and labels."""
    query = (
        select(Column)
        .where(Column.id == column_id)
        .options(selectinload(Column.cards).selectinload(Card.labels))
        .execution_options(populate_existing=True)
    )
    return (await db.execute(query)).scalar_one()


async def next_column_position(db: AsyncSession, board_id: int) -> int:
    """max(position) + 1 among the board's columns, or 0 for an empty board."""
    query = select(func.max(Column.position)).where(Column.board_id == board_id)
    current = (await db.execute(query)).scalar_one_or_none()
    return 0 if current is None else current + 1


async def create_column(
    db: AsyncSession,
    user_id: int,
    board_id: int,
    data: ColumnCreate,
) -> Column:
    """
    Create a column on a board owned by the user.

    Without an explicit position the column is appended after the last one.
    """
    await require_board(db, user_id, board_id)
    position = data.position
    if position is None:
        position = await next_column_position(db, board_id)

    column = Column(
        board_id=board_id,
        title=data.title,
        color=data.color or DEFAULT_COLUMN_COLOR,
        position=position,
    )
    db.add(column)
    await db.flush()
    return await load_column(db, column.id)


async def update_column(
    db: AsyncSession,
    user_id: int,
    column_id: int,
    data: ColumnUpdate,
) -> Column:
    """Update the fields present in the request."""
    column = await require_column(db, user_id, column_id)
    for field in data.model_fields_set:
        setattr(column, field, getattr(data, field))
    await db.flush()
    return await load_column(db, column_id)


async def delete_column(db: AsyncSession, user_id: int, column_id: int) -> None:
    """Delete a column together with its cards and their labels."""
    column = await require_column(db, user_id, column_id)
    await db.delete(column)
    await db.flush()


async def reorder_columns(
    db: AsyncSession,
    user_id: int,
    items: list[ColumnPosition],
) -> None:
    """
    Apply a batch of (id, position) pairs.

    Every pair is authorized before the first write, so an unknown or foreign
    id leaves all positions untouched. Writes are applied in submitted order;
    a repeated id ends with its last position.
    """
    columns = [await require_column(db, user_id, item.id) for item in items]
    for column, item in zip(columns, items, strict=True):
        column.position = item.position
    await db.flush()
    logger.info("Reordered %s columns for user_id=%s", len(items), user_id)
