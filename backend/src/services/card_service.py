"""Service layer for card operations."""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.card import Card
from models.card_label import CardLabel
from schemas.card import CardCreate, CardMove, CardUpdate
from services.ownership_service import require_card, require_column

logger = logging.getLogger(__name__)

# Fields written directly from CardUpdate; labels are handled separately.
_SCALAR_FIELDS = ("title", "description", "image", "due_date", "completed", "position")


async def load_card(db: AsyncSession, card_id: int) -> Card:
    """Re-fetch a card with its labels, overwriting stale identity-map state."""
    query = (
        select(Card)
        .where(Card.id == card_id)
        .options(selectinload(Card.labels))
        .execution_options(populate_existing=True)
    )
    return (await db.execute(query)).scalar_one()


async def next_card_position(db: AsyncSession, column_id: int) -> int:
    """max(position) + 1 among the column's cards, or 0 for an empty column."""
    query = select(func.max(Card.position)).where(Card.column_id == column_id)
    current = (await db.execute(query)).scalar_one_or_none()
    return 0 if current is None else current + 1


async def replace_labels(db: AsyncSession, card_id: int, labels: list[str]) -> None:
    """Delete every label on the card and recreate them from ``labels``."""
    await db.execute(delete(CardLabel).where(CardLabel.card_id == card_id))
    db.add_all(CardLabel(card_id=card_id, label=label) for label in labels)
    await db.flush()


async def create_card(
    db: AsyncSession,
    user_id: int,
    column_id: int,
    data: CardCreate,
) -> Card:
    """
    Create a card in a column whose board is owned by the user.

    Without an explicit position the card is appended after the last one.
    """
    await require_column(db, user_id, column_id)
    position = data.position
    if position is None:
        position = await next_card_position(db, column_id)

    card = Card(
        column_id=column_id,
        title=data.title,
        description=data.description,
        image=data.image,
        due_date=data.due_date,
        completed=bool(data.completed),
        position=position,
    )
    db.add(card)
    await db.flush()

    if data.labels:
        await replace_labels(db, card.id, data.labels)
    return await load_card(db, card.id)


async def get_card(db: AsyncSession, user_id: int, card_id: int) -> Card:
    """Get a card whose board is owned by the user."""
    await require_card(db, user_id, card_id)
    return await load_card(db, card_id)


async def update_card(
    db: AsyncSession,
    user_id: int,
    card_id: int,
    data: CardUpdate,
) -> Card:
    """
    Update the fields present in the request.

    When ``labels`` is present the label set is replaced wholesale; when it is
    absent the existing labels are kept.
    """
    card = await require_card(db, user_id, card_id)
    provided = data.model_fields_set
    for field in _SCALAR_FIELDS:
        if field in provided:
            setattr(card, field, getattr(data, field))
    await db.flush()

    if "labels" in provided:
        await replace_labels(db, card_id, data.labels or [])
    return await load_card(db, card_id)


async def delete_card(db: AsyncSession, user_id: int, card_id: int) -> None:
    """Delete a card and its labels."""
    card = await require_card(db, user_id, card_id)
    await db.delete(card)
    await db.flush()


async def move_card(
    db: AsyncSession,
    user_id: int,
    card_id: int,
    data: CardMove,
) -> Card:
    """
    Re-parent a card to ``data.column_id`` at ``data.position``.

    Both the card and the target column must belong to the user; nothing is
    written otherwise.
    """
    card = await require_card(db, user_id, card_id)
    await require_column(db, user_id, data.column_id)
    card.column_id = data.column_id
    card.position = data.position
    await db.flush()
    return await load_card(db, card_id)


async def toggle_complete(db: AsyncSession, user_id: int, card_id: int) -> Card:
    """Flip the card's completed flag. Two toggles restore the original value."""
    card = await require_card(db, user_id, card_id)
    card.completed = not card.completed
    await db.flush()
    return await load_card(db, card_id)
