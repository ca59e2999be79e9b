"""Card endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.card import CardCreate, CardData, CardMove, CardResponse, CardUpdate
from schemas.envelope import ApiResponse, MessageResponse
from services import card_service

router = APIRouter(tags=["cards"])


def _card_envelope(card: object, message: str | None = None) -> ApiResponse[CardData]:
    return ApiResponse(
        message=message,
        data=CardData(card=CardResponse.model_validate(card)),
    )


@router.post(
    "/columns/{column_id}/cards",
    response_model=ApiResponse[CardData],
    status_code=status.HTTP_201_CREATED,
)
async def create_card(
    column_id: int,
    data: CardCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[CardData]:
    """Add a card to a column. Without a position it is appended at the end."""
    card = await card_service.create_card(db, current_user.id, column_id, data)
    return _card_envelope(card, "Card created successfully")


@router.get("/cards/{card_id}", response_model=ApiResponse[CardData])
async def get_card(
    card_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[CardData]:
    """Get a card with its labels."""
    card = await card_service.get_card(db, current_user.id, card_id)
    return _card_envelope(card)


@router.put("/cards/{card_id}", response_model=ApiResponse[CardData])
async def update_card(
    card_id: int,
    data: CardUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[CardData]:
    """
    Update a card.

    Only fields present in the body change. Sending ``labels`` replaces the
    whole label set; omitting it keeps the current labels.
    """
    card = await card_service.update_card(db, current_user.id, card_id, data)
    return _card_envelope(card, "Card updated successfully")


@router.delete("/cards/{card_id}", response_model=MessageResponse)
async def delete_card(
    card_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """Delete a card and its labels."""
    await card_service.delete_card(db, current_user.id, card_id)
    return MessageResponse(message="Card deleted successfully")


@router.post("/cards/{card_id}/move", response_model=ApiResponse[CardData])
async def move_card(
    card_id: int,
    data: CardMove,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[CardData]:
    """Move a card to a column (possibly the same one) at the given position."""
    card = await card_service.move_card(db, current_user.id, card_id, data)
    return _card_envelope(card, "Card moved successfully")


@router.put("/cards/{card_id}/toggle-complete", response_model=ApiResponse[CardData])
async def toggle_complete(
    card_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[CardData]:
    """Flip the card's completed flag."""
    card = await card_service.toggle_complete(db, current_user.id, card_id)
    return _card_envelope(card, "Card status updated successfully")
