"""Board endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.board import BoardCreate, BoardData, BoardListData, BoardResponse, BoardUpdate
from schemas.envelope import ApiResponse, MessageResponse
from services import board_service

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("", response_model=ApiResponse[BoardListData])
async def list_boards(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[BoardListData]:
    """List the current user's boards with columns, cards, and labels nested in order."""
    boards = await board_service.list_boards(db, current_user.id)
    return ApiResponse(
        data=BoardListData(boards=[BoardResponse.model_validate(b) for b in boards]),
    )


@router.post(
    "",
    response_model=ApiResponse[BoardData],
    status_code=status.HTTP_201_CREATED,
)
async def create_board(
    data: BoardCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[BoardData]:
    """Create a board. It starts with Todo, In Progress, and Done columns."""
    board = await board_service.create_board(db, current_user.id, data)
    return ApiResponse(
        message="Board created successfully",
        data=BoardData(board=BoardResponse.model_validate(board)),
    )


@router.get("/{board_id}", response_model=ApiResponse[BoardData])
async def get_board(
    board_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[BoardData]:
    """Get a board. 404 if it does not exist, 403 if it belongs to someone else."""
    board = await board_service.get_board(db, current_user.id, board_id)
    return ApiResponse(data=BoardData(board=BoardResponse.model_validate(board)))


@router.put("/{board_id}", response_model=ApiResponse[BoardData])
async def update_board(
    board_id: int,
    data: BoardUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[BoardData]:
    """Update a board's title and/or description."""
    board = await board_service.update_board(db, current_user.id, board_id, data)
    return ApiResponse(
        message="Board updated successfully",
        data=BoardData(board=BoardResponse.model_validate(board)),
    )


@router.delete("/{board_id}", response_model=MessageResponse)
async def delete_board(
    board_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """Delete a board with all of its columns, cards, and labels."""
    await board_service.delete_board(db, current_user.id, board_id)
    return MessageResponse(message="Board deleted successfully")
