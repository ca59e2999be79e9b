"""Column endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.column import (
    ColumnCreate,
    ColumnData,
    ColumnReorder,
    ColumnResponse,
    ColumnUpdate,
)
from schemas.envelope import ApiResponse, MessageResponse
from services import column_service

router = APIRouter(tags=["columns"])


@router.post(
    "/boards/{board_id}/columns",
    response_model=ApiResponse[ColumnData],
    status_code=status.HTTP_201_CREATED,
)
async def create_column(
    board_id: int,
    data: ColumnCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[ColumnData]:
    """Add a column to a board. Without a position it is appended at the end."""
    column = await column_service.create_column(db, current_user.id, board_id, data)
    return ApiResponse(
        message="Column created successfully",
        data=ColumnData(column=ColumnResponse.model_validate(column)),
    )


# Declared before /columns/{column_id} so "reorder" is never parsed as an id.
@router.post("/columns/reorder", response_model=MessageResponse)
async def reorder_columns(
    data: ColumnReorder,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """
    Set the positions of several columns at once.

    Every column must exist and belong to the current user; otherwise the
    request fails with 404/403 and no position changes.
    """
    await column_service.reorder_columns(db, current_user.id, data.columns)
    return MessageResponse(message="Columns reordered successfully")


@router.put("/columns/{column_id}", response_model=ApiResponse[ColumnData])
async def update_column(
    column_id: int,
    data: ColumnUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[ColumnData]:
    """Update a column's title, color, or position."""
    column = await column_service.update_column(db, current_user.id, column_id, data)
    return ApiResponse(
        message="Column updated successfully",
        data=ColumnData(column=ColumnResponse.model_validate(column)),
    )


@router.delete("/columns/{column_id}", response_model=MessageResponse)
async def delete_column(
    column_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """Delete a column together with its cards."""
    await column_service.delete_column(db, current_user.id, column_id)
    return MessageResponse(message="Column deleted successfully")
