"""Tests for the board service."""
from collections.abc import Callable

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Board, Card, CardLabel, Column
from models.user import User
from schemas.board import BoardCreate, BoardUpdate
from services import board_service
from services.exceptions import ResourceForbiddenError, ResourceNotFoundError


async def _count(db_session: AsyncSession, model: type) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar_one()


async def test__create_board__adds_default_columns(
    db_session: AsyncSession, test_user: User,
) -> None:
    board = await board_service.create_board(
        db_session, test_user.id, BoardCreate(title="Sprint", description="Q3"),
    )

    assert board.user_id == test_user.id
    assert board.title == "Sprint"
    assert board.description == "Q3"
    assert [(c.title, c.position) for c in board.columns] == [
        ("Todo", 0), ("In Progress", 1), ("Done", 2),
    ]
    assert all(c.cards == [] for c in board.columns)


async def test__list_boards__only_own_boards(
    db_session: AsyncSession, test_user: User, other_user: User, make_board: Callable,
) -> None:
    await make_board(test_user, "Mine 1")
    await make_board(other_user, "Theirs")
    await make_board(test_user, "Mine 2")

    boards = await board_service.list_boards(db_session, test_user.id)

    assert [b.title for b in boards] == ["Mine 1", "Mine 2"]
    assert all(b.user_id == test_user.id for b in boards)


async def test__list_boards__nested_levels_ordered_by_position(
    db_session: AsyncSession, test_user: User, make_board: Callable,
) -> None:
    tree = await make_board(test_user, layout={"A": ["a1", "a2"], "B": ["b1"]})
    # Swap column order and reverse cards in A
    tree.columns[0].position = 5
    tree.cards[0].position = 3
    await db_session.flush()

    [board] = await board_service.list_boards(db_session, test_user.id)

    assert [c.title for c in board.columns] == ["B", "A"]
    assert [card.title for card in board.columns[1].cards] == ["a2", "a1"]
    assert [label.label for label in board.columns[0].cards[0].labels] == ["sample"]


async def test__list_boards__position_ties_fall_back_to_id(
    db_session: AsyncSession, test_user: User, make_board: Callable,
) -> None:
    tree = await make_board(test_user, layout={"First": [], "Second": [], "Third": []})
    for column in tree.columns:
        column.position = 0
    await db_session.flush()

    [board] = await board_service.list_boards(db_session, test_user.id)

    assert [c.title for c in board.columns] == ["First", "Second", "Third"]


async def test__get_board__foreign_is_forbidden(
    db_session: AsyncSession, test_user: User, other_user: User, make_board: Callable,
) -> None:
    tree = await make_board(other_user)

    with pytest.raises(ResourceForbiddenError):
        await board_service.get_board(db_session, test_user.id, tree.board.id)


async def test__get_board__missing(db_session: AsyncSession, test_user: User) -> None:
    with pytest.raises(ResourceNotFoundError):
        await board_service.get_board(db_session, test_user.id, 12345)


async def test__update_board__only_provided_fields(
    db_session: AsyncSession, test_user: User, make_board: Callable,
) -> None:
    tree = await make_board(test_user, "Original")

    board = await board_service.update_board(
        db_session, test_user.id, tree.board.id, BoardUpdate(title="Renamed"),
    )

    assert board.title == "Renamed"
    assert board.description == "Original description"


async def test__update_board__description_can_be_cleared(
    db_session: AsyncSession, test_user: User, make_board: Callable,
) -> None:
    tree = await make_board(test_user)

    board = await board_service.update_board(
        db_session, test_user.id, tree.board.id, BoardUpdate(description=None),
    )

    assert board.description is None


async def test__delete_board__cascades_to_columns_cards_labels(
    db_session: AsyncSession, test_user: User, make_board: Callable,
) -> None:
    tree = await make_board(test_user, layout={"A": ["a1", "a2"], "B": ["b1"], "C": []})

    await board_service.delete_board(db_session, test_user.id, tree.board.id)

    assert await _count(db_session, Board) == 0
    assert await _count(db_session, Column) == 0
    assert await _count(db_session, Card) == 0
    assert await _count(db_session, CardLabel) == 0


async def test__delete_board__leaves_other_boards(
    db_session: AsyncSession, test_user: User, other_user: User, make_board: Callable,
) -> None:
    doomed = await make_board(test_user)
    await make_board(other_user, layout={"X": ["x1"]})

    await board_service.delete_board(db_session, test_user.id, doomed.board.id)

    assert await _count(db_session, Board) == 1
    assert await _count(db_session, Column) == 1
    assert await _count(db_session, Card) == 1


async def test__delete_board__foreign_is_forbidden_and_kept(
    db_session: AsyncSession, test_user: User, other_user: User, make_board: Callable,
) -> None:
    tree = await make_board(other_user)

    with pytest.raises(ResourceForbiddenError):
        await board_service.delete_board(db_session, test_user.id, tree.board.id)

    assert await _count(db_session, Board) == 1
