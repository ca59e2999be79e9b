"""
IDOR (Insecure Direct Object Reference) security tests.

These tests verify that users cannot read, modify, move, or delete boards,
columns, and cards belonging to other users by manipulating resource ids.
Foreign resources answer 403 and the database is left untouched.

OWASP Reference: A01:2021 - Broken Access Control
"""
from typing import TYPE_CHECKING

from httpx import AsyncClient, Response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.card import Card
from models.column import Column

if TYPE_CHECKING:
    from conftest import BoardTree

FORBIDDEN = {"success": False, "message": "Unauthorized"}


def assert_forbidden(response: Response) -> None:
    assert response.status_code == 403
    assert response.json() == FORBIDDEN


class TestBoardIDOR:
    """Test IDOR protection for board resources."""

    async def test__get_board__forbidden(
        self, client_as_user_b: AsyncClient, user_a_board: "BoardTree",
    ) -> None:
        response = await client_as_user_b.get(f"/boards/{user_a_board.board.id}")
        assert_forbidden(response)

    async def test__update_board__forbidden_and_unchanged(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        """User B cannot rename user A's board."""
        response = await client_as_user_b.put(
            f"/boards/{user_a_board.board.id}", json={"title": "Hacked by User B"},
        )

        assert_forbidden(response)
        await db_session.refresh(user_a_board.board)
        assert user_a_board.board.title == "A's board"

    async def test__delete_board__forbidden_and_kept(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        response = await client_as_user_b.delete(f"/boards/{user_a_board.board.id}")

        assert_forbidden(response)
        count = await db_session.scalar(
            select(func.count()).select_from(Column).where(
                Column.board_id == user_a_board.board.id,
            ),
        )
        assert count == 2

    async def test__list_boards__excludes_other_users_data(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        user_b_board: "BoardTree",
    ) -> None:
        """User B's list contains only user B's boards."""
        response = await client_as_user_b.get("/boards")

        assert response.status_code == 200
        ids = [board["id"] for board in response.json()["data"]["boards"]]
        assert ids == [user_b_board.board.id]

    async def test__create_column_on_foreign_board__forbidden(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        response = await client_as_user_b.post(
            f"/boards/{user_a_board.board.id}/columns", json={"title": "Injected"},
        )

        assert_forbidden(response)
        titles = (await db_session.scalars(
            select(Column.title).where(Column.board_id == user_a_board.board.id),
        )).all()
        assert "Injected" not in titles


class TestColumnIDOR:
    """Test IDOR protection for column resources."""

    async def test__update_column__forbidden_and_unchanged(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        column = user_a_board.columns[0]

        response = await client_as_user_b.put(
            f"/columns/{column.id}", json={"title": "Hacked", "color": "#000000"},
        )

        assert_forbidden(response)
        await db_session.refresh(column)
        assert column.title == "Todo"
        assert column.color == "#E8EAF6"

    async def test__delete_column__forbidden_and_kept(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        column = user_a_board.columns[0]

        response = await client_as_user_b.delete(f"/columns/{column.id}")

        assert_forbidden(response)
        assert await db_session.scalar(select(Column.id).where(Column.id == column.id)) == column.id

    async def test__reorder_with_foreign_column__forbidden_and_nothing_moves(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        user_b_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        """A batch mixing own and foreign columns is rejected as a whole."""
        own = user_b_board.columns[0]
        foreign = user_a_board.columns[1]

        response = await client_as_user_b.post(
            "/columns/reorder",
            json={"columns": [
                {"id": own.id, "position": 7},
                {"id": foreign.id, "position": 0},
            ]},
        )

        assert_forbidden(response)
        await db_session.refresh(own)
        await db_session.refresh(foreign)
        assert own.position == 0
        assert foreign.position == 1

    async def test__create_card_in_foreign_column__forbidden(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        column = user_a_board.columns[1]

        response = await client_as_user_b.post(
            f"/columns/{column.id}/cards", json={"title": "Injected"},
        )

        assert_forbidden(response)
        count = await db_session.scalar(
            select(func.count()).select_from(Card).where(Card.column_id == column.id),
        )
        assert count == 0


class TestCardIDOR:
    """Test IDOR protection for card resources."""

    async def test__get_card__forbidden(
        self, client_as_user_b: AsyncClient, user_a_board: "BoardTree",
    ) -> None:
        response = await client_as_user_b.get(f"/cards/{user_a_board.cards[0].id}")
        assert_forbidden(response)

    async def test__update_card__forbidden_and_unchanged(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        card = user_a_board.cards[0]

        response = await client_as_user_b.put(
            f"/cards/{card.id}", json={"title": "Hacked", "labels": []},
        )

        assert_forbidden(response)
        await db_session.refresh(card, ["labels"])
        assert card.title == "Secret card"
        assert [label.label for label in card.labels] == ["sample"]

    async def test__delete_card__forbidden_and_kept(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        card = user_a_board.cards[0]

        response = await client_as_user_b.delete(f"/cards/{card.id}")

        assert_forbidden(response)
        assert await db_session.scalar(select(Card.id).where(Card.id == card.id)) == card.id

    async def test__toggle_complete__forbidden_and_unchanged(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        card = user_a_board.cards[0]

        response = await client_as_user_b.put(f"/cards/{card.id}/toggle-complete")

        assert_forbidden(response)
        await db_session.refresh(card)
        assert card.completed is False

    async def test__move_own_card_into_foreign_column__forbidden(
        self,
        client: AsyncClient,
        user_a_board: "BoardTree",
        user_b_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        """User A owns the card but not the destination column, so nothing moves."""
        card = user_a_board.cards[0]
        target = user_b_board.columns[0]

        response = await client.post(
            f"/cards/{card.id}/move", json={"column_id": target.id, "position": 0},
        )

        assert_forbidden(response)
        await db_session.refresh(card)
        assert card.column_id == user_a_board.columns[0].id
        assert card.position == 0

    async def test__move_foreign_card_into_own_column__forbidden(
        self,
        client_as_user_b: AsyncClient,
        user_a_board: "BoardTree",
        user_b_board: "BoardTree",
        db_session: AsyncSession,
    ) -> None:
        """User B cannot pull user A's card onto their own board."""
        card = user_a_board.cards[0]

        response = await client_as_user_b.post(
            f"/cards/{card.id}/move",
            json={"column_id": user_b_board.columns[0].id, "position": 0},
        )

        assert_forbidden(response)
        await db_session.refresh(card)
        assert card.column_id == user_a_board.columns[0].id
