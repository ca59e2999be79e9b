"""Fixtures for cross-user access tests: user A owns the data, user B attacks it."""
from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest
from httpx import AsyncClient

from models.user import User

if TYPE_CHECKING:
    from conftest import BoardTree


@pytest.fixture
async def user_a_board(test_user: User, make_board: Callable) -> "BoardTree":
    """A board owned by user A with one card in its first column."""
    return await make_board(
        test_user, title="A's board", layout={"Todo": ["Secret card"], "Done": []},
    )


@pytest.fixture
async def user_b_board(other_user: User, make_board: Callable) -> "BoardTree":
    """A board owned by user B."""
    return await make_board(other_user, title="B's board", layout={"Todo": ["B card"]})


@pytest.fixture
async def client_as_user_b(
    app_client: AsyncClient,
    login_as: Callable,
    other_user: User,
) -> AsyncClient:
    """Client authenticated as user B."""
    await login_as(app_client, other_user)
    return app_client
