"""Pytest fixtures for testing."""
import os
from dataclasses import dataclass

# Settings are read at import time by db.session and api.main; configure the
# environment before any application module is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"
os.environ["GOOGLE_REDIRECT_URI"] = "http://test/auth/google/callback"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ["SESSION_SECURE_COOKIE"] = "false"
os.environ["REDIS_ENABLED"] = "false"
os.environ["APP_DEBUG"] = "false"

import time  # noqa: E402
from collections.abc import AsyncGenerator, Callable, Generator, Iterator  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core import google_oauth, sessions  # noqa: E402
from core.config import Settings, get_settings  # noqa: E402
from core.session_cache import set_session_cache  # noqa: E402
from db.session import configure_sqlite  # noqa: E402
from models import Base, Board, Card, CardLabel, Column, User  # noqa: E402

# Set TEST_POSTGRES=1 to run the suite against PostgreSQL in a container.
USE_POSTGRES = os.environ.get("TEST_POSTGRES", "").lower() in {"1", "true", "yes"}


@dataclass
class BoardTree:
    """A board created by make_board, with its columns and cards in creation order."""

    board: Board
    columns: list[Column]
    cards: list[Card]


@pytest.fixture(scope="session")
def postgres_url() -> Iterator[str | None]:
    """Start a PostgreSQL container for the session when TEST_POSTGRES is set."""
    if not USE_POSTGRES:
        yield None
        return

    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:16", driver="asyncpg") as postgres:
        yield postgres.get_connection_url()


@pytest.fixture
async def async_engine(postgres_url: str | None) -> AsyncGenerator[AsyncEngine]:
    """Create an async engine with a fresh schema."""
    if postgres_url:
        engine = create_async_engine(postgres_url, echo=False)
    else:
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        configure_sqlite(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    if postgres_url:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_connection(async_engine: AsyncEngine) -> AsyncGenerator[AsyncConnection]:
    """
    Create a connection with a transaction that will be rolled back after the test.

    This provides test isolation - each test runs in its own transaction
    that is rolled back, so tests don't affect each other.
    """
    async with async_engine.connect() as connection:
        transaction = await connection.begin()
        try:
            yield connection
        finally:
            await transaction.rollback()


@pytest.fixture
async def db_session(db_connection: AsyncConnection) -> AsyncGenerator[AsyncSession]:
    """
    Create an async session bound to the test transaction.

    Uses savepoints, allowing the session's flush/commit to work within our
    outer test transaction.
    """
    session_factory = async_sessionmaker(
        bind=db_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def no_session_cache() -> Generator[None]:
    """Tests run without Redis unless they install a cache themselves."""
    set_session_cache(None)
    yield
    set_session_cache(None)


@pytest.fixture
def settings() -> Settings:
    """Settings as configured by the test environment."""
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory creating users with distinct Google subjects."""
    counter = {"n": 0}

    async def _make_user(email: str | None = None, name: str | None = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            google_id=f"google-sub-{n}",
            email=email or f"user{n}@example.com",
            name=name or f"User {n}",
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make_user


@pytest.fixture
async def test_user(make_user: Callable) -> User:
    """The primary user for tests."""
    return await make_user(email="owner@example.com", name="Owner")


@pytest.fixture
async def other_user(make_user: Callable) -> User:
    """A second user who must never see the primary user's data."""
    return await make_user(email="other@example.com", name="Other")


@pytest.fixture
def make_board(db_session: AsyncSession) -> Callable:
    """
    Factory creating a board with columns and cards directly in the database.

    ``layout`` maps column titles to lists of card titles.
    """

    async def _make_board(
        user: User,
        title: str = "Board",
        layout: dict[str, list[str]] | None = None,
    ) -> BoardTree:
        columns: list[Column] = []
        cards: list[Card] = []
        board = Board(user_id=user.id, title=title, description=f"{title} description")
        db_session.add(board)
        await db_session.flush()
        layout = layout if layout is not None else {"Todo": ["First card"], "Done": []}
        for column_position, (column_title, card_titles) in enumerate(layout.items()):
            column = Column(
                board_id=board.id, title=column_title, color="#E8EAF6", position=column_position,
            )
            db_session.add(column)
            await db_session.flush()
            columns.append(column)
            for card_position, card_title in enumerate(card_titles):
                card = Card(column_id=column.id, title=card_title, position=card_position)
                db_session.add(card)
                await db_session.flush()
                cards.append(card)
                db_session.add(CardLabel(card_id=card.id, label="sample"))
        await db_session.flush()
        return BoardTree(board=board, columns=columns, cards=cards)

    return _make_board


@pytest.fixture
async def app_client(
    db_session: AsyncSession,
) -> AsyncGenerator[AsyncClient]:
    """Create an unauthenticated test client with database session override."""
    # Clear the settings cache so it picks up the test environment
    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def login_as(db_session: AsyncSession) -> Callable:
    """Establish a session for a user and attach its cookie to a client."""

    async def _login_as(client: AsyncClient, user: User) -> str:
        settings = get_settings()
        credential = await sessions.establish(db_session, user.id, settings)
        client.cookies.set(settings.session_cookie_name, credential)
        return credential

    return _login_as


@pytest.fixture
async def client(
    app_client: AsyncClient,
    login_as: Callable,
    test_user: User,
) -> AsyncClient:
    """Test client authenticated as ``test_user``."""
    await login_as(app_client, test_user)
    return app_client


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """Signing key standing in for Google's."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def mock_jwks(monkeypatch: pytest.MonkeyPatch, rsa_key: rsa.RSAPrivateKey) -> Mock:
    """Serve the test public key instead of fetching Google's JWKS."""
    jwks_client = Mock()
    jwks_client.get_signing_key_from_jwt.return_value = Mock(key=rsa_key.public_key())
    monkeypatch.setattr(google_oauth, "get_jwks_client", lambda _settings: jwks_client)
    return jwks_client


@pytest.fixture
def make_id_token(rsa_key: rsa.RSAPrivateKey, settings: Settings) -> Callable[..., str]:
    """Build an RS256 identity token; keyword arguments override claims (None drops one)."""

    def _make(**overrides: object) -> str:
        now = int(time.time())
        claims = {
            "iss": "https://accounts.google.com",
            "aud": settings.google_client_id,
            "sub": "1234567890",
            "email": "a@b.com",
            "name": "Ada Lovelace",
            "picture": "https://example.com/ada.png",
            "iat": now,
            "exp": now + 3600,
        }
        claims.update(overrides)
        claims = {k: v for k, v in claims.items() if v is not None}
        return jwt.encode(claims, rsa_key, algorithm="RS256", headers={"kid": "test-key"})

    return _make
