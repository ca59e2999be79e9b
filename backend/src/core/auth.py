"""Authentication module for session cookie validation and Google user binding."""
import logging
from datetime import UTC, datetime

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core import sessions
from core.config import Settings, get_settings
from core.google_oauth import IdentityClaims
from db.session import get_async_session
from models.user import User

logger = logging.getLogger(__name__)


def get_session_credential(request: Request, settings: Settings) -> str | None:
    """Read the session credential from the request cookie."""
    return request.cookies.get(settings.session_cookie_name) or None


async def get_or_create_user(
    db: AsyncSession,
    claims: IdentityClaims,
) -> tuple[User, bool]:
    """
    Upsert a user keyed on the immutable Google subject id.

    Profile fields (name, email, avatar) are refreshed on every login; email is
    never used for lookup because it can change at the provider.

    Handles race conditions where two callbacks for the same new user insert
    concurrently: the losing INSERT hits the unique constraint on google_id,
    its savepoint is rolled back, and the winner's row is returned.

    Returns:
        Tuple of (user, created).

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    """
    query = select(User).where(User.google_id == claims.subject)
    user = (await db.execute(query)).scalar_one_or_none()
    created = False

    if user is None:
        try:
            async with db.begin_nested():
                user = User(google_id=claims.subject, provider="google")
                db.add(user)
            created = True
        except IntegrityError:
            logger.info("Concurrent user creation for google_id=%s", claims.subject)
            user = (await db.execute(query)).scalar_one()

    user.name = claims.name or claims.email or user.name
    if claims.email:
        user.email = claims.email
    user.avatar = claims.picture
    user.provider = "google"
    user.email_verified_at = datetime.now(UTC)
    await db.flush()

    return user, created


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Dependency that validates the session cookie and returns the current user.

    The session is resolved once per request here; route handlers receive the
    user rather than reading the cookie themselves.
    """
    credential = get_session_credential(request, settings)
    if credential is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user_id = await sessions.validate(db, credential)
    if user_id is None:
        # The 401 below rolls the request back; keep the expired-row cleanup.
        await db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
        )

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
        )

    request.state.user_id = user.id
    return user
