"""
Server-side session management for cookie authentication.

Lifecycle of a browser:

    Anonymous -> Authenticating (OAuth code received)
              -> Authenticated (session row bound to a user, cookie issued)
              -> Anonymous (logout or expiry)

Only the SHA-256 of a credential is persisted; the plaintext lives in the
client's HTTP-only cookie. The session table is touched exclusively through
the functions in this module.
"""
import hashlib
import logging
import secrets
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from fastapi import Response
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from core.session_cache import get_session_cache
from models.user_session import UserSession

logger = logging.getLogger(__name__)


class TerminateResult(StrEnum):
    """Outcome of terminate()."""

    TERMINATED = "terminated"
    ALREADY_INVALID = "already_invalid"  # credential presented but no live session
    NO_SESSION = "no_session"  # anonymous request, nothing presented


def generate_credential() -> tuple[str, str]:
    """
    Generate a new session credential.

    Returns:
        Tuple of (plaintext_credential, session_id). The session id is the hash
        stored server-side; the plaintext is only ever sent to the client.
    """
    credential = secrets.token_urlsafe(32)
    return credential, hash_credential(credential)


def hash_credential(credential: str) -> str:
    """Hash a credential for lookup against stored session ids."""
    return hashlib.sha256(credential.encode()).hexdigest()


async def _revoke(session_id: str) -> None:
    cache = get_session_cache()
    if cache:
        await cache.revoke(session_id)


async def _discard(db: AsyncSession, session_id: str) -> bool:
    """Delete a session row and mark its id revoked. Returns True if a row existed."""
    result = await db.execute(delete(UserSession).where(UserSession.id == session_id))
    await db.flush()
    await _revoke(session_id)
    return result.rowcount > 0


async def establish(
    db: AsyncSession,
    user_id: int,
    settings: Settings,
    previous_credential: str | None = None,
) -> str:
    """
    Bind a new session to a user and return the credential for the client.

    A fresh identifier is issued on every call. Any session tied to the
    credential the client presented during login is discarded first, so an
    identifier planted before login can never become authenticated.

    Note: Uses flush(), not commit.
    """
    if previous_credential:
        await _discard(db, hash_credential(previous_credential))

    credential, session_id = generate_credential()
    expires_at = datetime.now(UTC) + timedelta(minutes=settings.session_lifetime_minutes)
    db.add(UserSession(id=session_id, user_id=user_id, expires_at=expires_at))
    await db.flush()

    logger.info("session_established user_id=%s", user_id)
    return credential


async def validate(db: AsyncSession, credential: str | None) -> int | None:
    """
    Resolve a credential to the id of its user.

    Returns None for a missing, unknown, or expired credential. Expired rows
    are deleted as they are encountered; the caller must commit for the
    deletion to persist.

    The database is the only source of a positive answer. The cache can only
    short-circuit credentials already known to be dead.
    """
    if not credential:
        return None

    session_id = hash_credential(credential)
    cache = get_session_cache()
    if cache and await cache.is_revoked(session_id):
        return None

    session = await db.get(UserSession, session_id)
    if session is None:
        await _revoke(session_id)
        return None

    if session.is_expired(datetime.now(UTC)):
        logger.info("session_expired user_id=%s", session.user_id)
        await _discard(db, session_id)
        return None

    return session.user_id


async def terminate(db: AsyncSession, credential: str | None) -> TerminateResult:
    """
    Invalidate the session behind a credential.

    Terminating an unknown or already-expired credential is a no-op reported
    as ALREADY_INVALID; a request without any credential is NO_SESSION so the
    caller can answer "not authenticated".
    """
    if not credential:
        return TerminateResult.NO_SESSION

    if await _discard(db, hash_credential(credential)):
        logger.info("session_terminated")
        return TerminateResult.TERMINATED
    return TerminateResult.ALREADY_INVALID


def set_session_cookie(response: Response, credential: str, settings: Settings) -> None:
    """Attach the session credential to a response as an HTTP-only cookie."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=credential,
        max_age=settings.session_lifetime_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Instruct the client to drop its session cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        path="/",
    )
