"""
Google sign-in and session endpoints.

The callback never answers with JSON: the browser is mid-navigation, so every
outcome is a redirect to the frontend, either ``/auth/success`` with the
session cookie set or ``/auth/error?reason=<code>``.
"""
import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_settings
from api.helpers.envelope import frontend_redirect
from core import google_oauth, sessions
from core.auth import get_or_create_user, get_session_credential
from core.config import Settings
from models.user import User
from schemas.envelope import ApiResponse, MessageResponse
from schemas.user import UserData, UserResponse
from services.provisioning_service import provision_if_needed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/google")
async def redirect_to_google(
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Send the browser to Google's consent screen."""
    try:
        url = google_oauth.build_authorization_url(settings)
    except google_oauth.OAuthConfigurationError as e:
        logger.error("Google OAuth redirect failed: %s", e)
        return frontend_redirect(settings, "/auth/error", reason=e.reason)
    return RedirectResponse(url=url, status_code=302)


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: str | None = None,
    error: str | None = None,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Complete the authorization code flow (query-string response mode)."""
    return await _complete_sign_in(request, code, error, db, settings)


@router.post("/google/callback")
async def google_callback_form(
    request: Request,
    code: str | None = Form(None),
    error: str | None = Form(None),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Complete the authorization code flow (form_post response mode)."""
    return await _complete_sign_in(request, code, error, db, settings)


async def _complete_sign_in(
    request: Request,
    code: str | None,
    error: str | None,
    db: AsyncSession,
    settings: Settings,
) -> RedirectResponse:
    """
    Steps: exchange the code (once, never retried), verify the identity token,
    upsert the user by Google subject, establish a fresh session (discarding any
    session behind the cookie presented here), provision a default board for
    users without one, then redirect with the cookie set.

    A provisioning failure still signs the user in; the success redirect then
    carries ``provisioning=failed`` so the frontend can show a degraded state.
    """
    if error:
        logger.warning("Google OAuth returned error: %s", error)
        return frontend_redirect(settings, "/auth/error", reason="access_denied")

    try:
        tokens = await google_oauth.exchange_code(code, settings)
        claims = await google_oauth.verify_id_token(tokens.id_token, settings)
        user, created = await get_or_create_user(db, claims)
        credential = await sessions.establish(
            db,
            user.id,
            settings,
            previous_credential=get_session_credential(request, settings),
        )
        provisioned = await _provision(db, user.id)
        await db.commit()
    except google_oauth.OAuthFlowError as e:
        logger.error("Google OAuth callback failed (%s): %s", e.reason, e)
        await db.rollback()
        return frontend_redirect(settings, "/auth/error", reason=e.reason)
    except Exception:
        logger.exception("Unexpected error in Google OAuth callback")
        await db.rollback()
        return frontend_redirect(settings, "/auth/error", reason="server_error")

    logger.info("Login succeeded user_id=%s created=%s", user.id, created)
    if provisioned:
        response = frontend_redirect(settings, "/auth/success")
    else:
        response = frontend_redirect(settings, "/auth/success", provisioning="failed")
    sessions.set_session_cookie(response, credential, settings)
    return response


async def _provision(db: AsyncSession, user_id: int) -> bool:
    """Provision defaults. Returns False when provisioning failed; the login continues."""
    try:
        await provision_if_needed(db, user_id)
    except Exception:
        logger.exception("Default board provisioning failed for user_id=%s", user_id)
        return False
    return True


@router.get("/me", response_model=ApiResponse[UserData])
async def get_me(
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserData]:
    """Return the authenticated user's profile."""
    return ApiResponse(data=UserData(user=UserResponse.model_validate(current_user)))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Terminate the current session and clear the cookie.

    Returns 401 when the request carries no session cookie at all. A cookie
    that no longer maps to a live session is treated as already logged out.
    """
    result = await sessions.terminate(db, get_session_credential(request, settings))
    if result is sessions.TerminateResult.NO_SESSION:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    message = (
        "Logged out successfully"
        if result is sessions.TerminateResult.TERMINATED
        else "Already logged out"
    )
    response = JSONResponse(content=MessageResponse(message=message).model_dump())
    sessions.clear_session_cookie(response, settings)
    return response
