"""
Google OAuth 2.0 authorization code flow.

Two network calls reach Google: the authorization code exchange and the JWKS
fetch used to verify the identity token. Both are bounded by
``oauth_timeout_seconds`` and neither is retried: an authorization code is
single-use, so a failed exchange means the user must start the login again.

Nothing is read from an identity token until its signature, issuer, audience,
and expiry have been verified.
"""
import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
import jwt
from jwt import PyJWKClient
from starlette.concurrency import run_in_threadpool

from core.config import Settings

logger = logging.getLogger(__name__)

# Cache for JWKS client (reuse across requests)
_jwks_clients: dict[str, PyJWKClient] = {}


class OAuthFlowError(Exception):
    """
    Base class for failures of the login flow.

    ``reason`` is the machine-readable code sent to the frontend error page.
    """

    reason = "server_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class OAuthConfigurationError(OAuthFlowError):
    """Client id, secret, or redirect URI is not configured."""

    reason = "configuration_error"


class AuthorizationCodeMissingError(OAuthFlowError):
    """The callback arrived without an authorization code."""

    reason = "no_code"


class TokenExchangeError(OAuthFlowError):
    """Google refused the code, returned an error payload, or could not be reached."""

    reason = "token_exchange_failed"


class IdTokenMissingError(OAuthFlowError):
    """The token response carried no identity token."""

    reason = "no_id_token"


class IdTokenVerificationError(OAuthFlowError):
    """The identity token failed signature, issuer, audience, or expiry checks."""

    reason = "invalid_token"


@dataclass(frozen=True)
class TokenSet:
    """Tokens returned by the authorization code exchange."""

    access_token: str
    id_token: str | None


@dataclass(frozen=True)
class IdentityClaims:
    """Verified fields from a Google identity token."""

    subject: str
    email: str | None
    name: str | None
    picture: str | None


def build_authorization_url(settings: Settings) -> str:
    """
    Build the Google consent screen URL.

    Raises:
        OAuthConfigurationError: If the OAuth client is not configured.
    """
    if not settings.google_client_id or not settings.google_redirect_uri:
        raise OAuthConfigurationError("Google OAuth configuration missing")

    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_redirect_uri,
        "response_type": "code",
        "scope": "openid profile email",
        "access_type": "offline",
        "prompt": "consent",
    }
    return f"{settings.google_auth_url}?{urlencode(params)}"


async def exchange_code(
    code: str | None,
    settings: Settings,
    redirect_uri: str | None = None,
) -> TokenSet:
    """
    Exchange an authorization code for tokens. Called at most once per code.

    Raises:
        AuthorizationCodeMissingError: If no code was supplied.
        OAuthConfigurationError: If the OAuth client is not configured.
        TokenExchangeError: If Google rejects the code or cannot be reached.
    """
    if not code:
        raise AuthorizationCodeMissingError("No authorization code received")
    if not settings.google_configured:
        raise OAuthConfigurationError("Google OAuth configuration missing")

    data = {
        "code": code,
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "redirect_uri": redirect_uri or settings.google_redirect_uri,
        "grant_type": "authorization_code",
    }

    try:
        async with httpx.AsyncClient(timeout=settings.oauth_timeout_seconds) as client:
            response = await client.post(
                settings.google_token_url,
                data=data,
                headers={"Accept": "application/json"},
            )
    except httpx.HTTPError as e:
        logger.error("Token exchange request failed: %s", e, exc_info=True)
        raise TokenExchangeError("Could not reach the token endpoint") from e

    try:
        payload = response.json()
    except ValueError:
        payload = {}

    if response.is_error or "error" in payload:
        logger.error(
            "Token exchange failed",
            extra={"status_code": response.status_code, "error": payload.get("error")},
        )
        raise TokenExchangeError(f"Token exchange failed: {payload.get('error', response.status_code)}")

    access_token = payload.get("access_token")
    if not access_token:
        raise TokenExchangeError("Token response did not include an access token")

    return TokenSet(access_token=access_token, id_token=payload.get("id_token"))


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Get or create a cached JWKS client for the given settings."""
    if settings.google_jwks_url not in _jwks_clients:
        _jwks_clients[settings.google_jwks_url] = PyJWKClient(
            settings.google_jwks_url,
            cache_jwk_set=True,
            lifespan=3600,  # Cache keys for 1 hour
            timeout=int(settings.oauth_timeout_seconds),
        )
    return _jwks_clients[settings.google_jwks_url]


def decode_id_token(id_token: str, settings: Settings) -> dict:
    """
    Verify a Google identity token and return its payload.

    Blocking: the first call (and every key rotation) fetches Google's JWKS.

    Raises:
        IdTokenVerificationError: If the token is malformed, expired, signed by
            an unknown key, or issued for another audience or by another issuer.
    """
    try:
        jwks_client = get_jwks_client(settings)
        signing_key = jwks_client.get_signing_key_from_jwt(id_token)

        payload = jwt.decode(
            id_token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.google_client_id,
            options={"require": ["exp", "iat", "iss", "aud", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise IdTokenVerificationError("Identity token has expired") from e
    except jwt.InvalidAudienceError as e:
        raise IdTokenVerificationError("Invalid audience") from e
    except jwt.PyJWTError as e:
        # Log full details for debugging (server-side only)
        logger.warning("Identity token validation failed: %s", e, exc_info=True)
        raise IdTokenVerificationError("Invalid identity token") from e

    if payload.get("iss") not in settings.google_issuers:
        raise IdTokenVerificationError("Invalid issuer")

    return payload


async def verify_id_token(id_token: str | None, settings: Settings) -> IdentityClaims:
    """
    Verify an identity token and extract the claims used to bind a user.

    Raises:
        IdTokenMissingError: If no token was supplied.
        IdTokenVerificationError: If verification fails or ``sub`` is empty.
    """
    if not id_token:
        raise IdTokenMissingError("No ID token in response")

    payload = await run_in_threadpool(decode_id_token, id_token, settings)

    subject = payload.get("sub")
    if not subject:
        raise IdTokenVerificationError("Invalid token: missing sub claim")

    return IdentityClaims(
        subject=str(subject),
        email=payload.get("email"),
        name=payload.get("name"),
        picture=payload.get("picture"),
    )
