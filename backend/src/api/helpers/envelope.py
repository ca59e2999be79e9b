"""Helpers for building error envelopes and frontend redirects."""
from typing import Any
from urllib.parse import urlencode

from fastapi.responses import JSONResponse, RedirectResponse

from core.config import Settings


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Build ``{success: false, message, ...}`` with the given status."""
    content: dict[str, Any] = {"success": False, "message": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def frontend_redirect(settings: Settings, path: str, **params: str) -> RedirectResponse:
    """
    Redirect the browser to a frontend route.

    Used by the OAuth flow, where the browser is mid-navigation and JSON
    errors would never be seen. Keyword arguments become the query string,
    e.g. ``reason=`` on the error page.
    """
    url = f"{settings.frontend_url.rstrip('/')}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)
