"""API helper utilities."""
from api.helpers.envelope import error_response, frontend_redirect

__all__ = [
    "error_response",
    "frontend_redirect",
]
