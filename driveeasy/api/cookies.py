"""Session cookie helpers."""

from fastapi import Request, Response

from driveeasy.core.config import Settings


def read_session_cookie(request: Request, settings: Settings) -> str | None:
    value = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return value or None


def set_session_cookie(response: Response, session_id: str, settings: Settings) -> None:
    """httpOnly cookie living exactly as long as the server-side session."""
    cookie_kwargs = {
        "key": settings.SESSION_COOKIE_NAME,
        "value": session_id,
        "max_age": settings.session_max_age_seconds,
        "httponly": True,
        "secure": settings.SESSION_COOKIE_SECURE,
        "samesite": settings.SESSION_COOKIE_SAMESITE,
        "path": "/",
    }
    if settings.SESSION_COOKIE_DOMAIN:
        cookie_kwargs["domain"] = settings.SESSION_COOKIE_DOMAIN
    response.set_cookie(**cookie_kwargs)


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        domain=settings.SESSION_COOKIE_DOMAIN,
        secure=settings.SESSION_COOKIE_SECURE,
        httponly=True,
        samesite=settings.SESSION_COOKIE_SAMESITE,
    )
