"""Capability checks over the session snapshot. Pure functions, no I/O."""

from driveeasy.core.errors import AuthenticationRequired, Forbidden
from driveeasy.schemas.auth import SessionData


def require_authenticated(session: SessionData | None) -> SessionData:
    """Return the session, or raise AuthenticationRequired when there is none."""
    if session is None:
        raise AuthenticationRequired()
    return session


def require_role(session: SessionData | None, role: str) -> SessionData:
    """
    Require an authenticated session whose role snapshot equals `role`.

    The role captured at login is authoritative for the session's lifetime;
    a later change to users.role is only seen after the next login.
    """
    session = require_authenticated(session)
    if session.role != role:
        raise Forbidden(role)
    return session
