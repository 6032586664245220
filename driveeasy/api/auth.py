"""Registration, cookie-session login/logout, and the auth dependencies
(get_current_session, require_admin, require_instructor)."""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from driveeasy.api.cookies import clear_session_cookie, read_session_cookie, set_session_cookie
from driveeasy.core.config import Settings, get_settings
from driveeasy.core.database import get_db
from driveeasy.models.user import ROLE_ADMIN, ROLE_INSTRUCTOR
from driveeasy.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    SessionData,
    SessionStatus,
)
from driveeasy.services.accounts import authenticate, register_user
from driveeasy.services.authorization import require_authenticated, require_role
from driveeasy.services.sessions import (
    DatabaseSessionStore,
    InMemorySessionStore,
    SessionManager,
    SessionStore,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@lru_cache
def get_memory_session_store() -> InMemorySessionStore:
    """Process-wide store used when SESSION_BACKEND=memory."""
    return InMemorySessionStore()


def get_session_store(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SessionStore:
    if settings.SESSION_BACKEND == "memory":
        return get_memory_session_store()
    return DatabaseSessionStore(db)


def get_session_manager(
    store: Annotated[SessionStore, Depends(get_session_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SessionManager:
    return SessionManager(store, ttl=timedelta(hours=settings.SESSION_TTL_HOURS))


def get_optional_session(
    request: Request,
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SessionData | None:
    """Dependency: the session bound to the request cookie, or None."""
    session = manager.validate_session(read_session_cookie(request, settings))
    request.state.user_id = session.user_id if session else None
    return session


def get_current_session(
    session: Annotated[SessionData | None, Depends(get_optional_session)],
) -> SessionData:
    """Dependency: require a valid session. Raises AuthenticationRequired (401)."""
    return require_authenticated(session)


def require_admin(
    session: Annotated[SessionData | None, Depends(get_optional_session)],
) -> SessionData:
    """Dependency: require a session whose role snapshot is 'admin'. 403 otherwise."""
    return require_role(session, ROLE_ADMIN)


def require_instructor(
    session: Annotated[SessionData | None, Depends(get_optional_session)],
) -> SessionData:
    return require_role(session, ROLE_INSTRUCTOR)


@router.post("/register", response_model=RegisterResponse)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RegisterResponse:
    """Create an account. Instructors also get a listing with an LIC license id."""
    user = register_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
    return RegisterResponse(message="Registration successful! Please login.", user_id=user.id)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    """
    Authenticate with email and password and start a fresh session.

    Whatever session id the client presented is discarded; the cookie is
    only set once the new session has been persisted.
    """
    user = authenticate(db, body.email, body.password)
    session_id = manager.create_session(
        user_id=user.id,
        role=user.role,
        name=user.name,
        email=user.email,
        previous_session_id=read_session_cookie(request, settings),
    )
    set_session_cookie(response, session_id, settings)
    logger.info("User logged in: %s (%s)", user.email, user.role)
    return LoginResponse(role=user.role, name=user.name, email=user.email, user_id=user.id)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    session_id = read_session_cookie(request, settings)
    manager.destroy_session(session_id)
    clear_session_cookie(response, settings)
    if session_id:
        logger.info("Session ended")
    return MessageResponse(message="Logged out successfully")


@router.get("/check-session", response_model=SessionStatus, response_model_exclude_none=True)
def check_session(
    session: Annotated[SessionData | None, Depends(get_optional_session)],
) -> SessionStatus:
    if session is None:
        return SessionStatus(logged_in=False)
    return SessionStatus(
        logged_in=True,
        user_id=session.user_id,
        role=session.role,
        name=session.name,
        email=session.email,
    )
