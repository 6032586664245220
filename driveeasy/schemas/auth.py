"""Request/response schemas for registration, login and sessions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Registration payload; field rules are enforced by the accounts service."""

    name: str = ""
    email: str = ""
    password: str = ""
    role: str = ""


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user_id: int = Field(..., alias="userId")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Login successful"
    role: str
    name: str
    email: str
    user_id: int = Field(..., alias="userId")


class MessageResponse(BaseModel):
    message: str


class SessionData(BaseModel):
    """Identity and role snapshot bound to a session at login."""

    user_id: int
    role: str
    name: str
    email: str


class SessionStatus(BaseModel):
    """Response for GET /check-session; identity fields only when logged in."""

    model_config = ConfigDict(populate_by_name=True)

    logged_in: bool = Field(..., alias="loggedIn")
    user_id: int | None = Field(default=None, alias="userId")
    role: str | None = None
    name: str | None = None
    email: str | None = None


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    created_at: datetime | None = None
