"""
Teacher Dashboard Backend — Authentication Schemas
===================================================

What:  Login request/response contracts and the Identity carried by a token.
"""

from pydantic import BaseModel, Field, field_validator

from dashboard.models.enums import Role


class Identity(BaseModel):
    """
    Verified claims of a bearer token. Lives for one request only.

    Attached to `request.state.identity` by the authentication gate.
    """

    username: str
    role: Role
    id: int


class LoginRequest(BaseModel):
    """Body of POST /auth/login."""

    username: str = Field(default="", validate_default=True, description="Login name")
    password: str = Field(default="", validate_default=True, description="Plain-text password")

    @field_validator("username")
    @classmethod
    def username_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Username is required")
        return value.strip()

    @field_validator("password")
    @classmethod
    def password_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


class LoginUser(BaseModel):
    username: str
    role: Role


class LoginData(BaseModel):
    """`data` of a successful login."""

    token: str
    user: LoginUser
