"""Pydantic schemas for user endpoint payloads."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict


class LoginRequest(BaseModel):
    """Credentials posted to the login endpoint."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str


class RegisterRequest(BaseModel):
    """Payload to create an account."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str
    nickname: str


class LoginData(BaseModel):
    """Login and profile payload; only the token is guaranteed."""

    model_config = ConfigDict(frozen=True)

    token: str
    user_id: str | None = None
    username: str | None = None
    nickname: str | None = None


class UserData(BaseModel):
    """Registration payload."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    nickname: str
    token: str
