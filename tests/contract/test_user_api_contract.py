"""Contract tests for user wrappers against a stub backend."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from fastapi import FastAPI
from fastapi import Header
from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from pydantic import BaseModel
import pytest

from usernet.core.config import ClientSettings
from usernet.core.errors import Err
from usernet.core.errors import NetworkErrorKind
from usernet.core.errors import NoData
from usernet.core.errors import Ok
from usernet.factory import ClientContext
from usernet.factory import build_client
from usernet.schemas.upload import UploadFile

BACKEND_URL = "http://testserver"


class _Credentials(BaseModel):
    username: str
    password: str


class _Registration(_Credentials):
    nickname: str


def _build_backend() -> FastAPI:
    app = FastAPI()
    users = {"ada": {"password": "pw", "nickname": "Ada", "user_id": "u-1"}}
    sessions: dict[str, str] = {}

    @app.post("/api/user/login")
    def login(body: _Credentials) -> dict[str, Any]:
        user = users.get(body.username)
        if user is None or user["password"] != body.password:
            return {"code": 1001, "message": "invalid credentials"}
        token = f"token-{body.username}"
        sessions[token] = body.username
        return {"code": 0, "message": "ok", "data": {"token": token, "user_id": user["user_id"]}}

    @app.post("/api/user/register")
    def register(body: _Registration) -> dict[str, Any]:
        if body.username in users:
            return {"code": 1002, "message": "username taken"}
        user_id = f"u-{len(users) + 1}"
        users[body.username] = {"password": body.password, "nickname": body.nickname, "user_id": user_id}
        token = f"token-{body.username}"
        sessions[token] = body.username
        data = {"user_id": user_id, "username": body.username, "nickname": body.nickname, "token": token}
        return {"code": 0, "message": "ok", "data": data}

    @app.get("/api/user/info")
    def info(authorization: str | None = Header(default=None)) -> JSONResponse:
        token = (authorization or "").removeprefix("Bearer ")
        username = sessions.get(token)
        if username is None:
            return JSONResponse(status_code=401, content={"code": 401, "message": "unauthorized"})
        user = users[username]
        data = {"token": token, "user_id": user["user_id"], "username": username, "nickname": user["nickname"]}
        return JSONResponse(content={"code": 0, "message": "ok", "data": data})

    @app.post("/user/logout")
    def logout(authorization: str | None = Header(default=None)) -> dict[str, Any]:
        token = (authorization or "").removeprefix("Bearer ")
        if sessions.pop(token, None) is None:
            return {"code": 1003, "message": "not logged in"}
        return {"code": 0, "message": "ok", "data": {"status": "logged_out"}}

    @app.post("/api/upload")
    async def upload(request: Request) -> dict[str, Any]:
        body = await request.body()
        content_type = request.headers.get("content-type", "")
        return {"multipart": content_type.startswith("multipart/form-data"), "size": len(body)}

    @app.get("/api/broken")
    def broken() -> HTMLResponse:
        return HTMLResponse(status_code=500, content="<html>upstream failure</html>")

    return app


@pytest.fixture
def client() -> Generator[ClientContext, None, None]:
    """Provide a wired client whose transport is the stub backend."""
    session = TestClient(_build_backend(), base_url=BACKEND_URL)
    context = build_client(ClientSettings(base_url=BACKEND_URL, timeout_seconds=5.0), session=session)  # type: ignore[arg-type]
    yield context
    context.close()


def test_login_then_profile_then_logout(client: ClientContext) -> None:
    login = client.users.login("ada", "pw").result(timeout=10)

    assert isinstance(login, Ok)
    assert login.value.token == "token-ada"
    assert login.value.user_id == "u-1"
    assert client.credentials.get() == "token-ada"

    profile = client.users.get_profile().result(timeout=10)

    assert isinstance(profile, Ok)
    assert profile.value.username == "ada"
    assert profile.value.nickname == "Ada"

    logout = client.users.logout().result(timeout=10)

    assert logout == Ok(None)
    assert client.credentials.get() is None


def test_rejected_login_is_no_data(client: ClientContext) -> None:
    result = client.users.login("ada", "wrong").result(timeout=10)

    assert result == Err(NoData())
    assert client.credentials.get() is None


def test_register_stores_new_token(client: ClientContext) -> None:
    result = client.users.register("grace", "pw", "Grace").result(timeout=10)

    assert isinstance(result, Ok)
    assert result.value.username == "grace"
    assert result.value.user_id
    assert client.credentials.get() == result.value.token


def test_profile_without_token_is_server_error(client: ClientContext) -> None:
    result = client.users.get_profile().result(timeout=10)

    assert isinstance(result, Err)
    assert result.error.kind is NetworkErrorKind.SERVER_ERROR
    assert result.error.status_code == 401
    assert result.error.message


def test_logout_with_logical_failure_still_clears_local_token(client: ClientContext) -> None:
    client.credentials.set("stale-token")

    result = client.users.logout().result(timeout=10)

    assert result == Ok(None)
    assert client.credentials.get() is None


def test_server_failure_with_malformed_body_is_server_error(client: ClientContext) -> None:
    result = client.dispatcher.get("/api/broken", response_model=dict).result(timeout=10)

    assert isinstance(result, Err)
    assert result.error.kind is NetworkErrorKind.SERVER_ERROR
    assert result.error.status_code == 500


def test_upload_posts_multipart_form(client: ClientContext) -> None:
    file = UploadFile(content=b"\x89PNG", filename="avatar.png", mime_type="image/png")

    result = client.users.upload(file, {"purpose": "avatar"}).result(timeout=10)

    assert isinstance(result, Ok)
    assert result.value["multipart"] is True
    assert result.value["size"] > 0
