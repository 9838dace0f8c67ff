"""Typed user endpoint wrappers with credential side effects."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Future
import logging
from typing import Any

from usernet.core.config import redact_secret
from usernet.core.errors import Err
from usernet.core.errors import NoData
from usernet.core.errors import Ok
from usernet.core.errors import Result
from usernet.credentials.store import CredentialStore
from usernet.schemas.envelope import Envelope
from usernet.schemas.upload import UploadFile
from usernet.schemas.user import LoginData
from usernet.schemas.user import LoginRequest
from usernet.schemas.user import RegisterRequest
from usernet.schemas.user import UserData
from usernet.transport.dispatcher import Dispatcher
from usernet.transport.dispatcher import ResultCallback
from usernet.transport.endpoint import Endpoint
from usernet.transport.endpoint import HTTPMethod

logger = logging.getLogger(__name__)

LOGIN_ENDPOINT = Endpoint("/api/user/login", HTTPMethod.POST)
REGISTER_ENDPOINT = Endpoint("/api/user/register", HTTPMethod.POST)
PROFILE_ENDPOINT = Endpoint("/api/user/info", HTTPMethod.GET, encode_body=False)
LOGOUT_ENDPOINT = Endpoint("/user/logout", HTTPMethod.POST, encode_body=False)
DEFAULT_UPLOAD_PATH = "/api/upload"


class UserAPI:
    """User operations bound to one dispatcher and credential store.

    Each public method returns a future resolving to an ``Ok``/``Err`` result
    and optionally reports the same result to ``callback``.
    """

    def __init__(self, *, dispatcher: Dispatcher, credentials: CredentialStore) -> None:
        self._dispatcher = dispatcher
        self._credentials = credentials

    def login(
        self,
        username: str,
        password: str,
        *,
        callback: ResultCallback | None = None,
    ) -> Future[Result[LoginData]]:
        """Authenticate and store the returned token."""
        request = LoginRequest(username=username, password=password)
        return self._dispatcher.submit(self.login_now, request, callback=callback)

    def register(
        self,
        username: str,
        password: str,
        nickname: str,
        *,
        callback: ResultCallback | None = None,
    ) -> Future[Result[UserData]]:
        """Create an account and store the returned token."""
        request = RegisterRequest(username=username, password=password, nickname=nickname)
        return self._dispatcher.submit(self.register_now, request, callback=callback)

    def get_profile(self, *, callback: ResultCallback | None = None) -> Future[Result[LoginData]]:
        """Fetch the current user's profile."""
        return self._dispatcher.submit(self.get_profile_now, callback=callback)

    def logout(self, *, callback: ResultCallback | None = None) -> Future[Result[None]]:
        """End the session; the local token is cleared once the server answers."""
        return self._dispatcher.submit(self.logout_now, callback=callback)

    def upload(
        self,
        file: UploadFile,
        fields: Mapping[str, str] | None = None,
        *,
        path: str = DEFAULT_UPLOAD_PATH,
        callback: ResultCallback | None = None,
    ) -> Future[Result[dict[str, Any]]]:
        """Upload one file as multipart form data."""
        return self._dispatcher.upload(path, file, fields, callback=callback)

    def login_now(self, request: LoginRequest) -> Result[LoginData]:
        logger.info("Logging in username=%s", request.username)
        result = self._dispatcher.execute(LOGIN_ENDPOINT, request, Envelope[LoginData])
        return self._store_token(result, operation="login")

    def register_now(self, request: RegisterRequest) -> Result[UserData]:
        logger.info("Registering username=%s", request.username)
        result = self._dispatcher.execute(REGISTER_ENDPOINT, request, Envelope[UserData])
        return self._store_token(result, operation="register")

    def get_profile_now(self) -> Result[LoginData]:
        result = self._dispatcher.execute(PROFILE_ENDPOINT, None, Envelope[LoginData])
        if isinstance(result, Err):
            return result
        return _require_data(result.value, operation="profile")

    def logout_now(self) -> Result[None]:
        result = self._dispatcher.execute(LOGOUT_ENDPOINT, None, Envelope[Any])
        if isinstance(result, Err):
            logger.warning("Logout failed; keeping local token: %r", result.error)
            return result
        # Envelope code and data are not inspected here.
        self._credentials.clear()
        logger.info("Logged out; local token cleared")
        return Ok(None)

    def _store_token(self, result: Result[Envelope[Any]], *, operation: str) -> Result[Any]:
        if isinstance(result, Err):
            logger.warning("%s failed: %r", operation, result.error)
            return result
        data_result = _require_data(result.value, operation=operation)
        if isinstance(data_result, Ok):
            self._credentials.set(data_result.value.token)
            logger.info("%s succeeded; stored token=%s", operation, redact_secret(data_result.value.token))
        return data_result


def _require_data(envelope: Envelope[Any], *, operation: str) -> Result[Any]:
    if envelope.data is None:
        logger.warning(
            "%s response carried no data code=%s message=%s",
            operation,
            envelope.code,
            envelope.message,
        )
        return Err(NoData())
    return Ok(envelope.data)
