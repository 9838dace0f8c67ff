"""HTTP request dispatcher with typed decoding and failure classification."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from collections.abc import Mapping
from concurrent.futures import Future
from concurrent.futures import ThreadPoolExecutor
import json
import logging
from typing import Any
from typing import TypeVar
from urllib.parse import urlsplit

from pydantic import BaseModel
from pydantic import TypeAdapter
from pydantic import ValidationError
import requests

from usernet.core.errors import DecodingError
from usernet.core.errors import Err
from usernet.core.errors import InvalidURL
from usernet.core.errors import NetworkFailure
from usernet.core.errors import Ok
from usernet.core.errors import Result
from usernet.core.errors import ServerError
from usernet.credentials.store import CredentialStore
from usernet.schemas.upload import UploadFile
from usernet.transport.endpoint import Endpoint
from usernet.transport.endpoint import HTTPMethod

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_MEDIA_TYPE = "application/json"
URL_SCHEMES = frozenset({"http", "https"})
URL_REJECTED_EXCEPTIONS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
)
HEADER_ENCODING_EXCEPTIONS = (UnicodeError, ValueError)

ResultCallback = Callable[[Result[Any]], None]


def build_url(base_url: str, path: str) -> str | None:
    """Join the base address and an endpoint path; None if not an absolute URL."""
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    if any(char.isspace() for char in url):
        return None
    try:
        parts = urlsplit(url)
        _ = parts.port
    except ValueError:
        return None
    if parts.scheme not in URL_SCHEMES or not parts.hostname:
        return None
    return url


def encode_body(body: BaseModel | Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Convert a request record to a JSON-compatible mapping.

    Raises TypeError or ValueError when the body has no JSON representation.
    """
    if body is None:
        return None
    if isinstance(body, BaseModel):
        encoded = body.model_dump(mode="json")
    elif isinstance(body, Mapping):
        encoded = dict(body)
    else:
        raise TypeError(f"Unsupported request body type {type(body).__name__}")
    json.dumps(encoded)
    return encoded


class Dispatcher:
    """Perform backend calls on a worker pool and deliver typed results.

    Every dispatch resolves to exactly one ``Ok`` or ``Err``; transport,
    status and decoding failures never escape as exceptions.
    """

    def __init__(
        self,
        *,
        base_url: str,
        credentials: CredentialStore,
        timeout_seconds: float = 30.0,
        max_workers: int = 4,
        session: requests.Session | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        if not base_url.rstrip("/"):
            raise ValueError("base_url is required")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")

        self._base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="usernet-dispatch",
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def dispatch(
        self,
        endpoint: Endpoint,
        body: BaseModel | Mapping[str, Any] | None = None,
        *,
        response_model: type[T],
        callback: ResultCallback | None = None,
    ) -> Future[Result[T]]:
        """Schedule a request and return a future resolving to its result."""
        return self.submit(self.execute, endpoint, body, response_model, callback=callback)

    async def dispatch_async(
        self,
        endpoint: Endpoint,
        body: BaseModel | Mapping[str, Any] | None = None,
        *,
        response_model: type[T],
    ) -> Result[T]:
        """Awaitable form of ``dispatch`` for asyncio callers."""
        future = self.dispatch(endpoint, body, response_model=response_model)
        return await asyncio.wrap_future(future)

    def get(self, path: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Future[Result[Any]]:
        return self.dispatch(Endpoint(path, HTTPMethod.GET), params, **kwargs)

    def post(self, path: str, body: BaseModel | Mapping[str, Any] | None = None, **kwargs: Any) -> Future[Result[Any]]:
        return self.dispatch(Endpoint(path, HTTPMethod.POST), body, **kwargs)

    def put(self, path: str, body: BaseModel | Mapping[str, Any] | None = None, **kwargs: Any) -> Future[Result[Any]]:
        return self.dispatch(Endpoint(path, HTTPMethod.PUT), body, **kwargs)

    def delete(self, path: str, body: BaseModel | Mapping[str, Any] | None = None, **kwargs: Any) -> Future[Result[Any]]:
        return self.dispatch(Endpoint(path, HTTPMethod.DELETE), body, **kwargs)

    def upload(
        self,
        path: str,
        file: UploadFile,
        fields: Mapping[str, str] | None = None,
        *,
        callback: ResultCallback | None = None,
    ) -> Future[Result[dict[str, Any]]]:
        """Schedule a multipart upload of one file plus optional form fields."""
        return self.submit(self.execute_upload, path, file, fields, callback=callback)

    def submit(
        self,
        fn: Callable[..., Result[T]],
        *args: Any,
        callback: ResultCallback | None = None,
    ) -> Future[Result[T]]:
        """Run ``fn`` on the worker pool, optionally reporting to ``callback``.

        The callback runs on the worker thread exactly once, before the future
        resolves to the same result.
        """
        return self._executor.submit(self._run, fn, args, callback)

    def execute(
        self,
        endpoint: Endpoint,
        body: BaseModel | Mapping[str, Any] | None,
        response_model: type[T],
    ) -> Result[T]:
        """Perform a request on the calling thread."""
        url = build_url(self._base_url, endpoint.path)
        if url is None:
            logger.warning("Rejected endpoint path=%s: invalid URL", endpoint.path)
            return Err(InvalidURL())

        params: dict[str, Any] | None = None
        payload: dict[str, Any] | None = None
        if endpoint.encode_body:
            try:
                encoded = encode_body(body)
            except (TypeError, ValueError) as exc:
                logger.warning("Failed to encode request body for %s %s: %s", endpoint.method.value, url, exc)
                return Err(DecodingError())
            if endpoint.method is HTTPMethod.GET:
                params = encoded
            else:
                payload = encoded

        logger.debug("Sending request %s %s", endpoint.method.value, url)
        try:
            response = self._session.request(
                endpoint.method.value,
                url,
                headers=self._headers(),
                params=params,
                json=payload,
                timeout=self._timeout_seconds,
            )
        except URL_REJECTED_EXCEPTIONS:
            logger.warning("Transport rejected URL %s", url)
            return Err(InvalidURL())
        except requests.RequestException as exc:
            logger.warning("Request %s %s failed: %s", endpoint.method.value, url, exc)
            return Err(NetworkFailure(_describe(exc)))
        except HEADER_ENCODING_EXCEPTIONS as exc:
            logger.warning("Could not encode request %s %s: %s", endpoint.method.value, url, exc)
            return Err(NetworkFailure(_describe(exc)))

        return self._decode(response, response_model, url)

    def execute_upload(
        self,
        path: str,
        file: UploadFile,
        fields: Mapping[str, str] | None = None,
    ) -> Result[dict[str, Any]]:
        """Perform a multipart upload on the calling thread."""
        url = build_url(self._base_url, path)
        if url is None:
            logger.warning("Rejected upload path=%s: invalid URL", path)
            return Err(InvalidURL())

        logger.debug("Uploading %s (%d bytes) to %s", file.filename, len(file.content), url)
        try:
            response = self._session.request(
                HTTPMethod.POST.value,
                url,
                headers=self._headers(json_body=False),
                data=dict(fields) if fields else None,
                files={"file": (file.filename, file.content, file.mime_type)},
                timeout=self._timeout_seconds,
            )
        except URL_REJECTED_EXCEPTIONS:
            logger.warning("Transport rejected URL %s", url)
            return Err(InvalidURL())
        except requests.RequestException as exc:
            logger.warning("Upload to %s failed: %s", url, exc)
            return Err(NetworkFailure(_describe(exc)))
        except HEADER_ENCODING_EXCEPTIONS as exc:
            logger.warning("Could not encode upload to %s: %s", url, exc)
            return Err(NetworkFailure(_describe(exc)))

        result = self._decode(response, Any, url)
        if isinstance(result, Ok) and not isinstance(result.value, dict):
            logger.warning("Upload response from %s is not a JSON object", url)
            return Err(DecodingError())
        return result

    def _run(
        self,
        fn: Callable[..., Result[T]],
        args: tuple[Any, ...],
        callback: ResultCallback | None,
    ) -> Result[T]:
        try:
            result = fn(*args)
        except Exception as exc:
            logger.exception("Dispatch raised unexpectedly")
            result = Err(NetworkFailure(_describe(exc)))
        if callback is not None:
            try:
                callback(result)
            except Exception:
                logger.exception("Result callback raised")
        return result

    def close(self) -> None:
        """Wait for in-flight requests, then release the pool and session."""
        self._executor.shutdown(wait=True)
        self._session.close()

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def _headers(self, *, json_body: bool = True) -> dict[str, str]:
        headers = {"Accept": JSON_MEDIA_TYPE}
        if json_body:
            headers["Content-Type"] = JSON_MEDIA_TYPE
        token = self._credentials.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _decode(response: Any, response_model: Any, url: str) -> Result[Any]:
        status_code = response.status_code
        logger.debug("Received status %s from %s", status_code, url)

        if not 200 <= status_code < 300:
            message = _rejection_message(response)
            logger.warning("Server rejected %s with status %s", url, status_code)
            return Err(ServerError(status_code, message))

        try:
            raw = response.json()
        except ValueError as exc:
            logger.warning("Response from %s is not valid JSON: %s", url, exc)
            return Err(ServerError(status_code, f"Response could not be serialized: {exc}"))

        try:
            value = TypeAdapter(response_model).validate_python(raw)
        except ValidationError as exc:
            logger.warning("Response from %s failed validation: %s", url, exc)
            return Err(ServerError(status_code, f"Response could not be decoded: {exc}"))

        return Ok(value)


def _rejection_message(response: Any) -> str:
    try:
        raw = response.json()
    except ValueError:
        raw = None
    if isinstance(raw, dict):
        message = raw.get("message")
        if isinstance(message, str) and message:
            return message
    return f"Response status code was unacceptable: {response.status_code}"


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__
