"""Wiring for the process-wide client object graph."""

from __future__ import annotations

from dataclasses import dataclass
import logging

import requests

from usernet.api.user import UserAPI
from usernet.core.config import ClientSettings
from usernet.core.config import get_client_settings
from usernet.credentials.store import CredentialStore
from usernet.credentials.store import FileCredentialStore
from usernet.credentials.store import InMemoryCredentialStore
from usernet.transport.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientContext:
    """Objects constructed once at start-up and handed to callers."""

    settings: ClientSettings
    credentials: CredentialStore
    dispatcher: Dispatcher
    users: UserAPI

    def close(self) -> None:
        self.dispatcher.close()


def build_client(
    settings: ClientSettings | None = None,
    *,
    credentials: CredentialStore | None = None,
    session: requests.Session | None = None,
) -> ClientContext:
    """Build the dispatcher, credential store and user wrappers from settings."""
    settings = settings or get_client_settings()
    logger.info("Building client with settings=%s", settings.safe_for_logging())

    if credentials is None:
        if settings.credential_path:
            credentials = FileCredentialStore(settings.credential_path)
        else:
            credentials = InMemoryCredentialStore()

    dispatcher = Dispatcher(
        base_url=settings.base_url,
        credentials=credentials,
        timeout_seconds=settings.timeout_seconds,
        max_workers=settings.max_workers,
        session=session,
    )
    return ClientContext(
        settings=settings,
        credentials=credentials,
        dispatcher=dispatcher,
        users=UserAPI(dispatcher=dispatcher, credentials=credentials),
    )
