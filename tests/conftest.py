"""Shared pytest fixtures for usernet test suites."""

from collections.abc import Callable
from collections.abc import Generator
from pathlib import Path
import sys
from typing import Any

import pytest

TESTS_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_ROOT.parent
for path in (PROJECT_ROOT, TESTS_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

BASE_URL = "http://backend.test"


@pytest.fixture
def credentials():
    """Provide an empty in-memory credential store."""
    from usernet.credentials.store import InMemoryCredentialStore

    return InMemoryCredentialStore()


@pytest.fixture
def make_dispatcher(credentials) -> Generator[Callable[..., Any], None, None]:
    """Build dispatchers over a session stub and close them at teardown."""
    from fakes import SessionStub
    from usernet.transport.dispatcher import Dispatcher

    created: list[Dispatcher] = []

    def factory(request_fn: Callable[..., Any], **kwargs: Any) -> tuple[Dispatcher, SessionStub]:
        session = SessionStub(request_fn)
        options: dict[str, Any] = {"base_url": BASE_URL, "credentials": credentials, "timeout_seconds": 5.0}
        options.update(kwargs)
        dispatcher = Dispatcher(session=session, **options)  # type: ignore[arg-type]
        created.append(dispatcher)
        return dispatcher, session

    yield factory

    for dispatcher in created:
        dispatcher.close()
