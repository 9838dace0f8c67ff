"""Network error taxonomy and the result values carried by dispatches."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic
from typing import NoReturn
from typing import TypeVar
from typing import Union

T = TypeVar("T")


class NetworkErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    NO_DATA = "no_data"
    DECODING_ERROR = "decoding_error"
    SERVER_ERROR = "server_error"
    NETWORK_FAILURE = "network_failure"


class NetworkError(RuntimeError):
    """Base error for every failure reported by the dispatcher or a wrapper.

    The subclasses below are the complete set; callers branch on ``kind``.
    """

    kind: NetworkErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def description(self) -> str:
        """Human-readable text suitable for an alert."""
        return self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkError):
            return NotImplemented
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash((type(self), tuple(sorted(self.__dict__.items()))))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class InvalidURL(NetworkError):
    """Raised when base address and path do not form an absolute URL."""

    kind = NetworkErrorKind.INVALID_URL

    def __init__(self) -> None:
        super().__init__("Invalid URL")

    def __repr__(self) -> str:
        return "InvalidURL()"


class NoData(NetworkError):
    """The server answered successfully but the envelope carried no data."""

    kind = NetworkErrorKind.NO_DATA

    def __init__(self) -> None:
        super().__init__("No data returned")

    def __repr__(self) -> str:
        return "NoData()"


class DecodingError(NetworkError):
    """A payload could not be converted to or from the wire format."""

    kind = NetworkErrorKind.DECODING_ERROR

    def __init__(self) -> None:
        super().__init__("Failed to decode data")

    def __repr__(self) -> str:
        return "DecodingError()"


class ServerError(NetworkError):
    """The server rejected the request or answered with an undecodable body."""

    kind = NetworkErrorKind.SERVER_ERROR

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def description(self) -> str:
        return f"Server error ({self.status_code}): {self.message}"

    def __repr__(self) -> str:
        return f"ServerError({self.status_code}, {self.message!r})"


class NetworkFailure(NetworkError):
    """No usable HTTP response was received."""

    kind = NetworkErrorKind.NETWORK_FAILURE

    @property
    def description(self) -> str:
        return f"Network request failed: {self.message}"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: NetworkError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the carried error."""
        raise self.error


Result = Union[Ok[T], Err]
