"""Schema imports for wire payloads."""

from usernet.schemas.envelope import Envelope
from usernet.schemas.upload import UploadFile
from usernet.schemas.user import LoginData
from usernet.schemas.user import LoginRequest
from usernet.schemas.user import RegisterRequest
from usernet.schemas.user import UserData

__all__ = [
    "Envelope",
    "LoginData",
    "LoginRequest",
    "RegisterRequest",
    "UploadFile",
    "UserData",
]
