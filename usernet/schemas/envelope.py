"""Uniform server response envelope."""

from __future__ import annotations

from typing import Generic
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ConfigDict

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Server response wrapper; ``data`` is absent on logical failures."""

    model_config = ConfigDict(frozen=True)

    code: int
    message: str
    data: T | None = None
