"""Multipart upload descriptor."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict

DEFAULT_UPLOAD_FILENAME = "image.jpg"
DEFAULT_UPLOAD_MIME_TYPE = "image/jpeg"


class UploadFile(BaseModel):
    """One file part sent under the ``file`` form field."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    filename: str = DEFAULT_UPLOAD_FILENAME
    mime_type: str = DEFAULT_UPLOAD_MIME_TYPE
