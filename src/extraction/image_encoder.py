import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from shift_sync.errors import ImageReadError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class EncodedImage:
    """Inline, transport-ready image: base64 payload plus the declared MIME type."""

    data_b64: str
    mime_type: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_b64}"

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data_b64)


def encode_image(data: bytes, mime_type: Optional[str]) -> EncodedImage:
    # No resizing or format checks: whatever the picker accepted goes through.
    return EncodedImage(
        data_b64=base64.standard_b64encode(data).decode("ascii"),
        mime_type=mime_type or DEFAULT_MIME_TYPE,
    )


def encode_image_file(path: str, mime_type: Optional[str] = None) -> EncodedImage:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        logger.error(f"Failed to read image {path}: {e}")
        raise ImageReadError() from e
    if not mime_type:
        mime_type, _ = mimetypes.guess_type(path)
    return encode_image(data, mime_type)


async def encode_upload(upload) -> EncodedImage:
    """Encode a FastAPI UploadFile, keeping its declared content type."""
    try:
        data = await upload.read()
    except Exception as e:
        logger.error(f"Failed to read uploaded image {getattr(upload, 'filename', '')}: {e}")
        raise ImageReadError() from e
    if not data:
        raise ImageReadError("The uploaded image is empty. Please choose another file.")
    return encode_image(data, getattr(upload, "content_type", None))
