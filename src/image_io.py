import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from constants import MAX_UPLOAD_BYTES, SUPPORTED_MIME_TYPES
from errors import InvalidInput

logger = logging.getLogger(__name__)

MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}
TOO_MANY_PIXELS_MESSAGE = "Image has too many pixels to analyze. Please try a smaller screenshot."

_DATA_URL_RE =re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class EncodedImage:
    """An uploaded still image: raw bytes plus the MIME type they were declared with."""

    mime_type: str
    data: bytes

    def __repr__(self) -> str:
        return f"EncodedImage(mime_type={self.mime_type!r}, size={len(self.data)})"

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_data_url(cls, data_url: str) -> "EncodedImage":
        match = _DATA_URL_RE.match(data_url.strip()) if isinstance(data_url, str) else None
        if not match:
            raise InvalidInput("Image must be a base64 data URL (data:image/...;base64,...).")
        try:
            data = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidInput("Image data is not valid base64.") from exc
        mime_type = (match.group("mime") or "").lower()
        return cls(mime_type=MIME_ALIASES.get(mime_type, mime_type), data=data)

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def validate(self) -> None:
        if not self.data:
            raise InvalidInput("Image is empty.")
        if self.mime_type not in SUPPORTED_MIME_TYPES:
            raise InvalidInput(
                f"Unsupported image type '{self.mime_type or 'unknown'}'. Use PNG, JPG or WEBP."
            )

    def open(self) -> Image.Image:
        """Decode into an RGB PIL image ready to be sent to Gemini."""
        self.validate()
        try:
            with Image.open(io.BytesIO(self.data)) as img:
                img.load()
                if img.mode != "RGB":
                    img = img.convert("RGB")
                return img.copy()
        except Image.DecompressionBombError as exc:
            raise InvalidInput(TOO_MANY_PIXELS_MESSAGE) from exc
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise InvalidInput("Image could not be decoded. Please try another screenshot.") from exc


ImageInput = Union[EncodedImage, str]


def coerce_image(image: ImageInput) -> EncodedImage:
    if isinstance(image, EncodedImage):
        return image
    if isinstance(image, str):
        return EncodedImage.from_data_url(image)
    raise InvalidInput(f"Unsupported image payload of type {type(image).__name__}.")


def load_image(path: Union[str, Path], max_bytes: Optional[int] = MAX_UPLOAD_BYTES) -> EncodedImage:
    """Read an image file from disk, rejecting files above ``max_bytes``."""
    file_path = Path(path)
    try:
        size = file_path.stat().st_size
        if max_bytes is not None and size > max_bytes:
            raise InvalidInput(
                f"{file_path.name} is {size / (1024 * 1024):.1f} MB; the limit is {max_bytes / (1024 * 1024):.0f} MB."
            )
        data = file_path.read_bytes()
    except OSError as exc:
        raise InvalidInput(f"Could not read {file_path.name}: {exc}") from exc

    mime_type = _sniff_mime_type(data)
    if not mime_type:
        raise InvalidInput(f"{file_path.name} is not a readable image.")
    logger.debug("Loaded %s (%s, %d bytes)", file_path, mime_type, len(data))
    return EncodedImage(mime_type=mime_type, data=data)


def _sniff_mime_type(data: bytes) -> Optional[str]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format or "")
    except Image.DecompressionBombError as exc:
        raise InvalidInput(TOO_MANY_PIXELS_MESSAGE) from exc
    except (UnidentifiedImageError, OSError):
        return None
