"""Image Encoder — raw file → UploadedImage (media type + base64 payload)."""
import asyncio
import base64
import logging
import mimetypes
import re
from pathlib import Path
from typing import BinaryIO

from image_ask.constants import (
    DATA_URI_SEPARATOR,
    DATA_URI_TEMPLATE,
    ERR_MALFORMED_DATA,
    ERR_NOT_BINARY,
    ERR_READ_FAILED,
    ERR_UNPARSEABLE_MEDIA_TYPE,
    FALLBACK_MEDIA_TYPE,
    IMAGE_SIGNATURES,
    MEDIA_TYPE_PATTERN,
    MSG_ENCODED_IMAGE,
    MSG_ENCODING_FAILED,
    WEBP_MEDIA_TYPE,
)
from image_ask.errors import EncodingError
from image_ask.models import UploadedImage

logger = logging.getLogger(__name__)

FileHandle = str | Path | bytes | bytearray | BinaryIO

_MEDIA_TYPE_RE = re.compile(MEDIA_TYPE_PATTERN)


# ── pure helpers ──────────────────────────────────────────────────────────────


def parse_data_uri(uri: str) -> UploadedImage:
    """Split `data:<mt>;base64,<payload>` into an UploadedImage."""
    parts = uri.split(DATA_URI_SEPARATOR)
    match parts:
        case [prefix, payload]:
            pass
        case _:
            raise EncodingError(ERR_MALFORMED_DATA)

    match _MEDIA_TYPE_RE.search(prefix):
        case None:
            raise EncodingError(ERR_UNPARSEABLE_MEDIA_TYPE)
        case found:
            return UploadedImage(media_type=found.group(1), encoded_data=payload)


def sniff_media_type(raw: bytes) -> str | None:
    if raw[:4] == b"RIFF" and raw[8:12] == b"WEBP":
        return WEBP_MEDIA_TYPE
    return next(
        (media_type for magic, media_type in IMAGE_SIGNATURES if raw.startswith(magic)),
        None,
    )


def detect_media_type(raw: bytes, name: str | None = None) -> str:
    guessed = mimetypes.guess_type(name)[0] if name else None
    return guessed or sniff_media_type(raw) or FALLBACK_MEDIA_TYPE


def to_data_uri(raw: bytes, media_type: str) -> str:
    return DATA_URI_TEMPLATE % (media_type, base64.standard_b64encode(raw).decode())


# ── file reading ──────────────────────────────────────────────────────────────


def _read(handle: FileHandle) -> tuple[bytes, str | None]:
    match handle:
        case bytes() | bytearray():
            return bytes(handle), None
        case str() | Path():
            path = Path(handle)
            return path.read_bytes(), path.name
        case _:
            name = getattr(handle, "name", None)
            raw = handle.read()
            match raw:
                case bytes() | bytearray():
                    return bytes(raw), name if isinstance(name, str) else None
                case _:
                    raise TypeError(ERR_NOT_BINARY)


async def encode_image(handle: FileHandle) -> UploadedImage:
    """Read `handle` off the event loop and return its encoded payload.

    Raises EncodingError on read failure or when the produced data URI
    cannot be parsed back into a media type and payload.
    """
    try:
        raw, name = await asyncio.to_thread(_read, handle)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning(MSG_ENCODING_FAILED, exc)
        raise EncodingError(ERR_READ_FAILED) from exc

    image = parse_data_uri(to_data_uri(raw, detect_media_type(raw, name)))
    logger.debug(MSG_ENCODED_IMAGE, image.media_type, len(image.encoded_data))
    return image
