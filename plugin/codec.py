# =============================================================================
# VisualEyes Heatmap Client - Image Codec Helpers
# =============================================================================
# Converts rendered image bytes into the base64 data URL the prediction API
# expects, and reads binary response bodies (the heatmap image) back into
# raw bytes for persistence.
# =============================================================================

import base64
import logging
from typing import Union

from plugin.errors import DecodeError

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


def encode_to_data_url(data: BytesLike, mime_type: str) -> str:
    """
    Encode a binary buffer as a ``data:<mime>;base64,<payload>`` URL.

    Uses the standard base64 alphabet with padding and no line wrapping.

    Args:
        data:      Raw image bytes (may be empty).
        mime_type: MIME type placed in the URL header, e.g. "image/jpg".

    Returns:
        str: The data URL.
    """
    payload = base64.b64encode(bytes(data)).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def decode_binary(body) -> bytes:
    """
    Copy a response body into a bytes object.

    Accepts bytes-like objects, or anything with a ``read()`` method
    (file objects, raw streams).

    Raises:
        DecodeError: If the body cannot be read as binary data (text body,
                     truncated stream, I/O error).
    """
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)

    read = getattr(body, "read", None)
    if read is None:
        raise DecodeError(f"Cannot read {type(body).__name__} as binary")

    try:
        data = read()
    except (OSError, ValueError) as exc:
        logger.warning("Failed to read binary body: %s", exc)
        raise DecodeError(f"Couldn't read response body: {exc}", cause=exc) from exc

    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError(f"Body read returned {type(data).__name__}, expected bytes")
    return bytes(data)
