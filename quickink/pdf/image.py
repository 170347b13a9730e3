"""
Signature image decoding.
"""
import base64
import binascii
import io
import re
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from quickink.pdf.errors import ImageDecodeError

DATA_URI_PREFIX = re.compile(r"^data:image/\w+;base64,")


@dataclass(frozen=True)
class SignatureImage:
    """Decoded signature bitmap with its native pixel size."""
    data: bytes
    width: int
    height: int


def decode_data_uri(data_uri: str) -> bytes:
    """
    Decode a base64 image data URI.

    Args:
        data_uri: "data:image/<fmt>;base64,<payload>" (a bare payload is accepted)

    Returns:
        Raw image bytes

    Raises:
        ImageDecodeError: If the payload is empty or not valid base64
    """
    if not data_uri:
        raise ImageDecodeError("Signature image data is empty")

    payload = DATA_URI_PREFIX.sub("", data_uri.strip(), count=1)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Failed to decode signature image: {e}")

    if not data:
        raise ImageDecodeError("Signature image data is empty")
    return data


def load_signature_image(data_uri: str) -> SignatureImage:
    """Decode a data URI and read the image's pixel dimensions."""
    data = decode_data_uri(data_uri)
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Signature image is not a readable image: {e}")

    if width <= 0 or height <= 0:
        raise ImageDecodeError(f"Signature image has invalid size {width}x{height}")

    return SignatureImage(data=data, width=width, height=height)
