"""
Media reference helpers.

Generated stills travel as ``data:<mime>;base64,<payload>`` URIs; clips and
remote assets are plain URLs.
"""

import base64
import binascii
from typing import Tuple

from storyforge.core.exceptions import CompositingError

DEFAULT_IMAGE_MIME = "image/png"


def is_data_uri(media_ref: str) -> bool:
    return bool(media_ref) and media_ref.startswith("data:")


def to_data_uri(data: bytes, mime_type: str = DEFAULT_IMAGE_MIME) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def split_data_uri(media_ref: str) -> Tuple[str, str]:
    """Return ``(mime_type, base64_payload)``; bare base64 is treated as PNG."""
    if not is_data_uri(media_ref):
        return DEFAULT_IMAGE_MIME, media_ref
    header, _, payload = media_ref.partition(",")
    mime_type = header[len("data:"):].split(";")[0] or DEFAULT_IMAGE_MIME
    return mime_type, payload


def parse_data_uri(media_ref: str) -> Tuple[str, bytes]:
    """Decode a data URI (or bare base64) into ``(mime_type, bytes)``."""
    mime_type, payload = split_data_uri(media_ref)
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CompositingError(f"Media reference is not valid base64: {e}")
