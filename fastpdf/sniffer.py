"""
Content-based MIME type detection.

Used only for image parts, whose payloads usually come without a reliable
file name. Detection inspects magic bytes through the filetype library and
never looks at extensions.
"""

import logging
from typing import Union

import filetype

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_mime_type(data: Union[bytes, bytearray]) -> str:
    """
    Guess the MIME type of a byte buffer from its signature.

    Args:
        data: Raw bytes

    Returns:
        MIME type string, or "" when undetermined
    """
    if not data:
        return ""
    kind = filetype.guess(bytes(data))
    if kind is None:
        logger.debug("Could not determine content type from file signature")
        return ""
    return kind.mime


def content_type_for(data: Union[bytes, bytearray]) -> str:
    """Sniffed MIME type, or application/octet-stream when undetermined."""
    return guess_mime_type(data) or DEFAULT_CONTENT_TYPE
