"""
Share token codec for BLK.

A share token is the compact JSON form of a payload, UTF-8 encoded, base64
encoded with the URL-safe alphabet and stripped of trailing padding, so it can
travel in a URL fragment.
"""
import base64
import binascii
import json
import logging
from typing import Any, Mapping, Optional

from blk.errors import DecodeError
from blk.models import SharePayload

logger = logging.getLogger(__name__)


def encode(payload: Mapping[str, Any]) -> str:
    """
    Encode a payload into a URL-safe token.

    Args:
        payload: Mapping of JSON-serializable values (usually name, description, code)

    Returns:
        Token using only ``A-Z a-z 0-9 - _``
    """
    data = json.dumps(dict(payload), ensure_ascii=False, separators=(",", ":"))
    token = base64.urlsafe_b64encode(data.encode("utf-8")).decode("ascii")
    return token.rstrip("=")


def decode_or_raise(token: str) -> Any:
    """
    Decode a token back into structured data.

    Raises:
        DecodeError: If the token is not valid base64url, UTF-8 or JSON
    """
    if not isinstance(token, str):
        raise DecodeError(f"Token must be a string, got {type(token).__name__}")

    padded = token + "=" * (-len(token) % 4)
    standard = padded.replace("-", "+").replace("_", "/")
    try:
        raw = base64.b64decode(standard.encode("ascii"), validate=True)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError, RecursionError) as e:
        raise DecodeError(f"Invalid share token: {e}") from e


def decode(token: str) -> Optional[Any]:
    """Decode a token, returning None instead of raising on malformed input."""
    try:
        return decode_or_raise(token)
    except DecodeError as e:
        logger.debug(f"Token rejected: {e}")
        return None


def encode_payload(payload: SharePayload) -> str:
    """Encode a SharePayload into a token."""
    return encode(payload.to_dict())


def decode_payload(token: str) -> Optional[SharePayload]:
    """
    Decode a token into a SharePayload.

    Returns None if the token is malformed or does not carry a non-empty
    name and code.
    """
    data = decode(token)
    if not isinstance(data, dict):
        return None
    return SharePayload.from_dict(data)
