"""
Share links for BLK.

A share link is a base URL whose fragment is a share token:
``https://example.org/blk/#<token>``. The token carries the record's name,
description and code, so the link is self-contained.
"""
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from blk.codec import decode_payload, encode_payload
from blk.models import Bookmarklet, SharePayload


def build_share_link(base_url: str, record: Bookmarklet) -> str:
    """
    Build the share link for a record.

    Args:
        base_url: Origin and path of the page that consumes the link; any
            fragment it already has is replaced
        record: Record to share

    Returns:
        ``<base_url>#<token>``
    """
    parts = urlsplit(base_url)
    token = encode_payload(record.to_payload())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, token))


def extract_token(text: str) -> str:
    """
    Pull the token out of a share link, a ``#fragment`` or a bare token.

    Returns:
        The token, or an empty string if there is none
    """
    text = (text or "").strip()
    if "#" in text:
        return text.split("#", 1)[1].strip()
    if "://" in text:
        return ""
    return text


def read_share_link(text: str) -> Optional[SharePayload]:
    """Decode the payload carried by a share link or token, or None if invalid."""
    token = extract_token(text)
    if not token:
        return None
    return decode_payload(token)
