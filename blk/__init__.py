"""
BLK - Bookmarklet Kit

Store, edit, search, share and install bookmarklets: small JavaScript
snippets that live in a browser's bookmarks bar.

Design Principles:
- One record collection, kept in a single key-value slot
- Every stored bookmarklet is already in executable ``javascript:`` form
- Share links are self-contained: the record travels in the URL fragment

Example Usage:
    >>> from blk import RecordStore, SqlStorage, encode, decode
    >>> store = RecordStore(SqlStorage(path="blk.db"))
    >>> item = store.create("Hello", "Say hi", "alert('hi')")
    >>> token = encode(item.to_payload().to_dict())
    >>> decode(token)["name"]
    'Hello'
"""

__version__ = "0.1.0"
__author__ = "BLK Contributors"

# Codec and normalization
from blk.codec import encode, decode, decode_or_raise, encode_payload, decode_payload
from blk.normalizer import normalize_code, is_bookmarklet

# Models
from blk.models import Bookmarklet, SharePayload

# Storage
from blk.storage import KeyValueStorage, MemoryStorage, JsonFileStorage, SqlStorage, open_storage
from blk.store import RecordStore

# Configuration
from blk.config import BlkConfig, get_config, init_config

# Errors
from blk.errors import (
    BlkError,
    ValidationError,
    DecodeError,
    BookmarkletImportError,
    PersistenceParseError,
    StorageError,
)

# Import/Export and sharing
from blk.importers import import_file
from blk.exporters import export_file
from blk.share import build_share_link, extract_token, read_share_link
from blk.controller import Controller, Message

__all__ = [
    # Codec
    "encode",
    "decode",
    "decode_or_raise",
    "encode_payload",
    "decode_payload",
    "normalize_code",
    "is_bookmarklet",
    # Models
    "Bookmarklet",
    "SharePayload",
    # Storage
    "KeyValueStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "SqlStorage",
    "open_storage",
    "RecordStore",
    # Config
    "BlkConfig",
    "get_config",
    "init_config",
    # Errors
    "BlkError",
    "ValidationError",
    "DecodeError",
    "BookmarkletImportError",
    "PersistenceParseError",
    "StorageError",
    # Import/Export and sharing
    "import_file",
    "export_file",
    "build_share_link",
    "extract_token",
    "read_share_link",
    "Controller",
    "Message",
]
