"""
Exception types for BLK.

All library errors derive from BlkError so callers at the boundary (controller,
CLI) can catch one base class while still telling the categories apart.
"""


class BlkError(Exception):
    """Base class for all BLK failures."""


class ValidationError(BlkError):
    """A required field was missing or blank at create/update time."""


class DecodeError(BlkError):
    """A share token could not be decoded."""


class BookmarkletImportError(BlkError):
    """Import input was not valid JSON or not a list at top level."""


class PersistenceParseError(BlkError):
    """The stored collection could not be parsed."""


class StorageError(BlkError):
    """Reading or writing the persistent slot failed."""
