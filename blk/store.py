"""
Record store for BLK.

RecordStore owns the collection of bookmarklets. It loads the collection from
a key-value storage slot once, keeps it in memory most-recent-first, and
writes the whole collection back after every mutation.

Example Usage:
    >>> from blk.storage import MemoryStorage
    >>> store = RecordStore(MemoryStorage())
    >>> item = store.create("Hello", "Say hi", "alert('hi')")
    >>> store.search("say")[0].id == item.id
    True
"""
import json
import logging
from dataclasses import replace
from typing import Any, Iterator, List, Optional

from blk.constants import DEFAULT_STORAGE_KEY, EXPORT_INDENT, UNTITLED_NAME
from blk.errors import BookmarkletImportError, PersistenceParseError, ValidationError
from blk.models import Bookmarklet, SharePayload
from blk.normalizer import normalize_code
from blk.storage import KeyValueStorage
from blk.utils import as_text, as_timestamp, generate_unique_id, now_ms

logger = logging.getLogger(__name__)


def _require(name: str, raw_code: str) -> None:
    if not (name or "").strip() or not (raw_code or "").strip():
        raise ValidationError("Name and code are required.")


class RecordStore:
    """
    In-memory bookmarklet collection persisted to a single storage slot.

    Records are kept newest first. Callers get the stored objects back from
    queries but should change them only through the store's methods, which
    persist every change.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY,
                 autoload: bool = True):
        """
        Args:
            storage: Backend holding the serialized collection
            key: Slot name within the backend
            autoload: Read the slot immediately
        """
        self.storage = storage
        self.key = key
        self._records: List[Bookmarklet] = []
        if autoload:
            self.load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Replace the in-memory collection with the stored one.

        An empty slot loads as an empty collection. A corrupt slot is logged and
        also loads as empty.
        """
        raw = self.storage.read(self.key)
        if raw is None:
            self._records = []
            return
        try:
            self._records = self._parse_stored(raw)
        except PersistenceParseError as e:
            logger.warning(f"Stored collection in '{self.key}' is unreadable, starting empty: {e}")
            self._records = []
        logger.debug(f"Loaded {len(self._records)} bookmarklets from {self.storage.describe()}")

    @staticmethod
    def _parse_stored(raw: str) -> List[Bookmarklet]:
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            raise PersistenceParseError(str(e)) from e
        if not isinstance(data, list):
            raise PersistenceParseError(f"expected a list, got {type(data).__name__}")
        return [Bookmarklet.from_dict(item) for item in data if isinstance(item, dict)]

    def save(self) -> None:
        """Overwrite the storage slot with the full collection."""
        self._commit(self._records)

    def _commit(self, records: List[Bookmarklet]) -> None:
        # Memory changes only once the write has gone through
        data = [r.to_dict() for r in records]
        self.storage.write(self.key, json.dumps(data, ensure_ascii=False))
        self._records = records

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Bookmarklet]:
        return iter(list(self._records))

    def all(self) -> List[Bookmarklet]:
        """All records, newest first."""
        return list(self._records)

    def get(self, id: str) -> Optional[Bookmarklet]:
        """Get the first record with the given id."""
        for record in self._records:
            if record.id == id:
                return record
        return None

    def search(self, query: Optional[str] = None) -> List[Bookmarklet]:
        """
        Filter records by a case-insensitive substring of name or description.

        Args:
            query: Text to look for; empty or None matches everything

        Returns:
            Matching records in collection order
        """
        if not query:
            return self.all()
        return [r for r in self._records if r.matches(query)]

    def to_list(self) -> List[dict]:
        """Serialize the collection to a list of plain dicts."""
        return [r.to_dict() for r in self._records]

    def to_json(self, indent: Optional[int] = EXPORT_INDENT) -> str:
        """Serialize the collection as JSON text (pretty-printed by default)."""
        return json.dumps(self.to_list(), indent=indent, ensure_ascii=False)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, name: str, description: str, raw_code: str) -> Bookmarklet:
        """
        Add a new bookmarklet at the front of the collection.

        Args:
            name: Display name (required)
            description: Optional description
            raw_code: Pasted code in any supported form (required)

        Returns:
            The created record

        Raises:
            ValidationError: If name or code is empty or whitespace-only
        """
        _require(name, raw_code)
        now = now_ms()
        record = Bookmarklet(
            id=generate_unique_id(),
            name=name,
            description=description or "",
            code=normalize_code(raw_code),
            created_at=now,
            updated_at=now,
        )
        self._commit([record] + self._records)
        logger.info(f"Created bookmarklet {record.id} ({record.name})")
        return record

    def update(self, id: str, name: str, description: str, raw_code: str) -> Optional[Bookmarklet]:
        """
        Replace a record's name, description and code.

        Returns:
            The updated record, or None if no record has that id (nothing changes)

        Raises:
            ValidationError: If name or code is empty or whitespace-only
        """
        _require(name, raw_code)
        for index, record in enumerate(self._records):
            if record.id == id:
                updated = replace(
                    record,
                    name=name,
                    description=description or "",
                    code=normalize_code(raw_code),
                    updated_at=now_ms(),
                )
                records = list(self._records)
                records[index] = updated
                self._commit(records)
                logger.info(f"Updated bookmarklet {id}")
                return updated
        logger.debug(f"Update skipped, no bookmarklet with id {id}")
        return None

    def delete(self, id: str) -> bool:
        """
        Remove the record(s) with the given id.

        Returns:
            True if anything was removed
        """
        remaining = [r for r in self._records if r.id != id]
        if len(remaining) == len(self._records):
            return False
        self._commit(remaining)
        logger.info(f"Deleted bookmarklet {id}")
        return True

    def import_many(self, items: Any) -> List[Bookmarklet]:
        """
        Prepend a batch of untyped records, defaulting whatever is missing.

        Each item gets a generated id, "Untitled" name, empty description and
        current timestamps where those are absent; its code is normalized.
        Items that are not objects are defaulted the same way. Existing ids are
        kept even if they collide with records already in the store.

        Args:
            items: Parsed import data, must be a list

        Returns:
            The imported records in input order

        Raises:
            BookmarkletImportError: If items is not a list
        """
        if not isinstance(items, list):
            raise BookmarkletImportError(
                f"Expected a list of bookmarklets, got {type(items).__name__}"
            )

        imported = [self._from_import(item) for item in items]
        self._commit(imported + self._records)
        logger.info(f"Imported {len(imported)} bookmarklets")
        return imported

    @staticmethod
    def _from_import(item: Any) -> Bookmarklet:
        data = item if isinstance(item, dict) else {}
        now = now_ms()
        return Bookmarklet(
            id=as_text(data.get("id")) or generate_unique_id(),
            name=as_text(data.get("name"), UNTITLED_NAME),
            description=as_text(data.get("description")),
            code=normalize_code(as_text(data.get("code"))),
            created_at=as_timestamp(data.get("createdAt"), now),
            updated_at=as_timestamp(data.get("updatedAt"), now),
        )

    def import_json(self, text: str) -> List[Bookmarklet]:
        """
        Parse JSON text and import it with import_many.

        Raises:
            BookmarkletImportError: If the text is not valid JSON or not a list
        """
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            raise BookmarkletImportError(f"Invalid JSON: {e}") from e
        return self.import_many(data)

    def add_payload(self, payload: SharePayload) -> Bookmarklet:
        """
        Add a record from a decoded share payload.

        The payload's name and description are kept as given; its code is
        normalized (a no-op for code that was shared from a stored record).
        """
        now = now_ms()
        record = Bookmarklet(
            id=generate_unique_id(),
            name=payload.name,
            description=payload.description or "",
            code=normalize_code(payload.code),
            created_at=now,
            updated_at=now,
        )
        self._commit([record] + self._records)
        logger.info(f"Imported shared bookmarklet {record.id} ({record.name})")
        return record
