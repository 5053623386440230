"""
Application controller for BLK.

Wires the edit form, search query, share links and import/export to the
record store, and reports every outcome as a Message for the front end to
show. All library errors stop here: nothing raised by the store, codec or
importers escapes a controller action.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from blk.constants import DEFAULT_SHARE_BASE_URL, EXPORT_FILENAME
from blk.errors import BlkError, BookmarkletImportError, ValidationError
from blk.exporters import export_file, export_to_string
from blk.importers import import_file
from blk.models import Bookmarklet
from blk.share import build_share_link, extract_token, read_share_link
from blk.store import RecordStore

logger = logging.getLogger(__name__)

INFO = "info"
SUCCESS = "success"
ERROR = "error"


@dataclass
class Message:
    """A user-facing notice."""
    kind: str
    text: str

    @property
    def is_error(self) -> bool:
        return self.kind == ERROR


@dataclass
class FormState:
    """Contents of the add/edit form."""
    name: str = ""
    description: str = ""
    code: str = ""

    def clear(self) -> None:
        self.name = ""
        self.description = ""
        self.code = ""


class Controller:
    """
    Orchestrates user actions against a RecordStore.

    The store is passed in explicitly; the controller keeps only view state
    (form contents, the id being edited, the search query, the last message).
    """

    def __init__(self, store: RecordStore, share_base_url: str = DEFAULT_SHARE_BASE_URL):
        self.store = store
        self.share_base_url = share_base_url
        self.form = FormState()
        self.editing_id: Optional[str] = None
        self.query = ""
        self.message: Optional[Message] = None

    def _notify(self, kind: str, text: str) -> Message:
        self.message = Message(kind, text)
        return self.message

    def dismiss(self) -> None:
        """Clear the current message."""
        self.message = None

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def filtered(self) -> List[Bookmarklet]:
        """Records matching the current search query."""
        return self.store.search(self.query)

    def clear_query(self) -> None:
        self.query = ""

    # ------------------------------------------------------------------
    # Form
    # ------------------------------------------------------------------

    def save_form(self) -> Message:
        """Create a record from the form, or update the one being edited."""
        try:
            if self.editing_id:
                updated = self.store.update(self.editing_id, self.form.name, self.form.description, self.form.code)
                if updated is None:
                    # Form contents stay, a second save creates a new record
                    missing, self.editing_id = self.editing_id, None
                    return self._notify(ERROR, f"Bookmarklet not found: {missing}")
            else:
                self.store.create(self.form.name, self.form.description, self.form.code)
        except ValidationError as e:
            return self._notify(ERROR, str(e))
        except BlkError as e:
            logger.error(f"Save failed: {e}")
            return self._notify(ERROR, f"Save failed: {e}")

        self.editing_id = None
        self.form.clear()
        return self._notify(SUCCESS, "Saved.")

    def edit_item(self, id: str) -> Optional[Bookmarklet]:
        """Load a record into the form for editing."""
        record = self.store.get(id)
        if record is None:
            self._notify(ERROR, f"Bookmarklet not found: {id}")
            return None
        self.editing_id = record.id
        self.form.name = record.name
        self.form.description = record.description or ""
        self.form.code = record.code
        return record

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.form.clear()

    def delete_item(self, id: str, confirm: Callable[[str], bool]) -> Optional[Message]:
        """
        Delete a record after asking the user.

        Args:
            id: Record to delete
            confirm: Called with a prompt; deletion happens only if it returns True

        Returns:
            A message, or None if the user declined
        """
        if not confirm("Delete this bookmarklet?"):
            return None
        try:
            removed = self.store.delete(id)
        except BlkError as e:
            logger.error(f"Delete failed: {e}")
            return self._notify(ERROR, f"Delete failed: {e}")
        if not removed:
            return self._notify(ERROR, f"Bookmarklet not found: {id}")
        if self.editing_id == id:
            self.cancel_edit()
        return self._notify(SUCCESS, "Deleted.")

    # ------------------------------------------------------------------
    # Sharing and install
    # ------------------------------------------------------------------

    def share_link(self, record: Bookmarklet) -> str:
        return build_share_link(self.share_base_url, record)

    @staticmethod
    def install_href(record: Bookmarklet) -> str:
        """The link target for installing a record: its normalized code."""
        return record.code

    def startup_notice(self, location: str) -> Optional[Message]:
        """
        Report a share token found in the page location, without importing it.

        Returns:
            An info message if the location carries a valid token, else None
        """
        payload = read_share_link(location)
        if payload is None:
            return None
        return self._notify(INFO, f'Found share link for "{payload.name}". You can import it.')

    def import_from_hash(self, location: str) -> Message:
        """Import the bookmarklet carried by a share link or token."""
        if not extract_token(location):
            return self._notify(ERROR, "No share token in URL.")
        payload = read_share_link(location)
        if payload is None:
            return self._notify(ERROR, "Invalid token.")
        try:
            self.store.add_payload(payload)
        except BlkError as e:
            logger.error(f"Import from link failed: {e}")
            return self._notify(ERROR, f"Import failed: {e}")
        return self._notify(SUCCESS, f'Imported "{payload.name}"')

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_all(self, format: str = "json", pretty: bool = True) -> str:
        """Render the whole collection for download."""
        return export_to_string(self.store.all(), format, pretty)

    def export_to(self, path: Optional[Path] = None, format: str = "json",
                  pretty: bool = True) -> Message:
        """Write the whole collection to a file (bookmarklets.json by default)."""
        path = Path(path or EXPORT_FILENAME)
        try:
            export_file(self.store.all(), path, format, pretty)
        except OSError as e:
            return self._notify(ERROR, f"Export failed: {e}")
        return self._notify(SUCCESS, f"Exported {len(self.store)} bookmarklets to {path}.")

    def import_text(self, text: str) -> Message:
        """Import a JSON document given as text."""
        try:
            imported = self.store.import_json(text)
        except BookmarkletImportError as e:
            logger.info(f"Rejected import: {e}")
            return self._notify(ERROR, "Failed to import JSON.")
        except BlkError as e:
            logger.error(f"Import failed: {e}")
            return self._notify(ERROR, f"Import failed: {e}")
        return self._notify(SUCCESS, f"Imported {len(imported)} bookmarklets.")

    def import_path(self, path: Path, format: Optional[str] = None) -> Message:
        """Import a JSON or HTML file."""
        try:
            imported = import_file(self.store, Path(path), format)
        except BookmarkletImportError as e:
            logger.info(f"Rejected import of {path}: {e}")
            return self._notify(ERROR, f"Failed to import {Path(path).name}.")
        except (BlkError, ValueError) as e:
            logger.error(f"Import of {path} failed: {e}")
            return self._notify(ERROR, f"Import failed: {e}")
        return self._notify(SUCCESS, f"Imported {len(imported)} bookmarklets.")
