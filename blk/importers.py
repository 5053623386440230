"""
Importers for BLK.

Reads bookmarklets from files into a RecordStore:

- json: a list of records in the exported layout; anything else is rejected
- html: a Netscape bookmarks file; only ``javascript:`` links are taken
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from blk.errors import BookmarkletImportError
from blk.models import Bookmarklet
from blk.normalizer import is_bookmarklet
from blk.store import RecordStore
from blk.utils import as_timestamp

logger = logging.getLogger(__name__)


def import_file(store: RecordStore, path: Path, format: Optional[str] = None) -> List[Bookmarklet]:
    """
    Import bookmarklets from a file.

    Args:
        store: Store to import into
        path: File path to import
        format: Format override (auto-detected from the extension if not given)

    Returns:
        The imported records

    Raises:
        BookmarkletImportError: If the file cannot be read or has the wrong shape
    """
    path = Path(path)
    if format is None:
        format_map = {
            ".html": "html",
            ".htm": "html",
            ".json": "json",
        }
        format = format_map.get(path.suffix.lower(), "json")

    importers = {
        "json": import_json,
        "html": import_html,
    }

    importer = importers.get(format)
    if not importer:
        raise ValueError(f"Unknown format: {format}")

    return importer(store, path)


def _read_text(path: Path) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise BookmarkletImportError(f"Cannot read {path}: {e}") from e


def import_json(store: RecordStore, path: Path) -> List[Bookmarklet]:
    """Import a JSON export file."""
    return store.import_json(_read_text(path))


def parse_html(text: str) -> List[Dict[str, Any]]:
    """
    Extract bookmarklet items from Netscape bookmarks HTML.

    Returns:
        Untyped items suitable for RecordStore.import_many
    """
    soup = BeautifulSoup(text, "html.parser")
    items = []

    for link in soup.find_all("a"):
        href = link.get("href") or ""
        if not is_bookmarklet(href):
            continue

        item: Dict[str, Any] = {
            "name": link.get_text().strip(),
            "code": href.strip(),
        }

        add_date = as_timestamp(link.get("add_date"), 0)
        if add_date:
            item["createdAt"] = add_date * 1000
        last_modified = as_timestamp(link.get("last_modified"), 0)
        if last_modified:
            item["updatedAt"] = last_modified * 1000

        # Description is the <DD> right after the link, before the next link
        for element in link.next_elements:
            if getattr(element, "name", None) == "a":
                break
            if getattr(element, "name", None) == "dd":
                text_node = element.find(string=True, recursive=False)
                if text_node and text_node.strip():
                    item["description"] = text_node.strip()
                break

        items.append(item)

    return items


def import_html(store: RecordStore, path: Path) -> List[Bookmarklet]:
    """Import the ``javascript:`` links of a Netscape bookmarks file."""
    items = parse_html(_read_text(path))
    logger.debug(f"Found {len(items)} bookmarklets in {path}")
    return store.import_many(items)
