"""
Exporters for BLK.

Provides export functions for the bookmarklet collection:

- json: the full collection, pretty-printed, in the persisted layout
- html: a Netscape bookmarks file whose links are the bookmarklets themselves,
  ready to import into a browser's bookmarks bar
- markdown: a readable listing with each bookmarklet in a fenced code block
"""
import html
import json
from pathlib import Path
from typing import List, Optional

from blk.constants import EXPORT_INDENT
from blk.models import Bookmarklet


def export_file(records: List[Bookmarklet], path: Path, format: str = "json",
                pretty: bool = True) -> None:
    """
    Export bookmarklets to a file.

    Args:
        records: Bookmarklets to export
        path: Output file path
        format: Export format (json, html, markdown)
        pretty: Indent JSON output
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    content = export_to_string(records, format, pretty)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def export_to_string(records: List[Bookmarklet], format: str = "json", pretty: bool = True) -> str:
    """Render bookmarklets in the given format."""
    if format == "json":
        return render_json(records, EXPORT_INDENT if pretty else None)

    exporters = {
        "html": render_html,
        "markdown": render_markdown,
    }

    exporter = exporters.get(format)
    if not exporter:
        raise ValueError(f"Unknown format: {format}")

    return exporter(records)


def render_json(records: List[Bookmarklet], indent: Optional[int] = EXPORT_INDENT) -> str:
    """JSON array of records, pretty-printed unless indent is None."""
    return json.dumps([r.to_dict() for r in records], indent=indent, ensure_ascii=False) + "\n"


def render_html(records: List[Bookmarklet]) -> str:
    """Netscape bookmarks file with one link per bookmarklet."""
    lines = [
        '<!DOCTYPE NETSCAPE-Bookmark-file-1>',
        '<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">',
        '<TITLE>Bookmarklets</TITLE>',
        '<H1>Bookmarklets</H1>',
        '<DL><p>'
    ]

    for r in records:
        add_date = r.created_at // 1000
        last_modified = r.updated_at // 1000
        href = html.escape(r.code, quote=True)
        title = html.escape(r.name, quote=False)
        lines.append(
            f'    <DT><A HREF="{href}" ADD_DATE="{add_date}" LAST_MODIFIED="{last_modified}">{title}</A>'
        )
        if r.description:
            lines.append(f'    <DD>{html.escape(r.description, quote=False)}')

    lines.append('</DL><p>')
    return "\n".join(lines) + "\n"


def render_markdown(records: List[Bookmarklet]) -> str:
    """Markdown listing of bookmarklets."""
    lines = ["# Bookmarklets", ""]

    for r in records:
        lines.append(f"## {r.name}")
        lines.append("")
        if r.description:
            lines.append(r.description)
            lines.append("")
        lines.append("```javascript")
        lines.append(r.code)
        lines.append("```")
        lines.append("")

    return "\n".join(lines)
