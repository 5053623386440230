"""
Tests for blk/exporters.py
"""
import json

import pytest
from bs4 import BeautifulSoup

from blk.exporters import export_file, export_to_string, render_html, render_json, render_markdown
from blk.models import Bookmarklet


@pytest.fixture
def records(sample_records):
    return [Bookmarklet.from_dict(d) for d in sample_records]


class TestJsonExport:
    """Test JSON export."""

    def test_layout(self, records, sample_records):
        text = render_json(records)
        assert json.loads(text) == sample_records
        assert text.endswith("\n")

    def test_pretty_printed(self, records):
        assert render_json(records).startswith('[\n  {\n    "id"')

    def test_unicode_kept(self, records):
        assert "Ünïcødé ✓" in render_json(records)

    def test_empty(self):
        assert json.loads(render_json([])) == []


class TestHtmlExport:
    """Test Netscape bookmarks export."""

    def test_header(self, records):
        html = render_html(records)
        assert html.startswith("<!DOCTYPE NETSCAPE-Bookmark-file-1>")

    def test_links_are_bookmarklets(self, records):
        soup = BeautifulSoup(render_html(records), "html.parser")
        links = soup.find_all("a")
        assert [a.get_text() for a in links] == [r.name for r in records]
        assert [a["href"] for a in links] == [r.code for r in records]

    def test_dates_in_seconds(self, records):
        soup = BeautifulSoup(render_html(records), "html.parser")
        link = soup.find("a")
        assert link["add_date"] == "1700000000"
        assert link["last_modified"] == "1700000500"

    def test_description_only_when_present(self, records):
        html = render_html(records)
        assert "<DD>Count words on the page" in html
        assert html.count("<DD>") == 2

    def test_escaping(self):
        record = Bookmarklet(name="<b>&</b>", code='javascript:alert("<x>")', description="a < b")
        html = render_html([record])
        assert "<b>" not in html
        assert 'HREF="javascript:alert(&quot;&lt;x&gt;&quot;)"' in html
        assert "<DD>a &lt; b" in html


class TestMarkdownExport:
    """Test Markdown export."""

    def test_sections(self, records):
        md = render_markdown(records)
        assert md.startswith("# Bookmarklets\n")
        for r in records:
            assert f"## {r.name}" in md
            assert f"```javascript\n{r.code}\n```" in md

    def test_description_included(self, records):
        assert "Invert page colors" in render_markdown(records)


class TestExportDispatch:
    """Test export_to_string() and export_file()."""

    def test_unknown_format(self, records):
        with pytest.raises(ValueError):
            export_to_string(records, "csv")

    @pytest.mark.parametrize("format", ["json", "html", "markdown"])
    def test_export_file(self, tmp_path, records, format):
        path = tmp_path / "out" / f"export.{format}"
        export_file(records, path, format)
        assert path.read_text(encoding="utf-8") == export_to_string(records, format)

    def test_compact_json(self, records, sample_records):
        text = export_to_string(records, "json", pretty=False)
        assert "\n  " not in text
        assert json.loads(text) == sample_records
