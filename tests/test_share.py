"""
Tests for blk/share.py
"""
import pytest

from blk.codec import encode
from blk.models import Bookmarklet, SharePayload
from blk.share import build_share_link, extract_token, read_share_link


@pytest.fixture
def record():
    return Bookmarklet(id="x", name="Hello ✓", description="Say hi", code="javascript:alert('hi')")


class TestBuildShareLink:
    """Test build_share_link()."""

    def test_link_has_token_fragment(self, record):
        link = build_share_link("https://example.org/blk/", record)
        base, token = link.split("#", 1)
        assert base == "https://example.org/blk/"
        assert token

    def test_link_carries_payload(self, record):
        link = build_share_link("https://example.org/", record)
        assert read_share_link(link) == SharePayload(
            name="Hello ✓", code="javascript:alert('hi')", description="Say hi"
        )

    def test_link_omits_id_and_timestamps(self, record):
        token = build_share_link("https://example.org/", record).split("#", 1)[1]
        assert token == encode({"name": record.name, "description": record.description, "code": record.code})

    def test_existing_fragment_replaced(self, record):
        link = build_share_link("https://example.org/page?q=1#old", record)
        assert link.startswith("https://example.org/page?q=1#")
        assert "#old" not in link

    def test_deterministic(self, record):
        assert build_share_link("https://a/", record) == build_share_link("https://a/", record)


class TestExtractToken:
    """Test extract_token()."""

    def test_full_link(self):
        assert extract_token("https://example.org/#abc") == "abc"

    def test_fragment_only(self):
        assert extract_token("#abc") == "abc"

    def test_bare_token(self):
        assert extract_token("  abc\n") == "abc"

    def test_link_without_fragment(self):
        assert extract_token("https://example.org/") == ""

    def test_empty(self):
        assert extract_token("") == ""
        assert extract_token("#") == ""
        assert extract_token(None) == ""


class TestReadShareLink:
    """Test read_share_link()."""

    def test_bare_token(self):
        token = encode({"name": "N", "code": "C"})
        assert read_share_link(token) == SharePayload(name="N", code="C")

    @pytest.mark.parametrize("text", [
        "",
        "https://example.org/",
        "https://example.org/#",
        "https://example.org/#!!!",
        "#not-a-token",
    ])
    def test_invalid_is_none(self, text):
        assert read_share_link(text) is None

    def test_incomplete_payload_is_none(self):
        token = encode({"name": "N", "code": ""})
        assert read_share_link("https://example.org/#" + token) is None
