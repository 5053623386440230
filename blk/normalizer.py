"""
Normalization of pasted code into executable bookmarklet form.

Accepts raw JavaScript statements, a ready-made ``javascript:`` URL, or code
fenced in Markdown backtick blocks, and returns a single string that can be
used directly as a bookmark's link target.
"""
import re

from blk.constants import JAVASCRIPT_PREFIX, WRAPPER_HEAD, WRAPPER_TAIL

# Three or more backticks, optionally followed by a language tag that ends the line
FENCE_PATTERN = re.compile(r"`{3,}(?:[ \t]*[\w+#.-]+(?=[ \t]*(?:\r?\n|$)))?")


def strip_fences(text: str) -> str:
    """Remove every backtick fence marker (with optional language tag) from text."""
    return FENCE_PATTERN.sub("", text)


def is_bookmarklet(text: str) -> bool:
    """Check whether text is already in executable-link form."""
    return text.strip().startswith(JAVASCRIPT_PREFIX)


def wrap_code(code: str) -> str:
    """Embed code in a self-invoking function that alerts on any error."""
    return WRAPPER_HEAD + code + WRAPPER_TAIL


def normalize_code(code: str) -> str:
    """
    Convert free-form pasted text into a canonical bookmarklet string.

    Text that already starts with ``javascript:`` (after fence stripping) is
    returned as is, so feeding a normalized string back in never wraps it a
    second time. Anything else is wrapped, including empty input.

    Args:
        code: Raw pasted text

    Returns:
        Executable bookmarklet string
    """
    text = code.strip()
    if text.startswith("`"):
        text = strip_fences(text).strip()
    if text.startswith(JAVASCRIPT_PREFIX):
        return text
    return wrap_code(text.strip())
