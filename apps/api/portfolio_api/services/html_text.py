"""Convert fetched HTML into normalized plain text."""

from __future__ import annotations

import re

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_CLOSING_TAG_RE = re.compile(r"</[^>]+>")
_TAG_RE = re.compile(r"<[^>]+>")
_NUMERIC_REF_RE = re.compile(r"&#(\d+);")
_WHITESPACE_RE = re.compile(r"\s+")

# Decoded in this order, &amp; first.
_NAMED_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
    ("&nbsp;", " "),
    ("&ndash;", "-"),
    ("&mdash;", "-"),
)


_REPLACEMENT_CHAR = "\ufffd"


def _decode_numeric_ref(match: re.Match[str]) -> str:
    code_point = int(match.group(1))
    # Lone surrogates and values past U+10FFFF are not characters.
    if code_point > 0x10FFFF or 0xD800 <= code_point <= 0xDFFF:
        return _REPLACEMENT_CHAR
    return chr(code_point)


def extract_text_from_html(html: str) -> str:
    """Strip scripts, styles and tags from html and collapse whitespace.

    Script and style blocks are removed with their contents before anything
    else so their text never reaches the extracted output.
    """
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _CLOSING_TAG_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)

    for entity, replacement in _NAMED_ENTITIES:
        text = text.replace(entity, replacement)
    text = _NUMERIC_REF_RE.sub(_decode_numeric_ref, text)

    return _WHITESPACE_RE.sub(" ", text).strip()
