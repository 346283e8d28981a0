"""
Lossy markup cleanup for text recovered from Anki note fields.

This is deliberately a tag stripper, not an HTML parser: anything between
``<`` and ``>`` is dropped and a fixed set of entities is decoded.
"""

import re

_LINE_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>?")

# Decoded in this order; "&amp;" first so "&amp;lt;" yields "<".
HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def strip_html(text: str) -> str:
    """
    Strip markup from a note field.

    Line-break tags become newlines, remaining tags are removed, common
    entities are decoded and surrounding whitespace is trimmed.
    """
    text = _LINE_BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return text.strip()
