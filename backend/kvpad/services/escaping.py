"""
KVPad Backend — HTML Escaping Codec
====================================

What:  Converts document text to and from its stored, HTML-escaped form.
Why:   Documents are stored escaped so the raw value is always safe to embed.
How:   Five literal substitutions. `&` goes first when escaping so the
       entities introduced for the other characters are not escaped twice.

Known limitation:
    unescape_html(escape_html(x)) == x only when x holds no entity-like
    substrings of its own. "&lt;" typed by a user is stored as "&amp;lt;",
    but unescaping applies "&amp;" → "&" first and then "&lt;" → "<".
"""

from typing import Optional

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)


def escape_html(text: Optional[str]) -> str:
    """Replace &, <, >, " and ' with named entities. None or "" → ""."""
    if not text:
        return ""
    for raw, entity in _ESCAPES:
        text = text.replace(raw, entity)
    return text


def unescape_html(text: Optional[str]) -> str:
    """Reverse escape_html's five substitutions. None or "" → ""."""
    if not text:
        return ""
    for raw, entity in _ESCAPES:
        text = text.replace(entity, raw)
    return text
