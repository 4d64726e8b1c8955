"""Markup escaping collaborators.

The render layer never escapes anything itself; it delegates to an object
implementing :class:`MarkupEscaper`.  :class:`MarkupSafeEscaper` is the
default and escapes everything.  :class:`AllowListEscaper` lets a small set
of inline tags through in descriptive text so that hosts can link to
documentation from a field description.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from markupsafe import escape

# Tags allowed in description text and the attributes allowed on each.
ALLOWED_HTML: dict[str, tuple[str, ...]] = {
    "p": (),
    "div": (),
    "span": (),
    "a": ("href", "class", "target"),
}

# Tags whose contents are dropped together with the tag.
DROP_WITH_CONTENT = frozenset({"script", "style", "iframe", "object"})

ALLOWED_URL_SCHEMES = frozenset({"", "http", "https", "mailto"})


class MarkupEscaper(Protocol):
    """Escapes values for inclusion in generated markup."""

    def escape_attribute(self, value: Any) -> str:
        """Return *value* escaped for use inside a double-quoted attribute."""

    def escape_text(self, text: Any) -> str:
        """Return *text* escaped for use as element content."""


class MarkupSafeEscaper:
    """Escape everything using :func:`markupsafe.escape`."""

    def escape_attribute(self, value: Any) -> str:
        return str(escape(_stringify(value)))

    def escape_text(self, text: Any) -> str:
        return str(escape(_stringify(text)))


class AllowListEscaper(MarkupSafeEscaper):
    """Escaper that keeps an allow-list of tags in text content.

    Disallowed tags are unwrapped (their text survives, escaped), attributes
    outside the per-tag allow-list are removed, and ``href`` values with a
    scheme other than http, https or mailto are dropped.  Attribute values
    are still fully escaped.
    """

    def __init__(self, allowed: Mapping[str, tuple[str, ...]] | None = None) -> None:
        self.allowed = dict(ALLOWED_HTML if allowed is None else allowed)

    def escape_text(self, text: Any) -> str:
        raw = _stringify(text)
        if "<" not in raw:
            return super().escape_text(raw)
        soup = BeautifulSoup(raw, "html.parser")
        for tag in soup.find_all(True):
            if tag.decomposed:
                continue
            if tag.name in DROP_WITH_CONTENT:
                tag.decompose()
                continue
            allowed_attrs = self.allowed.get(tag.name)
            if allowed_attrs is None:
                tag.unwrap()
                continue
            for attr in list(tag.attrs):
                if attr not in allowed_attrs:
                    del tag.attrs[attr]
                elif attr == "href" and not _safe_url(tag.attrs[attr]):
                    del tag.attrs[attr]
        return str(soup)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def _safe_url(value: Any) -> bool:
    try:
        scheme = urlsplit(str(value).strip()).scheme
    except ValueError:
        return False
    return scheme.lower() in ALLOWED_URL_SCHEMES


__all__ = [
    "ALLOWED_HTML",
    "AllowListEscaper",
    "MarkupEscaper",
    "MarkupSafeEscaper",
]
