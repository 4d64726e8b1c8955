from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from .escaping import MarkupEscaper, MarkupSafeEscaper

logger = logging.getLogger(__name__)

# Characters that cannot appear in an HTML attribute name.
_INVALID_NAME = re.compile(r"[\s\"'=<>/\x00-\x1f]")


class AttributeFormatter:
    """Turn a mapping of attribute names to values into markup attributes.

    Entries are emitted in insertion order as ``name="value"`` pairs joined by
    single spaces.  Entries whose name is empty, ``None`` or not a valid
    attribute name are skipped, as are ``None`` and ``False`` values.
    ``True`` produces a bare attribute (``checked``), and lists or tuples are
    joined with spaces so class lists can be passed directly.
    """

    def __init__(self, escaper: MarkupEscaper | None = None) -> None:
        self.escaper = escaper or MarkupSafeEscaper()

    def format(self, attributes: Mapping[Any, Any] | None) -> str:
        if not attributes:
            return ""
        parts: list[str] = []
        for name, value in attributes.items():
            if not name or value is None or value is False:
                continue
            name = str(name).strip()
            if not name:
                continue
            if _INVALID_NAME.search(name):
                logger.debug("dropping invalid attribute name %r", name)
                continue
            if value is True:
                parts.append(name)
                continue
            if isinstance(value, (list, tuple)):
                value = " ".join(str(v) for v in value if v not in (None, ""))
            parts.append(f'{name}="{self.escaper.escape_attribute(value)}"')
        return " ".join(parts)

    __call__ = format


def merge_attributes(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge attribute mappings, later layers winning on key collision.

    ``None`` values never override an earlier layer.  Keys keep the position
    of their first appearance so output order does not depend on which layer
    supplied the final value.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in (layer or {}).items():
            if value is not None or key not in merged:
                merged[key] = value
    return merged


__all__ = ["AttributeFormatter", "merge_attributes"]
