from __future__ import annotations

import configparser
import io
import json
from collections.abc import Mapping
from typing import Any

from . import register_store
from .base import FileOptionStore, Record


def _encode(value: Any) -> str:
    if isinstance(value, str) and not _needs_quoting(value):
        return value
    return json.dumps(value)


def _needs_quoting(text: str) -> bool:
    # configparser strips surrounding whitespace and indents continuation lines
    return (
        text != text.strip()
        or "\n" in text
        or "\r" in text
        or text.startswith(("[", '"'))
    )


def _decode(raw: str) -> Any:
    if raw.startswith(("[", '"')):
        try:
            value = json.loads(raw)
        except ValueError:
            return raw
        if isinstance(value, (list, str)):
            return value
    return raw


@register_store
class IniOptionStore(FileOptionStore):
    """Store each record as an INI section named after its storage key.

    INI values are text, so scalars come back as strings.  Lists (the value
    of a checkbox group) are written as JSON arrays and decoded on load.
    Multi-line text and text with surrounding whitespace is written as a
    JSON string so it reads back unchanged.
    """

    suffixes = (".ini",)

    def _parse(self, text: str) -> dict[str, Record]:
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        parser.optionxform = str  # field ids are case sensitive
        parser.read_string(text)
        return {
            section: {k: _decode(v) for k, v in parser.items(section)}
            for section in parser.sections()
        }

    def _dump(self, data: Mapping[str, Record]) -> str:
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str
        for section in sorted(data):
            parser.add_section(section)
            for key, value in data[section].items():
                if value is None:
                    continue
                parser.set(section, key, _encode(value))
        buf = io.StringIO()
        parser.write(buf)
        return buf.getvalue()
