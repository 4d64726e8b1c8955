from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import tomlkit

from . import register_store
from .base import FileOptionStore, Record


@register_store
class TomlOptionStore(FileOptionStore):
    """TOML file store; each storage key is a table.

    Saving a record edits the existing document in place, so comments and
    tables written by hand survive a form submission.  TOML has no
    null, so ``None`` values are left out.
    """

    suffixes = (".toml",)

    def _parse(self, text: str) -> dict[str, Record]:
        return tomlkit.parse(text).unwrap()

    def _dump(self, data: Mapping[str, Record]) -> str:
        doc = self._document()
        for key in [k for k in doc if k not in data]:
            del doc[key]
        for key, record in data.items():
            table = doc.get(key)
            if not isinstance(record, Mapping):
                # top-level scalars written by hand
                if key not in doc:
                    doc[key] = _plain(record)
                continue
            if isinstance(table, Mapping):
                for name in [n for n in table if record.get(n) is None]:
                    del table[name]
                _fill(table, record)
            else:
                doc[key] = _fill(tomlkit.table(), record)
        return tomlkit.dumps(doc)

    def _document(self) -> tomlkit.TOMLDocument:
        if self.path.exists():
            text = self.path.read_text(encoding="utf-8")
            if text.strip():
                return tomlkit.parse(text)
        return tomlkit.document()


def _fill(table: Any, record: Mapping[str, Any]) -> Any:
    for name, value in record.items():
        if value is not None:
            table[name] = _plain(value)
    return table


def _plain(value: Any) -> Any:
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return value
