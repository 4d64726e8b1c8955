from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any


class InMemoryOptionStore:
    """Option store keeping records in a dictionary.

    Useful for tests and for hosts that manage persistence themselves and
    only need the form layer.  Records are copied on the way in and out so
    that callers cannot mutate the stored data through a loaded snapshot.
    """

    def __init__(self, records: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self.records: dict[str, dict[str, Any]] = {
            key: copy.deepcopy(dict(rec)) for key, rec in (records or {}).items()
        }
        self.registered: set[str] = set()
        self.loads = 0

    def load(self, storage_key: str) -> dict[str, Any] | None:
        self.loads += 1
        record = self.records.get(storage_key)
        return None if record is None else copy.deepcopy(record)

    def ensure_registered(self, storage_key: str) -> None:
        self.registered.add(storage_key)
        self.records.setdefault(storage_key, {})

    def save(self, storage_key: str, record: Mapping[str, Any]) -> None:
        self.records[storage_key] = copy.deepcopy(dict(record))
