from __future__ import annotations

import json
from collections.abc import Mapping

from . import register_store
from .base import FileOptionStore, Record


@register_store
class JsonOptionStore(FileOptionStore):
    """JSON file store; the document maps storage keys to records."""

    suffixes = (".json",)

    def _parse(self, text: str) -> dict[str, Record]:
        return json.loads(text)

    def _dump(self, data: Mapping[str, Record]) -> str:
        return json.dumps(dict(data), indent=2, sort_keys=True) + "\n"
