from __future__ import annotations

from collections.abc import Mapping

import yaml

from . import register_store
from .base import FileOptionStore, Record


@register_store
class YamlOptionStore(FileOptionStore):
    """YAML file store."""

    suffixes = (".yaml", ".yml")

    def _parse(self, text: str) -> dict[str, Record]:
        return yaml.safe_load(text) or {}

    def _dump(self, data: Mapping[str, Record]) -> str:
        return yaml.safe_dump(dict(data), sort_keys=True, allow_unicode=True)
