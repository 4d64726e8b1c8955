from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .model import FieldDefinition


class ValueResolver:
    """Look up field values in the record loaded at registration time.

    The resolver never writes and never reloads; a value submitted after the
    snapshot was taken is only visible to the next registration pass.
    """

    def __init__(
        self,
        record: Mapping[str, Any],
        fields: Mapping[str, FieldDefinition] | None = None,
    ) -> None:
        self._record = record if isinstance(record, MappingProxyType) else MappingProxyType(dict(record))
        self._fields = fields if fields is not None else {}

    def get(self, field_id: str) -> Any:
        """Return the stored value, else the field's ``default``, else ``None``."""
        if field_id in self._record:
            return self._record[field_id]
        field = self._fields.get(field_id)
        if field is not None and field.has_default:
            return field.option("default")
        return None

    def get_all(self) -> Mapping[str, Any]:
        return self._record

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._record


__all__ = ["ValueResolver"]
