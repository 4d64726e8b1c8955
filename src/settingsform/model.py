"""Immutable descriptors produced by the registration pass."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable

from .kinds import FieldKind, kind_spec

# ``callback(section)`` may return markup to emit after the section heading.
SectionCallback = Callable[["SectionDefinition"], "str | None"]


class RegistrationState(str, Enum):
    IDLE = "idle"
    REGISTERING = "registering"
    REGISTERED = "registered"


def _freeze(data: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class SectionDefinition:
    """A named group of fields rendered under one heading."""

    id: str
    label: str
    description: str | None = None
    field_options: Mapping[str, Any] = dataclass_field(default_factory=dict)
    callback: SectionCallback | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "field_options", _freeze(self.field_options))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "label": self.label}
        if self.description is not None:
            data["description"] = self.description
        if self.field_options:
            data["field_options"] = dict(self.field_options)
        if self.callback is not None:
            data["callback"] = getattr(self.callback, "__qualname__", repr(self.callback))
        return data


@dataclass(frozen=True)
class FieldDefinition:
    """A single registered field and its resolved options."""

    id: str
    label: str
    kind: FieldKind
    section_id: str
    resolved_options: Mapping[str, Any] = dataclass_field(default_factory=dict)
    order: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", FieldKind.coerce(self.kind))
        object.__setattr__(self, "resolved_options", _freeze(self.resolved_options))

    def option(self, key: str, default: Any = None) -> Any:
        return self.resolved_options.get(key, default)

    @property
    def has_default(self) -> bool:
        return "default" in self.resolved_options

    @property
    def multiple(self) -> bool:
        """Whether the stored value is a list of values."""
        return self.kind is FieldKind.MULTI_INPUT and self.option("type") == "checkbox"

    @property
    def single_control(self) -> bool:
        return kind_spec(self.kind).single_control

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "kind": self.kind.value,
            "section": self.section_id,
            "options": dict(self.resolved_options),
        }


__all__ = [
    "FieldDefinition",
    "RegistrationState",
    "SectionCallback",
    "SectionDefinition",
]
