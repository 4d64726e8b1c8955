"""Field kinds and the options each one recognises.

Every kind carries an explicit table of required and optional option keys.
Declarations are checked against that table when a field is registered, so
a typo in an option name surfaces at start-up instead of silently rendering
a field without its placeholder.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable

from .errors import InvalidField

# Options every kind accepts.
COMMON_OPTIONS: tuple[str, ...] = ("description", "class", "label_for", "attributes")

MULTI_INPUT_TYPES = ("radio", "checkbox")

# Value stored when a lone checkbox is ticked and no ``value`` option is set.
CHECKED_SENTINEL = "yes"


class FieldKind(str, Enum):
    SINGLE_INPUT = "single-input"
    MULTI_INPUT = "multi-input"
    SELECT = "select"
    CHECKBOX = "checkbox"
    TEXTAREA = "textarea"
    RICH_TEXT = "rich-text"

    @classmethod
    def coerce(cls, value: FieldKind | str) -> FieldKind:
        """Return the kind named by *value*.

        Underscores and hyphens are interchangeable and case is ignored.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower().replace("_", "-")
            try:
                return cls(name)
            except ValueError:
                pass
        raise InvalidField(f"unknown field kind: {value!r}")


@dataclass(frozen=True)
class KindSpec:
    """Recognised options and defaults for one field kind."""

    kind: FieldKind
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    defaults: Mapping[str, Any] = dataclass_field(default_factory=dict)
    # whether a single control carries the field id, so the row label can
    # point at it with ``for``
    single_control: bool = True
    check: Callable[[str, Mapping[str, Any]], None] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "defaults", MappingProxyType(dict(self.defaults)))

    @property
    def recognised(self) -> frozenset[str]:
        return frozenset(self.required) | frozenset(self.optional) | frozenset(COMMON_OPTIONS)


def _require_mapping(field_id: str, options: Mapping[str, Any], key: str) -> None:
    value = options.get(key)
    if value is not None and not isinstance(value, Mapping):
        raise InvalidField(f"field {field_id!r}: option {key!r} must be a mapping")


def _require_choices(field_id: str, options: Mapping[str, Any]) -> None:
    choices = options.get("options")
    if not isinstance(choices, Mapping):
        raise InvalidField(
            f"field {field_id!r}: option 'options' must map values to labels"
        )


def _require_positive_int(field_id: str, options: Mapping[str, Any], key: str) -> None:
    value = options.get(key)
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidField(f"field {field_id!r}: option {key!r} must be a positive integer")


def _check_single_input(field_id: str, options: Mapping[str, Any]) -> None:
    kind_type = options.get("type")
    if not isinstance(kind_type, str) or not kind_type.strip():
        raise InvalidField(f"field {field_id!r}: option 'type' must be a non-empty string")


def _check_multi_input(field_id: str, options: Mapping[str, Any]) -> None:
    if options.get("type") not in MULTI_INPUT_TYPES:
        raise InvalidField(
            f"field {field_id!r}: option 'type' must be one of {', '.join(MULTI_INPUT_TYPES)}"
        )
    _require_choices(field_id, options)


def _check_select(field_id: str, options: Mapping[str, Any]) -> None:
    _require_choices(field_id, options)


def _check_text_area(field_id: str, options: Mapping[str, Any]) -> None:
    _require_positive_int(field_id, options, "rows")
    _require_positive_int(field_id, options, "cols")


def _check_rich_text(field_id: str, options: Mapping[str, Any]) -> None:
    _check_text_area(field_id, options)
    _require_mapping(field_id, options, "editor")


KIND_REGISTRY: dict[FieldKind, KindSpec] = {
    FieldKind.SINGLE_INPUT: KindSpec(
        FieldKind.SINGLE_INPUT,
        required=("type",),
        optional=("default", "placeholder"),
        defaults={"class": "regular-text"},
        check=_check_single_input,
    ),
    FieldKind.MULTI_INPUT: KindSpec(
        FieldKind.MULTI_INPUT,
        required=("type", "options"),
        optional=("default",),
        single_control=False,
        check=_check_multi_input,
    ),
    FieldKind.SELECT: KindSpec(
        FieldKind.SELECT,
        required=("options",),
        optional=("default",),
        check=_check_select,
    ),
    FieldKind.CHECKBOX: KindSpec(
        FieldKind.CHECKBOX,
        optional=("value",),
        defaults={"value": CHECKED_SENTINEL},
    ),
    FieldKind.TEXTAREA: KindSpec(
        FieldKind.TEXTAREA,
        optional=("default", "rows", "cols", "placeholder"),
        defaults={"rows": 5, "class": "large-text"},
        check=_check_text_area,
    ),
    FieldKind.RICH_TEXT: KindSpec(
        FieldKind.RICH_TEXT,
        optional=("default", "rows", "editor"),
        defaults={"rows": 10, "class": "large-text rich-text"},
        check=_check_rich_text,
    ),
}


def kind_spec(kind: FieldKind | str) -> KindSpec:
    return KIND_REGISTRY[FieldKind.coerce(kind)]


def resolve_options(
    field_id: str,
    kind: FieldKind | str,
    section_options: Mapping[str, Any] | None,
    field_options: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Merge kind defaults, section options and field options for a field.

    Field options win over section options, which win over kind defaults.
    Keys supplied by the field itself must be recognised by the kind; keys
    inherited from the section that the kind does not recognise are left
    out, since a section may hold fields of several kinds.
    """
    spec = kind_spec(kind)
    if field_options is not None and not isinstance(field_options, Mapping):
        raise InvalidField(f"field {field_id!r}: options must be a mapping")
    field_options = dict(field_options or {})
    unknown = sorted(str(k) for k in field_options if k not in spec.recognised)
    if unknown:
        raise InvalidField(
            f"field {field_id!r}: unrecognised option(s) for {spec.kind.value}: "
            + ", ".join(unknown)
        )
    inherited = {
        k: v for k, v in (section_options or {}).items() if k in spec.recognised
    }
    resolved = {**spec.defaults, **inherited, **field_options}
    missing = [k for k in spec.required if k not in resolved]
    if missing:
        raise InvalidField(
            f"field {field_id!r}: missing required option(s) for {spec.kind.value}: "
            + ", ".join(missing)
        )
    _require_mapping(field_id, resolved, "attributes")
    if spec.check is not None:
        spec.check(field_id, resolved)
    return resolved


__all__ = [
    "CHECKED_SENTINEL",
    "COMMON_OPTIONS",
    "FieldKind",
    "KIND_REGISTRY",
    "KindSpec",
    "MULTI_INPUT_TYPES",
    "kind_spec",
    "resolve_options",
]
