"""Settings page declarations stored in YAML, JSON or TOML files.

A declaration file describes the same sections and fields a host would
otherwise declare in code:

.. code-block:: yaml

    storage_key: my_plugin
    page_id: my-plugin-settings
    title: My plugin
    sections:
      - id: personal_info
        label: Personal info
        field_options: {class: wide}
        fields:
          - id: first_name
            label: First name
            kind: single-input
            options: {type: text, default: ""}

The file is only parsed and shape-checked here; option validation happens
in the registration pass like for any other host.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .errors import DeclarationError
from .registration import RegistrationEngine

SECTION_KEYS = ("id", "label", "description", "field_options", "fields")
FIELD_KEYS = ("id", "label", "kind", "options")


def _parse(path: Path) -> Any:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(text)
    if suffix == ".json":
        return json.loads(text)
    if suffix == ".toml":
        return tomllib.loads(text)
    raise DeclarationError(f"unsupported declaration format: {path.name}")


def load_declaration(path: Path | str) -> dict[str, Any]:
    """Read and shape-check the declaration at *path*."""
    path = Path(path)
    try:
        data = _parse(path)
    except DeclarationError:
        raise
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise DeclarationError(f"cannot read declaration {path}: {exc}") from exc
    return validate_declaration(data, source=str(path))


def _require_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DeclarationError(f"{where} must be a mapping")
    return value


def validate_declaration(data: Any, *, source: str = "<declaration>") -> dict[str, Any]:
    data = dict(_require_mapping(data, source))
    for key in ("storage_key", "page_id"):
        if not isinstance(data.get(key), str) or not data[key]:
            raise DeclarationError(f"{source}: {key!r} must be a non-empty string")
    sections = data.get("sections")
    if sections is None:
        sections = []
    if not isinstance(sections, list):
        raise DeclarationError(f"{source}: 'sections' must be a list")
    for i, section in enumerate(sections):
        where = f"{source}: sections[{i}]"
        section = _require_mapping(section, where)
        unknown = sorted(k for k in section if k not in SECTION_KEYS)
        if unknown:
            raise DeclarationError(f"{where}: unknown key(s) {', '.join(unknown)}")
        if "id" not in section:
            raise DeclarationError(f"{where}: missing 'id'")
        fields = section.get("fields")
        if fields is None:
            fields = []
        if not isinstance(fields, list):
            raise DeclarationError(f"{where}: 'fields' must be a list")
        for j, field in enumerate(fields):
            fwhere = f"{where}.fields[{j}]"
            field = _require_mapping(field, fwhere)
            unknown = sorted(k for k in field if k not in FIELD_KEYS)
            if unknown:
                raise DeclarationError(f"{fwhere}: unknown key(s) {', '.join(unknown)}")
            for key in ("id", "kind"):
                if key not in field:
                    raise DeclarationError(f"{fwhere}: missing {key!r}")
    data["sections"] = sections
    return data


class DeclaredPage:
    """Settings page host backed by a declaration mapping."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self.data = validate_declaration(data)

    @classmethod
    def from_file(cls, path: Path | str) -> DeclaredPage:
        return cls(load_declaration(path))

    @property
    def title(self) -> str | None:
        return self.data.get("title")

    def get_storage_key(self) -> str:
        return self.data["storage_key"]

    def get_page_id(self) -> str:
        return self.data["page_id"]

    def declare_fields(self, engine: RegistrationEngine) -> None:
        for section in self.data["sections"]:
            options = {
                k: section[k] for k in ("description", "field_options") if k in section
            }
            with engine.section(section["id"], section.get("label", ""), options):
                for field in section.get("fields") or []:
                    engine.register_field(
                        field["id"],
                        field.get("label", ""),
                        field["kind"],
                        field.get("options"),
                    )


__all__ = ["DeclaredPage", "load_declaration", "validate_declaration"]
