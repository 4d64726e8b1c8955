"""The registration pass that builds the section and field tables.

A :class:`RegistrationEngine` is owned by one settings page.  The host hands
it a declaration callback; :meth:`RegistrationEngine.register` loads the
stored record once, runs the callback and freezes the result.  Sections must
be opened and closed strictly in turn and fields may only be declared while
a section is open::

    def declare(engine):
        with engine.section("personal_info", "Personal info"):
            engine.text("first_name", "First name", {"default": ""})

    engine = RegistrationEngine("my_plugin", store, declare)
    engine.register()
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Callable

from .errors import InvalidField, OrderingViolation
from .kinds import FieldKind, resolve_options
from .model import FieldDefinition, RegistrationState, SectionDefinition
from .stores import OptionStore
from .values import ValueResolver

logger = logging.getLogger(__name__)

Declaration = Callable[["RegistrationEngine"], None]

SECTION_OPTIONS = ("description", "field_options", "callback")

# Characters that would break the ``storage_key[field_id]`` naming scheme.
_FORBIDDEN_ID_CHARS = frozenset("[]")


def _check_id(what: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidField(f"{what} id must be a non-empty string, got {value!r}")
    if _FORBIDDEN_ID_CHARS & set(value) or value != value.strip():
        raise InvalidField(f"{what} id {value!r} contains brackets or surrounding whitespace")
    return value


class RegistrationEngine:
    """Phase-aware registry of sections and fields for one settings page."""

    def __init__(
        self,
        storage_key: str,
        store: OptionStore,
        declare: Declaration | None = None,
    ) -> None:
        self.storage_key = _check_id("storage key", storage_key)
        self.store = store
        self.declare = declare
        self._reset()

    def _reset(self) -> None:
        self._state = RegistrationState.IDLE
        self._current_section_id: str | None = None
        self._sections: dict[str, SectionDefinition] = {}
        self._fields: dict[str, FieldDefinition] = {}
        self._section_fields: dict[str, list[str]] = {}
        self._record: Mapping[str, Any] = MappingProxyType({})
        self._values = ValueResolver(self._record, self._fields)

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------
    @property
    def state(self) -> RegistrationState:
        return self._state

    @property
    def current_section_id(self) -> str | None:
        return self._current_section_id

    @property
    def is_registered(self) -> bool:
        return self._state is RegistrationState.REGISTERED

    def _require_registering(self, operation: str) -> None:
        if self._state is not RegistrationState.REGISTERING:
            raise OrderingViolation(
                f"{operation} can only be called during register() "
                f"(state is {self._state.value})"
            )

    # ------------------------------------------------------------------
    # registration pass
    # ------------------------------------------------------------------
    def register(self) -> None:
        """Load the stored record and run the declaration callback once.

        Calling this again after a successful pass does nothing.  If the
        declaration fails the tables are discarded and the engine returns to
        the idle state before the error propagates.
        """
        if self._state is RegistrationState.REGISTERED:
            logger.debug("%s already registered; skipping", self.storage_key)
            return
        if self._state is RegistrationState.REGISTERING:
            raise OrderingViolation(
                f"register() called re-entrantly for {self.storage_key!r}"
            )

        self._state = RegistrationState.REGISTERING
        logger.debug("registering fields for %s", self.storage_key)
        try:
            record = self.store.load(self.storage_key)
            self._record = MappingProxyType(dict(record or {}))
            self._values = ValueResolver(self._record, self._fields)
            self.store.ensure_registered(self.storage_key)
            if self.declare is not None:
                self.declare(self)
            if self._current_section_id is not None:
                raise OrderingViolation(
                    f"section {self._current_section_id!r} was never ended"
                )
        except Exception:
            self._reset()
            raise
        self._state = RegistrationState.REGISTERED
        logger.debug(
            "registered %d section(s) and %d field(s) for %s",
            len(self._sections),
            len(self._fields),
            self.storage_key,
        )

    def start_section(
        self,
        section_id: str,
        label: str,
        options: Mapping[str, Any] | None = None,
    ) -> SectionDefinition:
        """Open a new section; fields registered next belong to it."""
        self._require_registering("start_section")
        if self._current_section_id is not None:
            raise OrderingViolation(
                f"end section {self._current_section_id!r} before starting {section_id!r}"
            )
        _check_id("section", section_id)
        if section_id in self._sections:
            raise InvalidField(f"section {section_id!r} is already registered")
        options = dict(options or {})
        unknown = sorted(str(k) for k in options if k not in SECTION_OPTIONS)
        if unknown:
            raise InvalidField(
                f"section {section_id!r}: unrecognised option(s): {', '.join(unknown)}"
            )
        field_options = options.get("field_options") or {}
        if not isinstance(field_options, Mapping):
            raise InvalidField(f"section {section_id!r}: field_options must be a mapping")
        callback = options.get("callback")
        if callback is not None and not callable(callback):
            raise InvalidField(f"section {section_id!r}: callback must be callable")

        section = SectionDefinition(
            id=section_id,
            label="" if label is None else str(label),
            description=options.get("description"),
            field_options=copy.deepcopy(dict(field_options)),
            callback=callback,
        )
        self._sections[section_id] = section
        self._section_fields[section_id] = []
        self._current_section_id = section_id
        return section

    def end_section(self) -> None:
        self._require_registering("end_section")
        if self._current_section_id is None:
            raise OrderingViolation("end_section called with no open section")
        self._current_section_id = None

    @contextmanager
    def section(
        self,
        section_id: str,
        label: str,
        options: Mapping[str, Any] | None = None,
    ) -> Iterator[SectionDefinition]:
        """Open a section for the duration of a ``with`` block."""
        section = self.start_section(section_id, label, options)
        yield section
        self.end_section()

    def register_field(
        self,
        field_id: str,
        label: str,
        kind: FieldKind | str,
        options: Mapping[str, Any] | None = None,
    ) -> FieldDefinition:
        """Add a field to the open section and return its definition."""
        self._require_registering("register_field")
        if self._current_section_id is None:
            raise OrderingViolation(f"cannot add field {field_id!r} outside of a section")
        _check_id("field", field_id)
        if field_id in self._fields:
            existing = self._fields[field_id].section_id
            raise InvalidField(
                f"field {field_id!r} is already registered in section {existing!r}"
            )
        kind = FieldKind.coerce(kind)
        section = self._sections[self._current_section_id]
        resolved = resolve_options(
            field_id,
            kind,
            section.field_options,
            copy.deepcopy(dict(options)) if isinstance(options, Mapping) else options,
        )
        definition = FieldDefinition(
            id=field_id,
            label="" if label is None else str(label),
            kind=kind,
            section_id=section.id,
            resolved_options=resolved,
            order=len(self._fields),
        )
        self._fields[field_id] = definition
        self._section_fields[section.id].append(field_id)
        return definition

    # ------------------------------------------------------------------
    # per-kind declarators
    # ------------------------------------------------------------------
    def _section_option(self, key: str) -> Any:
        if self._current_section_id is None:
            return None
        return self._sections[self._current_section_id].field_options.get(key)

    def text(self, field_id: str, label: str, options: Mapping[str, Any] | None = None) -> FieldDefinition:
        """Single-line input; ``type`` falls back to ``text``."""
        opts = dict(options or {})
        if "type" not in opts and self._section_option("type") is None:
            opts["type"] = "text"
        return self.register_field(field_id, label, FieldKind.SINGLE_INPUT, opts)

    def radio(
        self,
        field_id: str,
        label: str,
        choices: Mapping[Any, str],
        options: Mapping[str, Any] | None = None,
    ) -> FieldDefinition:
        opts = {**(options or {}), "type": "radio", "options": choices}
        return self.register_field(field_id, label, FieldKind.MULTI_INPUT, opts)

    def checkboxes(
        self,
        field_id: str,
        label: str,
        choices: Mapping[Any, str],
        options: Mapping[str, Any] | None = None,
    ) -> FieldDefinition:
        opts = {**(options or {}), "type": "checkbox", "options": choices}
        return self.register_field(field_id, label, FieldKind.MULTI_INPUT, opts)

    def select(
        self,
        field_id: str,
        label: str,
        choices: Mapping[Any, str],
        options: Mapping[str, Any] | None = None,
    ) -> FieldDefinition:
        opts = {**(options or {}), "options": choices}
        return self.register_field(field_id, label, FieldKind.SELECT, opts)

    def checkbox(self, field_id: str, label: str, options: Mapping[str, Any] | None = None) -> FieldDefinition:
        return self.register_field(field_id, label, FieldKind.CHECKBOX, options)

    def textarea(self, field_id: str, label: str, options: Mapping[str, Any] | None = None) -> FieldDefinition:
        return self.register_field(field_id, label, FieldKind.TEXTAREA, options)

    def rich_text(self, field_id: str, label: str, options: Mapping[str, Any] | None = None) -> FieldDefinition:
        return self.register_field(field_id, label, FieldKind.RICH_TEXT, options)

    # ------------------------------------------------------------------
    # inspection
    # ------------------------------------------------------------------
    @property
    def sections(self) -> Mapping[str, SectionDefinition]:
        return MappingProxyType(self._sections)

    @property
    def fields(self) -> Mapping[str, FieldDefinition]:
        return MappingProxyType(self._fields)

    @property
    def record(self) -> Mapping[str, Any]:
        return self._record

    @property
    def values(self) -> ValueResolver:
        return self._values

    def get_section(self, section_id: str) -> SectionDefinition | None:
        return self._sections.get(section_id)

    def get_field(self, field_id: str) -> FieldDefinition | None:
        return self._fields.get(field_id)

    def fields_in(self, section_id: str) -> list[FieldDefinition]:
        """Fields of *section_id* in registration order."""
        return [self._fields[f] for f in self._section_fields.get(section_id, [])]

    def name_for(self, field_id: str) -> str:
        """HTML ``name`` under which *field_id* is submitted."""
        return f"{self.storage_key}[{field_id}]"

    def definition_table(self) -> list[dict[str, Any]]:
        """Plain-data dump of the sections and their fields."""
        return [
            {**section.to_dict(), "fields": [f.to_dict() for f in self.fields_in(sid)]}
            for sid, section in self._sections.items()
        ]


__all__ = ["Declaration", "RegistrationEngine", "SECTION_OPTIONS"]
