"""HTML rendering of registered sections and fields.

:class:`RenderEngine` holds the stateless per-kind field renderers.  Section
rendering happens through a :class:`RenderPass`, which tracks whether the
form binding (the hidden inputs the persistence layer needs to accept the
submission) has been emitted yet.  The binding goes out exactly once per
pass, in front of whichever section is rendered first.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .attributes import AttributeFormatter, merge_attributes
from .config import FormConfig
from .errors import OrderingViolation, UnknownSection
from .escaping import AllowListEscaper, MarkupEscaper, MarkupSafeEscaper
from .kinds import FieldKind
from .model import FieldDefinition, SectionDefinition
from .registration import RegistrationEngine

logger = logging.getLogger(__name__)

# Attributes computed from the field identity and its value.  Host options
# can never set these.
COMPUTED_ATTRIBUTES = frozenset({"id", "name", "value", "checked", "selected"})

TokenProvider = Callable[[str], str]


def _same(a: Any, b: Any) -> bool:
    """Compare stored and option values as text, the way HTML submits them."""
    if a is None or b is None:
        return False
    return _as_text(a) == _as_text(b)


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _data_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, sort_keys=True)
    return value


class RenderEngine:
    """Render fields and sections of a registered :class:`RegistrationEngine`."""

    def __init__(
        self,
        engine: RegistrationEngine,
        *,
        escaper: MarkupEscaper | None = None,
        description_escaper: MarkupEscaper | None = None,
        config: FormConfig | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self.engine = engine
        self.config = config or FormConfig()
        self.escaper = escaper or MarkupSafeEscaper()
        if description_escaper is None:
            description_escaper = (
                AllowListEscaper() if self.config.description_html else self.escaper
            )
        self.description_escaper = description_escaper
        self.formatter = AttributeFormatter(self.escaper)
        self.token_provider = token_provider
        self._renderers: dict[FieldKind, Callable[[FieldDefinition], str]] = {
            FieldKind.SINGLE_INPUT: self._render_single_input,
            FieldKind.MULTI_INPUT: self._render_multi_input,
            FieldKind.SELECT: self._render_select,
            FieldKind.CHECKBOX: self._render_checkbox,
            FieldKind.TEXTAREA: self._render_textarea,
            FieldKind.RICH_TEXT: self._render_rich_text,
        }
        self._pass: RenderPass | None = None

    # ------------------------------------------------------------------
    # passes
    # ------------------------------------------------------------------
    def begin_pass(self) -> RenderPass:
        """Start a new render cycle; the binding will be emitted again."""
        self._pass = RenderPass(self)
        return self._pass

    def reset(self) -> None:
        self._pass = None

    @property
    def current_pass(self) -> RenderPass:
        if self._pass is None:
            self._pass = RenderPass(self)
        return self._pass

    def render_section(self, section_id: str) -> str:
        return self.current_pass.render_section(section_id)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _require_registered(self) -> None:
        if not self.engine.is_registered:
            raise OrderingViolation(
                f"cannot render {self.engine.storage_key!r} before register() completes"
            )

    def _attrs(self, *layers: Mapping[str, Any] | None) -> str:
        return self.formatter.format(merge_attributes(*layers))

    def _host_attributes(self, field: FieldDefinition) -> dict[str, Any]:
        passthrough = field.option("attributes") or {}
        return {k: v for k, v in passthrough.items() if k not in COMPUTED_ATTRIBUTES}

    def _description(self, field: FieldDefinition | SectionDefinition, tag: str = "p", css: str = "description") -> str:
        text = field.option("description") if isinstance(field, FieldDefinition) else field.description
        return self.text(text, tag, {"class": css})

    def text(self, text: Any, tag: str | None = None, attrs: Mapping[str, Any] | None = None) -> str:
        """Escape descriptive *text*, optionally wrapped in *tag*."""
        if not isinstance(text, str) or not text:
            return ""
        body = self.description_escaper.escape_text(text)
        if tag is None:
            return body
        attr_string = self.formatter.format(attrs)
        open_tag = f"<{tag} {attr_string}>" if attr_string else f"<{tag}>"
        return f"{open_tag}{body}</{tag}>"

    def value_of(self, field: FieldDefinition) -> Any:
        return self.engine.values.get(field.id)

    def render_binding(self) -> str:
        """Hidden inputs identifying the record a submission belongs to."""
        hidden = [
            {"type": "hidden", "name": "option_page", "value": self.engine.storage_key},
            {"type": "hidden", "name": "action", "value": "update"},
        ]
        if self.token_provider is not None:
            hidden.append(
                {
                    "type": "hidden",
                    "name": self.config.token_field,
                    "value": self.token_provider(self.engine.storage_key),
                }
            )
        return "\n".join(f"<input {self.formatter.format(h)}>" for h in hidden)

    # ------------------------------------------------------------------
    # fields
    # ------------------------------------------------------------------
    def render_field(self, field: FieldDefinition) -> str:
        """Markup for the control(s) of a single field."""
        self._require_registered()
        return self._renderers[field.kind](field)

    def _render_single_input(self, field: FieldDefinition) -> str:
        value = self.value_of(field)
        attrs = self._attrs(
            self._host_attributes(field),
            {
                "type": field.option("type"),
                "class": field.option("class"),
                "placeholder": field.option("placeholder"),
            },
            {
                "id": field.id,
                "name": self.engine.name_for(field.id),
                "value": "" if value is None else value,
            },
        )
        return f"<input {attrs}>" + self._description(field)

    def _render_checkbox(self, field: FieldDefinition) -> str:
        checked_value = field.option("value")
        attrs = self._attrs(
            self._host_attributes(field),
            {"type": "checkbox", "class": field.option("class")},
            {
                "id": field.id,
                "name": self.engine.name_for(field.id),
                "value": checked_value,
                "checked": _same(self.value_of(field), checked_value),
            },
        )
        description = self.text(field.option("description"))
        label = f" {description}" if description else ""
        return f"<label><input {attrs}>{label}</label>"

    def _render_multi_input(self, field: FieldDefinition) -> str:
        input_type = field.option("type")
        multiple = field.multiple
        current = _as_list(self.value_of(field)) if multiple else self.value_of(field)
        name = self.engine.name_for(field.id) + ("[]" if multiple else "")
        host = self._host_attributes(field)
        lines = ["<fieldset>"]
        description = self.text(field.option("description"))
        if description:
            lines.append(f"{description}<br>")
        for index, (value, label) in enumerate(field.option("options").items()):
            if multiple:
                checked = any(_same(value, c) for c in current)
            else:
                checked = _same(value, current)
            attrs = self._attrs(
                host,
                {"type": input_type, "class": field.option("class")},
                {
                    "id": f"{field.id}-{index}",
                    "name": name,
                    "value": value,
                    "checked": checked,
                },
            )
            lines.append(
                f"<label><input {attrs}> {self.escaper.escape_text(label)}</label><br>"
            )
        lines.append("</fieldset>")
        return "\n".join(lines)

    def _render_select(self, field: FieldDefinition) -> str:
        current = self.value_of(field)
        attrs = self._attrs(
            self._host_attributes(field),
            {"class": field.option("class")},
            {"id": field.id, "name": self.engine.name_for(field.id)},
        )
        lines = [f"<select {attrs}>"]
        for value, label in field.option("options").items():
            option_attrs = self.formatter.format(
                {"value": value, "selected": _same(value, current)}
            )
            lines.append(f"<option {option_attrs}>{self.escaper.escape_text(label)}</option>")
        lines.append("</select>")
        return "\n".join(lines) + self._description(field)

    def _render_textarea(self, field: FieldDefinition, extra: Mapping[str, Any] | None = None) -> str:
        value = self.value_of(field)
        attrs = self._attrs(
            self._host_attributes(field),
            {
                "rows": field.option("rows"),
                "cols": field.option("cols"),
                "class": field.option("class"),
                "placeholder": field.option("placeholder"),
            },
            extra,
            {"id": field.id, "name": self.engine.name_for(field.id)},
        )
        body = self.escaper.escape_text("" if value is None else value)
        return f"<textarea {attrs}>{body}</textarea>" + self._description(field)

    def _render_rich_text(self, field: FieldDefinition) -> str:
        editor = field.option("editor") or {}
        data = {f"data-editor-{key}": _data_value(val) for key, val in editor.items()}
        return self._render_textarea(field, {"data-editor": "rich-text", **data})

    # ------------------------------------------------------------------
    # rows
    # ------------------------------------------------------------------
    def render_row(self, field: FieldDefinition) -> str:
        label_for = field.option("label_for")
        if label_for is None and field.single_control:
            label_for = field.id
        label = self.escaper.escape_text(field.label)
        if label_for:
            label = f"<label {self.formatter.format({'for': label_for})}>{label}</label>"
        return (
            f'<tr><th scope="row">{label}</th>'
            f"<td>{self.render_field(field)}</td></tr>"
        )


class RenderPass:
    """One page render cycle.

    ``has_emitted_binding`` flips to ``True`` the first time a section is
    rendered through this pass.
    """

    def __init__(self, renderer: RenderEngine) -> None:
        self.renderer = renderer
        self.has_emitted_binding = False

    @property
    def engine(self) -> RegistrationEngine:
        return self.renderer.engine

    def render_section(self, section_id: str) -> str:
        self.renderer._require_registered()
        section = self.engine.get_section(section_id)
        if section is None:
            registered = ", ".join(self.engine.sections) or "none"
            raise UnknownSection(
                f"{section_id!r} is not a registered section of "
                f"{self.engine.storage_key!r} (registered: {registered})"
            )
        parts: list[str] = []
        if not self.has_emitted_binding:
            parts.append(self.renderer.render_binding())
            self.has_emitted_binding = True
            logger.debug("emitted form binding for %s", self.engine.storage_key)

        escaper = self.renderer.escaper
        if section.label:
            parts.append(f"<h2>{escaper.escape_text(section.label)}</h2>")
        description = self.renderer._description(section, css="section-description")
        if description:
            parts.append(description)
        if section.callback is not None:
            extra = section.callback(section)
            if extra:
                parts.append(str(extra))

        table_attrs = self.renderer.formatter.format(
            {
                "class": [self.renderer.config.table_class, f"settings-{section.id}"],
                "role": "presentation",
            }
        )
        parts.append(f"<table {table_attrs}>")
        parts.extend(self.renderer.render_row(f) for f in self.engine.fields_in(section.id))
        parts.append("</table>")
        return "\n".join(parts)

    def render_sections(self, section_ids: Iterable[str] | None = None) -> list[str]:
        """Render *section_ids* (all, in declaration order, by default)."""
        ids = list(self.engine.sections) if section_ids is None else list(section_ids)
        return [self.render_section(sid) for sid in ids]


__all__ = ["COMPUTED_ATTRIBUTES", "RenderEngine", "RenderPass", "TokenProvider"]
