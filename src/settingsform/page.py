"""Host-facing settings page.

A host supplies three things: the storage key of its composite record, a
page id, and a ``declare_fields(engine)`` method.  :class:`SettingsPage`
holds the registration engine and the renderer on the host's behalf::

    class MyPage:
        def get_storage_key(self):
            return "my_plugin"

        def get_page_id(self):
            return "my-plugin-settings"

        def declare_fields(self, engine):
            with engine.section("general", "General"):
                engine.text("site_name", "Site name")

    page = SettingsPage(MyPage(), store)
    page.register()
    html = page.render_form()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from .config import FormConfig
from .escaping import MarkupEscaper
from .registration import RegistrationEngine
from .render import RenderEngine, RenderPass, TokenProvider
from .stores import OptionStore
from .submission import FormData, TokenValidator, parse_submission

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
PAGE_TEMPLATE = "settings_page.html.jinja"


@lru_cache(maxsize=1)
def template_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class SettingsPageHost(Protocol):
    def get_storage_key(self) -> str:
        ...

    def get_page_id(self) -> str:
        ...

    def declare_fields(self, engine: RegistrationEngine) -> None:
        ...


class SettingsPage:
    """Registration, value access and rendering for one host page."""

    def __init__(
        self,
        host: SettingsPageHost,
        store: OptionStore,
        *,
        config: FormConfig | None = None,
        escaper: MarkupEscaper | None = None,
        token_provider: TokenProvider | None = None,
        token_validator: TokenValidator | None = None,
        title: str | None = None,
    ) -> None:
        self.host = host
        self.store = store
        self.config = config or FormConfig()
        self.title = title
        self.token_validator = token_validator
        self.engine = RegistrationEngine(host.get_storage_key(), store, host.declare_fields)
        self.renderer = RenderEngine(
            self.engine,
            escaper=escaper,
            config=self.config,
            token_provider=token_provider,
        )

    @property
    def storage_key(self) -> str:
        return self.engine.storage_key

    @property
    def page_id(self) -> str:
        return self.host.get_page_id()

    # ------------------------------------------------------------------
    def register(self) -> None:
        """Run the host's declaration.  Safe to call from several hooks."""
        self.engine.register()

    def get_value(self, field_id: str) -> Any:
        return self.engine.values.get(field_id)

    def get_all_values(self) -> Mapping[str, Any]:
        return self.engine.values.get_all()

    def get_form_binding_attributes(self, extra: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Attributes for the enclosing ``<form>`` element.

        *extra* attributes are kept, but ``method`` and ``action`` always come
        from the configuration so the submission reaches the store.
        """
        return {**(extra or {}), "method": self.config.method, "action": self.config.action}

    def get_form_attribute_string(self, extra: Mapping[str, Any] | None = None) -> str:
        return self.renderer.formatter.format(self.get_form_binding_attributes(extra))

    def render_section(self, section_id: str) -> str:
        return self.renderer.render_section(section_id)

    def render_form(
        self,
        section_ids: Iterable[str] | None = None,
        *,
        extra_attributes: Mapping[str, Any] | None = None,
    ) -> str:
        """Render a complete ``<form>`` holding the given (default: all) sections.

        Each call uses a render pass of its own, so the binding is emitted once
        per form and the pass used by :meth:`render_section` is left alone.
        """
        render_pass = RenderPass(self.renderer)
        sections = [Markup(html) for html in render_pass.render_sections(section_ids)]
        template = template_environment().get_template(PAGE_TEMPLATE)
        html = template.render(
            page_id=self.page_id,
            title=self.title,
            form_attributes=Markup(self.get_form_attribute_string(extra_attributes)),
            sections=sections,
            submit_label=self.config.submit_label,
        )
        if not html.endswith("\n"):
            html += "\n"
        return html

    def handle_submission(self, form: FormData) -> dict[str, Any]:
        """Turn posted *form* data into a record and save it."""
        self.register()
        record = parse_submission(
            self.engine,
            form,
            token_field=self.config.token_field,
            token_validator=self.token_validator,
        )
        self.store.save(self.storage_key, record)
        logger.info("saved %d value(s) for %s", len(record), self.storage_key)
        return record


__all__ = ["SettingsPage", "SettingsPageHost", "template_environment"]
