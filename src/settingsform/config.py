"""Rendering configuration.

Values come from, in increasing priority: built-in defaults, the user's
``settings.ini`` in the platform config directory, ``.settingsform.ini`` in
the working directory, an explicit file, and ``SETTINGSFORM_*`` environment
variables.  Only the ``[settingsform]`` section of each file is read.
"""

from __future__ import annotations

import configparser
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .paths import project_config_file, user_config_file

logger = logging.getLogger(__name__)

SECTION = "settingsform"
ENV_PREFIX = "SETTINGSFORM_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class FormConfig:
    # form element attributes
    action: str = "options.php"
    method: str = "post"
    # class applied to every section table, followed by ``settings-<id>``
    table_class: str = "form-table"
    submit_label: str = "Save Changes"
    # hidden input carrying the token from ``token_provider``
    token_field: str = "_token"
    # keep a small allow-list of tags in descriptions instead of escaping all
    description_html: bool = True

    def merged(self, values: Mapping[str, str]) -> FormConfig:
        """Return a copy updated from raw string *values*."""
        updates: dict[str, Any] = {}
        for f in fields(self):
            raw = values.get(f.name)
            if raw is None:
                continue
            if f.type in ("bool", bool):
                updates[f.name] = _parse_bool(f.name, raw)
            else:
                updates[f.name] = raw
        return replace(self, **updates) if updates else self


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"invalid boolean for {name}: {raw!r}")


def _read_section(path: Path) -> dict[str, str]:
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read(path, encoding="utf-8")
    except (OSError, configparser.Error) as exc:
        logger.warning("Failed to read config %s: %s", path, exc)
        return {}
    if not parser.has_section(SECTION):
        return {}
    return dict(parser.items(SECTION))


def _env_values(env: Mapping[str, str]) -> dict[str, str]:
    return {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in env.items()
        if key.startswith(ENV_PREFIX)
    }


def load_config(
    path: Path | str | None = None,
    *,
    env: Mapping[str, str] | None = None,
    search: bool = True,
) -> FormConfig:
    """Build a :class:`FormConfig` from config files and the environment."""
    config = FormConfig()
    files: list[Path] = []
    if search:
        files.extend([user_config_file(), project_config_file()])
    if path is not None:
        explicit = Path(path)
        if not explicit.is_file():
            logger.warning("Config file %s does not exist", explicit)
        files.append(explicit)
    for f in files:
        if f.is_file():
            try:
                config = config.merged(_read_section(f))
            except ValueError as exc:
                logger.warning("Ignoring config %s: %s", f, exc)
    try:
        config = config.merged(_env_values(os.environ if env is None else env))
    except ValueError as exc:
        logger.warning("Ignoring environment config: %s", exc)
    return config


__all__ = ["FormConfig", "load_config"]
