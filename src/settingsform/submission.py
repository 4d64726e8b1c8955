"""Translate posted form data back into a composite record.

Rendered controls are named ``<storage_key>[<field_id>]`` (with a trailing
``[]`` for checkbox groups).  Parsing a submission reverses that mapping for
the registered fields.  As with a browser, an unticked checkbox submits
nothing, so its field is absent from the parsed record.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Union

from .errors import OrderingViolation, SubmissionError
from .kinds import FieldKind
from .registration import RegistrationEngine

logger = logging.getLogger(__name__)

FormData = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]
TokenValidator = Callable[[str, "str | None"], bool]


def _collect(form: FormData) -> dict[str, list[Any]]:
    """Normalise *form* into ``name -> [values]``."""
    pairs = form.items() if isinstance(form, Mapping) else form
    out: dict[str, list[Any]] = {}
    for name, value in pairs:
        bucket = out.setdefault(str(name), [])
        if isinstance(value, (list, tuple)):
            bucket.extend(value)
        else:
            bucket.append(value)
    return out


def parse_submission(
    engine: RegistrationEngine,
    form: FormData,
    *,
    token_field: str = "_token",
    token_validator: TokenValidator | None = None,
) -> dict[str, Any]:
    """Return the record described by *form* for the fields of *engine*."""
    if not engine.is_registered:
        raise OrderingViolation("register() must run before a submission is parsed")
    data = _collect(form)
    page = (data.get("option_page") or [None])[-1]
    if page != engine.storage_key:
        raise SubmissionError(
            f"submission for {page!r} cannot update {engine.storage_key!r}"
        )
    if token_validator is not None:
        token = (data.get(token_field) or [None])[-1]
        if not token_validator(engine.storage_key, token):
            raise SubmissionError(f"invalid form token for {engine.storage_key!r}")

    record: dict[str, Any] = {}
    consumed = {"option_page", "action", token_field}
    for field in engine.fields.values():
        name = engine.name_for(field.id)
        if field.multiple:
            name += "[]"
            if name in data:
                record[field.id] = [str(v) for v in data[name]]
        elif name in data:
            value = data[name][-1]
            if field.kind is FieldKind.CHECKBOX:
                value = field.option("value")
            record[field.id] = value
        consumed.add(name)

    ignored = sorted(k for k in data if k not in consumed)
    if ignored:
        logger.debug("ignoring unregistered form keys: %s", ", ".join(ignored))
    return record


__all__ = ["FormData", "TokenValidator", "parse_submission"]
