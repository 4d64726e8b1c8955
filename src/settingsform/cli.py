from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from urllib.parse import parse_qsl

from .config import load_config
from .declarations import DeclaredPage
from .errors import SettingsFormError
from .page import SettingsPage
from .paths import default_store_path
from .stores import get_store_for_path


def _page(args: argparse.Namespace) -> SettingsPage:
    host = DeclaredPage.from_file(args.declaration)
    store_path = args.store or default_store_path()
    store = get_store_for_path(store_path)
    config = load_config(args.config)
    page = SettingsPage(host, store, config=config, title=host.title)
    page.register()
    return page


def _print_value(value) -> None:
    if isinstance(value, str):
        print(value)
    else:
        print(json.dumps(value))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def show_cmd(args: argparse.Namespace) -> int:
    page = _page(args)
    table = page.engine.definition_table()
    if args.as_json:
        print(json.dumps(table, indent=2, sort_keys=True, default=str))
        return 0
    for section in table:
        print(f"[{section['id']}] {section['label']}")
        for field in section["fields"]:
            print(f"  {field['id']} ({field['kind']}): {field['label']}")
    return 0


def render_cmd(args: argparse.Namespace) -> int:
    page = _page(args)
    if args.section:
        render_pass = page.renderer.begin_pass()
        print("\n".join(render_pass.render_sections(args.section)))
    else:
        sys.stdout.write(page.render_form())
    return 0


def get_cmd(args: argparse.Namespace) -> int:
    page = _page(args)
    if args.field is None:
        print(json.dumps(dict(page.get_all_values()), indent=2, sort_keys=True))
        return 0
    value = page.get_value(args.field)
    if value is None:
        return 1
    _print_value(value)
    return 0


def set_cmd(args: argparse.Namespace) -> int:
    page = _page(args)
    if page.engine.get_field(args.field) is None:
        print(f"unknown field: {args.field}", file=sys.stderr)
        return 2
    record = dict(page.get_all_values())
    try:
        record[args.field] = json.loads(args.value) if args.as_json else args.value
    except json.JSONDecodeError as exc:
        print(f"invalid JSON value: {exc}", file=sys.stderr)
        return 2
    page.store.save(page.storage_key, record)
    return 0


def submit_cmd(args: argparse.Namespace) -> int:
    page = _page(args)
    form = parse_qsl(args.query, keep_blank_values=True)
    record = page.handle_submission(form)
    print(json.dumps(record, indent=2, sort_keys=True))
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="settingsform")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="cmd")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("declaration", type=Path, help="YAML, JSON or TOML declaration")
    common.add_argument("--store", type=Path, help="Record store file (.json, .ini, .yaml, .toml)")
    common.add_argument("--config", type=Path, help="Extra settingsform INI config")

    p_show = subparsers.add_parser("show", parents=[common], help="List declared sections and fields.")
    p_show.add_argument("--json", dest="as_json", action="store_true")
    p_show.set_defaults(func=show_cmd)

    p_render = subparsers.add_parser("render", parents=[common], help="Render the settings form as HTML.")
    p_render.add_argument(
        "--section", action="append", help="Render only this section (repeatable)"
    )
    p_render.set_defaults(func=render_cmd)

    p_get = subparsers.add_parser("get", parents=[common], help="Print the value for FIELD.")
    p_get.add_argument("field", nargs="?")
    p_get.set_defaults(func=get_cmd)

    p_set = subparsers.add_parser("set", parents=[common], help="Store VALUE for FIELD.")
    p_set.add_argument("field")
    p_set.add_argument("value")
    p_set.add_argument("--json", dest="as_json", action="store_true", help="Parse VALUE as JSON")
    p_set.set_defaults(func=set_cmd)

    p_submit = subparsers.add_parser(
        "submit", parents=[common], help="Apply a URL-encoded form submission."
    )
    p_submit.add_argument("query")
    p_submit.set_defaults(func=submit_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    if args.verbose:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
        logger = logging.getLogger("settingsform")
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    try:
        return int(func(args))
    except SettingsFormError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except SystemExit as exc:  # pragma: no cover - argparse may raise
        return int(exc.code)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
