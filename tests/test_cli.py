import json
from pathlib import Path

import pytest

from settingsform import cli

DECL = """\
storage_key: demo
page_id: demo-settings
title: Demo
sections:
  - id: general
    label: General
    fields:
      - id: site_name
        label: Site name
        kind: single-input
        options: {type: text, default: Anon}
      - id: newsletter
        label: Newsletter
        kind: checkbox
"""


@pytest.fixture()
def files(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    decl = tmp_path / "page.yaml"
    decl.write_text(DECL, encoding="utf-8")
    return str(decl), str(tmp_path / "opts.json")


def test_get_default_then_set(files, capsys):
    decl, store = files
    assert cli.main(["get", decl, "site_name", "--store", store]) == 0
    assert capsys.readouterr().out.strip() == "Anon"
    assert cli.main(["get", decl, "newsletter", "--store", store]) == 1

    assert cli.main(["set", decl, "site_name", "Ada", "--store", store]) == 0
    capsys.readouterr()
    assert cli.main(["get", decl, "site_name", "--store", store]) == 0
    assert capsys.readouterr().out.strip() == "Ada"


def test_set_unknown_field(files, capsys):
    decl, store = files
    assert cli.main(["set", decl, "nope", "x", "--store", store]) == 2
    assert "unknown field" in capsys.readouterr().err


def test_show(files, capsys):
    decl, store = files
    assert cli.main(["show", decl, "--store", store, "--json"]) == 0
    table = json.loads(capsys.readouterr().out)
    assert [f["id"] for f in table[0]["fields"]] == ["site_name", "newsletter"]
    assert cli.main(["show", decl, "--store", store]) == 0
    assert "site_name (single-input): Site name" in capsys.readouterr().out


def test_render(files, capsys):
    decl, store = files
    assert cli.main(["render", decl, "--store", store]) == 0
    out = capsys.readouterr().out
    assert "<form" in out and 'name="demo[site_name]"' in out
    assert cli.main(["render", decl, "--store", store, "--section", "general"]) == 0
    assert "<form" not in capsys.readouterr().out
    assert cli.main(["render", decl, "--store", store, "--section", "missing"]) == 2
    assert "missing" in capsys.readouterr().err


def test_submit(files, capsys):
    decl, store = files
    query = "option_page=demo&action=update&demo%5Bsite_name%5D=Ada&demo%5Bnewsletter%5D=yes"
    assert cli.main(["submit", decl, query, "--store", store]) == 0
    assert json.loads(capsys.readouterr().out) == {"site_name": "Ada", "newsletter": "yes"}
    assert json.loads(Path(store).read_text())["demo"] == {
        "site_name": "Ada",
        "newsletter": "yes",
    }


def test_bad_declaration(tmp_path, capsys):
    bad = tmp_path / "page.yaml"
    bad.write_text("storage_key: demo\n", encoding="utf-8")
    assert cli.main(["show", str(bad), "--store", str(tmp_path / "o.json")]) == 2
    assert "page_id" in capsys.readouterr().err


def test_no_command():
    assert cli.main([]) == 1


def test_unsupported_store_suffix(files, capsys):
    decl, _ = files
    assert cli.main(["show", decl, "--store", "opts.txt"]) == 2
    assert "No option store" in capsys.readouterr().err
