import tomllib
from pathlib import Path

import pytest

from settingsform import (
    StoreLoadError,
    StoreWriteError,
    UnsupportedStore,
    get_store_for_path,
)
from settingsform.stores import (
    IniOptionStore,
    InMemoryOptionStore,
    JsonOptionStore,
    TomlOptionStore,
    YamlOptionStore,
    supported_suffixes,
)

RECORD = {
    "first_name": "Ada",
    "topics": ["a", "c"],
    "newsletter": "yes",
    "bio": "  indented\nline two\n",
}


@pytest.mark.parametrize("name", ["opts.json", "opts.yaml", "opts.yml", "opts.toml", "opts.ini"])
def test_file_store_roundtrip(tmp_path: Path, name: str):
    store = get_store_for_path(tmp_path / name)
    assert store.load("demo") is None
    store.save("demo", RECORD)
    assert get_store_for_path(tmp_path / name).load("demo") == RECORD


def test_factory_picks_store_by_suffix(tmp_path: Path):
    assert isinstance(get_store_for_path(tmp_path / "a.JSON"), JsonOptionStore)
    assert isinstance(get_store_for_path(tmp_path / "a.yml"), YamlOptionStore)
    assert isinstance(get_store_for_path(tmp_path / "a.toml"), TomlOptionStore)
    assert isinstance(get_store_for_path(tmp_path / "a.ini"), IniOptionStore)
    assert supported_suffixes() == [".ini", ".json", ".toml", ".yaml", ".yml"]
    with pytest.raises(UnsupportedStore):
        get_store_for_path(tmp_path / "a.txt")


def test_ensure_registered_is_idempotent(tmp_path: Path):
    path = tmp_path / "opts.json"
    store = JsonOptionStore(path)
    store.ensure_registered("demo")
    assert store.load("demo") == {}
    store.save("demo", {"x": "1"})
    store.ensure_registered("demo")
    assert store.load("demo") == {"x": "1"}


def test_records_are_kept_apart(tmp_path: Path):
    store = YamlOptionStore(tmp_path / "opts.yaml")
    store.save("one", {"x": "1"})
    store.save("two", {"x": "2"})
    assert store.load("one") == {"x": "1"}
    assert store.load("two") == {"x": "2"}


def test_empty_file_loads_nothing(tmp_path: Path):
    path = tmp_path / "opts.yaml"
    path.write_text("", encoding="utf-8")
    assert YamlOptionStore(path).load("demo") is None


@pytest.mark.parametrize(
    "name, text",
    [
        ("bad.yaml", "[invalid"),
        ("bad.json", "{"),
        ("bad.toml", "x = "),
        ("list.json", "[1, 2]"),
        ("scalar.json", '{"demo": 3}'),
    ],
)
def test_invalid_files_raise_load_error(tmp_path: Path, name: str, text: str):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    with pytest.raises(StoreLoadError):
        get_store_for_path(path).load("demo")


def test_toml_store_keeps_comments_and_other_tables(tmp_path: Path):
    path = tmp_path / "opts.toml"
    path.write_text('# site settings\n[other]\nx = 1\n\n[demo]\nold = "gone"\n', encoding="utf-8")
    store = TomlOptionStore(path)
    store.save("demo", {"first_name": "Ada", "skip": None})
    text = path.read_text(encoding="utf-8")
    assert "# site settings" in text
    assert store.load("other") == {"x": 1}
    assert store.load("demo") == {"first_name": "Ada"}


def test_toml_store_keeps_top_level_values(tmp_path: Path):
    path = tmp_path / "opts.toml"
    path.write_text('title = "site"\n\n[demo]\nx = "1"\n', encoding="utf-8")
    store = TomlOptionStore(path)
    store.save("demo", {"x": "2"})
    assert tomllib.loads(path.read_text(encoding="utf-8")) == {
        "title": "site",
        "demo": {"x": "2"},
    }
    assert not (tmp_path / "opts.toml.tmp").exists()


def test_failed_write_leaves_file_alone(tmp_path: Path):
    path = tmp_path / "opts.json"
    store = JsonOptionStore(path)
    store.save("demo", {"x": "1"})
    with pytest.raises(StoreWriteError):
        store.save("demo", {"x": object()})
    assert store.load("demo") == {"x": "1"}
    assert not (tmp_path / "opts.json.tmp").exists()


def test_ini_store_keeps_case_and_percent(tmp_path: Path):
    store = IniOptionStore(tmp_path / "opts.ini")
    record = {"firstName": "100%", "note": "[not a list", "quoted": '"hi"'}
    store.save("demo", record)
    assert store.load("demo") == record


def test_memory_store_copies_records():
    store = InMemoryOptionStore({"demo": {"topics": ["a"]}})
    loaded = store.load("demo")
    loaded["topics"].append("b")
    assert store.load("demo") == {"topics": ["a"]}
    assert store.loads == 2
