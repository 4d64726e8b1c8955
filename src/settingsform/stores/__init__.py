"""Option store registry and factory."""
from __future__ import annotations

from pathlib import Path

from ..errors import UnsupportedStore
from .base import FileOptionStore, OptionStore
from .memory import InMemoryOptionStore

_REGISTRY: dict[str, type[FileOptionStore]] = {}


def register_store(store: type[FileOptionStore]) -> type[FileOptionStore]:
    """Register a file store class and return it for decorator use."""
    for suf in store.suffixes:
        _REGISTRY[suf] = store
    return store


def get_store_for_path(path: Path | str) -> FileOptionStore:
    path = Path(path)
    store_cls = _REGISTRY.get(path.suffix.lower())
    if store_cls is None:
        raise UnsupportedStore(f"No option store for {path.suffix or path.name!r}")
    return store_cls(path)


def supported_suffixes() -> list[str]:
    return sorted(_REGISTRY)


# register default stores
from . import ini_store, json_store, toml_store, yaml_store  # noqa: F401,E402
from .ini_store import IniOptionStore  # noqa: E402
from .json_store import JsonOptionStore  # noqa: E402
from .toml_store import TomlOptionStore  # noqa: E402
from .yaml_store import YamlOptionStore  # noqa: E402

__all__ = [
    "FileOptionStore",
    "IniOptionStore",
    "InMemoryOptionStore",
    "JsonOptionStore",
    "OptionStore",
    "TomlOptionStore",
    "YamlOptionStore",
    "get_store_for_path",
    "register_store",
    "supported_suffixes",
]
