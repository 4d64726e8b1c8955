from __future__ import annotations

from bs4 import BeautifulSoup

from settingsform import InMemoryOptionStore, RegistrationEngine


def declare_demo(engine: RegistrationEngine) -> None:
    """Two sections covering the common field kinds."""
    with engine.section(
        "personal_info",
        "Personal info",
        {"field_options": {"class": "a", "description": "sec"}},
    ):
        engine.text("first_name", "First name", {"default": ""})
        engine.text("nickname", "Nickname", {"class": "b"})
    with engine.section("preferences", "Preferences"):
        engine.radio("color", "Favourite colour", {"red": "Red", "blue": "Blue"})
        engine.checkbox("newsletter", "Newsletter", {"description": "Send me news"})
        engine.select("size", "Size", {"s": "Small", "m": "Medium"}, {"default": "m"})


def make_engine(record=None, declare=declare_demo, storage_key="demo") -> RegistrationEngine:
    records = {} if record is None else {storage_key: record}
    store = InMemoryOptionStore(records)
    return RegistrationEngine(storage_key, store, declare)


class DemoPage:
    """Minimal host used by page and submission tests."""

    def __init__(self, declare=declare_demo, storage_key: str = "demo") -> None:
        self._declare = declare
        self._storage_key = storage_key

    def get_storage_key(self) -> str:
        return self._storage_key

    def get_page_id(self) -> str:
        return "demo-settings"

    def declare_fields(self, engine: RegistrationEngine) -> None:
        self._declare(engine)


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")
