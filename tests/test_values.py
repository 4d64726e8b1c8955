import pytest

from settingsform import InMemoryOptionStore, RegistrationEngine, ValueResolver
from tests.utils import make_engine


def _personal_info(engine):
    with engine.section("personal_info", "Personal info"):
        engine.register_field(
            "first_name", "First name", "single-input", {"type": "text", "default": ""}
        )


def test_default_until_stored_value_is_loaded():
    store = InMemoryOptionStore()
    engine = RegistrationEngine("demo", store, _personal_info)
    engine.register()
    assert engine.values.get("first_name") == ""

    store.records["demo"] = {"first_name": "Ada"}
    # the loaded snapshot does not change under the engine
    engine.register()
    assert engine.values.get("first_name") == ""

    fresh = RegistrationEngine("demo", store, _personal_info)
    fresh.register()
    assert fresh.values.get("first_name") == "Ada"


def test_stored_value_wins_over_default():
    engine = make_engine({"size": "s"})
    engine.register()
    assert engine.values.get("size") == "s"


def test_missing_value_without_default_is_none():
    engine = make_engine()
    engine.register()
    assert engine.values.get("color") is None
    assert engine.values.get("not_a_field") is None


def test_unregistered_keys_resolve_from_record():
    engine = make_engine({"legacy": "kept"})
    engine.register()
    assert engine.values.get("legacy") == "kept"
    assert "legacy" in engine.values


def test_get_all_is_read_only():
    engine = make_engine({"first_name": "Ada"})
    engine.register()
    everything = engine.values.get_all()
    assert dict(everything) == {"first_name": "Ada"}
    with pytest.raises(TypeError):
        everything["first_name"] = "Grace"  # type: ignore[index]


def test_resolver_over_plain_mapping():
    resolver = ValueResolver({"a": 1})
    assert resolver.get("a") == 1
    assert resolver.get("b") is None
