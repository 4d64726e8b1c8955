import pytest

from settingsform import (
    FormConfig,
    InMemoryOptionStore,
    SettingsPage,
    SubmissionError,
)
from tests.utils import DemoPage, soup


def _page(record=None, **kwargs):
    store = InMemoryOptionStore({} if record is None else {"demo": record})
    page = SettingsPage(DemoPage(), store, **kwargs)
    page.register()
    return page, store


def test_host_surface_values():
    page, _ = _page({"first_name": "Ada"})
    assert page.storage_key == "demo"
    assert page.page_id == "demo-settings"
    assert page.get_value("first_name") == "Ada"
    assert page.get_value("size") == "m"
    assert dict(page.get_all_values()) == {"first_name": "Ada"}


def test_register_from_several_hooks():
    page, store = _page()
    page.register()
    page.register()
    assert store.loads == 1


def test_form_binding_attributes():
    page, _ = _page(config=FormConfig(action="/save"))
    assert page.get_form_binding_attributes() == {"method": "post", "action": "/save"}
    attrs = page.get_form_binding_attributes({"id": "settings", "method": "get"})
    assert attrs == {"id": "settings", "method": "post", "action": "/save"}
    assert page.get_form_attribute_string({"id": "s"}) == 'id="s" method="post" action="/save"'


def test_render_form():
    page, _ = _page({"color": "red"}, title="Demo <settings>")
    html = page.render_form(extra_attributes={"class": "settings"})
    doc = soup(html)
    form = doc.find("form")
    assert form["method"] == "post"
    assert form["action"] == "options.php"
    assert form["class"] == ["settings"]
    assert doc.find("h1").get_text() == "Demo <settings>"
    assert len(form.find_all("input", attrs={"name": "option_page"})) == 1
    assert [t["class"][1] for t in form.find_all("table")] == [
        "settings-personal_info",
        "settings-preferences",
    ]
    assert form.find("input", attrs={"type": "submit"})["value"] == "Save Changes"
    assert doc.find("div", class_="wrap")["class"] == ["wrap", "settings-page-demo-settings"]
    # the binding goes out again on the next full render
    assert len(soup(page.render_form()).find_all("input", attrs={"name": "option_page"})) == 1


def test_render_section_after_render_form_emits_binding():
    page, _ = _page()
    page.render_form()
    first = soup(page.render_section("personal_info"))
    assert first.find("input", attrs={"name": "option_page"})["value"] == "demo"
    second = soup(page.render_section("preferences"))
    assert second.find("input", attrs={"name": "option_page"}) is None


def test_render_form_subset():
    page, _ = _page()
    doc = soup(page.render_form(["preferences"]))
    assert len(doc.find_all("table")) == 1


def test_handle_submission_saves_record():
    page, store = _page({"first_name": "Old", "newsletter": "yes"})
    record = page.handle_submission(
        {
            "option_page": "demo",
            "action": "update",
            "demo[first_name]": "Ada",
            "demo[color]": "blue",
            "demo[unknown]": "dropped",
        }
    )
    assert record == {"first_name": "Ada", "color": "blue"}
    assert store.records["demo"] == record
    # the page keeps serving the snapshot it loaded
    assert page.get_value("first_name") == "Old"


def test_submission_for_another_page_is_rejected():
    page, store = _page()
    with pytest.raises(SubmissionError):
        page.handle_submission({"option_page": "other", "demo[first_name]": "Ada"})
    assert store.records["demo"] == {}


def test_submission_token_is_checked():
    page, _ = _page(
        token_provider=lambda key: "secret",
        token_validator=lambda key, token: token == "secret",
    )
    assert 'value="secret"' in page.render_section("personal_info")
    with pytest.raises(SubmissionError):
        page.handle_submission({"option_page": "demo", "_token": "wrong"})
    page.handle_submission({"option_page": "demo", "_token": "secret"})
