from settingsform import AttributeFormatter
from settingsform.attributes import merge_attributes


def test_value_is_escaped():
    out = AttributeFormatter().format({"type": "text", "id": "first_name", "value": "<b>"})
    assert out == 'type="text" id="first_name" value="&lt;b&gt;"'
    assert "<" not in out and ">" not in out


def test_quotes_are_escaped():
    out = AttributeFormatter().format({"title": 'say "hi"'})
    assert '"hi"' not in out
    assert out.startswith('title="say ')


def test_empty_mapping():
    fmt = AttributeFormatter()
    assert fmt.format({}) == ""
    assert fmt.format(None) == ""


def test_empty_names_and_none_values_are_dropped():
    out = AttributeFormatter().format({"": "x", None: "y", "placeholder": None, "id": "a"})
    assert out == 'id="a"'


def test_boolean_and_list_values():
    out = AttributeFormatter().format(
        {"checked": True, "disabled": False, "class": ["form-table", "settings-a"], "rows": 5}
    )
    assert out == 'checked class="form-table settings-a" rows="5"'


def test_insertion_order_is_kept():
    out = AttributeFormatter().format({"z": 1, "a": 2, "m": 3})
    assert out == 'z="1" a="2" m="3"'


def test_merge_attributes_later_layers_win():
    merged = merge_attributes({"class": "a", "id": "x"}, {"class": None}, {"id": "y"})
    assert merged == {"class": "a", "id": "y"}
    assert list(merged) == ["class", "id"]


def test_invalid_attribute_names_are_dropped():
    out = AttributeFormatter().format(
        {'x" onclick="alert(1)': "y", "a b": 1, "c=d": 1, "<e>": 1, "f/": 1, "data-ok": "1"}
    )
    assert out == 'data-ok="1"'
