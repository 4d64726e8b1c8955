from settingsform import AllowListEscaper, MarkupSafeEscaper


def test_markupsafe_escapes_everything():
    esc = MarkupSafeEscaper()
    assert esc.escape_text("<p>hi</p>") == "&lt;p&gt;hi&lt;/p&gt;"
    assert esc.escape_attribute(None) == ""
    assert esc.escape_attribute(3) == "3"


def test_allow_list_keeps_permitted_tags():
    esc = AllowListEscaper()
    out = esc.escape_text('See <a href="https://example.com" class="x" onclick="evil()">docs</a>')
    assert out == 'See <a href="https://example.com" class="x">docs</a>'


def test_allow_list_unwraps_unknown_tags_and_drops_scripts():
    esc = AllowListEscaper()
    out = esc.escape_text("<b>bold</b><script>alert(1)</script>")
    assert out == "bold"


def test_allow_list_drops_javascript_links():
    esc = AllowListEscaper()
    out = esc.escape_text('<a href="javascript:alert(1)">x</a>')
    assert out == "<a>x</a>"


def test_allow_list_plain_text_is_escaped():
    esc = AllowListEscaper()
    assert esc.escape_text("a & b") == "a &amp; b"
