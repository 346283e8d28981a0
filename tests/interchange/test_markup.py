import pytest

from flashdeck.interchange.markup import strip_html


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("<b>Hello</b>&nbsp;world<br>", "Hello world"),
        ("line one<br/>line two", "line one\nline two"),
        ("a<BR />b", "a\nb"),
        ("<div><i>nested</i> tags</div>", "nested tags"),
        ("1 &lt; 2 &amp;&amp; 3 &gt; 2", "1 < 2 && 3 > 2"),
        ("&quot;quoted&quot; &#39;single&#39;", "\"quoted\" 'single'"),
        ("  padded  ", "padded"),
        ("plain text", "plain text"),
        ("", ""),
    ],
)
def test_strip_html(raw, expected):
    assert strip_html(raw) == expected


def test_unterminated_tag_is_dropped():
    assert strip_html("text <span") == "text"


def test_escaped_entity_decodes_once_into_markup_characters():
    assert strip_html("&amp;lt;b&amp;gt;") == "<b>"
