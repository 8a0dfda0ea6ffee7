from app.services.result_display import (
    ListResult,
    ScalarResult,
    clipboard_text,
    resolve_display_content,
    sanitize_html,
)


def test_result_key_takes_precedence():
    content = resolve_display_content({"result": "Analysis: strong idea", "meta": 1})
    assert isinstance(content, ScalarResult)
    assert content.text == "Analysis: strong idea"


def test_list_result_becomes_blocks():
    content = resolve_display_content({"result": ["<h2>One</h2>", "Two"]})
    assert isinstance(content, ListResult)
    assert content.items == ["<h2>One</h2>", "Two"]
    assert clipboard_text(content) == "<h2>One</h2>\nTwo"


def test_whole_body_used_without_result_key():
    content = resolve_display_content({"headline": "Hi"})
    assert isinstance(content, ScalarResult)
    assert content.text == '{"headline": "Hi"}'

    empty_result = resolve_display_content({"result": "", "other": True})
    assert '"other": true' in empty_result.text


def test_sanitize_html_strips_unsafe_markup():
    assert "<script" not in sanitize_html("<p>Hi</p><script>alert(1)</script>")
    assert sanitize_html('<img src=x onerror="alert(1)">') == ""
    cleaned = sanitize_html('<a href="https://x.test" onclick="evil()">link</a>')
    assert 'href="https://x.test"' in cleaned
    assert "onclick" not in cleaned
    assert sanitize_html("<div><strong>kept</strong></div>") == "<strong>kept</strong>"


def test_display_html_is_sanitized():
    content = resolve_display_content({"result": "<p onclick='x()'>Hello</p>"})
    assert content.html == "<p>Hello</p>"
