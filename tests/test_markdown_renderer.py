import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from quicknotes.services.markdown_renderer import MarkdownRenderer
from quicknotes.services.sanitize import sanitize_rendered_html


def test_plain_text_note():
    html_out = MarkdownRenderer().render_fragment("eggs, milk")
    assert html_out == "<p>eggs, milk</p>"


def test_markdown_formatting():
    html_out = MarkdownRenderer().render_fragment("# Title\n\n**bold**")
    assert "<h1>Title</h1>" in html_out
    assert "<strong>bold</strong>" in html_out


def test_script_is_stripped():
    html_out = MarkdownRenderer().render_fragment("hi <script>alert(1)</script>")
    assert "<script>" not in html_out


def test_javascript_links_dropped():
    cleaned = sanitize_rendered_html('<a href="javascript:alert(1)">x</a>')
    assert "javascript:" not in cleaned


def test_page_uses_theme():
    dark = MarkdownRenderer(theme="dark").render_page("x")
    light = MarkdownRenderer(theme="light").render_page("x")
    assert "#2b2b2b" in dark
    assert "#f5f5f5" in light
    assert "<p>x</p>" in dark
