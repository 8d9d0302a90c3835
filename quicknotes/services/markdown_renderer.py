from __future__ import annotations

import markdown as md

from quicknotes.services.sanitize import sanitize_rendered_html

MD_EXTENSIONS = ["fenced_code", "tables", "nl2br"]

THEME_CSS = {
    "dark": """
    body { color: #e6e6e6; }
    code, pre { background: #2b2b2b; }
    a { color: #8ab4f8; }
    """,
    "light": """
    body { color: #202020; }
    code, pre { background: #f5f5f5; }
    a { color: #1a5fb4; }
    """,
}


class MarkdownRenderer:
    """Note text -> sanitized HTML page for the read-only preview pane."""

    def __init__(self, *, theme: str = "dark"):
        self.theme = theme

    def render_fragment(self, text: str) -> str:
        rendered = md.markdown(text or "", extensions=MD_EXTENSIONS)
        return sanitize_rendered_html(rendered)

    def render_page(self, text: str) -> str:
        css = THEME_CSS.get(self.theme, THEME_CSS["dark"])
        return f"""\
<html>
<head>
  <meta charset="utf-8"/>
  <style>
    body {{ font-family: sans-serif; line-height: 1.5; }}
    pre {{ padding: 8px; }}
    {css}
  </style>
</head>
<body>{self.render_fragment(text)}</body>
</html>
"""
