from __future__ import annotations

import bleach

# QTextBrowser renders a small HTML subset; keep the allow-list to what it shows
ALLOWED_TAGS = {
    "a", "p", "br", "hr",
    "strong", "em", "code", "pre", "blockquote",
    "ul", "ol", "li",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "table", "thead", "tbody", "tr", "th", "td",
}
ALLOWED_ATTRS = {
    "a": ["href", "title"],
    "th": ["align"], "td": ["align"],
}
ALLOWED_PROTOCOLS = {"http", "https", "mailto"}


def sanitize_rendered_html(rendered_html: str) -> str:
    """Strip everything not on the allow-list (scripts, styles, event handlers)."""
    return bleach.clean(
        rendered_html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )
