from .markdown_renderer import MarkdownRenderer
from .sanitize import sanitize_rendered_html

__all__ = ["MarkdownRenderer", "sanitize_rendered_html"]
