"""
Elementary Kernel: Formatters

Pure text → markup services used by the code and markdown widgets.
Both are swappable; the compiler only relies on the two protocols below.
"""

from __future__ import annotations

from typing import Protocol

import markdown as md
from pygments import highlight as _pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


class UnknownLanguage(Exception):
    """The highlighter has no lexer for the requested language."""


class Highlighter(Protocol):
    def highlight(self, lang: str, source: str) -> str: ...


class MarkdownRenderer(Protocol):
    def render(self, text: str) -> str: ...


class PygmentsHighlighter:
    """Highlights source into bare <span class="..."> markup (no wrapping <pre>)."""

    def __init__(self) -> None:
        self._formatter = HtmlFormatter(nowrap=True)

    def highlight(self, lang: str, source: str) -> str:
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            raise UnknownLanguage(lang)
        return _pygments_highlight(source, lexer, self._formatter)


class PythonMarkdown:
    """Markdown → HTML with Python-Markdown."""

    def __init__(self, extensions: list[str] | None = None) -> None:
        self.extensions = extensions if extensions is not None else list(MARKDOWN_EXTENSIONS)

    def render(self, text: str) -> str:
        return md.markdown(text, extensions=self.extensions)
