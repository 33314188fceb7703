"""
Elementary Kernel: Document + HTML Renderer

The default patch engine. A Document stands in for the live page: it holds the
current markup, the event handlers attached to it, the element ids present, and
any widgets (maps) attached to those elements.

HtmlRenderer.patch(root, adapter, fragment) replaces the document's markup with
the adapter's rendering of the fragment tree. Reconciliation is whole-document;
an identical rendering leaves the document untouched.
"""

from __future__ import annotations

import logging
from typing import Any

from elementary.kernel.fragments import JsonMLAdapter

logger = logging.getLogger(__name__)


class Document:
    """In-memory render target."""

    def __init__(self) -> None:
        self.html: str = ""
        self.handlers: dict[str, dict[str, Any]] = {}
        self.ids: set[str] = set()
        self.widgets: dict[str, Any] = {}
        self.patches: int = 0

    def has_element(self, element_id: str) -> bool:
        return element_id in self.ids

    def dispatch(self, handler_id: str, attr: str, event: Any) -> bool:
        """
        Deliver a runtime event to a bound handler, as the browser would.
        Returns False when no such handler is attached.
        """
        handler = self.handlers.get(handler_id, {}).get(attr)
        if handler is None:
            logger.warning("dispatch: no %s handler on %s", attr, handler_id)
            return False
        handler(event)
        return True

    def __repr__(self) -> str:
        return f"Document(patches={self.patches}, ids={sorted(self.ids)!r})"


class HtmlRenderer:
    """Applies fragment trees to a Document."""

    def patch(self, root: Document, adapter: JsonMLAdapter, fragment: Any) -> bool:
        """Returns True when the document changed."""
        markup = adapter.render(fragment)
        # Handlers are rebuilt every pass: they close over the latest context
        root.handlers = markup.handlers
        if markup.html == root.html:
            return False
        root.html = markup.html
        root.ids = markup.ids
        root.patches += 1
        return True
