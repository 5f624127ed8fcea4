"""Conversion between plain text and the Atlassian Document Format (ADF).

Jira Cloud's REST API v3 represents rich text fields such as ``description`` as
an ADF document. The synchronization engine works on plain text, so
descriptions are flattened on read and wrapped into paragraphs on write.
"""

from typing import Any

# Nodes that start a new line of text. Containers such as lists, list items,
# blockquotes and panels only contribute the lines of their children.
LINE_NODE_TYPES = {"paragraph", "heading", "codeBlock", "rule"}


def text_to_adf(text: str) -> dict[str, Any]:
    """Convert plain text into a minimal ADF document with one paragraph per line."""
    lines = (text or "").split("\n")
    content: list[dict[str, Any]] = []
    for line in lines:
        if line == "":
            content.append({"type": "paragraph", "content": []})
        else:
            content.append({"type": "paragraph", "content": [{"type": "text", "text": line}]})
    return {"type": "doc", "version": 1, "content": content}


class _LineCollector:
    """Accumulates flattened text lines while walking an ADF tree."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def start_line(self) -> None:
        self.lines.append("")

    def append_text(self, text: str) -> None:
        if not self.lines:
            self.start_line()
        self.lines[-1] += text

    def visit(self, node: Any) -> None:
        if not isinstance(node, dict):
            return
        node_type = node.get("type")
        if node_type == "text":
            self.append_text(node.get("text", ""))
            return
        if node_type == "hardBreak":
            self.start_line()
            return
        if node_type in LINE_NODE_TYPES:
            self.start_line()
        for child in node.get("content") or []:
            self.visit(child)


def adf_to_text(document: dict[str, Any] | None) -> str:
    """Flatten an ADF document into plain text, one line per paragraph-like node.

    This is the inverse of ``text_to_adf`` for documents it produced. Marks
    (bold, links, ...) and media are dropped.
    """
    if not document:
        return ""
    collector = _LineCollector()
    for child in document.get("content") or []:
        collector.visit(child)
    return "\n".join(collector.lines)


def description_to_text(description: Any) -> str:
    """Return a Jira ``description`` field as plain text with LF line breaks, whichever form Jira sent."""
    if description is None:
        return ""
    if isinstance(description, dict):
        return adf_to_text(description)
    return str(description).replace("\r\n", "\n").replace("\r", "\n")
