"""Shared markdown-it pipeline and source-offset helpers.

Both the metadata extractor and the renderer parse through :func:`parse`, so
they agree on where the front-matter block is and on every block's line map.
"""

from __future__ import annotations

import re
from functools import lru_cache

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.front_matter import front_matter_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

_CHECKBOX_CLASS = "task-list-item-checkbox"
_CHECKED_ATTR = 'checked="checked"'
_FENCE_RE = re.compile(r"-{3,}")


@lru_cache(maxsize=1)
def markdown_pipeline() -> MarkdownIt:
    """CommonMark + tables, strikethrough, YAML front-matter and GFM task lists."""
    md = MarkdownIt("commonmark").enable("table").enable("strikethrough")
    md.use(front_matter_plugin)
    md.use(tasklists_plugin)
    return md


def parse(text: str, env: dict | None = None) -> SyntaxTreeNode:
    """Parse *text* into a block tree (root node of type ``root``).

    Pass *env* to keep the document's link reference definitions for
    :func:`inline_plain_text`.
    """
    return SyntaxTreeNode(markdown_pipeline().parse(text, env))


def inline_plain_text(src: str, env: dict | None = None) -> str:
    """Parse a fragment of inline markdown and flatten it with :func:`plain_text`."""
    return plain_text(SyntaxTreeNode(markdown_pipeline().parseInline(src, env)))


# ---------------------------------------------------------------------------
# Source offsets
# ---------------------------------------------------------------------------


class SourceMap:
    """Translate between parser line numbers and character offsets in the raw text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    def __len__(self) -> int:
        return len(self._line_starts)

    def offset_of_line(self, line: int) -> int:
        """Start offset of zero-based *line*; past-the-end lines map to ``len(text)``."""
        if line < 0:
            return 0
        if line >= len(self._line_starts):
            return len(self.text)
        return self._line_starts[line]

    def line_at(self, offset: int) -> int:
        """Number of newlines preceding *offset* (clamped to the text)."""
        offset = max(0, min(offset, len(self.text)))
        return self.text.count("\n", 0, offset)


def front_matter_node(tree: SyntaxTreeNode) -> SyntaxTreeNode | None:
    """The front-matter block if it opens the document."""
    if tree.children and tree.children[0].type == "front_matter":
        return tree.children[0]
    return None


def fence_lines(text: str, node: SyntaxTreeNode) -> list[str] | None:
    """Raw lines of a front-matter block, opening and closing fence included.

    The search stays inside the block's line map, so the closing fence is
    the one the parser closed the block on (a run of at least as many
    dashes as the opener).  ``None`` when the block was never closed.
    """
    if node.map is None:
        return None
    lines = text.split("\n")
    start, end = node.map
    opener = lines[start].strip()
    markers = len(opener) - len(opener.lstrip("-"))
    for close in range(start + 1, min(end + 1, len(lines))):
        candidate = lines[close].strip()
        if _FENCE_RE.fullmatch(candidate) and len(candidate) >= markers:
            return lines[start : close + 1]
    return None


# ---------------------------------------------------------------------------
# Inline text
# ---------------------------------------------------------------------------


def is_task_checkbox(node: SyntaxTreeNode) -> bool:
    return node.type == "html_inline" and _CHECKBOX_CLASS in node.content


def task_checkbox(inline: SyntaxTreeNode) -> SyntaxTreeNode | None:
    """The checkbox the task-list plugin put in front of *inline*, if any."""
    if inline.children and is_task_checkbox(inline.children[0]):
        return inline.children[0]
    return None


def checkbox_checked(checkbox: SyntaxTreeNode) -> bool:
    return _CHECKED_ATTR in checkbox.content


def plain_text(node: SyntaxTreeNode) -> str:
    """Flatten an inline subtree to the text a reader would see.

    Emphasis, links and strikethrough contribute their children's text; code
    spans their code; line breaks a newline.  The task-list checkbox is
    dropped.
    """
    if node.type in ("text", "code_inline"):
        return node.content
    if node.type == "html_inline":
        return "" if is_task_checkbox(node) else node.content
    if node.type in ("softbreak", "hardbreak"):
        return "\n"
    return "".join(plain_text(child) for child in node.children)


def paragraph_inline(item: SyntaxTreeNode) -> SyntaxTreeNode | None:
    """Inline content of the first paragraph directly inside *item*."""
    for child in item.children:
        if child.type == "paragraph" and child.children:
            return child.children[0]
    return None
