"""DocumentRenderer: markdown text -> interactive render-node tree.

Every call to :meth:`DocumentRenderer.render` is a complete, synchronous pass
over freshly parsed text.  Nothing is cached between passes; callers throw the
previous :class:`~scoria.nodes.Document` away and use the new one.

Supported blocks
----------------
- headings (bold, size shrinking with level)
- paragraphs, with ``[[slug]]`` / ``[[slug|alias]]`` wiki-links
- bullet and ordered lists, nested to any depth
- GitHub task items ``- [ ]`` / ``- [x]``, wired back to their source line
- thematic breaks

Everything else (code, quotes, tables, raw HTML) renders as an empty
:class:`~scoria.nodes.Spacer`.

Wiki-links are found in a paragraph's raw inline source, so a target is
taken literally (``[[my *draft* note]]``) and reference definitions never
swallow it.  The text around links is flattened piece by piece; emphasis
opened before a link and closed after it shows its markers.
"""

from __future__ import annotations

import logging
import zlib
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING

from markdown_it.tree import SyntaxTreeNode

from scoria.config import EngineConfig
from scoria.link_index import NoteLinkIndex
from scoria.markdown import (
    SourceMap,
    checkbox_checked,
    inline_plain_text,
    paragraph_inline,
    parse,
    plain_text,
    task_checkbox,
)
from scoria.metadata import Metadata, extract_metadata
from scoria.nodes import (
    Badge,
    BadgeRow,
    Document,
    Heading,
    HoverPreview,
    LinkActivated,
    LinkSpan,
    ListBlock,
    ListItem,
    NotFound,
    Paragraph,
    RenderNode,
    Spacer,
    TaskItem,
    TaskToggled,
    TextSpan,
    ThematicBreak,
)
from scoria.wikilinks import WikiLink, split_wikilinks

if TYPE_CHECKING:
    from scoria.note import Note

log = logging.getLogger(__name__)

_LIST_TYPES = ("bullet_list", "ordered_list")
_BULLET = "• "


def badge_tint(key: str, palette: tuple[str, ...]) -> str:
    """Stable palette pick for a namespaced badge key (``"tag:python"``)."""
    return palette[zlib.crc32(key.encode("utf-8")) % len(palette)]


def heading_font_size(level: int, config: EngineConfig) -> int:
    return max(config.min_font_size, config.heading_base_size - level * config.heading_step)


class DocumentRenderer:
    """Turns markdown into :mod:`scoria.nodes` trees.

    Parameters
    ----------
    index:
        Link index used to decide whether a wiki-link has a preview target.
    config:
        Visual settings (indent unit, heading sizes, palette, preview depth).
    note_loader:
        Reads a target note's text for hover previews.  Defaults to reading
        the note's file as UTF-8.
    """

    def __init__(
        self,
        index: NoteLinkIndex | None = None,
        config: EngineConfig | None = None,
        note_loader: Callable[["Note"], str] | None = None,
    ) -> None:
        self.index = index if index is not None else NoteLinkIndex()
        self.config = config or EngineConfig()
        self.note_loader = note_loader or (lambda note: note.read_text())

    def render(
        self,
        raw_text: str,
        metadata: Metadata | None = None,
        on_task_toggled: TaskToggled | None = None,
        on_link_activated: LinkActivated | None = None,
    ) -> Document:
        """Build the render tree for *raw_text*.

        Parser errors are not caught here; they abort this pass only.
        """
        return _RenderPass(self, raw_text, on_task_toggled, on_link_activated, depth=0).run(metadata)

    def badges(self, metadata: Metadata) -> BadgeRow:
        """Date badge first, then one per tag, then one per alias."""
        palette = self.config.palette
        badges: list[Badge] = []
        if metadata.date is not None:
            badges.append(Badge("date", metadata.date.isoformat(), badge_tint("date", palette)))
        for tag in metadata.tags:
            badges.append(Badge("tag", tag, badge_tint("tag:" + tag, palette)))
        for alias in metadata.aliases:
            badges.append(Badge("alias", alias, badge_tint("alias:" + alias, palette)))
        return BadgeRow(tuple(badges))


class _RenderPass:
    """State for one pass over one text: source map, callbacks, preview depth."""

    def __init__(
        self,
        renderer: DocumentRenderer,
        raw_text: str,
        on_task_toggled: TaskToggled | None,
        on_link_activated: LinkActivated | None,
        depth: int,
    ) -> None:
        self.renderer = renderer
        self.config = renderer.config
        self.raw_text = raw_text
        self.source = SourceMap(raw_text)
        #: Parser env; holds the reference definitions of this text.
        self.env: dict = {}
        self.on_task_toggled = on_task_toggled
        self.on_link_activated = on_link_activated
        self.depth = depth

    def run(self, metadata: Metadata | None) -> Document:
        children: list[RenderNode] = []
        if metadata is not None and metadata.has_badges:
            children.append(self.renderer.badges(metadata))

        for block in parse(self.raw_text, self.env).children:
            # Front-matter is shown as badges, never as text.
            if block.type == "front_matter":
                continue
            children.append(self.block(block))
        return Document(tuple(children))

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def block(self, node: SyntaxTreeNode) -> RenderNode:
        if node.type == "heading":
            level = int(node.tag[1:])
            return Heading(
                level=level,
                text=self.inline_text(node),
                font_size=heading_font_size(level, self.config),
            )
        if node.type == "paragraph":
            return self.paragraph(node)
        if node.type in _LIST_TYPES:
            return self.list_block(node, depth=0)
        if node.type == "hr":
            return ThematicBreak()
        return Spacer()

    @staticmethod
    def inline_text(node: SyntaxTreeNode) -> str:
        return "".join(plain_text(child) for child in node.children)

    def paragraph(self, node: SyntaxTreeNode) -> Paragraph:
        """Links are found in the raw inline source; only the text between them is flattened."""
        source = node.children[0].content if node.children else ""
        spans: list[TextSpan | LinkSpan] = []
        for part in split_wikilinks(source):
            if isinstance(part, WikiLink):
                spans.append(self.link(part))
                continue
            text = inline_plain_text(part, self.env)
            if text:
                spans.append(TextSpan(text))
        return Paragraph(tuple(spans))

    # ------------------------------------------------------------------
    # Wiki-links and previews
    # ------------------------------------------------------------------

    def link(self, link: WikiLink) -> LinkSpan:
        target = self.renderer.index.resolve_by_slug(link.slug)
        preview = None
        if self.depth < self.config.max_preview_depth:
            preview = HoverPreview(link.slug, partial(self.preview, link.slug, target))
        return LinkSpan(
            slug=link.slug,
            display=link.display,
            target=target,
            preview=preview,
            on_activated=self.on_link_activated,
        )

    def preview(self, slug: str, target: "Note | None") -> RenderNode:
        if target is None:
            return NotFound(slug)
        try:
            text = self.renderer.note_loader(target)
        except OSError as e:
            log.warning("Cannot preview %s: %s", target.path, e)
            return NotFound(slug)
        nested = _RenderPass(
            self.renderer,
            text,
            self.on_task_toggled,
            self.on_link_activated,
            depth=self.depth + 1,
        )
        return nested.run(extract_metadata(text))

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    @staticmethod
    def ordered_start(node: SyntaxTreeNode) -> int:
        try:
            return int(node.attrs.get("start", 1))
        except (TypeError, ValueError):
            return 1

    def list_block(self, node: SyntaxTreeNode, depth: int) -> ListBlock:
        ordered = node.type == "ordered_list"
        start = self.ordered_start(node) if ordered else 1
        items: list[ListItem | TaskItem] = []
        number = start
        for child in node.children:
            if child.type != "list_item":
                continue
            items.append(self.list_item(child, ordered, number, depth))
            number += 1
        return ListBlock(
            ordered=ordered,
            start=start,
            depth=depth,
            indent=depth * self.config.indent_unit,
            items=tuple(items),
        )

    def list_item(
        self, node: SyntaxTreeNode, ordered: bool, number: int, depth: int
    ) -> ListItem | TaskItem:
        nested = tuple(
            self.list_block(child, depth + 1) for child in node.children if child.type in _LIST_TYPES
        )
        inline = paragraph_inline(node)
        checkbox = task_checkbox(inline) if inline is not None else None

        if checkbox is not None:
            return TaskItem(
                label="".join(plain_text(c) for c in inline.children[1:]).strip(),
                checked=checkbox_checked(checkbox),
                source_line_index=self.source_line(node),
                children=nested,
                on_toggled=self.on_task_toggled,
            )

        marker = f"{number}. " if ordered else _BULLET
        first = inline.children[0] if inline is not None and inline.children else None
        return ListItem(marker=marker, text=plain_text(first) if first is not None else "", children=nested)

    def source_line(self, node: SyntaxTreeNode) -> int:
        """Zero-based line of *node*: newlines before its start offset."""
        start_line = node.map[0] if node.map else 0
        return self.source.line_at(self.source.offset_of_line(start_line))
