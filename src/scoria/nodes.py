"""Render-node tree produced by :class:`scoria.renderer.DocumentRenderer`.

Nodes are immutable and rebuilt on every render pass.  Interactive nodes
(:class:`TaskItem`, :class:`LinkSpan`) carry the caller's callbacks in
fields that take no part in equality, so two renders of the same text
compare equal.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from scoria.note import Note

TaskToggled = Callable[[int, bool], None]
LinkActivated = Callable[[str], None]


@dataclass(frozen=True)
class RenderNode:
    kind: ClassVar[str] = "node"

    def iter_children(self) -> tuple["RenderNode", ...]:
        return ()

    def walk(self) -> Iterator["RenderNode"]:
        """Depth-first iteration over this node and its children (previews excluded)."""
        yield self
        for child in self.iter_children():
            yield from child.walk()


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Badge(RenderNode):
    kind: ClassVar[str] = "badge"

    #: ``"date"``, ``"tag"`` or ``"alias"``
    badge_kind: str
    text: str
    tint: str


@dataclass(frozen=True)
class BadgeRow(RenderNode):
    kind: ClassVar[str] = "badge_row"

    badges: tuple[Badge, ...]

    def iter_children(self) -> tuple[RenderNode, ...]:
        return self.badges


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Heading(RenderNode):
    kind: ClassVar[str] = "heading"

    level: int
    text: str
    font_size: int
    font_weight: str = "bold"


@dataclass(frozen=True)
class ThematicBreak(RenderNode):
    kind: ClassVar[str] = "thematic_break"


@dataclass(frozen=True)
class Spacer(RenderNode):
    """Stand-in for block kinds the renderer does not draw."""

    kind: ClassVar[str] = "spacer"


@dataclass(frozen=True)
class NotFound(RenderNode):
    """Shown in a hover preview when a wiki-link target is not in the vault."""

    kind: ClassVar[str] = "not_found"

    slug: str

    @property
    def message(self) -> str:
        return f"Note not found: {self.slug}"


# ---------------------------------------------------------------------------
# Inline spans
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextSpan(RenderNode):
    kind: ClassVar[str] = "text"

    text: str


class HoverPreview:
    """Lazily built popup attached to a wiki-link.

    The popup is open while the pointer is over the link *or* over the popup
    itself, and closes only once both are left.  Its content is built the
    first time it opens and then kept for the life of this render pass.
    """

    def __init__(self, slug: str, build: Callable[[], RenderNode]) -> None:
        self.slug = slug
        self._build = build
        self._content: RenderNode | None = None
        self.link_hovered = False
        self.popup_hovered = False

    @property
    def is_open(self) -> bool:
        return self.link_hovered or self.popup_hovered

    @property
    def is_built(self) -> bool:
        return self._content is not None

    @property
    def content(self) -> RenderNode:
        if self._content is None:
            self._content = self._build()
        return self._content

    def link_entered(self) -> None:
        self.link_hovered = True
        if self._content is None:
            self._content = self._build()

    def link_exited(self) -> None:
        self.link_hovered = False

    def popup_entered(self) -> None:
        self.popup_hovered = True

    def popup_exited(self) -> None:
        self.popup_hovered = False

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"HoverPreview({self.slug!r}, {state})"


@dataclass(frozen=True)
class LinkSpan(RenderNode):
    """A ``[[wiki-link]]`` inside a paragraph."""

    kind: ClassVar[str] = "link"

    slug: str
    display: str
    target: "Note | None" = field(default=None, compare=False)
    preview: HoverPreview | None = field(default=None, compare=False, repr=False)
    on_activated: LinkActivated | None = field(default=None, compare=False, repr=False)

    @property
    def resolved(self) -> bool:
        return self.target is not None

    def activate(self) -> None:
        """Click: hand the slug to the caller, who resolves it lazily."""
        if self.on_activated is not None:
            self.on_activated(self.slug)


@dataclass(frozen=True)
class Paragraph(RenderNode):
    kind: ClassVar[str] = "paragraph"

    spans: tuple[TextSpan | LinkSpan, ...]

    @property
    def text(self) -> str:
        return "".join(s.text if isinstance(s, TextSpan) else s.display for s in self.spans)

    @property
    def links(self) -> tuple[LinkSpan, ...]:
        return tuple(s for s in self.spans if isinstance(s, LinkSpan))

    def iter_children(self) -> tuple[RenderNode, ...]:
        return self.spans


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ListItem(RenderNode):
    kind: ClassVar[str] = "list_item"

    #: ``"• "`` for bullets, ``"3. "`` for ordered items
    marker: str
    text: str
    children: tuple["ListBlock", ...] = ()

    def iter_children(self) -> tuple[RenderNode, ...]:
        return self.children


@dataclass(frozen=True)
class TaskItem(RenderNode):
    kind: ClassVar[str] = "task_item"

    label: str
    checked: bool
    #: Zero-based line of the ``- [ ]`` marker in the raw text.
    source_line_index: int
    children: tuple["ListBlock", ...] = ()
    on_toggled: TaskToggled | None = field(default=None, compare=False, repr=False)

    def toggle(self, checked: bool | None = None) -> None:
        """Checkbox click: report ``(source_line_index, new_state)`` to the caller."""
        new_state = (not self.checked) if checked is None else checked
        if self.on_toggled is not None:
            self.on_toggled(self.source_line_index, new_state)

    def iter_children(self) -> tuple[RenderNode, ...]:
        return self.children


@dataclass(frozen=True)
class ListBlock(RenderNode):
    kind: ClassVar[str] = "list"

    ordered: bool
    start: int
    #: Nesting depth; top-level lists are depth 0.
    depth: int
    #: Absolute indent, ``depth * indent_unit``.
    indent: int
    items: tuple[ListItem | TaskItem, ...]

    def iter_children(self) -> tuple[RenderNode, ...]:
        return self.items


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Document(RenderNode):
    kind: ClassVar[str] = "document"

    children: tuple[RenderNode, ...]

    def iter_children(self) -> tuple[RenderNode, ...]:
        return self.children

    def task_items(self) -> list[TaskItem]:
        return [n for n in self.walk() if isinstance(n, TaskItem)]

    def links(self) -> list[LinkSpan]:
        return [n for n in self.walk() if isinstance(n, LinkSpan)]
