"""Document tree model for heading/list structured markdown.

Two node types make up a parsed document:

- ContentNode: one line of non-heading content plus everything nested
  beneath it (list items own their sub-items and continuation text).
- Section: one heading plus its body (a ContentNode tree) and its
  sub-headings.

Indentation is never stored as an absolute depth. Each node remembers the
whitespace it carried relative to its parent when it was parsed, so an
untouched document renders back byte-for-byte, while a node moved to a new
parent is re-indented for its new position. A line whose whitespace does
not extend its parent's (tabs under spaces, fenced code pulled left) keeps
its whole leading whitespace instead, until it is moved.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional

LIST_MARKER_PATTERN = re.compile(r"^(?:[-*+]|\d+\.)[ \t]")

ContentFilter = Callable[["ContentNode"], bool]
SectionFilter = Callable[["Section"], bool]


class NodeKind(Enum):
    """Closed set of content node kinds."""

    ROOT = "root"
    LIST_ITEM = "list_item"
    TEXT = "text"


class SectionKind(Enum):
    """Closed set of section kinds."""

    ROOT = "root"
    HEADING = "heading"


@dataclass
class ContentNode:
    """Single line of content with its nested children.

    Attributes:
        text: Line content without leading indentation (list marker included)
        kind: Root sentinel, list item or plain text
        indent: Whitespace between the parent's prefix and the text as parsed.
                None means "derive from position" and is what inserted nodes get.
        children: Nested nodes in document order
        absolute_indent: Full leading whitespace of a line that did not start
                         with its parent's prefix; rendered verbatim when set
    """

    text: str
    kind: NodeKind = NodeKind.TEXT
    indent: Optional[str] = None
    children: list["ContentNode"] = field(default_factory=list)
    absolute_indent: Optional[str] = None

    @classmethod
    def root(cls) -> "ContentNode":
        """Create an empty root sentinel."""
        return cls(text="", kind=NodeKind.ROOT)

    @classmethod
    def from_text(cls, text: str) -> "ContentNode":
        """Create a node for unindented line text, classifying list markers.

        Examples:
            >>> ContentNode.from_text("- [ ] task").kind
            <NodeKind.LIST_ITEM: 'list_item'>
            >>> ContentNode.from_text("plain").kind
            <NodeKind.TEXT: 'text'>
        """
        kind = NodeKind.LIST_ITEM if LIST_MARKER_PATTERN.match(text) else NodeKind.TEXT
        return cls(text=text, kind=kind)

    @property
    def is_root(self) -> bool:
        return self.kind is NodeKind.ROOT

    @property
    def marker_width(self) -> int:
        """Width of the list marker including its trailing whitespace (0 for text)."""
        match = LIST_MARKER_PATTERN.match(self.text)
        return len(match.group(0)) if match else 0

    def child_indent(self, child: "ContentNode", indentation: str) -> str:
        """Whitespace placed between this node's prefix and a child's text.

        A child keeps the whitespace it was parsed with. Otherwise list items
        nest one indentation unit deeper and plain text under a list item is
        aligned with the item's text.

        Args:
            child: One of this node's children
            indentation: Indentation unit string ("\\t" or N spaces)

        Returns:
            Relative indentation for the child
        """
        if child.indent is not None:
            return child.indent
        if self.kind is NodeKind.ROOT:
            return ""
        if child.kind is NodeKind.TEXT and self.kind is NodeKind.LIST_ITEM:
            return " " * self.marker_width
        return indentation

    def child_prefix(self, child: "ContentNode", prefix: str, indentation: str) -> str:
        """Full leading whitespace of a child, given this node's prefix."""
        if child.absolute_indent is not None:
            return child.absolute_indent
        return prefix + self.child_indent(child, indentation)

    def append_child(self, child: "ContentNode") -> "ContentNode":
        """Append a child, re-indenting it for its new position.

        Returns:
            The appended child
        """
        child._detach_indentation()
        self.children.append(child)
        return child

    def prepend_child(self, child: "ContentNode") -> "ContentNode":
        """Insert a child at the start, re-indenting it for its new position.

        Returns:
            The prepended child
        """
        child._detach_indentation()
        self.children.insert(0, child)
        return child

    def _detach_indentation(self) -> None:
        # Absolute whitespace only holds at the position it was parsed in.
        self.indent = None
        for node in self.walk():
            node.absolute_indent = None

    def remove_child(self, child: "ContentNode") -> None:
        """Remove a direct child (matched by identity).

        Raises:
            ValueError: If the node is not a direct child
        """
        for i, existing in enumerate(self.children):
            if existing is child:
                del self.children[i]
                return
        raise ValueError(f"Node is not a child of this node: {child.text!r}")

    def extract_children(
        self, content_filter: ContentFilter, recursive: bool = True
    ) -> list["ContentNode"]:
        """Remove matching descendants and return them in document order.

        A matching node is taken together with its subtree and is not searched
        further. Non-matching nodes stay in place.

        Args:
            content_filter: Predicate selecting nodes to remove
            recursive: If False, only direct children are tested

        Returns:
            Extracted nodes in document order
        """
        extracted = []
        kept = []
        for child in self.children:
            if content_filter(child):
                extracted.append(child)
                continue
            kept.append(child)
            if recursive:
                extracted.extend(child.extract_children(content_filter, recursive))
        self.children = kept
        return extracted

    def find(self, matcher: ContentFilter) -> Optional["ContentNode"]:
        """Depth-first search for the first node matching the predicate."""
        if not self.is_root and matcher(self):
            return self
        for child in self.children:
            if found := child.find(matcher):
                return found
        return None

    def walk(self) -> Iterator["ContentNode"]:
        """Yield every non-root node in pre-order."""
        if not self.is_root:
            yield self
        for child in self.children:
            yield from child.walk()

    def stringify(self, indentation: str) -> list[str]:
        """Render this node and its subtree to lines.

        The node itself is rendered without a prefix; descendants are indented
        relative to it. The root sentinel renders only its children.

        Args:
            indentation: Indentation unit string ("\\t" or N spaces)

        Returns:
            Rendered lines
        """
        lines: list[str] = []
        self._stringify_into(lines, "", indentation)
        return lines

    def _stringify_into(self, lines: list[str], prefix: str, indentation: str) -> None:
        if not self.is_root:
            lines.append(f"{prefix}{self.text}")
        for child in self.children:
            child._stringify_into(
                lines, self.child_prefix(child, prefix, indentation), indentation
            )


@dataclass
class Section:
    """Heading with its body content and nested sub-headings.

    Attributes:
        text: Everything after the heading marker, separator whitespace included,
              so that "#" * level + text reproduces the heading line
        level: Heading depth (1-6); 0 for the document root
        content: Root of the body content tree
        children: Sub-sections in document order
        kind: Document root or real heading
    """

    text: str
    level: int
    content: ContentNode = field(default_factory=ContentNode.root)
    children: list["Section"] = field(default_factory=list)
    kind: SectionKind = SectionKind.HEADING

    @classmethod
    def root(cls) -> "Section":
        """Create the implicit level-0 document section."""
        return cls(text="", level=0, kind=SectionKind.ROOT)

    @property
    def is_root(self) -> bool:
        return self.kind is SectionKind.ROOT

    @property
    def title(self) -> str:
        """Heading text with surrounding whitespace removed."""
        return self.text.strip()

    @property
    def heading_line(self) -> str:
        return "#" * self.level + self.text

    def append_child(self, section: "Section") -> "Section":
        self.children.append(section)
        return section

    def renumber_levels(self, start_level: int) -> None:
        """Move this section to start_level, shifting the subtree by the same amount.

        Relative nesting is preserved: a section N levels below its parent
        stays N levels below. Callers must keep the result within 1-6.

        Args:
            start_level: New level for this section
        """
        self._shift_levels(start_level - self.level)

    def _shift_levels(self, delta: int) -> None:
        self.level += delta
        for child in self.children:
            child._shift_levels(delta)

    def extract_content(
        self,
        content_filter: ContentFilter,
        section_filter: Optional[SectionFilter] = None,
        top_level_only: bool = False,
    ) -> list[ContentNode]:
        """Remove matching content nodes from this section tree.

        Sections failing section_filter are skipped entirely, including
        their sub-sections.

        Args:
            content_filter: Predicate selecting content nodes to remove
            section_filter: Predicate selecting sections to search (None = all)
            top_level_only: Only test direct children of each section's body

        Returns:
            Extracted nodes in document order
        """
        return [
            node
            for _section, node in self.extract_content_with_sections(
                content_filter, section_filter, top_level_only
            )
        ]

    def extract_content_with_sections(
        self,
        content_filter: ContentFilter,
        section_filter: Optional[SectionFilter] = None,
        top_level_only: bool = False,
    ) -> list[tuple["Section", ContentNode]]:
        """Same as extract_content, pairing each node with the section it came from."""
        if section_filter is not None and not section_filter(self):
            return []

        extracted = [
            (self, node)
            for node in self.content.extract_children(
                content_filter, recursive=not top_level_only
            )
        ]
        for child in self.children:
            extracted.extend(
                child.extract_content_with_sections(
                    content_filter, section_filter, top_level_only
                )
            )
        return extracted

    def walk(self) -> Iterator["Section"]:
        """Yield this section and every descendant section in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def stringify(self, indentation: str) -> list[str]:
        """Render the section tree to lines.

        Args:
            indentation: Indentation unit string ("\\t" or N spaces)

        Returns:
            Heading line (unless root), body lines, then sub-section lines
        """
        lines = []
        if self.kind is SectionKind.HEADING:
            lines.append(self.heading_line)
        lines.extend(self.content.stringify(indentation))
        for child in self.children:
            lines.extend(child.stringify(indentation))
        return lines
