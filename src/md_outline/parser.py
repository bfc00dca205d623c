"""Markdown parser for heading and list structured documents.

Parsing happens in two layers:

- SectionParser splits lines at headings ("#" to "######" followed by
  whitespace) and nests sections by heading level.
- BlockParser turns each section's body into a ContentNode tree, nesting
  list items and their continuation text by indentation.

Both layers use a stack of open nodes, so parsing is a single pass with no
lookahead. Rendering the result with the same indentation unit reproduces
the input exactly.
"""

import re
from dataclasses import dataclass
from typing import Optional

from md_outline.nodes import ContentNode, NodeKind, Section

HEADING_PATTERN = re.compile(r"^(#{1,6})\s")
LIST_ITEM_PATTERN = re.compile(r"^[ \t]*(?:[-*+]|\d+\.)[ \t]")
INDENTED_LINE_PATTERN = re.compile(r"^[ \t]+")
LEADING_WHITESPACE_PATTERN = re.compile(r"^[ \t]*")
CODE_FENCE_PATTERN = re.compile(r"^[ \t]*(?:(?:[-*+]|\d+\.)[ \t]+)?(`{3,}|~{3,})")


@dataclass(frozen=True)
class IndentUnit:
    """Indentation unit: one tab, or tab_size spaces.

    Attributes:
        use_tab: Render nesting with tabs instead of spaces
        tab_size: Number of spaces making one level (also used to read
                  space-indented lines when use_tab is set)
    """

    use_tab: bool = True
    tab_size: int = 4

    @property
    def text(self) -> str:
        return "\t" if self.use_tab else " " * self.tab_size

    def level_of(self, whitespace: str) -> int:
        """Count indentation levels in a run of leading whitespace.

        Every tab is one level; spaces count one level per tab_size, rounded down.

        Examples:
            >>> IndentUnit(use_tab=False, tab_size=4).level_of("      ")
            1
            >>> IndentUnit().level_of("\\t\\t  ")
            2
        """
        tabs = whitespace.count("\t")
        spaces = len(whitespace) - tabs
        return tabs + spaces // self.tab_size


def leading_whitespace(line: str) -> str:
    return LEADING_WHITESPACE_PATTERN.match(line).group(0)


def heading_level(line: str) -> Optional[int]:
    """Return the heading level of a line, or None if it is not a heading."""
    match = HEADING_PATTERN.match(line)
    return len(match.group(1)) if match else None


def _fence_token(line: str) -> Optional[str]:
    match = CODE_FENCE_PATTERN.match(line)
    if match is None:
        return None
    token = match.group(1)
    # "```code```" is inline code: a backtick fence's info string has no backticks
    if token[0] == "`" and "`" in line[match.end():]:
        return None
    return token


def _closes_fence(line: str, opening: str) -> bool:
    token = _fence_token(line)
    return token is not None and token[0] == opening[0] and len(token) >= len(opening)


class BlockParser:
    """Builds a ContentNode tree from non-heading lines.

    Rules:
    - A list item nests under the closest open list item with a smaller depth.
    - Indented plain text attaches to the deepest open list item whose depth
      does not exceed its own (continuation text), otherwise to the root.
    - Unindented plain text (blank lines included) closes all open lists.
    - Plain text never opens a nesting context.
    - Lines of a fenced code block stay with the parent of the opening fence.

    Misaligned indentation is attached to the nearest fitting ancestor, keeps
    its exact whitespace and never raises.
    """

    def __init__(self, unit: IndentUnit = IndentUnit()):
        """Initialize parser.

        Args:
            unit: Indentation unit used for depth arithmetic and rendering
        """
        self.unit = unit

    def indentation_level(self, line: str) -> int:
        """Indentation depth of a line in units."""
        return self.unit.level_of(leading_whitespace(line))

    def parse(self, lines: list[str]) -> ContentNode:
        """Parse lines into a content tree.

        Args:
            lines: Lines without trailing newlines

        Returns:
            Root sentinel owning the top-level nodes
        """
        root = ContentNode.root()
        # Open contexts: (depth, node, rendered prefix of the node)
        stack: list[tuple[int, ContentNode, str]] = [(-1, root, "")]
        fence: Optional[tuple[str, ContentNode, str]] = None

        for line in lines:
            if fence is not None:
                opening, parent, prefix = fence
                self._attach(parent, prefix, line, NodeKind.TEXT)
                if _closes_fence(line, opening):
                    fence = None
                continue

            if LIST_ITEM_PATTERN.match(line):
                depth = self.indentation_level(line)
                while stack[-1][0] >= depth:
                    stack.pop()
                _, parent, parent_prefix = stack[-1]
                node, prefix = self._attach(parent, parent_prefix, line, NodeKind.LIST_ITEM)
                stack.append((depth, node, prefix))
                if opening := _fence_token(line):
                    fence = (opening, node, prefix)
                continue

            if INDENTED_LINE_PATTERN.match(line):
                depth = self.indentation_level(line)
                while stack[-1][0] > depth:
                    stack.pop()
            else:
                del stack[1:]

            _, parent, parent_prefix = stack[-1]
            self._attach(parent, parent_prefix, line, NodeKind.TEXT)
            if opening := _fence_token(line):
                fence = (opening, parent, parent_prefix)

        return root

    def _attach(
        self, parent: ContentNode, parent_prefix: str, line: str, kind: NodeKind
    ) -> tuple[ContentNode, str]:
        """Create a node for line under parent, remembering its relative indent.

        Lines that do not extend the parent's prefix (mixed tabs and spaces,
        fenced code left of its fence) keep their absolute whitespace instead.
        """
        if line.startswith(parent_prefix):
            rest = line[len(parent_prefix):]
            indent = leading_whitespace(rest)
            node = ContentNode(text=rest[len(indent):], kind=kind, indent=indent)
        else:
            whitespace = leading_whitespace(line)
            node = ContentNode(
                text=line[len(whitespace):], kind=kind, absolute_indent=whitespace
            )

        parent.children.append(node)
        return node, parent.child_prefix(node, parent_prefix, self.unit.text)


class SectionParser:
    """Builds a Section tree from document lines.

    A heading closes every open section of the same or deeper level; a jump
    of several levels still nests just once under the open section.
    """

    def __init__(self, block_parser: BlockParser):
        self.block_parser = block_parser

    @property
    def indentation(self) -> str:
        return self.block_parser.unit.text

    def parse(self, lines: list[str]) -> Section:
        """Parse lines into a section tree.

        Args:
            lines: Document lines without trailing newlines

        Returns:
            Level-0 root section; lines before the first heading are its content
        """
        root = Section.root()
        stack = [root]
        body: list[str] = []
        fence: Optional[str] = None

        for line in lines:
            if fence is not None:
                body.append(line)
                if _closes_fence(line, fence):
                    fence = None
                continue

            level = heading_level(line)
            if level is None:
                body.append(line)
                fence = _fence_token(line)
                continue

            stack[-1].content = self.block_parser.parse(body)
            body = []

            while stack[-1].level >= level:
                stack.pop()
            section = Section(text=line[level:], level=level)
            stack[-1].append_child(section)
            stack.append(section)

        stack[-1].content = self.block_parser.parse(body)
        return root

    def stringify(self, section: Section) -> list[str]:
        """Render a section tree with this parser's indentation unit."""
        return section.stringify(self.indentation)


def parse_lines(lines: list[str], unit: IndentUnit = IndentUnit()) -> Section:
    """Parse document lines into a section tree.

    Examples:
        >>> root = parse_lines(["# H1", "- item"])
        >>> root.children[0].title
        'H1'
    """
    return SectionParser(BlockParser(unit)).parse(lines)


def render_lines(section: Section, unit: IndentUnit = IndentUnit()) -> list[str]:
    """Render a section tree back to lines."""
    return section.stringify(unit.text)
