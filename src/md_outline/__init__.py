"""Markdown outline parser - parse and restructure heading/list documents.

This package turns plain markdown lines into a two-level tree (headings
nesting sections, indentation nesting list items and continuation text)
and renders it back without changing untouched lines.

Key features:
- Lossless round-trips for tab or N-space indentation
- Recursive extraction of content nodes with section filtering
- Heading level renumbering that preserves relative nesting
- Task sorting and blank line normalization
- Cursor-relative heading and list range detection

Example:
    >>> from md_outline import IndentUnit, parse_lines, render_lines
    >>> unit = IndentUnit(use_tab=False, tab_size=2)
    >>> root = parse_lines(["# Tasks", "- [ ] a", "  - b"], unit)
    >>> root.children[0].content.children[0].children[0].text
    '- b'
    >>> render_lines(root, unit)
    ['# Tasks', '- [ ] a', '  - b']
"""

from md_outline.nodes import ContentNode, NodeKind, Section, SectionKind
from md_outline.parser import (
    BlockParser,
    IndentUnit,
    SectionParser,
    heading_level,
    parse_lines,
    render_lines,
)
from md_outline.ranges import detect_heading_range, detect_list_range
from md_outline.tasks import TaskMatcher, sort_content_recursively
from md_outline.whitespace import (
    add_newline_to_section,
    add_surrounding_blanks,
    normalize_newlines,
    normalize_newlines_recursively,
    strip_surrounding_blanks,
)

__version__ = "0.1.0"

__all__ = [
    "ContentNode",
    "NodeKind",
    "Section",
    "SectionKind",
    "BlockParser",
    "SectionParser",
    "IndentUnit",
    "heading_level",
    "parse_lines",
    "render_lines",
    "detect_heading_range",
    "detect_list_range",
    "TaskMatcher",
    "sort_content_recursively",
    "add_newline_to_section",
    "add_surrounding_blanks",
    "normalize_newlines",
    "normalize_newlines_recursively",
    "strip_surrounding_blanks",
]
