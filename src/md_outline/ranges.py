"""Locate the heading or list surrounding a cursor line.

Ranges are inclusive (start_line, end_line) pairs of 0-based line numbers.
"""

import re
from typing import Optional

from md_outline.parser import INDENTED_LINE_PATTERN, LIST_ITEM_PATTERN, heading_level

LineRange = tuple[int, int]


def detect_heading_range(lines: list[str], cursor_line: int) -> Optional[LineRange]:
    """Find the heading section containing the cursor.

    Walks up from the cursor to the nearest heading, then down until the
    next heading of the same or a shallower level.

    Args:
        lines: Document lines
        cursor_line: 0-based cursor line

    Returns:
        Inclusive line range, or None if no heading is above the cursor

    Examples:
        >>> detect_heading_range(["# a", "text", "## b", "# c"], 1)
        (0, 2)
    """
    start = None
    level = None
    for line_number in range(min(cursor_line, len(lines) - 1), -1, -1):
        level = heading_level(lines[line_number])
        if level is not None:
            start = line_number
            break

    if start is None:
        return None

    closing_pattern = re.compile(rf"^#{{1,{level}}}\s")
    end = start
    for line_number in range(start + 1, len(lines)):
        if closing_pattern.match(lines[line_number]):
            break
        end = line_number

    return start, end


def _is_list_line(line: str) -> bool:
    return bool(LIST_ITEM_PATTERN.match(line) or INDENTED_LINE_PATTERN.match(line))


def detect_list_range(lines: list[str], cursor_line: int) -> Optional[LineRange]:
    """Find the run of list item and indented lines containing the cursor.

    Args:
        lines: Document lines
        cursor_line: 0-based cursor line

    Returns:
        Inclusive line range, or None if the cursor is not on a list line

    Examples:
        >>> detect_list_range(["text", "- a", "\\t- b", "text"], 2)
        (1, 2)
    """
    if not 0 <= cursor_line < len(lines) or not _is_list_line(lines[cursor_line]):
        return None

    start = cursor_line
    while start > 0 and _is_list_line(lines[start - 1]):
        start -= 1

    end = cursor_line
    while end + 1 < len(lines) and _is_list_line(lines[end + 1]):
        end += 1

    return start, end
