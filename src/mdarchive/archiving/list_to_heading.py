"""Turn the list under the cursor into a heading hierarchy.

Every list item down to the cursor's depth becomes a heading one level
below its parent, starting right below the heading the list sits under.
Deeper items and continuation text become the body of the new headings:

    # Project                # Project
    - Phase 1         ->     ## Phase 1
        - task               - task
"""

import re
from typing import Optional

from md_outline import (
    BlockParser,
    NodeKind,
    Section,
    SectionKind,
    SectionParser,
    detect_heading_range,
    detect_list_range,
    heading_level,
    normalize_newlines_recursively,
)

from mdarchive.models.config import ArchiverSettings
from mdarchive.services.file_operations import LineBuffer
from mdarchive.utils.logging import get_logger

logger = get_logger(__name__)

MAX_HEADING_LEVEL = 6
LIST_ITEM_PREFIX_PATTERN = re.compile(r"^(?:[-*+]|\d+\.)(?:[ \t]+\[[^\]]\])?")


def list_item_title(text: str) -> str:
    """Strip the list marker and checkbox from a list item line.

    Examples:
        >>> list_item_title("- [x] Ship it")
        'Ship it'
        >>> list_item_title("11. Plan")
        'Plan'
    """
    return LIST_ITEM_PREFIX_PATTERN.sub("", text, count=1).strip()


class ListToHeadingTransformer:
    """Converts nested list items into headings."""

    def __init__(self, settings: ArchiverSettings):
        self.settings = settings
        self.block_parser = BlockParser(settings.indentation.unit)
        self.section_parser = SectionParser(self.block_parser)

    def turn_list_items_into_headings(self, buffer: LineBuffer) -> Optional[Section]:
        """Replace the list under the cursor with headings.

        Items nested no deeper than the cursor line are converted. The first
        converted level sits one below the nearest heading above the list, or
        at level 1 when there is none. Levels that would go past 6 stay lists.

        Args:
            buffer: Document with cursor

        Returns:
            Section holding the generated headings, or None if the cursor is
            not on a list
        """
        list_range = detect_list_range(buffer.lines, buffer.cursor_line)
        if list_range is None:
            logger.warning("no_list_under_cursor", target=buffer.name, line=buffer.cursor_line)
            return None

        base_level = self._level_above(buffer.lines, list_range[0])
        max_depth = min(
            self.block_parser.indentation_level(buffer.cursor_text) + 1,
            MAX_HEADING_LEVEL - base_level,
        )

        root = Section(text="", level=base_level, kind=SectionKind.ROOT)
        root.content = self.block_parser.parse(buffer.get_range(list_range))
        self._convert_items(root, 1, max_depth)

        if self.settings.add_newlines_around_headings:
            normalize_newlines_recursively(root)

        buffer.replace_range(list_range, self.section_parser.stringify(root))
        logger.info(
            "list_turned_into_headings",
            target=buffer.name,
            base_level=base_level,
            depth=max_depth,
        )
        return root

    def _convert_items(self, parent: Section, depth: int, max_depth: int) -> None:
        if depth > max_depth:
            return

        content = parent.content
        items = [child for child in content.children if child.kind is NodeKind.LIST_ITEM]
        for item in items:
            content.remove_child(item)
            section = parent.append_child(
                Section(text=f" {list_item_title(item.text)}", level=parent.level + 1)
            )
            for child in item.children:
                section.content.append_child(child)
            self._convert_items(section, depth + 1, max_depth)

    @staticmethod
    def _level_above(lines: list[str], line_number: int) -> int:
        heading_range = detect_heading_range(lines, line_number)
        if heading_range is None:
            return 0
        return heading_level(lines[heading_range[0]]) or 0
