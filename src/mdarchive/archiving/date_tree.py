"""Date tree resolution for archived content.

Archived tasks can be grouped under date bullets, e.g. a bullet for the
current week holding a bullet for the current day:

    - [[2024-03-W-11]]
        - [[2024-03-14]]
            - [x] archived task

Each enabled DateLevel contributes one bullet to the path. A bullet is
reused only when it sits exactly where the path expects it, so a day
bullet left at the top level (from before weeks were enabled) is not
picked up under a new week bullet.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from md_outline import ContentNode

from mdarchive.models.config import DateLevelSettings
from mdarchive.utils.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def wrap_label(label: str) -> str:
    """Format a label as a bullet linking to the note of that name.

    Examples:
        >>> wrap_label("2024-03-14")
        '- [[2024-03-14]]'
    """
    return f"- [[{label}]]"


@dataclass(frozen=True)
class DateLevel:
    """One level of the date tree.

    Attributes:
        name: Level name for logging ("week", "day")
        date_format: strftime template producing the label
        enabled: Whether this level contributes a bullet
    """

    name: str
    date_format: str
    enabled: bool = True

    def label(self, moment: datetime) -> str:
        return moment.strftime(self.date_format)


def date_levels_from_settings(settings: DateLevelSettings) -> list[DateLevel]:
    """Build the ordered week/day levels from settings."""
    return [
        DateLevel("week", settings.weekly_note_format, settings.use_weeks),
        DateLevel("day", settings.daily_note_format, settings.use_days),
    ]


class DateTreeResolver:
    """Upserts a path of date bullets and appends new nodes under it."""

    def __init__(self, levels: Sequence[DateLevel], clock: Clock = datetime.now):
        """Initialize resolver.

        Args:
            levels: Date levels from outermost to innermost
            clock: Source of the current moment
        """
        self.levels = list(levels)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: DateLevelSettings, clock: Clock = datetime.now) -> "DateTreeResolver":
        return cls(date_levels_from_settings(settings), clock)

    def merge_new_nodes_with_date_tree(
        self, root: ContentNode, new_nodes: list[ContentNode]
    ) -> ContentNode:
        """Append new nodes under the date path for the current moment.

        For every enabled level, the direct children of the node resolved so
        far are searched for the level's bullet (first exact match wins); a
        missing bullet is appended. With no enabled levels the nodes go
        directly under root.

        Args:
            root: Node the date path starts from (e.g. the archive section body)
            new_nodes: Nodes to append, in order, with their subtrees

        Returns:
            The node the new nodes were appended to
        """
        moment = self._clock()
        current = root

        for level in self.levels:
            if not level.enabled:
                continue
            current = self._find_or_create(current, wrap_label(level.label(moment)))
            logger.debug("date_level_resolved", level=level.name, label=current.text)

        for node in new_nodes:
            current.append_child(node)

        return current

    @staticmethod
    def _find_or_create(parent: ContentNode, text: str) -> ContentNode:
        for child in parent.children:
            if child.text == text:
                return child
        return parent.append_child(ContentNode.from_text(text))
