"""Task line classification and sorting."""

import re
from dataclasses import dataclass

from md_outline.nodes import ContentNode, NodeKind

BULLET_SIGN = r"(?:[-*+]|\d+\.)"


@dataclass(frozen=True)
class TaskMatcher:
    """Classifies list items as tasks and completed tasks.

    By default a task is "<marker> [ ]" or "<marker> [x]" and only a
    lowercase "x" marks completion. With all_checked_types, any checkbox
    symbol makes a task and any non-space symbol ("[-]", "[>]", "[X]")
    counts as completed.
    """

    all_checked_types: bool = False

    @property
    def task_pattern(self) -> re.Pattern:
        symbols = r"[^\]]" if self.all_checked_types else r"[x ]"
        return re.compile(rf"^{BULLET_SIGN} \[{symbols}\]")

    @property
    def completed_task_pattern(self) -> re.Pattern:
        symbols = r"[^ \]]" if self.all_checked_types else r"x"
        return re.compile(rf"^{BULLET_SIGN} \[{symbols}\]")

    def is_task(self, text: str) -> bool:
        return self.task_pattern.match(text) is not None

    def is_completed_task(self, text: str) -> bool:
        return self.completed_task_pattern.match(text) is not None

    def is_incomplete_task(self, text: str) -> bool:
        return self.is_task(text) and not self.is_completed_task(text)


def sort_content_recursively(root: ContentNode, matcher: TaskMatcher = TaskMatcher()) -> None:
    """Order children as: plain lines, incomplete tasks, completed tasks.

    Relative order inside each group is preserved and the same ordering is
    applied at every depth. Sorting twice gives the same result as once.
    Only list items count as tasks, so fenced lines keep their order.

    Args:
        root: Node whose subtree is sorted in place
        matcher: Task classification rules
    """
    non_tasks = []
    incomplete = []
    completed = []
    for child in root.children:
        if child.kind is not NodeKind.LIST_ITEM:
            non_tasks.append(child)
        elif matcher.is_completed_task(child.text):
            completed.append(child)
        elif matcher.is_task(child.text):
            incomplete.append(child)
        else:
            non_tasks.append(child)
    root.children = non_tasks + incomplete + completed

    for child in root.children:
        sort_content_recursively(child, matcher)
