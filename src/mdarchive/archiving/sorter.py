"""Sort tasks in the list under the cursor."""

from md_outline import BlockParser, TaskMatcher, detect_list_range, sort_content_recursively

from mdarchive.models.config import ArchiverSettings
from mdarchive.services.file_operations import LineBuffer
from mdarchive.utils.logging import get_logger

logger = get_logger(__name__)


class TaskListSorter:
    """Reorders a list so plain items come first, then open tasks, then done tasks."""

    def __init__(self, settings: ArchiverSettings):
        self.settings = settings
        self.block_parser = BlockParser(settings.indentation.unit)
        self.task_matcher = TaskMatcher(settings.archive_all_checked_task_types)

    def sort_list_under_cursor(self, buffer: LineBuffer) -> bool:
        """Sort the list containing the cursor line, at every nesting depth.

        Args:
            buffer: Document with cursor

        Returns:
            True if a list was sorted, False if the cursor is not on a list
        """
        list_range = detect_list_range(buffer.lines, buffer.cursor_line)
        if list_range is None:
            logger.warning("no_list_under_cursor", target=buffer.name, line=buffer.cursor_line)
            return False

        root = self.block_parser.parse(buffer.get_range(list_range))
        sort_content_recursively(root, self.task_matcher)
        buffer.replace_range(list_range, root.stringify(self.block_parser.unit.text))

        logger.info("list_sorted", target=buffer.name, start=list_range[0], end=list_range[1])
        return True
