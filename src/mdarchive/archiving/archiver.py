"""Move completed tasks and finished headings into an archive section.

Every operation follows the same cycle: read the target's lines, parse
them into a section tree, mutate the tree, render and write it back.
Nothing is kept between operations.
"""

import re
from datetime import datetime
from typing import Callable, Optional

from md_outline import (
    BlockParser,
    ContentNode,
    NodeKind,
    Section,
    SectionParser,
    TaskMatcher,
    add_newline_to_section,
    add_surrounding_blanks,
    detect_heading_range,
    strip_surrounding_blanks,
)

from mdarchive.archiving.date_tree import DateTreeResolver
from mdarchive.archiving.metadata import MetadataService, parse_front_matter, split_front_matter
from mdarchive.models.config import ArchiverSettings
from mdarchive.services.exceptions import ArchiveTargetError
from mdarchive.services.file_operations import DiskFile, LineBuffer, LineTarget
from mdarchive.utils.logging import get_logger

logger = get_logger(__name__)

ACTIVE_FILE_PLACEHOLDER = "%"

ArchiveFileResolver = Callable[[LineTarget], LineTarget]
TreeEditor = Callable[[Section], None]


def build_archive_file_name(template: str, active_name: str) -> str:
    """Archive file name for a source file.

    Examples:
        >>> build_archive_file_name("% (archive)", "notes")
        'notes (archive).md'
    """
    return f"{template.replace(ACTIVE_FILE_PLACEHOLDER, active_name)}.md"


def compile_user_pattern(pattern: str) -> Optional[re.Pattern]:
    """Compile a configured regular expression; an invalid one gives None."""
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning("invalid_pattern", pattern=pattern, error=str(e))
        return None


class Archiver:
    """Archives completed tasks and headings within markdown documents.

    Example:
        >>> archiver = Archiver(ArchiverSettings())
        >>> buffer = LineBuffer(["- [x] foo", "- [ ] bar", "# Archived"])
        >>> archiver.archive_tasks(buffer)
        'Archived 1 tasks'
        >>> buffer.lines
        ['- [ ] bar', '# Archived', '', '- [x] foo', '']
    """

    def __init__(
        self,
        settings: ArchiverSettings,
        date_tree_resolver: Optional[DateTreeResolver] = None,
        metadata_service: Optional[MetadataService] = None,
        archive_file_resolver: Optional[ArchiveFileResolver] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize archiver.

        Args:
            settings: Archiver settings
            date_tree_resolver: Date bucket resolver (default: built from settings.dates)
            metadata_service: Task metadata appender (default: built from settings.metadata)
            archive_file_resolver: Maps the active target to its separate archive
                target (default: sibling file named from settings.separate_file_name)
            clock: Source of the current moment for date labels and metadata
        """
        self.settings = settings
        self.parser = SectionParser(BlockParser(settings.indentation.unit))
        self.task_matcher = TaskMatcher(settings.archive_all_checked_task_types)
        self.date_tree_resolver = date_tree_resolver or DateTreeResolver.from_settings(
            settings.dates, clock
        )
        self.metadata_service = metadata_service or MetadataService(settings.metadata, clock)
        self.archive_file_resolver = archive_file_resolver or self._sibling_archive_file
        self.additional_task_pattern = compile_user_pattern(settings.additional_task_pattern)
        self.replacement_pattern = (
            compile_user_pattern(settings.text_replacement.regex)
            if settings.text_replacement.apply_replacement
            else None
        )

    def parse(self, lines: list[str]) -> Section:
        return self.parser.parse(lines)

    def stringify(self, tree: Section) -> list[str]:
        return self.parser.stringify(tree)

    def archive_tasks(self, target: LineTarget) -> str:
        """Move completed top-level tasks into the archive section.

        Args:
            target: Document to archive tasks in

        Returns:
            Status message for the user
        """
        if self.settings.archive_to_separate_file:
            archive_target = self.archive_file_resolver(target)
            tasks = self._extract_tasks_from_target(target)
            self._edit_tree(archive_target, lambda tree: self.archive_nodes_to_root(tasks, tree))
        else:
            lines = target.read_lines()
            tree = self.parse(lines)
            tasks = self._extract_tasks(tree, lines)
            self.archive_nodes_to_root(tasks, tree)
            target.write_lines(self.stringify(tree))

        logger.info("tasks_archived", target=target.name, count=len(tasks))
        if not tasks:
            return "No tasks to archive"
        return f"Archived {len(tasks)} tasks"

    def delete_tasks(self, target: LineTarget) -> str:
        """Remove completed top-level tasks from the document.

        Returns:
            Status message for the user
        """
        tree = self.parse(target.read_lines())
        tasks = tree.extract_content(
            self.is_completed_task, self.is_not_archive, top_level_only=True
        )
        target.write_lines(self.stringify(tree))

        logger.info("tasks_deleted", target=target.name, count=len(tasks))
        if not tasks:
            return "No tasks to delete"
        return f"Deleted {len(tasks)} tasks"

    def archive_heading_under_cursor(self, buffer: LineBuffer) -> Optional[Section]:
        """Cut the heading under the cursor and file it under the archive heading.

        The heading is renumbered to sit one level below the archive heading,
        keeping its sub-headings' relative depth.

        Args:
            buffer: Document with cursor

        Returns:
            The archived section, or None if no heading is above the cursor
        """
        heading_range = detect_heading_range(buffer.lines, buffer.cursor_line)
        if heading_range is None:
            logger.warning("no_heading_under_cursor", target=buffer.name, line=buffer.cursor_line)
            return None

        archive_target = (
            self.archive_file_resolver(buffer)
            if self.settings.archive_to_separate_file
            else buffer
        )

        heading_lines = buffer.get_range(heading_range)
        buffer.replace_range(heading_range, [""])
        section = self.parse(heading_lines).children[0]

        def move_section(tree: Section) -> None:
            archive_section = self.get_archive_section(tree)
            section.renumber_levels(archive_section.level + 1)
            archive_section.append_child(section)

        self._edit_tree(archive_target, move_section)
        logger.info("heading_archived", target=buffer.name, heading=section.title)
        return section

    def archive_nodes_to_root(self, nodes: list[ContentNode], root: Section) -> None:
        """Merge nodes into the archive section of root (created if missing)."""
        archive_section = self.get_archive_section(root)
        content = archive_section.content

        if self.settings.add_newlines_around_headings:
            content.children = strip_surrounding_blanks(content.children)

        if nodes:
            bucket = self.date_tree_resolver.merge_new_nodes_with_date_tree(content, nodes)
            logger.debug("archive_bucket_resolved", bucket=bucket.text, count=len(nodes))

        if self.settings.add_newlines_around_headings:
            content.children = add_surrounding_blanks(content.children)

    def get_archive_section(self, root: Section) -> Section:
        """Find the archive section among root's top-level sections, or append one.

        Args:
            root: Document root section

        Returns:
            Existing or newly created archive section
        """
        for section in root.children:
            if self.is_archive(section):
                return section

        if self.settings.add_newlines_around_headings:
            add_newline_to_section(root)

        archive_section = Section(
            text=f" {self.settings.archive_heading}",
            level=self.settings.archive_heading_depth,
        )
        root.append_child(archive_section)
        logger.debug("archive_section_created", level=archive_section.level)
        return archive_section

    def is_archive(self, section: Section) -> bool:
        return section.title.endswith(self.settings.archive_heading)

    def is_not_archive(self, section: Section) -> bool:
        return not self.is_archive(section)

    def is_completed_task(self, node: ContentNode) -> bool:
        """Completed list item that also matches the additional task pattern.

        An additional pattern that does not compile matches nothing.
        """
        if node.kind is not NodeKind.LIST_ITEM:
            return False
        if not self.task_matcher.is_completed_task(node.text):
            return False
        if not self.settings.additional_task_pattern:
            return True
        pattern = self.additional_task_pattern
        return pattern is not None and pattern.search(node.text) is not None

    def replace_text(self, text: str) -> str:
        """Apply the configured replacement to an archived task line."""
        if self.replacement_pattern is None:
            return text
        try:
            return self.replacement_pattern.sub(
                self.settings.text_replacement.replacement, text, count=1
            )
        except re.error as e:
            logger.warning("invalid_replacement", error=str(e))
            return text

    def _extract_tasks(self, tree: Section, lines: list[str]) -> list[ContentNode]:
        extracted = tree.extract_content_with_sections(
            self.is_completed_task, self.is_not_archive, top_level_only=True
        )
        for _section, task in extracted:
            task.text = self.replace_text(task.text)
        if self.metadata_service.enabled:
            front_matter = parse_front_matter(split_front_matter(lines))
            for section, task in extracted:
                self.metadata_service.append_metadata(task, section.title, front_matter)
        return [task for _section, task in extracted]

    def _extract_tasks_from_target(self, target: LineTarget) -> list[ContentNode]:
        lines = target.read_lines()
        tree = self.parse(lines)
        tasks = self._extract_tasks(tree, lines)
        target.write_lines(self.stringify(tree))
        return tasks

    def _edit_tree(self, target: LineTarget, edit: TreeEditor) -> None:
        tree = self.parse(target.read_lines())
        edit(tree)
        target.write_lines(self.stringify(tree))

    def _sibling_archive_file(self, target: LineTarget) -> LineTarget:
        if target.path is None:
            raise ArchiveTargetError(target.name, "Cannot place an archive file next to an unsaved document")
        file_name = build_archive_file_name(self.settings.separate_file_name, target.name)
        return DiskFile(target.path.parent / file_name)
