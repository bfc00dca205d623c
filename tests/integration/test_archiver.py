"""Integration tests for archiving and deleting completed tasks."""

import pytest

from mdarchive.archiving import Archiver
from mdarchive.models.config import ArchiverSettings
from mdarchive.services.exceptions import ArchiveTargetError
from mdarchive.services.file_operations import DiskFile, LineBuffer

WEEK = "2021-01-W-00"
DAY = "2021-01-01"


@pytest.fixture
def archive(frozen_clock):
    """Archive completed tasks in an in-memory document and return it."""

    def run(lines, **settings):
        buffer = LineBuffer(lines)
        Archiver(ArchiverSettings(**settings), clock=frozen_clock).archive_tasks(buffer)
        return buffer.lines

    return run


class TestArchiveTopLevelTasks:
    """Test moving top-level tasks to the archive."""

    def test_only_normalizes_whitespace_without_tasks(self, archive):
        """Test that the archive body is normalized even with nothing to move."""
        assert archive(["foo", "bar", "# Archived"]) == ["foo", "bar", "# Archived", ""]

    def test_single_task_to_empty_archive(self, archive):
        """Test moving one task."""
        assert archive(["- [x] foo", "- [ ] bar", "# Archived"]) == [
            "- [ ] bar",
            "# Archived",
            "",
            "- [x] foo",
            "",
        ]

    def test_h2_archive(self, archive):
        """Test an archive heading at level 2."""
        assert archive(["- [x] foo", "- [ ] bar", "## Archived"]) == [
            "- [ ] bar",
            "## Archived",
            "",
            "- [x] foo",
            "",
        ]

    def test_multiple_levels_of_indentation(self, archive):
        """Test that the whole subtree moves with the task."""
        assert archive([
            "- [x] root",
            "\t- child 1",
            "\t\t- child 2",
            "\t\t\t- child 3",
            "\t\t\t\t- [x] child with tasks 4",
            "# Archived",
        ]) == [
            "# Archived",
            "",
            "- [x] root",
            "\t- child 1",
            "\t\t- child 2",
            "\t\t\t- child 3",
            "\t\t\t\t- [x] child with tasks 4",
            "",
        ]

    def test_appends_to_populated_archive(self, archive):
        """Test that tasks go after existing archived tasks."""
        assert archive([
            "- [x] foo",
            "- [x] foo #2",
            "- [ ] bar",
            "- [x] foo #3",
            "# Archived",
            "",
            "- [x] Completed",
            "- [x] Completed #2",
            "",
        ]) == [
            "- [ ] bar",
            "# Archived",
            "",
            "- [x] Completed",
            "- [x] Completed #2",
            "- [x] foo",
            "- [x] foo #2",
            "- [x] foo #3",
            "",
        ]

    def test_sub_items_after_archive_heading(self, archive):
        """Test tasks from sections after the archive, with continuation lines."""
        assert archive([
            "- [ ] bar",
            "# Archived",
            "- [x] Completed",
            "# After archive",
            "Other stuff",
            "- [x] foo",
            "  stuff in the same block",
            "\t- Some info",
            "\t- [ ] A subtask",
        ]) == [
            "- [ ] bar",
            "# Archived",
            "",
            "- [x] Completed",
            "- [x] foo",
            "  stuff in the same block",
            "\t- Some info",
            "\t- [ ] A subtask",
            "",
            "# After archive",
            "Other stuff",
        ]

    def test_only_top_level_tasks(self, archive):
        """Test that completed sub-tasks of open tasks stay."""
        assert archive(["- [ ] bar", "\t- [x] completed sub-task", "- [x] foo", "# Archived"]) == [
            "- [ ] bar",
            "\t- [x] completed sub-task",
            "# Archived",
            "",
            "- [x] foo",
            "",
        ]

    def test_numbered_tasks(self, archive):
        """Test numbered list tasks."""
        assert archive(["1. [x] foo", "# Archived"]) == ["# Archived", "", "1. [x] foo", ""]

    def test_heading_with_special_characters(self, archive):
        """Test that the heading is matched literally."""
        assert archive(
            ["- [x] foo", "- [ ] bar", "# [[Archived]]"], archive_heading="[[Archived]]"
        ) == ["- [ ] bar", "# [[Archived]]", "", "- [x] foo", ""]

    def test_archived_tasks_are_not_archived_again(self, archive):
        """Test that completed tasks already in the archive stay put."""
        lines = ["- [ ] bar", "# Archived", "", "- [x] old", ""]

        assert archive(lines) == lines

    def test_other_checked_types(self, archive):
        """Test archiving any checked symbol when enabled."""
        lines = ["- [-] cancelled", "- [>] deferred", "- [ ] open", "# Archived"]

        assert archive(lines) == lines + [""]
        assert archive(lines, archive_all_checked_task_types=True) == [
            "- [ ] open",
            "# Archived",
            "",
            "- [-] cancelled",
            "- [>] deferred",
            "",
        ]

    @pytest.mark.parametrize(
        "lines,expected",
        [
            (["- [x] foo", "- [x] foo #2", "\t- [x] foo #3"], "Archived 2 tasks"),
            (["- [ ] foo"], "No tasks to archive"),
        ],
    )
    def test_reports_top_level_count(self, frozen_clock, lines, expected):
        """Test the status message."""
        archiver = Archiver(ArchiverSettings(), clock=frozen_clock)

        assert archiver.archive_tasks(LineBuffer(lines)) == expected


class TestCreatingArchive:
    """Test creating a missing archive heading."""

    def test_appends_heading_with_newline(self, archive):
        """Test the heading is appended after a blank line."""
        assert archive(["- Text", "1. [x] foo"]) == [
            "- Text",
            "",
            "# Archived",
            "",
            "1. [x] foo",
            "",
        ]

    def test_without_newlines(self, archive):
        """Test that no blank lines are added when disabled."""
        assert archive(
            ["- [x] foo", "Some text"], add_newlines_around_headings=False
        ) == ["Some text", "# Archived", "- [x] foo"]

    def test_heading_depth_from_settings(self, archive):
        """Test the configured depth of a new archive heading."""
        assert archive(["- [x] foo"], archive_heading_depth=3) == [
            "### Archived",
            "",
            "- [x] foo",
            "",
        ]

    def test_nothing_to_archive_still_creates_heading(self, archive):
        """Test that the archive heading is created with a blank body."""
        assert archive(["- [ ] open"]) == ["- [ ] open", "", "# Archived", ""]

    def test_blank_line_after_last_subsection(self, archive):
        """Test that the blank line goes after the last section's body."""
        assert archive(["- [x] foo", "# Notes", "text"]) == [
            "# Notes",
            "text",
            "",
            "# Archived",
            "",
            "- [x] foo",
            "",
        ]


class TestDateTree:
    """Test archiving under date bullets."""

    def test_week_bullet(self, archive):
        """Test archiving under the current week."""
        assert archive(["- [x] foo", "- [ ] bar", "# Archived"], dates={"use_weeks": True}) == [
            "- [ ] bar",
            "# Archived",
            "",
            f"- [[{WEEK}]]",
            "\t- [x] foo",
            "",
        ]

    def test_indentation_from_settings(self, archive):
        """Test that nesting under the bullet uses the configured unit."""
        assert archive(
            ["- [x] foo", "# Archived"],
            dates={"use_weeks": True},
            indentation={"use_tab": False, "tab_size": 3},
        ) == ["# Archived", "", f"- [[{WEEK}]]", "   - [x] foo", ""]

    def test_appends_under_existing_week(self, archive):
        """Test reuse of the current week bullet."""
        assert archive(
            [
                "- [x] foo",
                "# Archived",
                "- [[old week]]",
                "\t- [x] old task",
                f"- [[{WEEK}]]",
                "\t- [x] baz",
            ],
            dates={"use_weeks": True},
        ) == [
            "# Archived",
            "",
            "- [[old week]]",
            "\t- [x] old task",
            f"- [[{WEEK}]]",
            "\t- [x] baz",
            "\t- [x] foo",
            "",
        ]

    def test_day_bullet(self, archive):
        """Test archiving under the current day."""
        assert archive(["- [x] foo", "- [ ] bar", "# Archived"], dates={"use_days": True}) == [
            "- [ ] bar",
            "# Archived",
            "",
            f"- [[{DAY}]]",
            "\t- [x] foo",
            "",
        ]

    @pytest.mark.parametrize(
        "archive_body",
        [
            [],
            ["", f"- [[{WEEK}]]"],
            ["", f"- [[{WEEK}]]", f"\t- [[{DAY}]]"],
        ],
    )
    def test_week_and_day(self, archive, archive_body):
        """Test creating or reusing the week and day path."""
        lines = ["- [x] foo", "- [ ] bar", "# Archived"] + archive_body

        assert archive(lines, dates={"use_weeks": True, "use_days": True}) == [
            "- [ ] bar",
            "# Archived",
            "",
            f"- [[{WEEK}]]",
            f"\t- [[{DAY}]]",
            "\t\t- [x] foo",
            "",
        ]

    def test_day_without_week(self, archive):
        """Test that a day bullet outside the week is left alone."""
        assert archive(
            ["- [x] foo", "- [ ] bar", "# Archived", "", f"- [[{DAY}]]"],
            dates={"use_weeks": True, "use_days": True},
        ) == [
            "- [ ] bar",
            "# Archived",
            "",
            f"- [[{DAY}]]",
            f"- [[{WEEK}]]",
            f"\t- [[{DAY}]]",
            "\t\t- [x] foo",
            "",
        ]

    def test_no_tasks_creates_no_bullets(self, archive):
        """Test that empty date bullets are not created."""
        assert archive(["- [ ] bar", "# Archived"], dates={"use_days": True}) == [
            "- [ ] bar",
            "# Archived",
            "",
        ]


class TestMetadata:
    """Test metadata appended to archived tasks."""

    def test_appends_heading_date_and_front_matter(self, archive):
        """Test all placeholders on archived tasks."""
        assert archive(
            [
                "---",
                "project: home",
                "---",
                "# Chores",
                "- [x] dishes",
                "\t- [x] cups",
                "# Archived",
            ],
            metadata={
                "add_metadata": True,
                "metadata": "from:: {{heading}} on:: {{date}} {{frontmatter}}",
            },
        ) == [
            "---",
            "project: home",
            "---",
            "# Chores",
            "# Archived",
            "",
            "- [x] dishes from:: Chores on:: 2021-01-01 project:: home",
            "\t- [x] cups",
            "",
        ]

    def test_disabled_metadata_leaves_tasks(self, archive):
        """Test that the template is ignored when disabled."""
        assert archive(
            ["- [x] foo", "# Archived"], metadata={"metadata": "{{date}}"}
        ) == ["# Archived", "", "- [x] foo", ""]


class TestDeleteTasks:
    """Test deleting completed tasks."""

    def test_deletes_completed_tasks(self, frozen_clock):
        """Test that completed top-level tasks are removed."""
        buffer = LineBuffer(["- [x] foo", "- [ ] bar"])

        message = Archiver(ArchiverSettings(), clock=frozen_clock).delete_tasks(buffer)

        assert buffer.lines == ["- [ ] bar"]
        assert message == "Deleted 1 tasks"

    def test_keeps_archive_and_nested_tasks(self, frozen_clock):
        """Test that archived and nested completed tasks stay."""
        lines = ["- [ ] bar", "\t- [x] sub", "# Archived", "- [x] old"]
        buffer = LineBuffer(lines)

        message = Archiver(ArchiverSettings(), clock=frozen_clock).delete_tasks(buffer)

        assert buffer.lines == lines
        assert message == "No tasks to delete"


class TestSeparateFile:
    """Test archiving into a separate file."""

    def test_archive_to_separate_target(self, frozen_clock):
        """Test that tasks land in the resolved archive target."""
        active = LineBuffer(["- [x] foo", "- [ ] bar"])
        archive_target = LineBuffer([""])
        archiver = Archiver(
            ArchiverSettings(archive_to_separate_file=True),
            archive_file_resolver=lambda target: archive_target,
            clock=frozen_clock,
        )

        assert archiver.archive_tasks(active) == "Archived 1 tasks"
        assert active.lines == ["- [ ] bar"]
        assert archive_target.lines == ["", "# Archived", "", "- [x] foo", ""]

    def test_default_archive_file_name(self, tmp_path, frozen_clock):
        """Test the sibling file named after the active file."""
        path = tmp_path / "Daily.md"
        path.write_text("- [x] foo\n- [ ] bar")
        archiver = Archiver(ArchiverSettings(archive_to_separate_file=True), clock=frozen_clock)

        archiver.archive_tasks(DiskFile(path))

        assert path.read_text() == "- [ ] bar"
        assert (tmp_path / "Daily (archive).md").read_text() == "\n# Archived\n\n- [x] foo\n"

    def test_custom_archive_file_name(self, tmp_path, frozen_clock):
        """Test a configured file name template."""
        path = tmp_path / "todo.md"
        path.write_text("- [x] foo")
        archiver = Archiver(
            ArchiverSettings(archive_to_separate_file=True, separate_file_name="archive/%-done"),
            clock=frozen_clock,
        )
        (tmp_path / "archive").mkdir()

        archiver.archive_tasks(DiskFile(path))

        assert (tmp_path / "archive" / "todo-done.md").exists()

    def test_unsaved_buffer_has_no_sibling(self, frozen_clock):
        """Test that a buffer without a path cannot use the default file name."""
        archiver = Archiver(ArchiverSettings(archive_to_separate_file=True), clock=frozen_clock)

        with pytest.raises(ArchiveTargetError, match="unsaved document"):
            archiver.archive_tasks(LineBuffer(["- [x] foo"]))

    def test_archive_target_is_directory(self, tmp_path, frozen_clock):
        """Test that a directory in place of the archive file is rejected."""
        path = tmp_path / "todo.md"
        path.write_text("- [x] foo")
        (tmp_path / "todo (archive).md").mkdir()
        archiver = Archiver(ArchiverSettings(archive_to_separate_file=True), clock=frozen_clock)

        with pytest.raises(ArchiveTargetError):
            archiver.archive_tasks(DiskFile(path))


class TestArchiveHeading:
    """Test archiving the heading under the cursor."""

    def run(self, lines, cursor_line=0, **settings):
        buffer = LineBuffer(lines, cursor_line=cursor_line)
        section = Archiver(ArchiverSettings(**settings)).archive_heading_under_cursor(buffer)
        return buffer, section

    def test_base_case(self):
        """Test moving a heading under the archive."""
        buffer, section = self.run(["# h1", "", "# Archived", ""])

        assert buffer.lines == ["", "# Archived", "", "## h1", ""]
        assert section.level == 2

    def test_single_line_heading(self):
        """Test a heading with no body."""
        buffer, _ = self.run(["# h1", "# Archived", ""])

        assert buffer.lines == ["", "# Archived", "", "## h1"]

    def test_nested_heading(self):
        """Test archiving a sub-heading found by walking up from the cursor."""
        buffer, _ = self.run(["# h1", "## h2", "text", "# Archived", ""], cursor_line=2)

        assert buffer.lines == ["# h1", "", "# Archived", "", "## h2", "text"]

    def test_sub_headings_keep_relative_depth(self):
        """Test that sub-headings are renumbered with their parent."""
        buffer, _ = self.run(["# h1", "### h3", "# Archived"], archive_heading_depth=1)

        assert buffer.lines == ["", "# Archived", "## h1", "#### h3"]

    def test_no_heading_under_cursor(self):
        """Test that text without a heading above is untouched."""
        buffer, section = self.run(["text"])

        assert buffer.lines == ["text"]
        assert section is None

    def test_creates_archive_heading(self):
        """Test archiving when the archive heading does not exist yet."""
        buffer, _ = self.run(["intro", "# h1", "body"], cursor_line=1)

        assert buffer.lines == ["intro", "", "# Archived", "## h1", "body"]

    def test_moves_to_separate_file(self):
        """Test archiving a heading into a separate target."""
        buffer = LineBuffer(["# h1", "# Archived", ""])
        archive_target = LineBuffer([""])
        archiver = Archiver(
            ArchiverSettings(archive_to_separate_file=True),
            archive_file_resolver=lambda target: archive_target,
        )

        archiver.archive_heading_under_cursor(buffer)

        assert buffer.lines == ["", "# Archived", ""]
        assert archive_target.lines == ["", "# Archived", "## h1"]


class TestUntouchedContent:
    """Test that content which is not archived is written back unchanged."""

    def test_mixed_indentation_survives_archiving(self, archive):
        """Test that a space-indented note under a tab-indented item keeps its whitespace."""
        assert archive(["- [x] done", "- [ ] open", "\t- sub", "    note", "# Archived", ""]) == [
            "- [ ] open",
            "\t- sub",
            "    note",
            "# Archived",
            "",
            "- [x] done",
            "",
        ]

    def test_task_lines_in_code_fence_are_not_archived(self, frozen_clock):
        """Test that a checked item inside a fence is code, not a task."""
        lines = ["```markdown", "- [x] example", "```", "# Archived", ""]
        buffer = LineBuffer(lines)

        message = Archiver(ArchiverSettings(), clock=frozen_clock).archive_tasks(buffer)

        assert message == "No tasks to archive"
        assert buffer.lines == lines

    def test_task_lines_in_code_fence_are_not_deleted(self, frozen_clock):
        """Test that deleting leaves fenced task lines alone."""
        buffer = LineBuffer(["```", "- [x] example", "```", "- [x] real"])

        message = Archiver(ArchiverSettings(), clock=frozen_clock).delete_tasks(buffer)

        assert message == "Deleted 1 tasks"
        assert buffer.lines == ["```", "- [x] example", "```"]


class TestAdditionalTaskPattern:
    """Test restricting archived tasks with an extra pattern."""

    def test_only_matching_tasks_are_archived(self, archive):
        """Test that tasks without the pattern stay."""
        assert archive(
            ["- [x] foo #task", "- [x] bar", "# Archived"], additional_task_pattern="#task"
        ) == ["- [x] bar", "# Archived", "", "- [x] foo #task", ""]

    def test_pattern_applies_to_deleting(self, frozen_clock):
        """Test that deleting honours the pattern too."""
        buffer = LineBuffer(["- [x] foo #task", "- [x] bar"])
        archiver = Archiver(ArchiverSettings(additional_task_pattern="#task"), clock=frozen_clock)

        assert archiver.delete_tasks(buffer) == "Deleted 1 tasks"
        assert buffer.lines == ["- [x] bar"]

    def test_invalid_pattern_matches_nothing(self, frozen_clock):
        """Test that an unparsable pattern archives nothing instead of raising."""
        buffer = LineBuffer(["- [x] foo", "# Archived"])
        archiver = Archiver(
            ArchiverSettings(additional_task_pattern="[unclosed"), clock=frozen_clock
        )

        assert archiver.archive_tasks(buffer) == "No tasks to archive"
        assert buffer.lines == ["- [x] foo", "# Archived", ""]


class TestTextReplacement:
    """Test rewriting archived task lines."""

    def test_removes_tag_from_archived_task(self, archive):
        """Test a plain replacement."""
        assert archive(
            ["- [x] foo #task", "- [ ] bar #task", "# Archived"],
            text_replacement={"apply_replacement": True, "regex": r" #task$", "replacement": ""},
        ) == ["- [ ] bar #task", "# Archived", "", "- [x] foo", ""]

    def test_group_reference(self, archive):
        """Test a replacement using a captured group."""
        assert archive(
            ["- [x] foo", "# Archived"],
            text_replacement={
                "apply_replacement": True,
                "regex": r"^- \[x\] (.*)$",
                "replacement": r"- [x] done: \1",
            },
        ) == ["# Archived", "", "- [x] done: foo", ""]

    def test_disabled_replacement(self, archive):
        """Test that the regex is ignored when the replacement is off."""
        assert archive(
            ["- [x] foo #task", "# Archived"],
            text_replacement={"regex": " #task", "replacement": ""},
        ) == ["# Archived", "", "- [x] foo #task", ""]

    @pytest.mark.parametrize(
        "regex,replacement",
        [
            ("(", ""),
            ("foo", r"\9"),
        ],
    )
    def test_invalid_replacement_leaves_task_unchanged(self, archive, regex, replacement):
        """Test that an unparsable regex or replacement keeps the task text."""
        assert archive(
            ["- [x] foo", "# Archived"],
            text_replacement={
                "apply_replacement": True,
                "regex": regex,
                "replacement": replacement,
            },
        ) == ["# Archived", "", "- [x] foo", ""]
