"""Configuration models for mdarchive."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from md_outline import IndentUnit


class IndentationSettings(BaseModel):
    """How nested list items are indented."""

    use_tab: bool = Field(
        default=True,
        description="Indent nested items with tabs instead of spaces"
    )

    tab_size: int = Field(
        default=4,
        ge=1,
        le=16,
        description="Spaces per indentation level (also used to read space-indented lines)"
    )

    model_config = {"frozen": True}

    @property
    def unit(self) -> IndentUnit:
        return IndentUnit(use_tab=self.use_tab, tab_size=self.tab_size)

    @property
    def indentation(self) -> str:
        """Indentation string written for one level."""
        return self.unit.text


class DateLevelSettings(BaseModel):
    """Which date buckets archived tasks are grouped under."""

    use_weeks: bool = Field(
        default=False,
        description="Group archived tasks under a bullet for the current week"
    )

    weekly_note_format: str = Field(
        default="%Y-%m-W-%W",
        min_length=1,
        description="strftime template for the week bullet label"
    )

    use_days: bool = Field(
        default=False,
        description="Group archived tasks under a bullet for the current day"
    )

    daily_note_format: str = Field(
        default="%Y-%m-%d",
        min_length=1,
        description="strftime template for the day bullet label"
    )

    model_config = {"frozen": True}


class MetadataSettings(BaseModel):
    """Optional metadata appended to every archived task."""

    add_metadata: bool = Field(
        default=False,
        description="Append resolved metadata to archived task lines"
    )

    metadata: str = Field(
        default="",
        description="Template with {{date}}, {{heading}} and {{frontmatter}} placeholders"
    )

    date_format: str = Field(
        default="%Y-%m-%d",
        min_length=1,
        description="strftime template used for {{date}}"
    )

    frontmatter_keys: Optional[str] = Field(
        default=None,
        description="Comma-separated front matter keys used for {{frontmatter}} (None = all keys)"
    )

    model_config = {"frozen": True}


class TextReplacementSettings(BaseModel):
    """Regular expression replacement applied to every archived task line."""

    apply_replacement: bool = Field(
        default=False,
        description="Rewrite archived task lines with regex and replacement"
    )

    regex: str = Field(
        default="",
        description="Python regular expression; only the first match is replaced"
    )

    replacement: str = Field(
        default="",
        description="Replacement text (\\1 and \\g<name> refer to groups)"
    )

    model_config = {"frozen": True}


class ArchiverSettings(BaseModel):
    """Root configuration for mdarchive."""

    archive_heading: str = Field(
        default="Archived",
        description="Text of the heading completed tasks are moved under"
    )

    archive_heading_depth: int = Field(
        default=1,
        ge=1,
        le=6,
        description="Level of a newly created archive heading"
    )

    add_newlines_around_headings: bool = Field(
        default=True,
        description="Keep one blank line around archive and generated headings"
    )

    archive_to_separate_file: bool = Field(
        default=False,
        description="Move tasks to a sibling archive file instead of the same file"
    )

    separate_file_name: str = Field(
        default="% (archive)",
        min_length=1,
        description="Archive file name without extension; % is the source file name"
    )

    archive_all_checked_task_types: bool = Field(
        default=False,
        description="Treat any non-space checkbox symbol ([-], [>], ...) as completed"
    )

    additional_task_pattern: str = Field(
        default="",
        description="Only archive or delete tasks whose line also matches this regex (empty = all)"
    )

    indentation: IndentationSettings = Field(default_factory=IndentationSettings)
    dates: DateLevelSettings = Field(default_factory=DateLevelSettings)
    metadata: MetadataSettings = Field(default_factory=MetadataSettings)
    text_replacement: TextReplacementSettings = Field(default_factory=TextReplacementSettings)

    model_config = {"frozen": True}

    @field_validator("archive_heading")
    @classmethod
    def validate_archive_heading(cls, v: str) -> str:
        """Reject headings that would match every section."""
        if not v.strip():
            raise ValueError("Archive heading must not be empty")
        return v.strip()
