"""Line-oriented read/write targets for archive operations.

A target is anything that can hand out its lines and take replacement
lines back: a file on disk or an in-memory buffer with a cursor (the
editor stand-in used by cursor-relative commands).
"""

import os
from pathlib import Path
from typing import Optional, Protocol

from md_outline.ranges import LineRange

from mdarchive.services.exceptions import ArchiveTargetError
from mdarchive.utils.logging import get_logger

logger = get_logger(__name__)


class LineTarget(Protocol):
    """Source or destination of document lines."""

    @property
    def name(self) -> str:
        ...

    @property
    def path(self) -> Optional[Path]:
        ...

    def read_lines(self) -> list[str]:
        ...

    def write_lines(self, lines: list[str]) -> None:
        ...


def atomic_write(path: Path, content: str) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    1. Write to a temporary file in the same directory
    2. fsync to ensure data is on disk
    3. Atomic rename to replace the original file

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: On file I/O errors
        PermissionError: On permission errors
    """
    # Same directory keeps the rename on one filesystem
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        temp_path.write_text(content, encoding="utf-8")

        with open(temp_path, "r+", encoding="utf-8") as f:
            f.flush()
            os.fsync(f.fileno())

        temp_path.replace(path)

        logger.debug("atomic_write_success", path=str(path), size=len(content))

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise


class DiskFile:
    """Markdown file on disk, read and written as "\\n"-separated lines.

    A file that does not exist yet reads as a single empty line, the same
    as a freshly created empty file.
    """

    def __init__(self, path: Path):
        """Initialize with file path.

        Args:
            path: Path to the markdown file

        Raises:
            ArchiveTargetError: If the path exists but is not a regular file
        """
        if path.exists() and not path.is_file():
            raise ArchiveTargetError(str(path), "Not a valid markdown file")
        self._path = path

    @property
    def name(self) -> str:
        return self._path.stem

    @property
    def path(self) -> Path:
        return self._path

    def read_lines(self) -> list[str]:
        if not self._path.exists():
            return [""]
        return self._path.read_text(encoding="utf-8").split("\n")

    def write_lines(self, lines: list[str]) -> None:
        atomic_write(self._path, "\n".join(lines))

    def __repr__(self) -> str:
        return f"DiskFile({str(self._path)!r})"


class LineBuffer:
    """In-memory document with a cursor, standing in for an editor.

    Attributes:
        lines: Current document lines
        cursor_line: 0-based line the cursor is on
    """

    def __init__(
        self,
        lines: list[str],
        cursor_line: int = 0,
        path: Optional[Path] = None,
        name: str = "buffer",
    ):
        self.lines = list(lines)
        self.cursor_line = cursor_line
        self._path = path
        self._name = path.stem if path is not None else name

    @classmethod
    def from_file(cls, path: Path, cursor_line: int = 0) -> "LineBuffer":
        """Load a buffer from a file (missing files load as one empty line)."""
        return cls(DiskFile(path).read_lines(), cursor_line=cursor_line, path=path)

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def line(self, line_number: int) -> str:
        return self.lines[line_number]

    @property
    def cursor_text(self) -> str:
        return self.lines[self.cursor_line]

    def get_range(self, line_range: LineRange) -> list[str]:
        start, end = line_range
        return self.lines[start:end + 1]

    def replace_range(self, line_range: LineRange, new_lines: list[str]) -> None:
        """Replace an inclusive line range with new lines."""
        start, end = line_range
        self.lines[start:end + 1] = new_lines

    def read_lines(self) -> list[str]:
        return list(self.lines)

    def write_lines(self, lines: list[str]) -> None:
        self.lines = list(lines)

    def save(self) -> None:
        """Write the buffer back to the file it was loaded from.

        Raises:
            ArchiveTargetError: If the buffer has no backing file
        """
        if self._path is None:
            raise ArchiveTargetError(self._name, "Buffer has no backing file")
        DiskFile(self._path).write_lines(self.lines)
